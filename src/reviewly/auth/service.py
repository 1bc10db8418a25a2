"""Centralized authentication and authorization helpers."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from reviewly.logging_config import get_logger
from reviewly.models import AdminAccount

logger = get_logger(__name__)


class AuthError(Exception):
    """Raised when an authentication or authorization error occurs."""

    def __init__(self, message: str, status: HTTPStatus = HTTPStatus.UNAUTHORIZED) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of one request, as carried by its token."""

    id: int
    username: str
    role: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Identity:
        return cls(
            id=int(payload["account_id"]),
            username=payload.get("username", ""),
            role=payload.get("role", ""),
        )


@dataclass
class AccountData:
    """Account information detached from the database session."""

    id: int
    username: str
    email: str
    role: str


@dataclass
class AuthResult:
    account: AccountData


class AuthService:
    """Provides utilities to authenticate accounts and check roles."""

    @staticmethod
    def authenticate(session: Session, username: str, password: str) -> AuthResult:
        account = (
            session.execute(select(AdminAccount).where(AdminAccount.username == username))
            .scalars()
            .one_or_none()
        )
        if account is None:
            raise AuthError("Credenciales inválidas")

        if not account.is_active:
            raise AuthError("Usuario inactivo")

        if not account.verify_password(password):
            raise AuthError("Credenciales inválidas")

        return AuthResult(
            account=AccountData(
                id=account.id,
                username=account.username,
                email=account.email,
                role=account.role,
            )
        )


def authorize(identity: Identity | None, allowed_roles: Iterable[str]) -> Identity:
    """
    Check that ``identity`` holds one of ``allowed_roles``.

    Raises:
        AuthError: 401 without an identity, 403 when the role is not allowed
    """
    if identity is None:
        raise AuthError("No autorizado", status=HTTPStatus.UNAUTHORIZED)

    allowed = {str(getattr(role, "value", role)) for role in allowed_roles}
    if identity.role not in allowed:
        logger.warning(
            f"Account {identity.id} with role {identity.role} denied; requires one of {sorted(allowed)}"
        )
        raise AuthError(
            "No tienes permisos para realizar esta acción", status=HTTPStatus.FORBIDDEN
        )
    return identity
