"""Service for managing dashboard accounts."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from reviewly.auth.service import AuthError, Identity, authorize
from reviewly.constants import Roles
from reviewly.errors import NotFoundError, ValidationError
from reviewly.logging_config import get_logger
from reviewly.models import AdminAccount
from reviewly.permissions import ensure_not_self
from reviewly.serializers import serialize_account

logger = get_logger(__name__)

DUPLICATE_ACCOUNT_MESSAGE = "El usuario o email ya existe"
SELF_DEACTIVATE_MESSAGE = "No puedes desactivarte a ti mismo"
SELF_DELETE_MESSAGE = "No puedes eliminarte a ti mismo"
SELF_ROLE_MESSAGE = "No puedes cambiar tu propio rol"


def _get_account(session: Session, account_id: int) -> AdminAccount:
    account = session.get(AdminAccount, account_id)
    if account is None:
        logger.warning(f"Account {account_id} not found")
        raise NotFoundError("Usuario no encontrado")
    return account


def _ensure_unique(
    session: Session,
    username: str | None,
    email: str | None,
    exclude_id: int | None = None,
) -> None:
    conditions = []
    if username:
        conditions.append(AdminAccount.username == username)
    if email:
        conditions.append(AdminAccount.email == email)
    if not conditions:
        return

    stmt = select(AdminAccount.id).where(or_(*conditions))
    if exclude_id is not None:
        stmt = stmt.where(AdminAccount.id != exclude_id)
    if session.execute(stmt).first() is not None:
        logger.warning(f"Attempt to use duplicate username/email: {username} / {email}")
        raise ValidationError(DUPLICATE_ACCOUNT_MESSAGE)


def count_accounts(session: Session) -> int:
    return session.scalar(select(func.count()).select_from(AdminAccount)) or 0


def list_accounts(session: Session) -> list[dict[str, Any]]:
    accounts = (
        session.execute(
            select(AdminAccount).order_by(AdminAccount.created_at.desc(), AdminAccount.id.desc())
        )
        .scalars()
        .all()
    )
    return [serialize_account(a) for a in accounts]


def get_account(session: Session, account_id: int) -> dict[str, Any]:
    return serialize_account(_get_account(session, account_id))


def create_account(session: Session, data: dict[str, Any]) -> dict[str, Any]:
    """Create an account. Username and email must both be unused."""
    _ensure_unique(session, data["username"], data["email"])

    account = AdminAccount(
        username=data["username"],
        email=data["email"],
        role=data.get("role") or Roles.MANAGER.value,
        is_active=True,
    )
    account.set_password(data["password"])

    session.add(account)
    session.flush()
    session.refresh(account)

    logger.info(f"Created account {account.id}: {account.username} ({account.role})")
    return serialize_account(account)


def register_account(
    session: Session, data: dict[str, Any], identity: Identity | None
) -> dict[str, Any]:
    """
    Registration endpoint backend.

    While no account exists anyone may register, so the first admin can be
    bootstrapped; afterwards only admins may use it.
    """
    if count_accounts(session) > 0:
        if identity is None:
            raise AuthError("No hay token, autorización denegada", status=HTTPStatus.UNAUTHORIZED)
        authorize(identity, [Roles.ADMIN.value])
    else:
        logger.info("Bootstrapping first account through registration")
    return create_account(session, data)


def update_account(
    session: Session, account_id: int, data: dict[str, Any], identity: Identity
) -> dict[str, Any]:
    """
    Partial update. An account may not change its own role nor deactivate
    itself.
    """
    account = _get_account(session, account_id)

    if data.get("role") is not None and data["role"] != account.role:
        ensure_not_self(identity, account_id, SELF_ROLE_MESSAGE)
    if data.get("is_active") is False:
        ensure_not_self(identity, account_id, SELF_DEACTIVATE_MESSAGE)

    _ensure_unique(session, data.get("username"), data.get("email"), exclude_id=account_id)

    for field in ("username", "email", "role", "is_active"):
        if data.get(field) is not None:
            setattr(account, field, data[field])
    if data.get("password"):
        account.set_password(data["password"])

    session.flush()
    session.refresh(account)

    logger.info(f"Updated account {account.id}: {account.username}")
    return serialize_account(account)


def set_account_active(
    session: Session, account_id: int, active: bool, identity: Identity
) -> dict[str, Any]:
    if not active:
        ensure_not_self(identity, account_id, SELF_DEACTIVATE_MESSAGE)

    account = _get_account(session, account_id)
    account.is_active = active
    session.flush()
    session.refresh(account)

    logger.info(f"Account {account.id} {'activated' if active else 'deactivated'}")
    return serialize_account(account)


def delete_account(session: Session, account_id: int, identity: Identity) -> None:
    ensure_not_self(identity, account_id, SELF_DELETE_MESSAGE)

    account = _get_account(session, account_id)
    session.delete(account)
    session.flush()
    logger.info(f"Deleted account {account_id}")
