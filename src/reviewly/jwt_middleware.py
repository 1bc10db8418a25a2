"""
JWT Middleware for Flask.

Provides request-level JWT validation and identity injection.
"""

from __future__ import annotations

from functools import wraps
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from flask import g, jsonify, request

from reviewly.auth.service import AuthError, Identity, authorize
from reviewly.jwt_service import (
    InvalidTokenError,
    TokenExpiredError,
    decode_token,
    extract_token_from_request,
)
from reviewly.logging_config import get_logger
from reviewly.serializers import error_response

if TYPE_CHECKING:
    from flask import Flask

logger = get_logger(__name__)

MISSING_TOKEN_MESSAGE = "No hay token, autorización denegada"


def init_jwt_middleware(app: Flask) -> None:
    """
    Initialize JWT middleware for a Flask app.

    Sets up a before_request handler that extracts the bearer token,
    validates it and stores the payload in ``g.current_user``. A token that
    fails validation leaves ``g.jwt_error`` set so required-auth routes can
    explain the 401.
    """

    @app.before_request
    def load_jwt_user():
        g.current_user = None
        g.jwt_token = None
        g.jwt_error = None

        token = extract_token_from_request(request)
        if not token:
            return

        try:
            payload = decode_token(token, verify_type="access")
            g.current_user = payload
            g.jwt_token = token
        except TokenExpiredError as e:
            logger.debug(f"Expired token on {request.path}")
            g.jwt_error = e.message
        except InvalidTokenError as e:
            logger.warning(f"Invalid token on {request.path}: {e}")
            g.jwt_error = "Token inválido"


def get_current_user() -> dict[str, Any] | None:
    """
    Get current authenticated token payload from request context.
    """
    return getattr(g, "current_user", None)


def get_current_identity() -> Identity | None:
    user = get_current_user()
    if not user or user.get("account_id") is None:
        return None
    return Identity.from_payload(user)


def get_account_id() -> int | None:
    identity = get_current_identity()
    return identity.id if identity else None


def _unauthenticated_response():
    message = getattr(g, "jwt_error", None) or MISSING_TOKEN_MESSAGE
    return jsonify(error_response(message)), HTTPStatus.UNAUTHORIZED


def jwt_required(f):
    """
    Decorator to require valid JWT for a route.

    Returns 401 if no valid token present.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_current_identity() is None:
            return _unauthenticated_response()
        return f(*args, **kwargs)

    return decorated_function


def jwt_optional(f):
    """
    Decorator that allows JWT but doesn't require it.

    The identity is populated by the middleware when a valid token is
    present; an invalid or missing token just leaves it empty.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        return f(*args, **kwargs)

    return decorated_function


def role_required(required_roles):
    """
    Decorator factory to require specific role(s) in JWT.

    Args:
        required_roles: A role or an iterable of roles

    Returns:
        Decorator answering 401 without a valid token and 403 when the
        token's role is not among ``required_roles``
    """
    if isinstance(required_roles, str):
        required_roles = [required_roles]
    required_roles = list(required_roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            identity = get_current_identity()
            if identity is None:
                return _unauthenticated_response()
            try:
                authorize(identity, required_roles)
            except AuthError as exc:
                return jsonify(error_response(exc.message)), exc.status
            return f(*args, **kwargs)

        return decorated_function

    return decorator
