"""
Permission matrix for dashboard accounts.

Each protected operation is a ``Permission``; each permission declares the
roles allowed to perform it. ``usuario`` is a reserved role and appears in
no set.
"""

from enum import Enum

from reviewly.auth.service import Identity
from reviewly.constants import Roles
from reviewly.errors import ValidationError
from reviewly.jwt_middleware import role_required
from reviewly.logging_config import get_logger

logger = get_logger(__name__)


class Permission(str, Enum):
    """Protected operations."""

    STAFF_VIEW_ALL = "staff:view_all"
    STAFF_CREATE = "staff:create"
    STAFF_EDIT = "staff:edit"
    STAFF_DELETE = "staff:delete"

    REVIEWS_DELETE = "reviews:delete"

    CUSTOMERS_VIEW = "customers:view"
    CUSTOMERS_EDIT = "customers:edit"
    CUSTOMERS_DELETE = "customers:delete"

    ACCOUNTS_MANAGE = "accounts:manage"


_STAFF_ROLES = {Roles.ADMIN.value, Roles.MANAGER.value}
_ADMIN_ONLY = {Roles.ADMIN.value}

PERMISSION_ROLES: dict[Permission, set[str]] = {
    Permission.STAFF_VIEW_ALL: _STAFF_ROLES,
    Permission.STAFF_CREATE: _STAFF_ROLES,
    Permission.STAFF_EDIT: _STAFF_ROLES,
    Permission.STAFF_DELETE: _ADMIN_ONLY,
    Permission.REVIEWS_DELETE: _STAFF_ROLES,
    Permission.CUSTOMERS_VIEW: _STAFF_ROLES,
    Permission.CUSTOMERS_EDIT: _STAFF_ROLES,
    Permission.CUSTOMERS_DELETE: _STAFF_ROLES,
    Permission.ACCOUNTS_MANAGE: _ADMIN_ONLY,
}


def roles_for(permission: Permission) -> set[str]:
    return set(PERMISSION_ROLES.get(permission, set()))


def permission_required(permission: Permission):
    """Route decorator enforcing the roles declared for ``permission``."""
    return role_required(sorted(roles_for(permission)))


def ensure_not_self(identity: Identity, target_id: int, message: str) -> None:
    """Reject an account operation aimed at the caller's own account."""
    if identity is not None and identity.id == target_id:
        logger.warning(f"Account {identity.id} attempted a self-targeted operation")
        raise ValidationError(message)
