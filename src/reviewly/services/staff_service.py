"""Service for managing the staff members customers can rate."""

from __future__ import annotations

import secrets
import string
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from reviewly.constants import EMPLOYEE_CODE_LENGTH, EMPLOYEE_CODE_PREFIX
from reviewly.errors import NotFoundError, ServiceError
from reviewly.logging_config import get_logger
from reviewly.models import Review, StaffMember
from reviewly.serializers import serialize_staff
from reviewly.services import rating_service

logger = get_logger(__name__)

EMPLOYEE_CODE_ALPHABET = string.ascii_uppercase + string.digits
EMPLOYEE_CODE_ATTEMPTS = 10


def resolve_staff(session: Session, staff_id: int, active_only: bool = False) -> StaffMember:
    """Load a staff member or raise NotFoundError."""
    staff = session.get(StaffMember, staff_id)
    if staff is None or (active_only and not staff.is_active):
        logger.warning(f"Staff member {staff_id} not found")
        raise NotFoundError("Personal no encontrado")
    return staff


def _serialize_with_summaries(session: Session, staff_list) -> list[dict[str, Any]]:
    summaries = rating_service.summarize_staff_ratings(session, [s.id for s in staff_list])
    return [serialize_staff(s, summaries[s.id]) for s in staff_list]


def list_active_staff(session: Session) -> list[dict[str, Any]]:
    """Public listing: active staff ordered by name, with their rating summary."""
    staff_list = (
        session.execute(
            select(StaffMember)
            .where(StaffMember.is_active.is_(True))
            .order_by(StaffMember.name, StaffMember.id)
        )
        .scalars()
        .all()
    )
    return _serialize_with_summaries(session, staff_list)


def list_all_staff(session: Session) -> list[dict[str, Any]]:
    """Back-office listing including inactive staff, newest first."""
    staff_list = (
        session.execute(
            select(StaffMember).order_by(StaffMember.created_at.desc(), StaffMember.id.desc())
        )
        .scalars()
        .all()
    )
    items = _serialize_with_summaries(session, staff_list)
    logger.info(f"Listed {len(items)} staff members")
    return items


def get_staff(session: Session, staff_id: int, include_inactive: bool = False) -> dict[str, Any]:
    staff = resolve_staff(session, staff_id, active_only=not include_inactive)
    return serialize_staff(staff, rating_service.summarize_staff(session, staff))


def generate_employee_code() -> str:
    suffix = "".join(secrets.choice(EMPLOYEE_CODE_ALPHABET) for _ in range(EMPLOYEE_CODE_LENGTH))
    return f"{EMPLOYEE_CODE_PREFIX}{suffix}"


def _unique_employee_code(session: Session) -> str:
    for _ in range(EMPLOYEE_CODE_ATTEMPTS):
        code = generate_employee_code()
        taken = session.execute(
            select(StaffMember.id).where(StaffMember.employee_code == code)
        ).first()
        if taken is None:
            return code
    logger.error("Could not generate a unique employee code")
    raise ServiceError("No se pudo generar el código de empleado")


def create_staff(session: Session, data: dict[str, Any]) -> dict[str, Any]:
    """Create a staff member; the employee code is always generated here."""
    staff = StaffMember(
        name=data["name"],
        photo_url=data.get("photo_url"),
        gender=data["gender"],
        is_active=data.get("is_active", True),
        employee_code=_unique_employee_code(session),
    )
    session.add(staff)
    session.flush()
    session.refresh(staff)

    logger.info(f"Created staff member {staff.id}: {staff.name} ({staff.employee_code})")
    return serialize_staff(staff, {"average_rating": 0, "review_count": 0})


def update_staff(session: Session, staff_id: int, data: dict[str, Any]) -> dict[str, Any]:
    """
    Apply a partial update. ``employee_code`` is immutable and ignored;
    setting ``is_active`` to false is the soft delete.
    """
    staff = resolve_staff(session, staff_id)

    # photo_url may be cleared; the other columns are NOT NULL
    if "photo_url" in data:
        staff.photo_url = data["photo_url"]
    for field in ("name", "gender", "is_active"):
        if data.get(field) is not None:
            setattr(staff, field, data[field])

    session.flush()
    session.refresh(staff)

    logger.info(f"Updated staff member {staff.id}: {staff.name}")
    return serialize_staff(staff, rating_service.summarize_staff(session, staff))


def delete_staff(session: Session, staff_id: int) -> int:
    """
    Hard-delete a staff member together with every review that references it.

    Returns the number of reviews removed.
    """
    staff = resolve_staff(session, staff_id)

    result = session.execute(
        delete(Review).where(Review.staff_id == staff_id).execution_options(
            synchronize_session=False
        )
    )
    removed = result.rowcount or 0
    session.delete(staff)
    session.flush()

    logger.info(f"Deleted staff member {staff_id} and {removed} reviews")
    return removed


def get_staff_stats(session: Session, staff_id: int) -> dict[str, Any]:
    """
    Live aggregate of one staff member's reviews.

    An id without reviews (including a deleted staff member) yields the
    zero result.
    """
    stats = rating_service.staff_stats(session, staff_id)
    return {"staff_id": staff_id, **stats}
