"""Service for submitting, listing and moderating reviews."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from reviewly.constants import (
    CATEGORY_COMMENT_MAX_LENGTH,
    COMMENT_MAX_LENGTH,
    CUSTOMER_NAME_MAX_LENGTH,
    DEFAULT_DUPLICATE_WINDOW_HOURS,
    DUPLICATE_REVIEW_MESSAGE,
    RECENT_REVIEWS_LIMIT,
    REVIEW_CATEGORIES,
    STAFF_REVIEWS_PAGE_SIZE,
)
from reviewly.datetime_utils import utcnow
from reviewly.errors import DuplicateReviewError, NotFoundError, ValidationError
from reviewly.logging_config import get_logger
from reviewly.models import Review, StaffMember
from reviewly.serializers import paginated_response, serialize_review
from reviewly.services import rating_service
from reviewly.services.staff_service import resolve_staff
from reviewly.validation import validate_pagination

logger = get_logger(__name__)


# ==================== GATEKEEPER ====================


def is_blocked(
    session: Session,
    address: str,
    now: datetime | None = None,
    window_hours: int = DEFAULT_DUPLICATE_WINDOW_HOURS,
) -> bool:
    """
    True when any review from ``address`` was created inside the trailing window.

    The check spans every staff member: one review per visitor per window.
    """
    now = now or utcnow()
    since = now - timedelta(hours=window_hours)
    existing = session.execute(
        select(Review.id)
        .where(Review.ip_address == address, Review.created_at >= since)
        .limit(1)
    ).first()
    return existing is not None


def check_duplicate(
    session: Session,
    address: str,
    now: datetime | None = None,
    window_hours: int = DEFAULT_DUPLICATE_WINDOW_HOURS,
) -> dict[str, Any]:
    """Tell the public form whether this visitor may still submit."""
    if is_blocked(session, address, now, window_hours):
        raise DuplicateReviewError(DUPLICATE_REVIEW_MESSAGE)
    return {"duplicate": False}


def _optional_text(data: dict[str, Any], key: str, max_length: int, label: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{label} inválido")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{label} no puede exceder {max_length} caracteres")
    return value or None


def _parse_staff_id(value) -> int:
    if value is None or value == "":
        raise ValidationError("ID de mesera y calificaciones son requeridas")
    if isinstance(value, bool):
        raise ValidationError("ID de personal inválido")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("ID de personal inválido") from None


def create_review(
    session: Session,
    staff: StaffMember,
    scores: dict[str, int],
    address: str,
    now: datetime,
    category_comments: dict[str, str | None] | None = None,
    comment: str | None = None,
    customer_name: str | None = None,
) -> Review:
    """
    Persist one review. The scalar rating is always computed here, from the
    same scores that are stored.
    """
    rating = rating_service.compute_scalar(scores)
    category_comments = category_comments or {}

    review = Review(
        staff_id=staff.id,
        rating=Decimal(str(rating)),
        comment=comment,
        customer_name=customer_name,
        ip_address=address,
        created_at=now,
        updated_at=now,
    )
    for category in REVIEW_CATEGORIES:
        setattr(review, category, scores[category])
        setattr(review, f"{category}_comment", category_comments.get(category))

    session.add(review)
    session.flush()
    return review


def submit_review(
    session: Session,
    data: dict[str, Any],
    address: str,
    now: datetime | None = None,
    window_hours: int = DEFAULT_DUPLICATE_WINDOW_HOURS,
) -> dict[str, Any]:
    """
    Accept a public review submission.

    Order of checks: duplicate window (429), staff reference (400/404),
    scores and text fields (400). Nothing is written on any failure.
    """
    now = now or utcnow()

    if is_blocked(session, address, now, window_hours):
        logger.warning(f"Duplicate review attempt from {address}")
        raise DuplicateReviewError(DUPLICATE_REVIEW_MESSAGE)

    if not isinstance(data, dict):
        raise ValidationError("El cuerpo de la solicitud debe ser un objeto JSON")

    staff_id = _parse_staff_id(data.get("staff_id"))
    ratings = data.get("ratings")
    if not isinstance(ratings, dict):
        raise ValidationError("ID de mesera y calificaciones son requeridas")

    staff = resolve_staff(session, staff_id)

    # compute_scalar validates every score; run it before touching text fields
    rating_service.compute_scalar(ratings)
    scores = {category: int(ratings[category]) for category in REVIEW_CATEGORIES}

    raw_comments = data.get("category_comments") or {}
    if not isinstance(raw_comments, dict):
        raise ValidationError("Comentarios por categoría inválidos")
    category_comments = {
        category: _optional_text(
            raw_comments, category, CATEGORY_COMMENT_MAX_LENGTH, "El comentario"
        )
        for category in REVIEW_CATEGORIES
    }
    comment = _optional_text(data, "comment", COMMENT_MAX_LENGTH, "El comentario")
    customer_name = _optional_text(data, "customer_name", CUSTOMER_NAME_MAX_LENGTH, "El nombre")

    review = create_review(
        session,
        staff,
        scores,
        address,
        now,
        category_comments=category_comments,
        comment=comment,
        customer_name=customer_name,
    )
    logger.info(f"Created review {review.id} for staff {staff.id} (rating {review.rating})")
    return serialize_review(review)


# ==================== QUERIES ====================


def list_staff_reviews(
    session: Session, staff_id: int, page: int | None = None, limit: int | None = None
) -> dict[str, Any]:
    """Public, newest-first page of one staff member's reviews."""
    page, limit = validate_pagination(page, limit, default_limit=STAFF_REVIEWS_PAGE_SIZE)
    offset = (page - 1) * limit

    total = session.scalar(
        select(func.count()).select_from(Review).where(Review.staff_id == staff_id)
    )
    reviews = (
        session.execute(
            select(Review)
            .where(Review.staff_id == staff_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
            .offset(offset)
        )
        .scalars()
        .all()
    )
    return paginated_response(
        "reviews", [serialize_review(r) for r in reviews], total or 0, page, limit
    )


def list_reviews(
    session: Session,
    page: int | None = None,
    limit: int | None = None,
    rating: int | None = None,
    staff_id: int | None = None,
) -> dict[str, Any]:
    """
    Moderation listing with optional filters.

    ``rating`` selects a histogram bucket: reviews whose rating rounds
    half-up to that integer.
    """
    page, limit = validate_pagination(page, limit)
    offset = (page - 1) * limit

    filters = []
    if rating is not None:
        lower = Decimal(rating) - Decimal("0.5")
        upper = Decimal(rating) + Decimal("0.5")
        filters.extend([Review.rating >= lower, Review.rating < upper])
    if staff_id is not None:
        filters.append(Review.staff_id == staff_id)

    total = session.scalar(select(func.count()).select_from(Review).where(*filters))
    reviews = (
        session.execute(
            select(Review)
            .options(joinedload(Review.staff))
            .where(*filters)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
            .offset(offset)
        )
        .unique()
        .scalars()
        .all()
    )
    items = [serialize_review(r, include_staff=True, include_ip=True) for r in reviews]
    return paginated_response("reviews", items, total or 0, page, limit)


def delete_review(session: Session, review_id: int) -> None:
    review = session.get(Review, review_id)
    if review is None:
        logger.warning(f"Attempt to delete non-existent review {review_id}")
        raise NotFoundError("Reseña no encontrada")
    session.delete(review)
    session.flush()
    logger.info(f"Deleted review {review_id} of staff {review.staff_id}")


def get_overall_stats(session: Session) -> dict[str, Any]:
    """Dashboard summary: global aggregate, active staff count, latest reviews."""
    stats = rating_service.overall_stats(session)
    total_staff = session.scalar(
        select(func.count()).select_from(StaffMember).where(StaffMember.is_active.is_(True))
    )
    recent = (
        session.execute(
            select(Review)
            .options(joinedload(Review.staff))
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(RECENT_REVIEWS_LIMIT)
        )
        .unique()
        .scalars()
        .all()
    )
    return {
        "total_reviews": stats["count"],
        "total_waitresses": total_staff or 0,
        "average_rating": stats["average_rating"],
        "category_averages": stats["category_averages"],
        "rating_distribution": stats["rating_distribution"],
        "recent_reviews": [serialize_review(r, include_staff=True) for r in recent],
    }
