"""
Rating arithmetic: the scalar rating of one review and roll-ups over a
collection of reviews.

Figures are always computed from the live review rows; nothing is cached
on the staff records.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from reviewly.constants import MAX_SCORE, MIN_SCORE, REVIEW_CATEGORIES
from reviewly.models import Review
from reviewly.validation import validate_score

TENTH = Decimal("0.1")
UNIT = Decimal("1")


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_tenth(value) -> float:
    """Round half-up to one decimal place."""
    return float(_to_decimal(value).quantize(TENTH, rounding=ROUND_HALF_UP))


def rating_bucket(rating) -> int:
    """Histogram bucket of a rating: its half-up rounded integer, kept in 1..5."""
    bucket = int(_to_decimal(rating).quantize(UNIT, rounding=ROUND_HALF_UP))
    return min(max(bucket, MIN_SCORE), MAX_SCORE)


def compute_scalar(scores: Mapping[str, Any]) -> float:
    """
    Mean of the five category scores rounded half-up to one decimal.

    Raises:
        ValidationError: if a category is missing or out of range
    """
    values = [validate_score(category, scores.get(category)) for category in REVIEW_CATEGORIES]
    mean = Decimal(sum(values)) / Decimal(len(values))
    return round_tenth(mean)


def empty_distribution() -> dict[int, int]:
    return {score: 0 for score in range(MIN_SCORE, MAX_SCORE + 1)}


def aggregate(reviews: Iterable[Any]) -> dict[str, Any]:
    """
    Roll up a collection of reviews.

    Works on anything exposing ``rating`` and the five category attributes.
    An empty collection yields zeros everywhere, never an error.
    """
    reviews = list(reviews)
    count = len(reviews)
    distribution = empty_distribution()

    if count == 0:
        return {
            "count": 0,
            "average_rating": 0,
            "category_averages": {category: 0 for category in REVIEW_CATEGORIES},
            "rating_distribution": distribution,
        }

    rating_total = Decimal(0)
    category_totals = {category: Decimal(0) for category in REVIEW_CATEGORIES}
    for review in reviews:
        rating_total += _to_decimal(review.rating)
        distribution[rating_bucket(review.rating)] += 1
        for category in REVIEW_CATEGORIES:
            category_totals[category] += Decimal(getattr(review, category) or 0)

    divisor = Decimal(count)
    return {
        "count": count,
        "average_rating": round_tenth(rating_total / divisor),
        "category_averages": {
            category: round_tenth(total / divisor) for category, total in category_totals.items()
        },
        "rating_distribution": distribution,
    }


def staff_stats(session: Session, staff_id: int) -> dict[str, Any]:
    """Aggregate every review of one staff member."""
    reviews = session.execute(select(Review).where(Review.staff_id == staff_id)).scalars().all()
    return aggregate(reviews)


def overall_stats(session: Session) -> dict[str, Any]:
    """Aggregate every review in the system."""
    reviews = session.execute(select(Review)).scalars().all()
    return aggregate(reviews)


def summarize_staff_ratings(session: Session, staff_ids: Iterable[int]) -> dict[int, dict[str, Any]]:
    """
    Average rating and review count per staff member, in one grouped query.

    Staff without reviews get ``{"average_rating": 0, "review_count": 0}``.
    """
    staff_ids = list(staff_ids)
    summaries = {
        staff_id: {"average_rating": 0, "review_count": 0} for staff_id in staff_ids
    }
    if not staff_ids:
        return summaries

    rows = session.execute(
        select(Review.staff_id, func.count(Review.id), func.sum(Review.rating))
        .where(Review.staff_id.in_(staff_ids))
        .group_by(Review.staff_id)
    ).all()

    for staff_id, count, rating_sum in rows:
        if not count:
            continue
        summaries[staff_id] = {
            "average_rating": round_tenth(_to_decimal(rating_sum) / Decimal(count)),
            "review_count": count,
        }
    return summaries


def summarize_staff(session: Session, staff) -> dict[str, Any]:
    """``{average_rating, review_count}`` for a single staff member."""
    return summarize_staff_ratings(session, [staff.id])[staff.id]
