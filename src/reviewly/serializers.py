"""
Serializers for consistent API responses.
"""

from __future__ import annotations

import logging
import math
from http import HTTPStatus
from typing import Any

from reviewly.datetime_utils import isoformat
from reviewly.models import AdminAccount, Customer, Review, StaffMember


def _safe_float(value) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def serialize_staff(staff: StaffMember, summary: dict[str, Any] | None = None) -> dict[str, Any]:
    """Serialize a StaffMember, optionally enriched with its rating summary."""
    data = {
        "id": staff.id,
        "name": staff.name,
        "photo_url": staff.photo_url,
        "employee_code": staff.employee_code,
        "gender": staff.gender,
        "is_active": staff.is_active,
        "created_at": isoformat(staff.created_at),
        "updated_at": isoformat(staff.updated_at),
    }
    if summary is not None:
        data.update(summary)
    return data


def serialize_review(
    review: Review, include_staff: bool = False, include_ip: bool = False
) -> dict[str, Any]:
    """
    Serialize a Review.

    The submitter address is left out unless ``include_ip`` is set, which
    only moderation endpoints do.
    """
    data = {
        "id": review.id,
        "staff_id": review.staff_id,
        "ratings": review.scores,
        "rating": _safe_float(review.rating),
        "category_comments": review.category_comments,
        "comment": review.comment,
        "customer_name": review.customer_name,
        "created_at": isoformat(review.created_at),
    }
    if include_staff and review.staff is not None:
        data["staff"] = {
            "id": review.staff.id,
            "name": review.staff.name,
            "employee_code": review.staff.employee_code,
        }
    if include_ip:
        data["ip_address"] = review.ip_address
    return data


def serialize_customer(customer: Customer) -> dict[str, Any]:
    return {
        "id": customer.id,
        "name": customer.name,
        "document": customer.document,
        "phone": customer.phone,
        "email": customer.email,
        "week_states": list(customer.week_states or []),
        "created_at": isoformat(customer.created_at),
        "updated_at": isoformat(customer.updated_at),
    }


def serialize_account(account: AdminAccount) -> dict[str, Any]:
    """Serialize an AdminAccount. The password hash is never included."""
    return {
        "id": account.id,
        "username": account.username,
        "email": account.email,
        "role": account.role,
        "is_active": account.is_active,
        "created_at": isoformat(account.created_at),
        "updated_at": isoformat(account.updated_at),
    }


def paginated_response(
    key: str,
    items: list[Any],
    total: int,
    page: int,
    limit: int,
) -> dict[str, Any]:
    """
    Create a standardized paginated response.

    Args:
        key: Name of the list in the payload (e.g. "reviews")
        items: List of serialized items for current page
        total: Total count of items across all pages
        page: Current page number (1-indexed)
        limit: Items per page

    Returns:
        ``{key: items, "pagination": {"total", "page", "pages"}}``
    """
    pages = math.ceil(total / limit) if limit > 0 else 0

    return {
        key: items,
        "pagination": {
            "total": total,
            "page": page,
            "pages": pages,
        },
    }


def message_response(message: str, **data: Any) -> dict[str, Any]:
    """Create a success payload carrying a human readable message."""
    response = {"message": message}
    response.update(data)
    return response


def error_response(error: str, details: Any = None) -> dict[str, Any]:
    """Create a standardized error response."""
    response: dict[str, Any] = {"message": error}
    if details:
        response["details"] = details
    return response


def server_error_response(
    log: logging.Logger, message: str, exc: Exception
) -> tuple[dict[str, Any], HTTPStatus]:
    """Log an unexpected route failure with its traceback and build the 500 reply."""
    log.error(f"{message}: {exc}", exc_info=True)
    return error_response(message), HTTPStatus.INTERNAL_SERVER_ERROR
