"""
Service-level exceptions.

Each exception carries the HTTP status the routes answer with, so a route
only needs to catch ``ServiceError`` to map any expected failure.
"""

from __future__ import annotations

from http import HTTPStatus


class ServiceError(Exception):
    """Base class for expected, user-facing failures."""

    status: HTTPStatus = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str, status: HTTPStatus | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class ValidationError(ServiceError):
    """Raised when validation fails."""

    status = HTTPStatus.BAD_REQUEST


class NotFoundError(ServiceError):
    status = HTTPStatus.NOT_FOUND


class DuplicateReviewError(ServiceError):
    """The visitor already reviewed someone inside the submission window."""

    status = HTTPStatus.TOO_MANY_REQUESTS
