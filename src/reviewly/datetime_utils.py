"""
Datetime utilities.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Get current UTC time as a naive datetime.

    Columns are declared without timezone, so every timestamp the services
    write or compare goes through this helper.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
