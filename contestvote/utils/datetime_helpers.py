"""Datetime utility functions for timezone handling."""
from datetime import datetime, UTC
from typing import Optional

from contestvote.utils.exceptions import ValidationError


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware in UTC.

    SQLite hands back naive datetimes for ``DateTime(timezone=True)`` columns;
    those are treated as UTC so they compare cleanly with request values.

    Example:
        >>> ensure_utc(datetime(2025, 1, 1, 12, 0, 0)).tzinfo == UTC
        True

        >>> ensure_utc(None) is None
        True
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def validate_date_range(start_date: Optional[datetime], end_date: Optional[datetime]) -> tuple[datetime, datetime]:
    """Require both dates and a strictly increasing range.

    Returns:
        The (start_date, end_date) pair normalized to UTC

    Raises:
        ValidationError: If either date is missing or start_date >= end_date
    """
    if start_date is None or end_date is None:
        raise ValidationError("startDate and endDate are required")

    start_utc = ensure_utc(start_date)
    end_utc = ensure_utc(end_date)
    if start_utc >= end_utc:
        raise ValidationError("End date must be after start date")
    return start_utc, end_utc
