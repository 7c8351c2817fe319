"""
Date helpers for download records and refresh timestamps.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in UTC; naive datetimes are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def parse_date(value) -> Optional[date]:
    """Parse the day of a download record.

    Accepts ``date`` and ``datetime`` objects, ``YYYY-MM-DD`` strings and full
    ISO 8601 timestamps (a trailing ``Z`` means UTC). Timestamps are moved to
    UTC before the day is taken. Returns None for anything unreadable.
    """
    if isinstance(value, datetime):
        return utc_day(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return utc_day(datetime.fromisoformat(text))
    except ValueError:
        return None
