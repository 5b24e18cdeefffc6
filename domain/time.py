"""
Domain time utilities (pure).

Centralized timestamp validation and conversion helpers.

Transactions carry an integer creation timestamp (milliseconds since the Unix
epoch) and an ISO calendar date. Both are derived from an injected clock so
callers and tests control "now".
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current UTC time."""

    return datetime.now(timezone.utc)


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the contract requirement that timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def to_epoch_millis(value: datetime) -> int:
    require_utc_timestamp("clock value", value)
    return int(value.timestamp() * 1000)


def iso_today(clock: Clock = utc_now) -> str:
    """Today's UTC date as YYYY-MM-DD."""

    now = clock()
    require_utc_timestamp("clock value", now)
    return now.date().isoformat()


def is_iso_date(value: str) -> bool:
    """True if value is a calendar date in YYYY-MM-DD form."""

    if len(value) != 10:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
