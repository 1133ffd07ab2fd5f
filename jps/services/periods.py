from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

PERIOD_TYPES = ("month", "trimester")
SNAPSHOT_PERIODS = ("month", "trimester", "year", "all")


def utcnow() -> datetime:
    """Naive UTC wall clock; every engine timestamp is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Drop tzinfo after converting to UTC (Postgres hands back aware datetimes)."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def trimester_of(value: datetime) -> int:
    return (value.month - 1) // 3 + 1


def trimester_of_month(month: int) -> int:
    return (month - 1) // 3 + 1


def _month_start(year: int, month: int) -> datetime:
    # month may overflow past 12
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1)


def resolve_window(period_type: str, reference: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Returns (start, end) for the month or trimester containing `reference`.
    `end` is the last instant of the window, so queries compare with <=.
    """
    reference = as_naive_utc(reference) or utcnow()
    if period_type == "month":
        first_month = reference.month
        span = 1
    elif period_type == "trimester":
        first_month = (trimester_of(reference) - 1) * 3 + 1
        span = 3
    else:
        raise ValueError(f"Unsupported period type: {period_type!r}")

    start = _month_start(reference.year, first_month)
    end = _month_start(reference.year, first_month + span) - timedelta(microseconds=1)
    return start, end


def resolve_cutoff(reference: datetime, end: datetime) -> datetime:
    """Never look past `reference` for a window that is still in progress."""
    return min(reference, end)


def months_between(earlier: datetime, later: datetime) -> int:
    """Calendar months from `earlier` to `later` (day of month ignored)."""
    return (later.year - earlier.year) * 12 + later.month - earlier.month
