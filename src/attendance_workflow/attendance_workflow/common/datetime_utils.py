from __future__ import annotations

from datetime import date, datetime, time, timezone

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)", details={"value": value})


def now_utc() -> datetime:
    """Current UTC time as a naive datetime (what MySQL DATETIME stores).

    Note: Wrapped so services can take it as an injectable clock.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Whole-day datetime range covering ``start`` through ``end``."""
    return datetime.combine(start, time.min), datetime.combine(end, time.max)
