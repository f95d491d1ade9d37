"""Shared utilities for NEO Watch."""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp; datetime columns only accept aware values."""
    return datetime.now(timezone.utc)


def today_iso() -> str:
    """Today's UTC date as YYYY-MM-DD (the provider's date format)."""
    return utcnow().date().isoformat()


def parse_date(value: str | date | None) -> str | None:
    """Normalize a date or ISO string to YYYY-MM-DD; preserve None."""
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(value).isoformat()
