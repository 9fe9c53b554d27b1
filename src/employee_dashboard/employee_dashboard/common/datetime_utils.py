from __future__ import annotations

from datetime import date, datetime


def now_local() -> datetime:
    """Current local time.

    Wrapped so tests can patch it.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def json_default(value):
    """``json.dumps`` fallback for dates and other non-JSON scalars in snapshots."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)
