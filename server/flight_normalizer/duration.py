from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from .normalizers import normalize_date, offset_hours, parse_clock
from .patterns import patterns

EN_ROUTE = "En Route"

DateLike = Union[str, date, None]


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60}:{minutes % 60:02d}"


def duration_minutes(text: Optional[str]) -> Optional[int]:
    """Minutes in an "H:MM" duration; None for "En Route", "" or anything else."""
    m = patterns.DURATION.match(text or "")
    if not m:
        return None
    return int(m.group("hours")) * 60 + int(m.group("minutes"))


def resolve_reference_date(value: DateLike) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None

    text = value.strip()
    if patterns.ISO_DATE.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None

    iso = normalize_date(text)
    return date.fromisoformat(iso) if iso else None


def _utc_instant(day: date, text: str) -> Optional[datetime]:
    parsed = parse_clock(text)
    if parsed is None:
        return None
    hour, minute, offset = parsed
    # "-03" means local is 3h behind UTC, so UTC = local - (-3h)
    return datetime.combine(day, time(hour, minute)) - timedelta(hours=offset_hours(offset))


def compute_duration(departure: Optional[str], arrival: Optional[str], reference_date: DateLike) -> str:
    """
    Elapsed time between two canonical times ("09:45 -03") as "H:MM".

    Returns "En Route" when the arrival says so, and "" when the arrival is
    missing/unknown or anything can't be parsed. An arrival that lands
    before the departure is taken to be on the next day.
    """
    arrival = (arrival or "").strip()
    lowered = arrival.lower()
    if not arrival or "unknown" in lowered:
        return ""
    if "en route" in lowered:
        return EN_ROUTE

    day = resolve_reference_date(reference_date)
    if day is None:
        return ""

    dep_utc = _utc_instant(day, departure or "")
    arr_utc = _utc_instant(day, arrival)
    if dep_utc is None or arr_utc is None:
        return ""

    while arr_utc < dep_utc:
        arr_utc += timedelta(days=1)

    minutes = int((arr_utc - dep_utc).total_seconds() // 60)
    return format_minutes(minutes)
