from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from .patterns import patterns

MONTHS_EN: Dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
MONTHS_PT: Dict[str, int] = {
    "jan": 1, "fev": 2, "mar": 3, "abr": 4, "mai": 5, "jun": 6,
    "jul": 7, "ago": 8, "set": 9, "out": 10, "nov": 11, "dez": 12,
}
MONTH_TABLES: Dict[str, Dict[str, int]] = {"en": MONTHS_EN, "pt": MONTHS_PT}


def strip_decorations(text: Optional[str]) -> str:
    """Drop the "First seen " / "Last seen " / "(?)" markers FlightAware adds to estimated times."""
    return patterns.DECORATIONS.sub("", text or "").strip()


def parse_clock(text: Optional[str]) -> Optional[Tuple[int, int, Optional[str]]]:
    """
    Read a wall-clock time out of scraped text.

    Returns (hour_24, minute, offset_text) or None. offset_text is the
    UTC offset exactly as written ("-03", "+2", "5") or None if absent.
    """
    cleaned = strip_decorations(text)
    if ":" not in cleaned:
        return None

    m = patterns.CLOCK.search(cleaned)
    if not m:
        return None

    hour = int(m.group("hour"))
    minute = int(m.group("minute"))
    if minute > 59:
        return None

    meridiem = (m.group("meridiem") or "").lower()
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12 + (12 if meridiem == "p" else 0)
    elif hour > 23:
        return None

    return hour, minute, m.group("offset")


def offset_hours(offset_text: Optional[str]) -> int:
    return int(offset_text) if offset_text else 0


def normalize_time(text: Optional[str]) -> str:
    """
    "First seen 09:45a -03" -> "09:45 -03", "9:05PM" -> "21:05".

    Returns "" when no time can be read.
    """
    parsed = parse_clock(text)
    if parsed is None:
        return ""
    hour, minute, offset = parsed
    clock = f"{hour:02d}:{minute:02d}"
    return f"{clock} {offset}" if offset else clock


def _month_number(abbr: str, locale: Optional[str]) -> Optional[int]:
    key = abbr.lower()
    if locale in MONTH_TABLES:
        return MONTH_TABLES[locale].get(key)
    # auto: English first, Portuguese second
    for table in (MONTHS_EN, MONTHS_PT):
        if key in table:
            return table[key]
    return None


def normalize_date(text: Optional[str], locale: Optional[str] = None) -> Optional[str]:
    """
    "23-Jul-2025" -> "2025-07-23", "05/Fev/2024" -> "2024-02-05".

    locale is "en", "pt" or None/"auto" (both tables, English wins).
    """
    if not text:
        return None

    m = patterns.DATE_DMY.search(text)
    if not m:
        return None

    month = _month_number(m.group("month"), locale)
    if month is None:
        return None

    try:
        return date(int(m.group("year")), month, int(m.group("day"))).isoformat()
    except ValueError:
        return None


def infer_date_from_time(time_text: Optional[str], now: datetime) -> Optional[str]:
    """
    Departure date for an airport-board row that only shows a time of day.

    The time is placed on now's UTC calendar day; if that instant is still
    in the future the flight must have left the previous UTC day.
    """
    parsed = parse_clock(time_text)
    if parsed is None:
        return None

    if now.tzinfo is None:
        now_utc = now.replace(tzinfo=timezone.utc)
    else:
        now_utc = now.astimezone(timezone.utc)

    hour, minute, offset = parsed
    candidate = datetime(
        now_utc.year, now_utc.month, now_utc.day, hour, minute, tzinfo=timezone.utc
    ) - timedelta(hours=offset_hours(offset))

    day = now_utc.date()
    if candidate > now_utc:
        day -= timedelta(days=1)
    return day.isoformat()
