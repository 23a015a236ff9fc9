"""Relative day and date resolution for chat messages.

All arithmetic is calendar-day granular. Callers pass ``today`` explicitly;
only the service edge reads the clock, through ``local_today()`` in the
configured timezone.
"""
import re
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

from .config import config

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_DAY_ALIASES = {
    "mon": "Monday",
    "tue": "Tuesday", "tues": "Tuesday",
    "wed": "Wednesday", "weds": "Wednesday",
    "thu": "Thursday", "thur": "Thursday", "thurs": "Thursday",
    "fri": "Friday",
    "sat": "Saturday",
    "sun": "Sunday",
}
_DAY_ALIASES.update({day.lower(): day for day in WEEKDAYS})

_WEEKDAY_OFFSETS = dict(zip(WEEKDAYS, (MO, TU, WE, TH, FR, SA, SU)))

SAME_DAY_PHRASES = ("today", "tonight", "this morning", "this afternoon", "this evening")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_US_DATE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")
_DAYS_AHEAD = re.compile(r"^(?:in\s+)?(\d+)\s+days?$")
_WEEKS_AHEAD = re.compile(r"^(?:in\s+)?(\d+)\s+weeks?$")


def local_today() -> date:
    """Today's date in the configured timezone."""
    return datetime.now(ZoneInfo(config.timezone)).date()


def _normalize(phrase: str) -> str:
    text = re.sub(r"\s+", " ", phrase.strip().lower())
    return text.rstrip(".,!?;:")


def canonical_day_name(name: str) -> str:
    """Map any casing or common abbreviation of a weekday to its canonical name."""
    normalized = _normalize(name)
    if normalized in _DAY_ALIASES:
        return _DAY_ALIASES[normalized]
    return normalized[:1].upper() + normalized[1:]


def is_weekday(name: str) -> bool:
    return _normalize(name) in _DAY_ALIASES


def parse_date(value: str) -> Optional[date]:
    """Parse an ISO ``YYYY-MM-DD`` or US ``M/D/YYYY`` date string."""
    text = value.strip()
    try:
        if _ISO_DATE.match(text):
            return date.fromisoformat(text)
        if _US_DATE.match(text):
            return datetime.strptime(text, "%m/%d/%Y").date()
    except ValueError:
        return None
    return None


def next_weekday(day_name: str, today: date) -> date:
    """Next occurrence of a weekday strictly after ``today``."""
    offset = _WEEKDAY_OFFSETS[canonical_day_name(day_name)]
    return today + relativedelta(days=+1, weekday=offset(+1))


def resolve_day(phrase: str, today: date) -> str:
    """Resolve a day phrase to a canonical weekday label."""
    text = _normalize(phrase)
    if text == "tomorrow":
        return WEEKDAYS[(today + timedelta(days=1)).weekday()]
    if text == "yesterday":
        return WEEKDAYS[(today - timedelta(days=1)).weekday()]
    if text in SAME_DAY_PHRASES:
        return WEEKDAYS[today.weekday()]

    explicit = parse_date(text)
    if explicit:
        return WEEKDAYS[explicit.weekday()]

    if text.startswith("next ") or text.startswith("this "):
        text = text[5:]
    return canonical_day_name(text)


def resolve_relative_date(phrase: str, today: date) -> Optional[str]:
    """Resolve a date phrase to a concrete date string.

    Explicit ``YYYY-MM-DD`` and ``M/D/YYYY`` dates pass through unchanged.
    A bare weekday always means its next future occurrence, never today.
    Returns None when the phrase is not a recognised date.
    """
    if _ISO_DATE.match(phrase.strip()) or _US_DATE.match(phrase.strip()):
        return phrase.strip()

    text = _normalize(phrase)
    if text == "tomorrow":
        return (today + timedelta(days=1)).isoformat()
    if text == "yesterday":
        return (today - timedelta(days=1)).isoformat()
    if text in SAME_DAY_PHRASES:
        return today.isoformat()
    if text == "next week":
        return (today + timedelta(days=7)).isoformat()
    if text == "next month":
        return (today + relativedelta(months=+1)).isoformat()

    match = _DAYS_AHEAD.match(text)
    if match:
        return (today + timedelta(days=int(match.group(1)))).isoformat()
    match = _WEEKS_AHEAD.match(text)
    if match:
        return (today + timedelta(weeks=int(match.group(1)))).isoformat()

    if text.startswith("next ") or text.startswith("this "):
        text = text[5:]
    if is_weekday(text):
        return next_weekday(text, today).isoformat()

    return None


def format_time(hour: int, minute: int, meridiem: str) -> str:
    return f"{hour}:{minute:02d} {meridiem.upper()}"
