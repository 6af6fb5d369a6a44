"""
Date helpers: calendar keys for stats/archives and due-date input parsing.

All "today" lookups go through today() so callers and tests can pin the date.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Optional


def today(on: Optional[date] = None) -> date:
    return on or datetime.now().date()


def day_key(d: date) -> str:
    """``YYYY-MM-DD`` key used by completionsByDay and archive lines."""
    return d.isoformat()


def month_key(d: date) -> str:
    """``YYYY-MM`` key used by completionsByMonth and archive file names."""
    return d.strftime("%Y-%m")


def previous_day(d: date) -> date:
    return d - timedelta(days=1)


# ---------------------------------------------------------------------------
# Due-date input
# ---------------------------------------------------------------------------

_LEAD_WORDS = ("due", "by", "on")

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_OFFSET_RE = re.compile(r"^(?:in\s+|\+)(\d+)\s*(d|days?|w|weeks?)$")
_MONTH_DAY_RE = re.compile(r"^([a-z]{3,})\.?\s+(\d{1,2})(?:\s+(\d{4}))?$")

_NAMED_DAYS = {"yesterday": -1, "today": 0, "tomorrow": 1, "next week": 7}

_WEEKDAYS = {name.lower(): i for i, name in enumerate(calendar.day_name)}
_WEEKDAYS.update({name.lower(): i for i, name in enumerate(calendar.day_abbr)})

_MONTHS = {name.lower(): i for i, name in enumerate(calendar.month_abbr) if name}


def _read_iso(phrase: str, base: date) -> Optional[date]:
    if not _ISO_RE.match(phrase):
        return None
    try:
        return date.fromisoformat(phrase)
    except ValueError:
        return None


def _read_named_day(phrase: str, base: date) -> Optional[date]:
    offset = _NAMED_DAYS.get(phrase)
    return None if offset is None else base + timedelta(days=offset)


def _read_weekday(phrase: str, base: date) -> Optional[date]:
    """``fri`` is the next Friday after today; ``next fri`` is a week later."""
    skip_week = phrase.startswith("next ")
    if skip_week:
        phrase = phrase[len("next "):]
    weekday = _WEEKDAYS.get(phrase)
    if weekday is None:
        return None
    ahead = (weekday - base.weekday()) % 7 or 7
    if skip_week:
        ahead += 7
    return base + timedelta(days=ahead)


def _read_offset(phrase: str, base: date) -> Optional[date]:
    m = _OFFSET_RE.match(phrase)
    if not m:
        return None
    amount = int(m.group(1))
    days = amount * 7 if m.group(2).startswith("w") else amount
    return base + timedelta(days=days)


def _read_month_day(phrase: str, base: date) -> Optional[date]:
    """``mar 15`` without a year is the next Mar 15 on or after today."""
    m = _MONTH_DAY_RE.match(phrase)
    if not m:
        return None
    month = _MONTHS.get(m.group(1)[:3])
    if month is None:
        return None
    day = int(m.group(2))
    try:
        if m.group(3):
            return date(int(m.group(3)), month, day)
        found = date(base.year, month, day)
        if found < base:
            found = date(base.year + 1, month, day)
        return found
    except ValueError:
        return None


_READERS: tuple = (_read_iso, _read_named_day, _read_weekday, _read_offset, _read_month_day)


def parse_due_date(text: Optional[str], on: Optional[date] = None) -> Optional[str]:
    """
    Turn a typed due date into the ``YYYY-MM-DD`` value written after ``due:``.

    Accepts ISO dates, ``today``/``tomorrow``/``yesterday``, weekday names
    (``friday``, ``fri``, ``next friday``), offsets (``in 3 days``, ``+2w``,
    ``next week``) and month-day (``mar 15``, ``March 15, 2025``). A leading
    ``due``, ``by`` or ``on`` is ignored. Relative forms count from
    ``today(on)``. Returns None when nothing matches.
    """
    if not text:
        return None
    words = text.lower().replace(",", " ").split()
    if words and words[0] in _LEAD_WORDS:
        words = words[1:]
    phrase = " ".join(words)
    if not phrase:
        return None

    base = today(on)
    for reader in _READERS:
        found = reader(phrase, base)
        if found is not None:
            return day_key(found)
    return None
