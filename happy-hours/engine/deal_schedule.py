"""
Deal schedule parsing.

Turns the raw ``valid_days`` / ``hh_start_time`` / ``hh_end_time`` text
imported from the venue spreadsheets into a canonical :class:`Schedule`:
a set of weekdays (Sunday=0 … Saturday=6) and a daily window expressed as
minutes since local midnight.

The import data is dirty, so parsing is deliberately lenient:

  - A blank start or end time falls back to ``DEFAULT_START_TIME`` /
    ``DEFAULT_END_TIME`` (16:00-19:00) instead of rejecting the deal.
  - Blank or unrecognizable weekday text means "every day".
  - Unknown weekday tokens are skipped one by one.

Only a time that is present but unreadable (``"late"``, ``"25:00"``) makes
the schedule unparseable, in which case ``parse_schedule`` returns ``None``
and the deal is treated as never active.

All functions are pure (no I/O).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from config.collections import DEFAULT_END_TIME, DEFAULT_START_TIME

MINUTES_PER_DAY = 24 * 60

ALL_DAYS: frozenset[int] = frozenset(range(7))
WEEKDAYS: frozenset[int] = frozenset({1, 2, 3, 4, 5})
WEEKENDS: frozenset[int] = frozenset({0, 6})

# Three-letter prefixes in JavaScript getDay() order (Sunday=0).
_DAY_PREFIXES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")
_TWO_LETTER_DAYS = {"su": 0, "mo": 1, "tu": 2, "we": 3, "th": 4, "fr": 5, "sa": 6}

_ALL_DAYS_PHRASES = {"all days", "all day", "all", "everyday", "every day", "daily"}

_RE_DAY_SPLIT = re.compile(r"[,/&;]+|\band\b|\s+")
_RE_DAY_RANGE = re.compile(r"^\s*([a-z]+)\.?\s*(?:-|to)\s*([a-z]+)\.?\s*$")

# "17:00", "5:30 pm", "17:00:00"
_RE_CLOCK = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?::\d{2})?\s*(?P<ampm>[ap]\.?m\.?)?$"
)
# "1700", "530", "5" (military style, optional am/pm)
_RE_DIGITS = re.compile(r"^(?P<digits>\d{1,4})\s*(?P<ampm>[ap]\.?m\.?)?$")


@dataclass(frozen=True)
class Schedule:
    """Canonical recurrence: weekdays plus a daily ``[start, end)`` window.

    ``end < start`` means the window crosses midnight.
    """

    days: frozenset[int]
    start: int
    end: int

    @property
    def crosses_midnight(self) -> bool:
        return self.end < self.start


# =====================================================================
# Weekdays
# =====================================================================


def _day_index(token: str) -> int | None:
    token = token.strip().strip(".").lower()
    if len(token) == 2:
        return _TWO_LETTER_DAYS.get(token)
    for idx, prefix in enumerate(_DAY_PREFIXES):
        if token.startswith(prefix):
            return idx
    return None


def _day_range(start: int, end: int) -> set[int]:
    days = {start}
    current = start
    while current != end:
        current = (current + 1) % 7
        days.add(current)
    return days


def parse_days(text: str | None) -> frozenset[int]:
    """Parse weekday text into a set of day indices (Sunday=0).

    >>> sorted(parse_days("Mon, Wed, Fri"))
    [1, 3, 5]
    >>> sorted(parse_days("Fri-Sun"))
    [0, 5, 6]
    >>> parse_days("All Days") == ALL_DAYS
    True
    """
    if not text or not text.strip():
        return ALL_DAYS

    lowered = text.strip().lower()
    if lowered in _ALL_DAYS_PHRASES or "everyday" in lowered:
        return ALL_DAYS

    days: set[int] = set()
    for chunk in lowered.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        if chunk in _ALL_DAYS_PHRASES:
            return ALL_DAYS

        m = _RE_DAY_RANGE.match(chunk)
        if m:
            start = _day_index(m.group(1))
            end = _day_index(m.group(2))
            if start is not None and end is not None:
                days |= _day_range(start, end)
                continue

        for token in _RE_DAY_SPLIT.split(chunk):
            if not token:
                continue
            if token in ("weekdays", "weekday"):
                days |= WEEKDAYS
            elif token in ("weekends", "weekend"):
                days |= WEEKENDS
            else:
                idx = _day_index(token)
                if idx is not None:
                    days.add(idx)

    if not days:
        return ALL_DAYS
    return frozenset(days)


# =====================================================================
# Times
# =====================================================================


def _apply_ampm(hour: int, ampm: str | None) -> int | None:
    if not ampm:
        return hour
    if hour < 1 or hour > 12:
        return None
    if ampm.startswith("a"):
        return 0 if hour == 12 else hour
    return 12 if hour == 12 else hour + 12


def parse_time(text: Any, fallback: str | None = None) -> int | None:
    """Return minutes since midnight for a raw time value.

    Accepts ``"HH:MM"``, ``"HH:MM:SS"``, ``"H:MM PM"`` and colon-less
    military digits: 1-2 digits are an hour (``"5"`` → 05:00), 3 digits are
    ``HMM`` and 4 digits are ``HHMM``.  ``24:00`` is midnight.

    Blank input uses *fallback* (parsed the same way).  Returns ``None``
    when the value cannot be read.

    >>> parse_time("1730")
    1050
    >>> parse_time("5")
    300
    >>> parse_time("", fallback="16:00")
    960
    """
    raw = "" if text is None else str(text).strip().lower()
    if not raw:
        if fallback is None:
            return None
        return parse_time(fallback)

    hour: int | None
    minute: int

    m = _RE_CLOCK.match(raw)
    if m and (m.group("minute") is not None or ":" in raw):
        hour = int(m.group("hour"))
        minute = int(m.group("minute") or 0)
        ampm = m.group("ampm")
    else:
        m = _RE_DIGITS.match(raw)
        if not m:
            return None
        digits = m.group("digits")
        ampm = m.group("ampm")
        if len(digits) <= 2:
            hour, minute = int(digits), 0
        elif len(digits) == 3:
            hour, minute = int(digits[0]), int(digits[1:])
        else:
            hour, minute = int(digits[:2]), int(digits[2:])

    hour = _apply_ampm(hour, ampm)
    if hour is None or minute > 59:
        return None
    if hour == 24 and minute == 0:
        return 0
    if hour > 23:
        return None
    return hour * 60 + minute


def format_minutes(minutes: int) -> str:
    """Render minutes since midnight as ``HH:MM``."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


# =====================================================================
# Schedules
# =====================================================================


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def parse_schedule(
    valid_days: str | None,
    start_time: Any,
    end_time: Any,
    *,
    default_start: str = DEFAULT_START_TIME,
    default_end: str = DEFAULT_END_TIME,
) -> Schedule | None:
    """Build a :class:`Schedule` from raw deal fields.

    Returns ``None`` when the deal carries no schedule data at all, or when
    a start/end time is present but unreadable.
    """
    if _is_blank(valid_days) and _is_blank(start_time) and _is_blank(end_time):
        return None

    start = parse_time(start_time, fallback=default_start)
    end = parse_time(end_time, fallback=default_end)
    if start is None or end is None:
        return None

    return Schedule(days=parse_days(valid_days), start=start, end=end)


def schedule_for_deal(deal: dict[str, Any]) -> Schedule | None:
    """Parse the schedule fields of a deal row."""
    return parse_schedule(
        deal.get("valid_days"),
        deal.get("hh_start_time"),
        deal.get("hh_end_time"),
    )
