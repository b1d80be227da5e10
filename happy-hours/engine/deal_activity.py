"""
Is a deal's happy hour open right now?

The reference instant is always passed in; nothing here reads the clock,
so results are deterministic and the same instant can be reused across a
whole ranking pass.

Midnight-crossing windows (``22:00-02:00``) belong to the day they START
on: at Saturday 01:00 a Friday-only 22:00-02:00 deal is still open, while
a Saturday-only one is not.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from deal_schedule import MINUTES_PER_DAY, Schedule, schedule_for_deal

logger = logging.getLogger("activity")


def _resolve_tz(tz: tzinfo | str | None) -> tzinfo:
    if tz is None:
        return timezone.utc
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def local_position(instant: datetime, tz: tzinfo | str | None) -> tuple[int, int]:
    """Return ``(weekday, minute_of_day)`` of *instant* in *tz*.

    Weekday uses Sunday=0.  Naive datetimes are taken to be UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    local = instant.astimezone(_resolve_tz(tz))
    # datetime.weekday() is Monday=0
    weekday = (local.weekday() + 1) % 7
    return weekday, local.hour * 60 + local.minute


def _safe_position(instant: datetime, tz: tzinfo | str | None) -> tuple[int, int] | None:
    """Like :func:`local_position`, but ``None`` for an unknown zone name."""
    try:
        return local_position(instant, tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        logger.warning("Unknown timezone %r, treating deals as inactive: %s", tz, exc)
        return None


def _open_at(schedule: Schedule, weekday: int, minute: int) -> bool:
    start, end = schedule.start, schedule.end
    if start <= end:
        return weekday in schedule.days and start <= minute < end
    if minute >= start:
        return weekday in schedule.days
    if minute < end:
        # Early-morning tail of a window that opened the previous evening.
        return (weekday - 1) % 7 in schedule.days
    return False


def is_active(
    schedule: Schedule | None,
    instant: datetime,
    tz: tzinfo | str | None = None,
) -> bool:
    """Return ``True`` if *schedule* is open at *instant* in local time *tz*.

    A missing schedule or an unknown zone name is never active.
    """
    if schedule is None:
        return False
    position = _safe_position(instant, tz)
    if position is None:
        return False
    return _open_at(schedule, *position)


def _minutes_remaining(schedule: Schedule, minute: int) -> int:
    if schedule.end > minute:
        return schedule.end - minute
    return schedule.end + MINUTES_PER_DAY - minute


def _minutes_until_start(schedule: Schedule, weekday: int, minute: int) -> int | None:
    if not schedule.days or schedule.start == schedule.end:
        return None
    for offset in range(8):
        day = (weekday + offset) % 7
        if day not in schedule.days:
            continue
        delta = offset * MINUTES_PER_DAY + schedule.start - minute
        if delta > 0:
            return delta
    return None


def evaluate(
    schedule: Schedule | None,
    instant: datetime,
    tz: tzinfo | str | None = None,
) -> dict[str, Any]:
    """Activity plus countdown fields for display.

    Returns ``is_active``, ``minutes_remaining`` (until an open window
    closes, ``None`` when closed) and ``minutes_until_start`` (until the
    next opening, ``None`` when open or never opening).
    """
    result: dict[str, Any] = {
        "is_active": False,
        "minutes_remaining": None,
        "minutes_until_start": None,
    }
    if schedule is None:
        return result
    position = _safe_position(instant, tz)
    if position is None:
        return result

    weekday, minute = position
    if _open_at(schedule, weekday, minute):
        result["is_active"] = True
        result["minutes_remaining"] = _minutes_remaining(schedule, minute)
    else:
        result["minutes_until_start"] = _minutes_until_start(schedule, weekday, minute)
    return result


def is_deal_active(
    deal: dict[str, Any],
    instant: datetime,
    tz: tzinfo | str | None = None,
) -> bool:
    return is_active(schedule_for_deal(deal), instant, tz)


def activity_map(
    deals: list[dict[str, Any]],
    instant: datetime,
    tz: tzinfo | str | None = None,
) -> dict[Any, bool]:
    """Evaluate every deal once, keyed by deal id."""
    position = _safe_position(instant, tz)
    result: dict[Any, bool] = {}
    for deal in deals:
        schedule = schedule_for_deal(deal)
        result[deal.get("id")] = (
            position is not None
            and schedule is not None
            and _open_at(schedule, *position)
        )
    return result
