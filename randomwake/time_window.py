"""Resolve the next randomised fire instant for an alarm window."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, Optional, Protocol

from .models import MINUTES_PER_DAY, TimeWindow

logger = logging.getLogger(__name__)

SCAN_DAYS = 7


class RandomSource(Protocol):
    """Anything exposing a uniform draw in [0, 1); `random.Random` qualifies."""

    def random(self) -> float:  # pragma: no cover - protocol definition
        ...


class InvalidWindowError(ValueError):
    """Raised when a window normalises to zero or negative duration."""


class NoMatchingRepeatDayError(LookupError):
    """Raised when a non-empty repeat-day set matches no weekday within a week."""


def weekday_index(day: date) -> int:
    """Weekday index with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def window_duration_minutes(window: TimeWindow) -> int:
    start = window.start_minute
    end = window.end_minute
    if end == start:
        raise InvalidWindowError(f"Window {window.start} - {window.end} has no duration.")
    if end < start:
        end += MINUTES_PER_DAY
    return end - start


def is_window_exceeded(window: TimeWindow, max_minutes: int = 30) -> bool:
    """True when the window is wider than the recommended maximum."""
    return window_duration_minutes(window) > max_minutes


def window_start_on(window: TimeWindow, day: date, tz: Optional[tzinfo] = None) -> datetime:
    start = window.start_minute
    return datetime.combine(day, time(start // 60, start % 60), tzinfo=tz)


def random_time_in_window(
    window: TimeWindow,
    day: date,
    rng: RandomSource,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """Uniform instant in [start, start + duration) for the window beginning on `day`."""
    duration_seconds = window_duration_minutes(window) * 60
    offset = int(rng.random() * duration_seconds)
    offset = min(max(offset, 0), duration_seconds - 1)
    return window_start_on(window, day, tz) + timedelta(seconds=offset)


def next_fire_instant(
    window: TimeWindow,
    repeat_days: Iterable[int],
    now: datetime,
    rng: Optional[RandomSource] = None,
) -> datetime:
    """Compute the next firing instant for a window and repeat-day set.

    One-shot alarms (empty `repeat_days`) fire today when the window start is
    still ahead of `now`, otherwise tomorrow. Repeating alarms fire today only
    when today is a repeat day and the window has not opened yet; otherwise the
    next matching weekday within a week is used. Every call makes an
    independent random draw.
    """
    source = rng if rng is not None else random.Random()
    window_duration_minutes(window)
    days = set(repeat_days)
    today = now.date()
    tz = now.tzinfo
    today_start = window_start_on(window, today, tz)

    if not days:
        target = today if today_start > now else today + timedelta(days=1)
        return random_time_in_window(window, target, source, tz)

    if weekday_index(today) in days and today_start > now:
        return random_time_in_window(window, today, source, tz)

    for offset in range(1, SCAN_DAYS + 1):
        candidate = today + timedelta(days=offset)
        if weekday_index(candidate) in days:
            return random_time_in_window(window, candidate, source, tz)

    logger.warning("No repeat day matched within %s days for %s", SCAN_DAYS, sorted(days))
    raise NoMatchingRepeatDayError(f"Repeat days {sorted(days)} match no weekday within {SCAN_DAYS} days.")


def time_of_day_minute(instant: datetime) -> int:
    return instant.hour * 60 + instant.minute


def format_time_range(window: TimeWindow) -> str:
    return f"{window.start} - {window.end}"


def format_time_until(fire_at: datetime, now: datetime) -> str:
    """Human readable countdown such as '1h 5m', '42m' or 'Now'."""
    remaining = (fire_at - now).total_seconds()
    if remaining <= 0:
        return "Now"
    total_minutes = int(remaining // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


__all__ = [
    "InvalidWindowError",
    "NoMatchingRepeatDayError",
    "RandomSource",
    "format_time_range",
    "format_time_until",
    "is_window_exceeded",
    "next_fire_instant",
    "random_time_in_window",
    "time_of_day_minute",
    "weekday_index",
    "window_duration_minutes",
    "window_start_on",
]
