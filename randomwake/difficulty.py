"""Adaptive difficulty derived from recent snooze behaviour."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from statistics import mean
from typing import Iterable, Tuple

from .models import MAX_DIFFICULTY, MIN_DIFFICULTY, AttemptRecord
from .task_generator import clamp_difficulty

logger = logging.getLogger(__name__)

HARD_SNOOZE_AVERAGE = 4.0
MEDIUM_SNOOZE_AVERAGE = 2.0


def difficulty_for_attempt(base_difficulty: int, snooze_count: int) -> int:
    """Escalate the base level by one step per snooze, capped at hard."""
    base = clamp_difficulty(base_difficulty)
    return min(MAX_DIFFICULTY, base + max(0, snooze_count))


def week_bounds(today: date) -> Tuple[date, date]:
    """Monday and Sunday of the week containing `today`."""
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def weekly_average_snooze(history: Iterable[AttemptRecord], today: date) -> float:
    """Mean snooze count of completed attempts in the current Monday-aligned week."""
    start, end = week_bounds(today)
    snoozes = [
        record.snooze_count
        for record in history
        if record.completed and start <= record.calendar_date <= end
    ]
    if not snoozes:
        return 0.0
    return float(mean(snoozes))


def classify_average_snooze(average: float) -> int:
    if average >= HARD_SNOOZE_AVERAGE:
        return 3
    if average >= MEDIUM_SNOOZE_AVERAGE:
        return 2
    return MIN_DIFFICULTY


def recompute_base_difficulty(history: Iterable[AttemptRecord], today: date) -> int:
    average = weekly_average_snooze(history, today)
    level = classify_average_snooze(average)
    logger.debug("Weekly snooze average %.2f -> base difficulty %s", average, level)
    return level


__all__ = [
    "HARD_SNOOZE_AVERAGE",
    "MEDIUM_SNOOZE_AVERAGE",
    "classify_average_snooze",
    "difficulty_for_attempt",
    "recompute_base_difficulty",
    "week_bounds",
    "weekly_average_snooze",
]
