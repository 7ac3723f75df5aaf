"""Attempt lifecycle, streak derivation, and period reporting over attempt history.

All functions operate on caller-owned snapshots: they never mutate the list or
records they receive and instead return updated copies.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from .difficulty import recompute_base_difficulty, week_bounds
from .models import AttemptRecord, DifficultyState, PeriodStats, TaskType
from .telemetry import emit_event

logger = logging.getLogger(__name__)

DEFAULT_STREAK_LOOKBACK_DAYS = 365


@dataclass(frozen=True)
class CompletionResult:
    history: List[AttemptRecord]
    state: DifficultyState
    record: AttemptRecord


def _clock(value: datetime) -> str:
    return value.strftime("%H:%M")


def _find_index(history: Sequence[AttemptRecord], attempt_id: str) -> int:
    for index, record in enumerate(history):
        if record.attempt_id == attempt_id:
            return index
    raise LookupError(f"Attempt '{attempt_id}' not found.")


def start_attempt(
    history: Sequence[AttemptRecord],
    alarm_id: str,
    task_type: TaskType,
    now: datetime,
) -> Tuple[List[AttemptRecord], str]:
    """Append an open attempt for an alarm that just fired."""
    record = AttemptRecord(
        alarm_id=alarm_id,
        calendar_date=now.date(),
        scheduled_time=_clock(now),
        task_type=task_type,
    )
    updated = [entry.model_copy(deep=True) for entry in history]
    updated.append(record)
    emit_event(
        "attempt_started",
        attempt_id=record.attempt_id,
        alarm_id=alarm_id,
        task_type=task_type,
    )
    return updated, record.attempt_id


def record_snooze(history: Sequence[AttemptRecord], attempt_id: str) -> List[AttemptRecord]:
    index = _find_index(history, attempt_id)
    updated = [entry.model_copy(deep=True) for entry in history]
    target = updated[index]
    updated[index] = target.model_copy(update={"snooze_count": target.snooze_count + 1})
    return updated


def compute_streak(
    history: Iterable[AttemptRecord],
    today: date,
    lookback_days: int = DEFAULT_STREAK_LOOKBACK_DAYS,
) -> int:
    """Count consecutive days with a completed attempt, walking back from today.

    Today never breaks the streak on its own: a day still in progress without a
    completed record is skipped rather than ending the walk.
    """
    completed_days = {record.calendar_date for record in history if record.completed}
    if not completed_days:
        return 0

    streak = 0
    cursor = today
    for offset in range(lookback_days):
        if cursor in completed_days:
            streak += 1
        elif offset > 0:
            break
        cursor -= timedelta(days=1)
    return streak


def complete_attempt(
    history: Sequence[AttemptRecord],
    state: DifficultyState,
    attempt_id: str,
    snooze_count: int,
    task_attempts: int,
    now: datetime,
    *,
    lookback_days: int = DEFAULT_STREAK_LOOKBACK_DAYS,
) -> CompletionResult:
    """Mark an attempt completed, then derive streaks and base difficulty from the updated history."""
    index = _find_index(history, attempt_id)
    updated = [entry.model_copy(deep=True) for entry in history]
    record = updated[index].model_copy(
        update={
            "actual_wake_time": _clock(now),
            "snooze_count": max(0, snooze_count),
            "task_attempts": max(0, task_attempts),
            "completed": True,
        }
    )
    updated[index] = record

    today = now.date()
    streak = compute_streak(updated, today, lookback_days)
    difficulty = recompute_base_difficulty(updated, today)
    new_state = DifficultyState(
        current_difficulty=difficulty,
        current_streak=streak,
        best_streak=max(state.best_streak, streak),
    )
    if difficulty != state.current_difficulty:
        logger.info("Base difficulty changed from %s to %s", state.current_difficulty, difficulty)
        emit_event(
            "difficulty_recomputed",
            previous=state.current_difficulty,
            current=difficulty,
        )
    emit_event(
        "attempt_completed",
        attempt_id=attempt_id,
        alarm_id=record.alarm_id,
        snooze_count=record.snooze_count,
        task_attempts=record.task_attempts,
        streak=streak,
    )
    return CompletionResult(history=updated, state=new_state, record=record)


def _period_stats(records: List[AttemptRecord]) -> PeriodStats:
    total = len(records)
    if total == 0:
        return PeriodStats()
    completed = sum(1 for record in records if record.completed)
    total_snooze = sum(record.snooze_count for record in records)
    return PeriodStats(
        total_alarms=total,
        completed_alarms=completed,
        average_snooze_count=total_snooze / total,
        success_rate=completed / total * 100,
    )


def _records_between(history: Iterable[AttemptRecord], start: date, end: date) -> List[AttemptRecord]:
    return [record for record in history if start <= record.calendar_date <= end]


def weekly_stats(history: Iterable[AttemptRecord], today: date) -> PeriodStats:
    start, end = week_bounds(today)
    return _period_stats(_records_between(history, start, end))


def monthly_stats(history: Iterable[AttemptRecord], today: date) -> PeriodStats:
    last_day = calendar.monthrange(today.year, today.month)[1]
    start = today.replace(day=1)
    end = today.replace(day=last_day)
    return _period_stats(_records_between(history, start, end))


def today_records(history: Iterable[AttemptRecord], today: date) -> List[AttemptRecord]:
    return [record for record in history if record.calendar_date == today]


def find_attempt(history: Iterable[AttemptRecord], attempt_id: str) -> Optional[AttemptRecord]:
    for record in history:
        if record.attempt_id == attempt_id:
            return record
    return None


__all__ = [
    "CompletionResult",
    "DEFAULT_STREAK_LOOKBACK_DAYS",
    "complete_attempt",
    "compute_streak",
    "find_attempt",
    "monthly_stats",
    "record_snooze",
    "start_attempt",
    "today_records",
    "weekly_stats",
]
