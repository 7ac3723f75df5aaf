"""Scheduling and dismissal flow tying the resolver, tasks, difficulty, and tracker together."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from .attempt_tracker import (
    DEFAULT_STREAK_LOOKBACK_DAYS,
    CompletionResult,
    complete_attempt,
    record_snooze,
    start_attempt,
)
from .difficulty import difficulty_for_attempt
from .models import Alarm, AttemptRecord, DifficultyState, ScheduledAlarm, ShakeTask, Task
from .task_generator import DEFAULT_LANGUAGE, generate_task, task_after_failure
from .task_verifier import Answer, verify_task
from .telemetry import emit_event
from .time_window import RandomSource, next_fire_instant

logger = logging.getLogger(__name__)


def schedule_alarm(
    alarm: Alarm,
    now: datetime,
    rng: Optional[RandomSource] = None,
    *,
    pre_alarm_minutes: Optional[int] = None,
) -> Optional[ScheduledAlarm]:
    """Resolve the next fire instant for an enabled alarm; disabled alarms are not scheduled."""
    if not alarm.enabled:
        return None
    fire_at = next_fire_instant(alarm.window, alarm.repeat_days, now, rng)
    pre_alarm_at: Optional[datetime] = None
    if pre_alarm_minutes:
        candidate = fire_at - timedelta(minutes=pre_alarm_minutes)
        if candidate > now:
            pre_alarm_at = candidate
    emit_event("alarm_scheduled", alarm_id=alarm.alarm_id, fire_at=fire_at)
    return ScheduledAlarm(
        alarm_id=alarm.alarm_id,
        fire_at=fire_at,
        pre_alarm_at=pre_alarm_at,
        label=alarm.label,
    )


def schedule_all(
    alarms: Iterable[Alarm],
    now: datetime,
    rng: Optional[RandomSource] = None,
    *,
    pre_alarm_minutes: Optional[int] = None,
) -> List[ScheduledAlarm]:
    scheduled: List[ScheduledAlarm] = []
    for alarm in alarms:
        entry = schedule_alarm(alarm, now, rng, pre_alarm_minutes=pre_alarm_minutes)
        if entry is not None:
            scheduled.append(entry)
    return sorted(scheduled, key=lambda item: item.fire_at)


class WakeSession:
    """One ring-to-dismissal cycle for a fired alarm.

    Opening a session records the attempt start. Each snooze escalates the
    difficulty of the next task shown; the session can only be completed once
    the current task has been solved.
    """

    def __init__(
        self,
        alarm: Alarm,
        history: Sequence[AttemptRecord],
        state: DifficultyState,
        now: datetime,
        *,
        language: str = DEFAULT_LANGUAGE,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.alarm = alarm
        self.state = state
        self.language = language
        self._rng: RandomSource = rng if rng is not None else random.Random()
        self.history, self.attempt_id = start_attempt(history, alarm.alarm_id, alarm.task_type, now)
        self.snooze_count = 0
        self.task_attempts = 0
        self.shake_total = 0
        self.solved = False
        self.result: Optional[CompletionResult] = None
        self.task: Task = self._new_task()

    @property
    def difficulty(self) -> int:
        return difficulty_for_attempt(self.state.current_difficulty, self.snooze_count)

    def _new_task(self) -> Task:
        return generate_task(self.alarm.task_type, self.difficulty, self.language, self._rng)

    def _ensure_open(self) -> None:
        if self.result is not None:
            raise RuntimeError(f"Attempt '{self.attempt_id}' is already completed.")

    def submit(self, answer: Answer) -> bool:
        """Check a typed answer. Wrong answers apply the task's regeneration policy."""
        self._ensure_open()
        if isinstance(self.task, ShakeTask):
            raise TypeError("Shake tasks are completed through add_shakes().")
        self.task_attempts += 1
        correct = verify_task(self.task, answer)
        emit_event(
            "task_submitted",
            attempt_id=self.attempt_id,
            task_kind=self.task.kind,
            difficulty=self.task.difficulty,
            correct=correct,
        )
        if correct:
            self.solved = True
        else:
            self.task = task_after_failure(self.task, self._rng)
        return correct

    def add_shakes(self, count: int = 1) -> bool:
        """Accumulate motion events toward the shake threshold."""
        self._ensure_open()
        if not isinstance(self.task, ShakeTask):
            raise TypeError("Only shake tasks accept motion events.")
        self.shake_total += max(0, count)
        if not self.solved and verify_task(self.task, self.shake_total):
            self.solved = True
            self.task_attempts = 1
        return self.solved

    def snooze(self) -> Task:
        """Delay dismissal; the replacement task is generated at the escalated level."""
        self._ensure_open()
        if self.solved:
            raise RuntimeError("Cannot snooze after the task has been solved.")
        self.snooze_count += 1
        self.history = record_snooze(self.history, self.attempt_id)
        self.shake_total = 0
        self.task = self._new_task()
        emit_event(
            "attempt_snoozed",
            attempt_id=self.attempt_id,
            snooze_count=self.snooze_count,
            difficulty=self.difficulty,
        )
        return self.task

    def complete(
        self,
        now: datetime,
        *,
        lookback_days: int = DEFAULT_STREAK_LOOKBACK_DAYS,
    ) -> CompletionResult:
        self._ensure_open()
        if not self.solved:
            raise RuntimeError("The current task has not been solved yet.")
        self.result = complete_attempt(
            self.history,
            self.state,
            self.attempt_id,
            self.snooze_count,
            self.task_attempts,
            now,
            lookback_days=lookback_days,
        )
        self.history = self.result.history
        self.state = self.result.state
        logger.info(
            "Alarm %s dismissed after %s attempt(s) and %s snooze(s)",
            self.alarm.alarm_id,
            self.task_attempts,
            self.snooze_count,
        )
        return self.result

    def reschedule(
        self,
        now: datetime,
        *,
        pre_alarm_minutes: Optional[int] = None,
    ) -> Optional[ScheduledAlarm]:
        """Arm the next occurrence of a repeating alarm; one-shot alarms are not re-armed."""
        if self.alarm.is_one_shot:
            return None
        return schedule_alarm(self.alarm, now, self._rng, pre_alarm_minutes=pre_alarm_minutes)


__all__ = ["WakeSession", "schedule_alarm", "schedule_all"]
