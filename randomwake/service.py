"""Application facade binding configuration, persistence, and the wake cycle."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from . import alarms as alarm_list
from .attempt_tracker import find_attempt, monthly_stats, weekly_stats
from .config import Settings, get_settings
from .models import Alarm, PeriodStats, ScheduledAlarm, TaskType, TimeWindow, UserSettings
from .storage import WakeStore
from .time_window import RandomSource, is_window_exceeded
from .wake_cycle import WakeSession, schedule_all

logger = logging.getLogger(__name__)


def _require_alarm(alarms: Iterable[Alarm], alarm_id: str) -> Alarm:
    alarm = alarm_list.get_alarm(alarms, alarm_id)
    if alarm is None:
        raise LookupError(f"Alarm '{alarm_id}' not found.")
    return alarm


class WakeService:
    """Load, mutate, and persist alarm state around each wake cycle."""

    def __init__(
        self,
        store: Optional[WakeStore] = None,
        settings: Optional[Settings] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store or WakeStore()
        self._rng: RandomSource = rng if rng is not None else random.Random()

    @property
    def store(self) -> WakeStore:
        return self._store

    @property
    def user_settings(self) -> UserSettings:
        return UserSettings(
            language=self._settings.language,
            default_task_type=self._settings.default_task_type,
        )

    def _warn_if_wide(self, alarm: Alarm) -> None:
        if is_window_exceeded(alarm.window, self._settings.max_window_minutes):
            logger.warning(
                "Alarm %s window %s-%s exceeds %s minutes",
                alarm.alarm_id,
                alarm.window.start,
                alarm.window.end,
                self._settings.max_window_minutes,
            )

    def create_alarm(
        self,
        start: str,
        end: str,
        repeat_days: Iterable[int] = (),
        *,
        task_type: Optional[TaskType] = None,
        label: str = "",
    ) -> Alarm:
        alarm = Alarm(
            window=TimeWindow(start=start, end=end),
            repeat_days=list(repeat_days),
            task_type=task_type or self._settings.default_task_type,
            label=label,
        )
        created = alarm_list.add_alarm(self._store.load_alarms(), alarm)[-1]
        self._warn_if_wide(created)
        return self._store.save_alarm(created)

    def update_alarm(self, alarm_id: str, updates: Dict[str, Any]) -> Alarm:
        updated = alarm_list.update_alarm(self._store.load_alarms(), alarm_id, updates)
        alarm = _require_alarm(updated, alarm_id)
        self._warn_if_wide(alarm)
        return self._store.save_alarm(alarm)

    def toggle_alarm(self, alarm_id: str) -> Alarm:
        toggled = alarm_list.toggle_alarm(self._store.load_alarms(), alarm_id)
        alarm = _require_alarm(toggled, alarm_id)
        return self._store.save_alarm(alarm)

    def delete_alarm(self, alarm_id: str) -> bool:
        return self._store.delete_alarm(alarm_id)

    def upcoming(self, now: datetime) -> List[ScheduledAlarm]:
        return schedule_all(
            self._store.load_alarms(),
            now,
            self._rng,
            pre_alarm_minutes=self._settings.pre_alarm_minutes,
        )

    def ring(self, alarm_id: str, now: datetime) -> WakeSession:
        """Open a wake session for a fired alarm and persist the open attempt."""
        alarm = _require_alarm(self._store.load_alarms(), alarm_id)
        session = WakeSession(
            alarm,
            self._store.load_attempts(),
            self._store.load_difficulty_state(),
            now,
            language=self._settings.language,
            rng=self._rng,
        )
        self._store.append_attempt(session.history[-1])
        return session

    def snooze(self, session: WakeSession) -> None:
        session.snooze()
        record = find_attempt(session.history, session.attempt_id)
        if record is None:
            raise LookupError(f"Attempt '{session.attempt_id}' not found.")
        self._store.update_attempt(record)

    def dismiss(self, session: WakeSession, now: datetime) -> Optional[ScheduledAlarm]:
        """Persist the completed attempt and arm the next occurrence, if any."""
        result = session.complete(now, lookback_days=self._settings.streak_lookback_days)
        self._store.record_completion(result)
        return session.reschedule(now, pre_alarm_minutes=self._settings.pre_alarm_minutes)

    def weekly_stats(self, today: date) -> PeriodStats:
        return weekly_stats(self._store.load_attempts(), today)

    def monthly_stats(self, today: date) -> PeriodStats:
        return monthly_stats(self._store.load_attempts(), today)


__all__ = ["WakeService"]
