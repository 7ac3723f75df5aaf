"""Alarm, task, and attempt-history models shared by the wake-cycle core."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

TaskType = Literal["math", "typing", "sequence", "shake"]
Language = Literal["en", "tr"]

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 3
MINUTES_PER_DAY = 24 * 60


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_clock(value: Any) -> str:
    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}"
    if not isinstance(value, str):
        raise ValueError("Time of day must be an 'HH:MM' string or datetime.time.")
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid time of day '{value}'; expected 'HH:MM'.")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Time of day '{value}' is out of range.")
    return f"{hours:02d}:{minutes:02d}"


class TimeWindow(BaseModel):
    """Time-of-day range inside which an alarm fires. `end <= start` wraps past midnight."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str

    @field_validator("start", "end", mode="before")
    @classmethod
    def _normalize_clock(cls, value: Any) -> str:
        return _parse_clock(value)

    @property
    def start_minute(self) -> int:
        hours, minutes = self.start.split(":")
        return int(hours) * 60 + int(minutes)

    @property
    def end_minute(self) -> int:
        hours, minutes = self.end.split(":")
        return int(hours) * 60 + int(minutes)

    @property
    def wraps_midnight(self) -> bool:
        return self.end_minute <= self.start_minute


class Alarm(BaseModel):
    """Persisted alarm definition owned by the alarm-management layer."""

    alarm_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    window: TimeWindow
    repeat_days: List[int] = Field(default_factory=list)
    enabled: bool = True
    task_type: TaskType = "math"
    sound_id: str = "random"
    label: str = ""
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @field_validator("repeat_days")
    @classmethod
    def _normalize_repeat_days(cls, value: List[int]) -> List[int]:
        for day in value:
            if not 0 <= day <= 6:
                raise ValueError(f"Repeat day {day} is outside 0 (Sunday) .. 6 (Saturday).")
        return sorted(set(value))

    @property
    def is_one_shot(self) -> bool:
        return not self.repeat_days


class ScheduledAlarm(BaseModel):
    """Fire instant handed to the platform notification scheduler."""

    alarm_id: str
    fire_at: datetime
    pre_alarm_at: Optional[datetime] = None
    label: str = ""


class MathTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["math"] = "math"
    difficulty: int = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    question: str
    expected_answer: int


class TypingTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["typing"] = "typing"
    difficulty: int = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    target_text: str
    language: Language = "en"


class SequenceTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["sequence"] = "sequence"
    difficulty: int = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    digit_string: str


class ShakeTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["shake"] = "shake"
    difficulty: int = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    required_shake_count: int = Field(ge=1)


Task = Annotated[
    Union[MathTask, TypingTask, SequenceTask, ShakeTask],
    Field(discriminator="kind"),
]


class AttemptRecord(BaseModel):
    """One wake-up cycle, from the alarm firing to completion or abandonment."""

    attempt_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    alarm_id: str
    calendar_date: date
    scheduled_time: str
    actual_wake_time: Optional[str] = None
    snooze_count: int = Field(default=0, ge=0)
    task_attempts: int = Field(default=0, ge=0)
    completed: bool = False
    task_type: TaskType = "math"


class DifficultyState(BaseModel):
    """Rolling difficulty and streak counters persisted between sessions."""

    current_difficulty: int = Field(default=MIN_DIFFICULTY, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    current_streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)


class PeriodStats(BaseModel):
    """Aggregate attempt statistics over a calendar period."""

    total_alarms: int = 0
    completed_alarms: int = 0
    average_snooze_count: float = 0.0
    success_rate: float = 0.0


class UserSettings(BaseModel):
    """User preferences that influence task generation."""

    language: Language = "en"
    default_task_type: TaskType = "math"
    vibration_enabled: bool = True
    gradual_volume_enabled: bool = True


__all__ = [
    "Alarm",
    "AttemptRecord",
    "DifficultyState",
    "Language",
    "MathTask",
    "MAX_DIFFICULTY",
    "MIN_DIFFICULTY",
    "MINUTES_PER_DAY",
    "PeriodStats",
    "ScheduledAlarm",
    "SequenceTask",
    "ShakeTask",
    "Task",
    "TaskType",
    "TimeWindow",
    "TypingTask",
    "UserSettings",
]
