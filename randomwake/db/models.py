"""ORM models backing alarm and attempt-history persistence."""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin

JSONType = JSON


class AlarmModel(TimestampMixin, Base):
    __tablename__ = "alarms"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    window_start: Mapped[str] = mapped_column(String(5), nullable=False)
    window_end: Mapped[str] = mapped_column(String(5), nullable=False)
    repeat_days: Mapped[list[int]] = mapped_column(JSONType, default=list, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    task_type: Mapped[str] = mapped_column(String(16), default="math", nullable=False)
    sound_id: Mapped[str] = mapped_column(String(32), default="random", nullable=False)
    label: Mapped[str] = mapped_column(Text, default="", nullable=False)


class AttemptRecordModel(Base):
    __tablename__ = "attempt_records"
    __table_args__ = (Index("ix_attempt_records_calendar_date", "calendar_date"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    alarm_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    calendar_date: Mapped[date] = mapped_column(Date, nullable=False)
    scheduled_time: Mapped[str] = mapped_column(String(5), nullable=False)
    actual_wake_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    snooze_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    task_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    task_type: Mapped[str] = mapped_column(String(16), default="math", nullable=False)
    # Insertion order; history is append-only.
    sequence: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class DifficultyStateModel(TimestampMixin, Base):
    __tablename__ = "difficulty_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    current_difficulty: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    current_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    best_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


__all__ = ["AlarmModel", "AttemptRecordModel", "DifficultyStateModel"]
