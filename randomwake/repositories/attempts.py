"""Database-backed attempt history and difficulty state repositories."""

from __future__ import annotations

from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.models import AttemptRecordModel, DifficultyStateModel
from ..models import AttemptRecord, DifficultyState

_STATE_ROW_ID = 1


class AttemptRepository:
    """Append-only attempt history with update-by-id for completion."""

    def list_all(self, session: Session) -> List[AttemptRecord]:
        stmt = select(AttemptRecordModel).order_by(AttemptRecordModel.sequence)
        return [self._to_domain(model) for model in session.execute(stmt).scalars()]

    def append(self, session: Session, record: AttemptRecord) -> AttemptRecord:
        if session.get(AttemptRecordModel, record.attempt_id) is not None:
            raise ValueError(f"Attempt '{record.attempt_id}' already recorded.")
        next_sequence = session.execute(
            select(func.coalesce(func.max(AttemptRecordModel.sequence), 0))
        ).scalar_one() + 1
        model = AttemptRecordModel(id=record.attempt_id, sequence=next_sequence)
        self._apply(model, record)
        session.add(model)
        session.flush()
        return self._to_domain(model)

    def update(self, session: Session, record: AttemptRecord) -> AttemptRecord:
        model = session.get(AttemptRecordModel, record.attempt_id)
        if model is None:
            raise LookupError(f"Attempt '{record.attempt_id}' not found.")
        self._apply(model, record)
        session.flush()
        return self._to_domain(model)

    @staticmethod
    def _apply(model: AttemptRecordModel, record: AttemptRecord) -> None:
        model.alarm_id = record.alarm_id
        model.calendar_date = record.calendar_date
        model.scheduled_time = record.scheduled_time
        model.actual_wake_time = record.actual_wake_time
        model.snooze_count = record.snooze_count
        model.task_attempts = record.task_attempts
        model.completed = record.completed
        model.task_type = record.task_type

    @staticmethod
    def _to_domain(model: AttemptRecordModel) -> AttemptRecord:
        return AttemptRecord(
            attempt_id=model.id,
            alarm_id=model.alarm_id,
            calendar_date=model.calendar_date,
            scheduled_time=model.scheduled_time,
            actual_wake_time=model.actual_wake_time,
            snooze_count=model.snooze_count,
            task_attempts=model.task_attempts,
            completed=model.completed,
            task_type=model.task_type,  # type: ignore[arg-type]
        )


class DifficultyStateRepository:
    def get(self, session: Session) -> DifficultyState:
        model = session.get(DifficultyStateModel, _STATE_ROW_ID)
        if model is None:
            return DifficultyState()
        return DifficultyState(
            current_difficulty=model.current_difficulty,
            current_streak=model.current_streak,
            best_streak=model.best_streak,
        )

    def save(self, session: Session, state: DifficultyState) -> DifficultyState:
        model = session.get(DifficultyStateModel, _STATE_ROW_ID)
        if model is None:
            model = DifficultyStateModel(id=_STATE_ROW_ID)
            session.add(model)
        model.current_difficulty = state.current_difficulty
        model.current_streak = state.current_streak
        model.best_streak = state.best_streak
        session.flush()
        return self.get(session)


attempts_repository = AttemptRepository()
difficulty_repository = DifficultyStateRepository()

__all__ = [
    "AttemptRepository",
    "DifficultyStateRepository",
    "attempts_repository",
    "difficulty_repository",
]
