"""Database-backed alarm repository."""

from __future__ import annotations

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.models import AlarmModel
from ..models import Alarm, TimeWindow


class AlarmRepository:
    """Persistence helper mirroring the JSON alarm store API."""

    def list_all(self, session: Session) -> List[Alarm]:
        stmt = select(AlarmModel).order_by(AlarmModel.created_at, AlarmModel.id)
        return [self._to_domain(model) for model in session.execute(stmt).scalars()]

    def get(self, session: Session, alarm_id: str) -> Alarm | None:
        model = session.get(AlarmModel, alarm_id)
        if model is None:
            return None
        return self._to_domain(model)

    def upsert(self, session: Session, alarm: Alarm) -> Alarm:
        model = session.get(AlarmModel, alarm.alarm_id)
        if model is None:
            model = AlarmModel(id=alarm.alarm_id, created_at=alarm.created_at)
            session.add(model)
        self._apply(model, alarm)
        session.flush()
        return self._to_domain(model)

    def delete(self, session: Session, alarm_id: str) -> bool:
        result = session.execute(delete(AlarmModel).where(AlarmModel.id == alarm_id))
        return bool(result.rowcount)

    @staticmethod
    def _apply(model: AlarmModel, alarm: Alarm) -> None:
        model.window_start = alarm.window.start
        model.window_end = alarm.window.end
        model.repeat_days = list(alarm.repeat_days)
        model.enabled = alarm.enabled
        model.task_type = alarm.task_type
        model.sound_id = alarm.sound_id
        model.label = alarm.label
        model.updated_at = alarm.updated_at

    @staticmethod
    def _to_domain(model: AlarmModel) -> Alarm:
        return Alarm(
            alarm_id=model.id,
            window=TimeWindow(start=model.window_start, end=model.window_end),
            repeat_days=list(model.repeat_days or []),
            enabled=model.enabled,
            task_type=model.task_type,  # type: ignore[arg-type]
            sound_id=model.sound_id,
            label=model.label,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


alarms_repository = AlarmRepository()

__all__ = ["AlarmRepository", "alarms_repository"]
