"""Caller-owned alarm list operations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import Alarm
from .time_window import window_duration_minutes

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"alarm_id", "created_at"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def validate_alarm(alarm: Alarm) -> Alarm:
    """Reject alarms whose window has no duration; the editor must block saving."""
    window_duration_minutes(alarm.window)
    return alarm


def add_alarm(alarms: Sequence[Alarm], alarm: Alarm) -> List[Alarm]:
    validate_alarm(alarm)
    if any(existing.alarm_id == alarm.alarm_id for existing in alarms):
        raise ValueError(f"Alarm '{alarm.alarm_id}' already exists.")
    stamp = _now()
    created = alarm.model_copy(update={"created_at": stamp, "updated_at": stamp}, deep=True)
    logger.debug("Adding alarm %s (%s - %s)", created.alarm_id, created.window.start, created.window.end)
    return [*alarms, created]


def update_alarm(alarms: Sequence[Alarm], alarm_id: str, updates: Dict[str, Any]) -> List[Alarm]:
    blocked = _IMMUTABLE_FIELDS.intersection(updates)
    if blocked:
        raise ValueError(f"Cannot update immutable alarm fields: {sorted(blocked)}")
    result: List[Alarm] = []
    found = False
    for alarm in alarms:
        if alarm.alarm_id != alarm_id:
            result.append(alarm)
            continue
        found = True
        payload = alarm.model_dump()
        payload.update(updates)
        payload["updated_at"] = _now()
        result.append(validate_alarm(Alarm.model_validate(payload)))
    if not found:
        raise LookupError(f"Alarm '{alarm_id}' not found.")
    return result


def delete_alarm(alarms: Sequence[Alarm], alarm_id: str) -> List[Alarm]:
    return [alarm for alarm in alarms if alarm.alarm_id != alarm_id]


def toggle_alarm(alarms: Sequence[Alarm], alarm_id: str) -> List[Alarm]:
    target = get_alarm(alarms, alarm_id)
    if target is None:
        raise LookupError(f"Alarm '{alarm_id}' not found.")
    return update_alarm(alarms, alarm_id, {"enabled": not target.enabled})


def get_alarm(alarms: Iterable[Alarm], alarm_id: str) -> Optional[Alarm]:
    for alarm in alarms:
        if alarm.alarm_id == alarm_id:
            return alarm
    return None


def active_alarms(alarms: Iterable[Alarm]) -> List[Alarm]:
    return [alarm for alarm in alarms if alarm.enabled]


__all__ = [
    "active_alarms",
    "add_alarm",
    "delete_alarm",
    "get_alarm",
    "toggle_alarm",
    "update_alarm",
    "validate_alarm",
]
