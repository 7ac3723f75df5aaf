"""Persistence facade for alarms, attempt history, and difficulty state."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .attempt_tracker import CompletionResult
from .config import get_settings
from .db.session import create_schema, session_scope
from .models import Alarm, AttemptRecord, DifficultyState
from .repositories import alarms_repository, attempts_repository, difficulty_repository

logger = logging.getLogger(__name__)

ALARMS_FILE = "alarms.json"
ATTEMPTS_FILE = "attempts.json"
DIFFICULTY_FILE = "difficulty.json"

_WRITE_METHODS = frozenset(
    {"save_alarm", "delete_alarm", "append_attempt", "update_attempt", "save_difficulty_state"}
)


class _DatabaseWakeStore:
    """SQLAlchemy-backed store; each call runs in its own session scope."""

    def __init__(self) -> None:
        self._schema_ready = False

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            create_schema()
            self._schema_ready = True

    def load_alarms(self) -> List[Alarm]:
        self._ensure_schema()
        with session_scope(commit=False) as session:
            return alarms_repository.list_all(session)

    def save_alarm(self, alarm: Alarm) -> Alarm:
        self._ensure_schema()
        with session_scope() as session:
            return alarms_repository.upsert(session, alarm)

    def delete_alarm(self, alarm_id: str) -> bool:
        self._ensure_schema()
        with session_scope() as session:
            return alarms_repository.delete(session, alarm_id)

    def load_attempts(self) -> List[AttemptRecord]:
        self._ensure_schema()
        with session_scope(commit=False) as session:
            return attempts_repository.list_all(session)

    def append_attempt(self, record: AttemptRecord) -> AttemptRecord:
        self._ensure_schema()
        with session_scope() as session:
            return attempts_repository.append(session, record)

    def update_attempt(self, record: AttemptRecord) -> AttemptRecord:
        self._ensure_schema()
        with session_scope() as session:
            return attempts_repository.update(session, record)

    def load_difficulty_state(self) -> DifficultyState:
        self._ensure_schema()
        with session_scope(commit=False) as session:
            return difficulty_repository.get(session)

    def save_difficulty_state(self, state: DifficultyState) -> DifficultyState:
        self._ensure_schema()
        with session_scope() as session:
            return difficulty_repository.save(session, state)


class _LegacyWakeStore:
    """JSON-file persistence used for offline and single-device modes."""

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self._data_dir = data_dir or get_settings().data_dir
        self._lock = threading.RLock()

    def _read(self, filename: str) -> Any:
        path = self._data_dir / filename
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def _write(self, filename: str, payload: Any) -> None:
        path = self._data_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)

    def _load_alarms_unlocked(self) -> List[Alarm]:
        alarms: List[Alarm] = []
        for payload in self._read(ALARMS_FILE) or []:
            try:
                alarms.append(Alarm.model_validate(payload))
            except Exception:  # noqa: BLE001
                logger.exception("Failed to parse stored alarm entry")
        return alarms

    def _load_attempts_unlocked(self) -> List[AttemptRecord]:
        records: List[AttemptRecord] = []
        for payload in self._read(ATTEMPTS_FILE) or []:
            try:
                records.append(AttemptRecord.model_validate(payload))
            except Exception:  # noqa: BLE001
                logger.exception("Failed to parse stored attempt entry")
        return records

    def load_alarms(self) -> List[Alarm]:
        with self._lock:
            return self._load_alarms_unlocked()

    def save_alarm(self, alarm: Alarm) -> Alarm:
        with self._lock:
            alarms = self._load_alarms_unlocked()
            stored = alarm.model_copy(deep=True)
            for index, existing in enumerate(alarms):
                if existing.alarm_id == alarm.alarm_id:
                    alarms[index] = stored
                    break
            else:
                alarms.append(stored)
            self._write(ALARMS_FILE, [entry.model_dump(mode="json") for entry in alarms])
            return stored

    def delete_alarm(self, alarm_id: str) -> bool:
        with self._lock:
            alarms = self._load_alarms_unlocked()
            remaining = [entry for entry in alarms if entry.alarm_id != alarm_id]
            if len(remaining) == len(alarms):
                return False
            self._write(ALARMS_FILE, [entry.model_dump(mode="json") for entry in remaining])
            return True

    def load_attempts(self) -> List[AttemptRecord]:
        with self._lock:
            return self._load_attempts_unlocked()

    def append_attempt(self, record: AttemptRecord) -> AttemptRecord:
        with self._lock:
            records = self._load_attempts_unlocked()
            if any(entry.attempt_id == record.attempt_id for entry in records):
                raise ValueError(f"Attempt '{record.attempt_id}' already recorded.")
            records.append(record.model_copy(deep=True))
            self._write(ATTEMPTS_FILE, [entry.model_dump(mode="json") for entry in records])
            return record

    def update_attempt(self, record: AttemptRecord) -> AttemptRecord:
        with self._lock:
            records = self._load_attempts_unlocked()
            for index, existing in enumerate(records):
                if existing.attempt_id == record.attempt_id:
                    records[index] = record.model_copy(deep=True)
                    break
            else:
                raise LookupError(f"Attempt '{record.attempt_id}' not found.")
            self._write(ATTEMPTS_FILE, [entry.model_dump(mode="json") for entry in records])
            return record

    def load_difficulty_state(self) -> DifficultyState:
        with self._lock:
            payload = self._read(DIFFICULTY_FILE)
        if not payload:
            return DifficultyState()
        try:
            return DifficultyState.model_validate(payload)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to parse stored difficulty state; using defaults")
            return DifficultyState()

    def save_difficulty_state(self, state: DifficultyState) -> DifficultyState:
        with self._lock:
            self._write(DIFFICULTY_FILE, state.model_dump(mode="json"))
        return state


class WakeStore:
    """Facade that delegates to database or JSON persistence based on configuration."""

    def __init__(self, data_dir: Optional[Path] = None, mode: Optional[str] = None) -> None:
        settings = get_settings()
        self._mode = mode or settings.persistence_mode
        self._db_store = _DatabaseWakeStore()
        self._legacy_store = _LegacyWakeStore(data_dir=data_dir)
        self._pending_resync: List[Tuple[str, Tuple[Any, ...]]] = []

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def pending_resync(self) -> int:
        return len(self._pending_resync)

    def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        if self._mode == "legacy":
            return getattr(self._legacy_store, method)(*args, **kwargs)
        if self._mode == "hybrid":
            self._try_resync()
            if self._pending_resync:
                # The JSON store stays authoritative until queued writes reach the database.
                return self._fallback(method, args, kwargs)
        try:
            return getattr(self._db_store, method)(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001
            if self._mode == "hybrid":
                logger.warning(
                    "Database persistence error during %s; falling back to legacy store: %s",
                    method,
                    exc,
                )
                return self._fallback(method, args, kwargs)
            raise

    def _fallback(self, method: str, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        result = getattr(self._legacy_store, method)(*args, **kwargs)
        self._mark_for_resync(method, args)
        return result

    def _mark_for_resync(self, method: str, args: Tuple[Any, ...]) -> None:
        if method in _WRITE_METHODS:
            self._pending_resync.append((method, args))

    def _try_resync(self) -> None:
        """Replay writes made during a database outage, oldest first."""
        while self._pending_resync:
            method, args = self._pending_resync[0]
            try:
                getattr(self._db_store, method)(*args)
            except (LookupError, ValueError) as exc:
                logger.warning("Dropping %s during resync; database rejected it: %s", method, exc)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Database still unavailable; %s write(s) pending resync: %s",
                    len(self._pending_resync),
                    exc,
                )
                return
            self._pending_resync.pop(0)

    def load_alarms(self) -> List[Alarm]:
        return self._call("load_alarms")

    def save_alarm(self, alarm: Alarm) -> Alarm:
        return self._call("save_alarm", alarm)

    def delete_alarm(self, alarm_id: str) -> bool:
        return self._call("delete_alarm", alarm_id)

    def load_attempts(self) -> List[AttemptRecord]:
        return self._call("load_attempts")

    def append_attempt(self, record: AttemptRecord) -> AttemptRecord:
        return self._call("append_attempt", record)

    def update_attempt(self, record: AttemptRecord) -> AttemptRecord:
        return self._call("update_attempt", record)

    def load_difficulty_state(self) -> DifficultyState:
        return self._call("load_difficulty_state")

    def save_difficulty_state(self, state: DifficultyState) -> DifficultyState:
        return self._call("save_difficulty_state", state)

    def record_completion(self, result: CompletionResult) -> DifficultyState:
        """Commit the completed attempt before the state derived from it."""
        self.update_attempt(result.record)
        return self.save_difficulty_state(result.state)


__all__ = ["WakeStore"]
