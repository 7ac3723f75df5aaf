from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from randomwake.config import get_settings
from randomwake.service import WakeService
from randomwake.storage import WakeStore
from randomwake.task_verifier import expected_answer

NOW = datetime(2026, 10, 18, 5, 0)


def _service(tmp_path: Path, **overrides: object) -> WakeService:
    get_settings.cache_clear()
    settings = get_settings().model_copy(update=overrides)
    store = WakeStore(data_dir=tmp_path, mode="legacy")
    return WakeService(store=store, settings=settings, rng=random.Random(7))


def teardown_function() -> None:
    get_settings.cache_clear()


def test_create_alarm_uses_configured_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    service = _service(tmp_path, default_task_type="typing", language="tr")
    with caplog.at_level(logging.WARNING, logger="randomwake.service"):
        alarm = service.create_alarm("05:00", "06:00", [3, 1, 1], label="Early")
    assert alarm.task_type == "typing"
    assert alarm.repeat_days == [1, 3]
    assert [entry.alarm_id for entry in service.store.load_alarms()] == [alarm.alarm_id]
    assert any("exceeds 30 minutes" in message for message in caplog.messages)
    assert service.user_settings.language == "tr"
    assert service.user_settings.default_task_type == "typing"


def test_toggle_update_and_delete_alarm(tmp_path: Path) -> None:
    service = _service(tmp_path)
    alarm = service.create_alarm("06:00", "06:30")
    assert service.toggle_alarm(alarm.alarm_id).enabled is False
    assert service.upcoming(NOW) == []
    assert service.update_alarm(alarm.alarm_id, {"enabled": True, "label": "Back"}).label == "Back"
    assert len(service.upcoming(NOW)) == 1
    assert service.delete_alarm(alarm.alarm_id) is True
    assert service.store.load_alarms() == []


def test_ring_unknown_alarm_raises(tmp_path: Path) -> None:
    with pytest.raises(LookupError):
        _service(tmp_path).ring("missing", NOW)


def test_full_wake_cycle_is_persisted(tmp_path: Path) -> None:
    service = _service(tmp_path, pre_alarm_minutes=5)
    alarm = service.create_alarm("06:00", "06:30", [0, 1], task_type="math")

    session = service.ring(alarm.alarm_id, datetime(2026, 10, 18, 6, 12))
    stored = service.store.load_attempts()
    assert [record.attempt_id for record in stored] == [session.attempt_id]
    assert stored[0].completed is False

    service.snooze(session)
    assert service.store.load_attempts()[0].snooze_count == 1
    assert session.difficulty == 2

    assert session.submit(expected_answer(session.task)) is True
    upcoming = service.dismiss(session, datetime(2026, 10, 18, 6, 20))

    assert upcoming is not None
    assert upcoming.fire_at.date() == date(2026, 10, 19)
    assert upcoming.pre_alarm_at == upcoming.fire_at - timedelta(minutes=5)

    record = service.store.load_attempts()[0]
    assert record.completed is True
    assert record.snooze_count == 1
    assert record.task_attempts == 1
    assert record.actual_wake_time == "06:20"
    assert service.store.load_difficulty_state().current_streak == 1

    stats = service.weekly_stats(date(2026, 10, 18))
    assert stats.total_alarms == 1
    assert stats.completed_alarms == 1
    assert service.monthly_stats(date(2026, 10, 18)).success_rate == 100.0


def test_missing_alarms_and_attempts_raise_lookup_error(tmp_path: Path) -> None:
    service = _service(tmp_path)
    with pytest.raises(LookupError):
        service.update_alarm("missing", {"label": "x"})
    with pytest.raises(LookupError):
        service.toggle_alarm("missing")

    alarm = service.create_alarm("06:00", "06:30")
    session = service.ring(alarm.alarm_id, NOW)
    session.history = []
    with pytest.raises(LookupError):
        service.snooze(session)
