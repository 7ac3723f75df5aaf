"""Tests for scheduling and the ring-to-dismissal flow."""

from __future__ import annotations

import random
from datetime import datetime, timedelta

import pytest

from randomwake.models import Alarm, DifficultyState, SequenceTask, ShakeTask, TimeWindow
from randomwake.task_verifier import expected_answer
from randomwake.telemetry import TelemetryEvent, clear_listeners, register_listener
from randomwake.wake_cycle import WakeSession, schedule_alarm, schedule_all

# Sunday morning.
NOW = datetime(2026, 10, 18, 5, 0)


def _alarm(task_type: str = "math", repeat_days: list[int] | None = None, **overrides: object) -> Alarm:
    payload: dict[str, object] = {
        "alarm_id": f"alarm-{task_type}",
        "window": TimeWindow(start="06:00", end="06:30"),
        "repeat_days": repeat_days or [],
        "task_type": task_type,
    }
    payload.update(overrides)
    return Alarm.model_validate(payload)


def teardown_function() -> None:
    clear_listeners()


def test_disabled_alarms_are_not_scheduled() -> None:
    assert schedule_alarm(_alarm(enabled=False), NOW, random.Random(1)) is None


def test_schedule_alarm_within_window_with_pre_alarm() -> None:
    events: list[TelemetryEvent] = []
    register_listener(events.append)
    scheduled = schedule_alarm(_alarm(label="Gym"), NOW, random.Random(1), pre_alarm_minutes=10)
    assert scheduled is not None
    assert datetime(2026, 10, 18, 6, 0) <= scheduled.fire_at < datetime(2026, 10, 18, 6, 30)
    assert scheduled.pre_alarm_at == scheduled.fire_at - timedelta(minutes=10)
    assert scheduled.label == "Gym"
    assert events[-1].name == "alarm_scheduled"
    assert events[-1].payload["alarm_id"] == "alarm-math"


def test_pre_alarm_in_the_past_is_dropped() -> None:
    scheduled = schedule_alarm(_alarm(), datetime(2026, 10, 18, 5, 55), random.Random(1), pre_alarm_minutes=30)
    assert scheduled is not None
    assert scheduled.pre_alarm_at is None


def test_schedule_all_skips_disabled_and_sorts() -> None:
    alarms = [
        _alarm("typing", window=TimeWindow(start="07:00", end="07:10")),
        _alarm("math"),
        _alarm("shake", enabled=False),
    ]
    scheduled = schedule_all(alarms, NOW, random.Random(2))
    assert [entry.alarm_id for entry in scheduled] == ["alarm-math", "alarm-typing"]


def test_math_session_retries_same_task_then_completes() -> None:
    session = WakeSession(_alarm("math"), [], DifficultyState(), NOW, rng=random.Random(4))
    task = session.task
    assert task.difficulty == 1
    assert session.history[0].completed is False

    assert session.submit("not a number") is False
    assert session.task is task
    assert session.submit(expected_answer(task)) is True

    result = session.complete(NOW + timedelta(minutes=20))
    record = result.record
    assert record.completed is True
    assert record.task_attempts == 2
    assert record.snooze_count == 0
    assert result.state.current_streak == 1
    assert session.history == result.history


def test_sequence_session_replaces_task_after_wrong_answer() -> None:
    state = DifficultyState(current_difficulty=3)
    session = WakeSession(_alarm("sequence"), [], state, NOW, rng=random.Random(8))
    first = session.task
    assert isinstance(first, SequenceTask)
    assert len(first.digit_string) == 8
    assert session.submit("00000000x") is False
    assert isinstance(session.task, SequenceTask)
    assert session.task.digit_string != first.digit_string


def test_snooze_escalates_next_task_and_is_recorded() -> None:
    events: list[TelemetryEvent] = []
    register_listener(events.append)
    session = WakeSession(_alarm("sequence"), [], DifficultyState(), NOW, rng=random.Random(9))
    assert len(session.task.digit_string) == 4

    session.snooze()
    assert session.difficulty == 2
    assert len(session.task.digit_string) == 6

    session.snooze()
    session.snooze()
    assert session.difficulty == 3
    assert len(session.task.digit_string) == 8
    assert session.history[-1].snooze_count == 3
    assert [event.name for event in events].count("attempt_snoozed") == 3

    session.submit(expected_answer(session.task))
    result = session.complete(NOW + timedelta(minutes=30))
    assert result.record.snooze_count == 3


def test_shake_session_accumulates_motion() -> None:
    session = WakeSession(_alarm("shake"), [], DifficultyState(), NOW)
    assert isinstance(session.task, ShakeTask)
    assert session.add_shakes(4) is False
    assert session.add_shakes(5) is False
    assert session.add_shakes(1) is True
    with pytest.raises(TypeError):
        session.submit("10")
    result = session.complete(NOW)
    assert result.record.task_attempts == 1


def test_session_guards_lifecycle() -> None:
    session = WakeSession(_alarm("math"), [], DifficultyState(), NOW, rng=random.Random(3))
    with pytest.raises(RuntimeError):
        session.complete(NOW)
    with pytest.raises(TypeError):
        session.add_shakes(3)
    session.submit(expected_answer(session.task))
    with pytest.raises(RuntimeError):
        session.snooze()
    session.complete(NOW)
    with pytest.raises(RuntimeError):
        session.submit("1")


def test_only_repeating_alarms_are_rescheduled() -> None:
    one_shot = WakeSession(_alarm("math"), [], DifficultyState(), NOW, rng=random.Random(1))
    assert one_shot.reschedule(NOW) is None

    weekly = WakeSession(_alarm("math", repeat_days=[0, 1]), [], DifficultyState(), NOW, rng=random.Random(1))
    after_ring = datetime(2026, 10, 18, 6, 20)
    scheduled = weekly.reschedule(after_ring)
    assert scheduled is not None
    assert scheduled.fire_at.date() == datetime(2026, 10, 19).date()
