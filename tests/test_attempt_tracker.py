"""Tests for attempt lifecycle, streaks, and period reporting."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from randomwake.attempt_tracker import (
    complete_attempt,
    compute_streak,
    find_attempt,
    monthly_stats,
    record_snooze,
    start_attempt,
    today_records,
    weekly_stats,
)
from randomwake.models import AttemptRecord, DifficultyState
from randomwake.telemetry import TelemetryEvent, clear_listeners, register_listener

TODAY = date(2026, 10, 18)
NOW = datetime(2026, 10, 18, 6, 12)


def _completed(day: date, snoozes: int = 0) -> AttemptRecord:
    return AttemptRecord(
        alarm_id="alarm-1",
        calendar_date=day,
        scheduled_time="06:00",
        actual_wake_time="06:05",
        snooze_count=snoozes,
        task_attempts=1,
        completed=True,
    )


def _days_ago(days: int) -> date:
    return TODAY - timedelta(days=days)


def teardown_function() -> None:
    clear_listeners()


def test_start_attempt_appends_open_record_without_mutating_input() -> None:
    original: list[AttemptRecord] = []
    history, attempt_id = start_attempt(original, "alarm-1", "sequence", NOW)
    assert original == []
    assert len(history) == 1
    record = history[0]
    assert record.attempt_id == attempt_id
    assert record.alarm_id == "alarm-1"
    assert record.calendar_date == TODAY
    assert record.scheduled_time == "06:12"
    assert record.task_type == "sequence"
    assert record.completed is False
    assert record.actual_wake_time is None


def test_complete_attempt_updates_record_and_state() -> None:
    events: list[TelemetryEvent] = []
    register_listener(events.append)
    history = [_completed(_days_ago(1))]
    history, attempt_id = start_attempt(history, "alarm-1", "math", NOW)

    result = complete_attempt(
        history,
        DifficultyState(),
        attempt_id,
        snooze_count=2,
        task_attempts=3,
        now=NOW + timedelta(minutes=4),
    )

    record = find_attempt(result.history, attempt_id)
    assert record is not None
    assert record.completed is True
    assert record.actual_wake_time == "06:16"
    assert record.snooze_count == 2
    assert record.task_attempts == 3
    assert result.record == record
    assert result.state.current_streak == 2
    assert result.state.best_streak == 2
    assert result.state.current_difficulty == 1
    assert find_attempt(history, attempt_id).completed is False
    assert [event.name for event in events][-1] == "attempt_completed"


def test_complete_attempt_recomputes_difficulty_from_updated_history() -> None:
    history = [_completed(date(2026, 10, 13), 4)]
    history, attempt_id = start_attempt(history, "alarm-1", "math", NOW)
    result = complete_attempt(history, DifficultyState(), attempt_id, 4, 1, NOW)
    assert result.state.current_difficulty == 3


def test_unknown_attempt_raises_lookup_error() -> None:
    with pytest.raises(LookupError):
        complete_attempt([], DifficultyState(), "missing", 0, 1, NOW)
    with pytest.raises(LookupError):
        record_snooze([], "missing")


def test_record_snooze_increments_open_attempt() -> None:
    history, attempt_id = start_attempt([], "alarm-1", "math", NOW)
    history = record_snooze(record_snooze(history, attempt_id), attempt_id)
    assert find_attempt(history, attempt_id).snooze_count == 2


def test_streak_counts_today_and_yesterday() -> None:
    history = [_completed(TODAY), _completed(_days_ago(1))]
    assert compute_streak(history, TODAY) == 2


def test_streak_with_only_today() -> None:
    assert compute_streak([_completed(TODAY)], TODAY) == 1


def test_streak_stops_at_gap() -> None:
    history = [_completed(TODAY), _completed(_days_ago(1)), _completed(_days_ago(3)), _completed(_days_ago(4))]
    assert compute_streak(history, TODAY) == 2


def test_today_without_record_does_not_break_streak() -> None:
    history = [_completed(_days_ago(1)), _completed(_days_ago(2))]
    assert compute_streak(history, TODAY) == 2


def test_missing_yesterday_ends_streak() -> None:
    assert compute_streak([_completed(_days_ago(2))], TODAY) == 0


def test_uncompleted_records_do_not_count() -> None:
    open_today = _completed(TODAY).model_copy(update={"completed": False})
    assert compute_streak([open_today], TODAY) == 0
    assert compute_streak([], TODAY) == 0


def test_streak_lookback_is_bounded() -> None:
    history = [_completed(_days_ago(offset)) for offset in range(400)]
    assert compute_streak(history, TODAY) == 365
    assert compute_streak(history, TODAY, lookback_days=10) == 10


def test_best_streak_never_decreases() -> None:
    state = DifficultyState()
    history: list[AttemptRecord] = []
    best_seen: list[int] = []
    days = [_days_ago(5), _days_ago(4), _days_ago(3), _days_ago(1), TODAY]
    for day in days:
        now = datetime(day.year, day.month, day.day, 6, 30)
        history, attempt_id = start_attempt(history, "alarm-1", "math", now)
        result = complete_attempt(history, state, attempt_id, 0, 1, now)
        history, state = result.history, result.state
        best_seen.append(state.best_streak)

    assert best_seen == sorted(best_seen)
    assert state.best_streak == 3
    assert state.current_streak == 2


def test_period_stats_include_open_attempts_in_totals() -> None:
    history = [
        _completed(date(2026, 10, 13), 1),
        _completed(date(2026, 10, 14), 3),
        _completed(date(2026, 10, 15)).model_copy(update={"completed": False, "snooze_count": 2}),
        _completed(date(2026, 10, 2), 5),
    ]
    weekly = weekly_stats(history, TODAY)
    assert weekly.total_alarms == 3
    assert weekly.completed_alarms == 2
    assert weekly.average_snooze_count == 2.0
    assert weekly.success_rate == pytest.approx(200 / 3)

    monthly = monthly_stats(history, TODAY)
    assert monthly.total_alarms == 4
    assert monthly.completed_alarms == 3


def test_empty_period_stats_are_zero() -> None:
    stats = weekly_stats([], TODAY)
    assert stats.total_alarms == 0
    assert stats.average_snooze_count == 0.0
    assert stats.success_rate == 0.0


def test_today_records_filters_by_date() -> None:
    history = [_completed(TODAY), _completed(_days_ago(1))]
    assert today_records(history, TODAY) == [history[0]]
