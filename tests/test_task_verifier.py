from __future__ import annotations

import pytest

from randomwake.models import MathTask, SequenceTask, ShakeTask, TypingTask
from randomwake.task_verifier import expected_answer, verify_task


def test_math_requires_numeric_equality() -> None:
    task = MathTask(difficulty=1, question="30 + 12 = ?", expected_answer=42)
    assert verify_task(task, 42)
    assert verify_task(task, "42")
    assert verify_task(task, " 42 ")
    assert verify_task(task, 42.0)
    assert not verify_task(task, "41")
    assert not verify_task(task, "forty-two")
    assert not verify_task(task, "")


def test_typing_ignores_case_and_surrounding_whitespace() -> None:
    task = TypingTask(difficulty=1, target_text="Good morning world")
    assert verify_task(task, "  good MORNING world ")
    assert not verify_task(task, "good morning")
    assert not verify_task(task, "good  morning world")


def test_sequence_is_exact() -> None:
    task = SequenceTask(difficulty=1, digit_string="0123")
    assert verify_task(task, "0123")
    assert not verify_task(task, "123")
    assert not verify_task(task, " 0123")
    assert not verify_task(task, "0132")


@pytest.mark.parametrize("count,passed", [(0, False), (9, False), (10, True), (17, True)])
def test_shake_is_threshold_based(count: int, passed: bool) -> None:
    task = ShakeTask(difficulty=1, required_shake_count=10)
    assert verify_task(task, count) is passed


def test_expected_answer_matches_variant() -> None:
    assert expected_answer(MathTask(difficulty=2, question="3 × 4 = ?", expected_answer=12)) == 12
    assert expected_answer(SequenceTask(difficulty=1, digit_string="0042")) == "0042"
    assert expected_answer(ShakeTask(difficulty=3, required_shake_count=30)) == 30


def test_unknown_variant_is_rejected() -> None:
    with pytest.raises(TypeError):
        verify_task(object(), "1")  # type: ignore[arg-type]
