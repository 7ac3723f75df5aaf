"""Answer checking for generated dismissal tasks."""

from __future__ import annotations

from typing import Union

from .models import MathTask, SequenceTask, ShakeTask, Task, TypingTask

Answer = Union[str, int, float]


def _as_number(answer: Answer) -> float | None:
    if isinstance(answer, bool):
        return None
    if isinstance(answer, (int, float)):
        return answer
    try:
        return float(str(answer).strip())
    except ValueError:
        return None


def verify_task(task: Task, answer: Answer) -> bool:
    """Return True when `answer` satisfies `task`. No partial credit."""
    if isinstance(task, MathTask):
        value = _as_number(answer)
        return value is not None and value == task.expected_answer
    if isinstance(task, TypingTask):
        return str(answer).strip().lower() == task.target_text.strip().lower()
    if isinstance(task, SequenceTask):
        return str(answer) == task.digit_string
    if isinstance(task, ShakeTask):
        value = _as_number(answer)
        return value is not None and value >= task.required_shake_count
    raise TypeError(f"Unsupported task variant: {type(task).__name__}")


def expected_answer(task: Task) -> Answer:
    """Canonical answer that passes `verify_task` for `task`."""
    if isinstance(task, MathTask):
        return task.expected_answer
    if isinstance(task, TypingTask):
        return task.target_text
    if isinstance(task, SequenceTask):
        return task.digit_string
    if isinstance(task, ShakeTask):
        return task.required_shake_count
    raise TypeError(f"Unsupported task variant: {type(task).__name__}")


__all__ = ["Answer", "expected_answer", "verify_task"]
