"""Challenge generation for alarm dismissal."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional

from .models import (
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    MathTask,
    SequenceTask,
    ShakeTask,
    Task,
    TaskType,
    TypingTask,
)
from .time_window import RandomSource

logger = logging.getLogger(__name__)

SEQUENCE_LENGTHS: Dict[int, int] = {1: 4, 2: 6, 3: 8}
SHAKE_COUNTS: Dict[int, int] = {1: 10, 2: 20, 3: 30}

TYPING_SENTENCES: Dict[str, Dict[int, List[str]]] = {
    "en": {
        1: [
            "Good morning world",
            "Today is a great day",
            "Time for coffee",
            "The sun is rising",
            "A new beginning",
        ],
        2: [
            "The early bird catches the worm",
            "Great things will happen today",
            "Every new day is an opportunity",
            "Success comes with patience",
            "Happiness is hidden in small things",
        ],
        3: [
            "The secret of getting ahead is getting started",
            "Believe you can and you are halfway there",
            "Challenges make us stronger and shape our character",
            "Waking up with new hopes every morning is the best gift",
            "Start chasing your dreams today and never give up",
        ],
    },
    "tr": {
        1: [
            "Günaydın dünya",
            "Bugün güzel bir gün",
            "Kahve zamanı geldi",
            "Güneş doğuyor",
            "Yeni bir başlangıç",
        ],
        2: [
            "Erken kalkan yol alır derler",
            "Bugün harika şeyler olacak",
            "Her yeni gün bir fırsattır",
            "Başarı sabırla gelir",
            "Mutluluk küçük şeylerde gizli",
        ],
        3: [
            "Hayatta en hakiki mürşit ilimdir fendir",
            "Başarının sırrı azimle çalışmaktır",
            "Zorluklar bizi güçlendirir ve karakterimizi şekillendirir",
            "Her sabah yeni umutlarla uyanmak en güzel hediyedir",
            "Düşlerinizin peşinden gitmeye bugün başlayın",
        ],
    },
}
DEFAULT_LANGUAGE = "en"


def clamp_difficulty(value: Any) -> int:
    """Coerce a difficulty to 1..3; anything malformed falls back to the easiest level."""
    if isinstance(value, bool):
        return MIN_DIFFICULTY
    try:
        level = int(value)
    except (TypeError, ValueError, OverflowError):
        return MIN_DIFFICULTY
    if level < MIN_DIFFICULTY or level > MAX_DIFFICULTY:
        return MIN_DIFFICULTY
    return level


def _randint(rng: RandomSource, low: int, high: int) -> int:
    """Inclusive integer draw built on a single uniform [0, 1) sample."""
    span = high - low + 1
    return low + min(int(rng.random() * span), span - 1)


def _choice(rng: RandomSource, options: List[str]) -> str:
    return options[_randint(rng, 0, len(options) - 1)]


def generate_math_task(difficulty: int, rng: RandomSource) -> MathTask:
    level = clamp_difficulty(difficulty)
    if level == 1:
        left = _randint(rng, 10, 59)
        right = _randint(rng, 10, 59)
        operator = "+" if rng.random() > 0.5 else "-"
        if operator == "-" and right > left:
            left, right = right, left
        answer = left + right if operator == "+" else left - right
        question = f"{left} {operator} {right} = ?"
    elif level == 2:
        left = _randint(rng, 2, 13)
        right = _randint(rng, 2, 13)
        answer = left * right
        question = f"{left} × {right} = ?"
    else:
        left = _randint(rng, 100, 199)
        right = _randint(rng, 50, 149)
        factor = _randint(rng, 1, 10)
        operator = "+" if rng.random() > 0.5 else "-"
        if operator == "-" and right > left:
            left, right = right, left
        intermediate = left + right if operator == "+" else left - right
        answer = intermediate * factor
        question = f"({left} {operator} {right}) × {factor} = ?"
    return MathTask(difficulty=level, question=question, expected_answer=answer)


def generate_typing_task(difficulty: int, rng: RandomSource, language: str = DEFAULT_LANGUAGE) -> TypingTask:
    level = clamp_difficulty(difficulty)
    locale = language if language in TYPING_SENTENCES else DEFAULT_LANGUAGE
    if locale != language:
        logger.debug("No typing sentences for locale %s; using %s", language, locale)
    text = _choice(rng, TYPING_SENTENCES[locale][level])
    return TypingTask(difficulty=level, target_text=text, language=locale)


def generate_sequence_task(difficulty: int, rng: RandomSource) -> SequenceTask:
    level = clamp_difficulty(difficulty)
    digits = "".join(str(_randint(rng, 0, 9)) for _ in range(SEQUENCE_LENGTHS[level]))
    return SequenceTask(difficulty=level, digit_string=digits)


def generate_shake_task(difficulty: int) -> ShakeTask:
    level = clamp_difficulty(difficulty)
    return ShakeTask(difficulty=level, required_shake_count=SHAKE_COUNTS[level])


def generate_task(
    task_type: TaskType,
    difficulty: int,
    language: str = DEFAULT_LANGUAGE,
    rng: Optional[RandomSource] = None,
) -> Task:
    source = rng if rng is not None else random.Random()
    if task_type == "math":
        return generate_math_task(difficulty, source)
    if task_type == "typing":
        return generate_typing_task(difficulty, source, language)
    if task_type == "sequence":
        return generate_sequence_task(difficulty, source)
    if task_type == "shake":
        return generate_shake_task(difficulty)
    logger.warning("Unknown task type %r; falling back to math", task_type)
    return generate_math_task(difficulty, source)


def task_after_failure(task: Task, rng: Optional[RandomSource] = None) -> Task:
    """Challenge to present after an incorrect submission.

    Sequence tasks are replaced so a memorised pattern cannot be replayed;
    math and typing tasks are retried unchanged, shake tasks only accumulate.
    """
    if isinstance(task, SequenceTask):
        source = rng if rng is not None else random.Random()
        return generate_sequence_task(task.difficulty, source)
    if isinstance(task, (MathTask, TypingTask, ShakeTask)):
        return task
    raise TypeError(f"Unsupported task variant: {type(task).__name__}")


__all__ = [
    "SEQUENCE_LENGTHS",
    "SHAKE_COUNTS",
    "TYPING_SENTENCES",
    "clamp_difficulty",
    "generate_math_task",
    "generate_sequence_task",
    "generate_shake_task",
    "generate_task",
    "generate_typing_task",
    "task_after_failure",
]
