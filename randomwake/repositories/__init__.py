"""Database repositories for alarms and attempt history."""

from .alarms import AlarmRepository, alarms_repository
from .attempts import AttemptRepository, DifficultyStateRepository, attempts_repository, difficulty_repository

__all__ = [
    "AlarmRepository",
    "AttemptRepository",
    "DifficultyStateRepository",
    "alarms_repository",
    "attempts_repository",
    "difficulty_repository",
]
