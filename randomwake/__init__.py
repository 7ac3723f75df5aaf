"""Random-window alarm scheduling and dismissal-task core."""

__version__ = "0.1.0"
