"""Task queue exports."""
from .models import Task, TaskStats, TaskStatus
from .queue import TaskQueue

__all__ = [
    "Task",
    "TaskQueue",
    "TaskStats",
    "TaskStatus",
]
