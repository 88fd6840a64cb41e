"""repo_scout: scan a GitHub project on a timer and chat about it."""

from .cache import ProjectStructureCache
from .conversation import ConversationStore
from .errors import RemoteError, ScanError, ScoutError, ValidationError
from .runner import Task, TaskQueue, TaskStats, TaskStatus

__all__ = [
    "ConversationStore",
    "ProjectStructureCache",
    "RemoteError",
    "ScanError",
    "ScoutError",
    "Task",
    "TaskQueue",
    "TaskStats",
    "TaskStatus",
    "ValidationError",
]
