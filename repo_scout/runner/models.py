"""Data models for the task queue."""
from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from attrs import define, field

TaskAction = Callable[[], Awaitable[Any]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@define(slots=True)
class Task:
    id: str
    name: str
    action: TaskAction = field(repr=False)
    priority: int = 5
    max_retries: int = 3
    timeout: float = 30.0
    status: TaskStatus = TaskStatus.PENDING
    result: Any = None
    error: Optional[str] = None
    attempts: int = 0
    created_at: datetime = field(factory=utc_now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)


@define(slots=True, frozen=True)
class TaskStats:
    total: int = 0
    completed: int = 0
    failed: int = 0
    success_rate: float = 0.0


__all__ = [
    "Task",
    "TaskAction",
    "TaskStats",
    "TaskStatus",
    "utc_now",
]
