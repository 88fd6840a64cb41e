"""Priority task queue with bounded retries and per-attempt deadlines."""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, List, Optional

from attrs import define, evolve, field

from repo_scout.errors import TaskTimeoutError, ValidationError
from repo_scout.runner.models import Task, TaskAction, TaskStats, TaskStatus, utc_now

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


def _discard_outcome(future: "asyncio.Future[Any]") -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.debug("Timed-out task raised after its deadline: %s", future.exception())


@define(slots=False)
class TaskQueue:
    """Runs submitted tasks one after another, highest priority first.

    Each task gets up to ``max_retries`` attempts. An attempt is raced against
    the task's ``timeout``; whichever finishes first wins and the losing
    action is cancelled. Between attempts the queue waits ``backoff * attempt``
    seconds. Terminal tasks are copied into an append-only history bounded by
    ``history_limit`` (``None`` keeps everything).
    """

    default_priority: int = 5
    default_max_retries: int = 3
    default_timeout: float = 30.0
    backoff: float = 1.0
    history_limit: Optional[int] = 1000
    sleep: SleepFunc = field(default=asyncio.sleep, repr=False)
    _pending: List[Task] = field(init=False, factory=list)
    _history: Deque[Task] = field(init=False)
    _running: bool = field(init=False, default=False)

    def __attrs_post_init__(self) -> None:
        self._history = deque(maxlen=self.history_limit)

    @property
    def is_running(self) -> bool:
        return self._running

    def submit(
        self,
        task_id: str,
        name: str,
        action: Optional[TaskAction],
        *,
        priority: Optional[int] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Task:
        """Validate and queue a task, keeping the queue ordered by priority."""
        if not task_id or not name or action is None:
            raise ValidationError("Task must have id, name, and action")
        if not callable(action):
            raise ValidationError(f"Task {task_id} action must be callable")

        retries = self.default_max_retries if max_retries is None else int(max_retries)
        if retries < 1:
            raise ValidationError(f"Task {task_id} max_retries must be at least 1")
        deadline = self.default_timeout if timeout is None else float(timeout)
        if deadline <= 0:
            raise ValidationError(f"Task {task_id} timeout must be positive")
        if any(queued.id == task_id for queued in self._pending):
            raise ValidationError(f"Task {task_id} is already queued")

        task = Task(
            id=task_id,
            name=name,
            action=action,
            priority=self.default_priority if priority is None else int(priority),
            max_retries=retries,
            timeout=deadline,
        )
        self._pending.append(task)
        # list.sort is stable, so equal priorities keep submission order
        self._pending.sort(key=lambda queued: queued.priority, reverse=True)
        logger.debug("Task added: %s (priority: %d)", name, task.priority)
        return task

    async def run_all(self) -> List[Task]:
        """Drain the queue, running every task to a terminal state."""
        if self._running:
            logger.warning("Tasks already running")
            return []

        self._running = True
        results: List[Task] = []
        logger.info("Starting task execution (%d queued)", len(self._pending))
        try:
            while self._pending:
                task = self._pending.pop(0)
                results.append(await self.execute_one(task))
        finally:
            self._running = False
        logger.info("Task execution completed (%d tasks)", len(results))
        return results

    async def execute_one(self, task: Task) -> Task:
        """Run ``task`` with retries; failures end up on the task, not raised."""
        last_error: Optional[str] = None
        task.started_at = utc_now()

        for attempt in range(1, task.max_retries + 1):
            task.attempts = attempt
            task.status = TaskStatus.RUNNING
            logger.debug("Executing task: %s (attempt %d/%d)", task.name, attempt, task.max_retries)
            try:
                result = await self._race(task)
            except Exception as exc:  # pylint: disable=broad-except
                last_error = str(exc) or exc.__class__.__name__
                logger.warning("Task attempt %d failed: %s: %s", attempt, task.name, last_error)
                if attempt < task.max_retries:
                    await self.sleep(self.backoff * attempt)
                continue

            task.status = TaskStatus.COMPLETED
            task.result = result
            task.finished_at = utc_now()
            logger.info("Task completed: %s (attempt %d)", task.name, attempt)
            self._record(task)
            return task

        task.status = TaskStatus.FAILED
        task.error = last_error
        task.finished_at = utc_now()
        logger.error("Task failed after retries: %s: %s", task.name, last_error)
        self._record(task)
        return task

    async def _race(self, task: Task) -> Any:
        future = asyncio.ensure_future(task.action())
        try:
            done, _ = await asyncio.wait({future}, timeout=task.timeout)
        except asyncio.CancelledError:
            future.cancel()
            raise
        if future in done:
            return future.result()

        # the loser is not awaited; whatever it ends with is dropped
        future.cancel()
        future.add_done_callback(_discard_outcome)
        raise TaskTimeoutError("Task timeout")

    def _record(self, task: Task) -> None:
        self._history.append(evolve(task))

    def pending(self) -> List[Task]:
        return list(self._pending)

    def history(self) -> List[Task]:
        return list(self._history)

    def clear(self) -> None:
        self._pending.clear()
        self._history.clear()
        logger.debug("Task queue cleared")

    def stats(self) -> TaskStats:
        total = len(self._history)
        completed = sum(1 for task in self._history if task.status is TaskStatus.COMPLETED)
        failed = sum(1 for task in self._history if task.status is TaskStatus.FAILED)
        return TaskStats(
            total=total,
            completed=completed,
            failed=failed,
            success_rate=(completed / total * 100) if total else 0.0,
        )


__all__ = ["TaskQueue"]
