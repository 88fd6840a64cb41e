"""Exception taxonomy for repo_scout."""
from __future__ import annotations

from typing import Optional


class ScoutError(Exception):
    """Base exception for repo_scout errors."""


class ValidationError(ScoutError):
    """Raised when a task submission is malformed."""


class RemoteError(ScoutError):
    """Raised when a remote API call fails (network, auth or HTTP status)."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ScanError(ScoutError):
    """Raised when the structure fetch or issue detection of a scan fails."""


class TaskTimeoutError(ScoutError):
    """Raised inside a task attempt when its deadline fires first."""


__all__ = [
    "ScoutError",
    "ValidationError",
    "RemoteError",
    "ScanError",
    "TaskTimeoutError",
]
