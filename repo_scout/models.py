"""Records shared by the scanner, the cache and the chat agent."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from attrs import asdict, define, field

from repo_scout.runner.models import utc_now


@define(slots=True, frozen=True)
class FileEntry:
    name: str
    path: str
    size: Optional[int] = None


@define(slots=True, frozen=True)
class DirectoryEntry:
    name: str
    path: str


@define(slots=True)
class ProjectStructure:
    files: List[FileEntry] = field(factory=list)
    directories: List[DirectoryEntry] = field(factory=list)
    timestamp: datetime = field(factory=utc_now)
    readme: Optional[str] = None

    def file_names(self) -> List[str]:
        return [entry.name for entry in self.files]


@define(slots=True, frozen=True)
class Issue:
    type: str
    severity: str
    file: str
    message: str


@define(slots=True, frozen=True)
class FileAnalysis:
    name: str
    path: str
    analysis: Dict[str, Any]


@define(slots=True)
class ProjectAnalysis:
    files: List[FileAnalysis] = field(factory=list)
    overall_health: str = "unknown"


@define(slots=True, frozen=True)
class Recommendation:
    priority: str
    suggestion: str
    reason: str


def _serialize(_inst: Any, _field: Any, value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value


@define(slots=True)
class Report:
    """Outcome of one scan cycle."""

    timestamp: datetime
    duration_ms: int
    structure: ProjectStructure
    issues: List[Issue] = field(factory=list)
    analysis: ProjectAnalysis = field(factory=ProjectAnalysis)
    recommendations: List[Recommendation] = field(factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self, value_serializer=_serialize)


class Role(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@define(slots=True, frozen=True)
class Message:
    role: Role
    content: str
    timestamp: datetime = field(factory=utc_now)


@define(slots=True)
class Conversation:
    session_id: str
    started_at: datetime = field(factory=utc_now)
    messages: List[Message] = field(factory=list)
    project_context: Optional[ProjectStructure] = None


__all__ = [
    "Conversation",
    "DirectoryEntry",
    "FileAnalysis",
    "FileEntry",
    "Issue",
    "Message",
    "ProjectAnalysis",
    "ProjectStructure",
    "Recommendation",
    "Report",
    "Role",
]
