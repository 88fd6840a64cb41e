"""Protocols for the remote collaborators the agents call through."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from repo_scout.models import Issue, ProjectStructure


class RemoteReader(Protocol):
    async def list_files(self, path: str = "") -> List[Dict[str, Any]]:
        """Return entries shaped like ``{name, path, size?, type}``."""

    async def read_file(self, path: str) -> str:
        ...


class RepositoryInfo(Protocol):
    async def get_repo_info(self) -> Mapping[str, Any]:
        ...

    async def list_issues(self, state: str = "open") -> List[Mapping[str, Any]]:
        ...


class IssueReporter(Protocol):
    async def file_issue(self, title: str, body: str, labels: Sequence[str] = ()) -> Mapping[str, Any]:
        ...


class Responder(Protocol):
    """LLM facade; implementations return placeholder text instead of raising."""

    async def generate(self, prompt: str, context: Optional[str] = None) -> str:
        ...

    async def chat(self, message: str, context: Optional[str] = None) -> str:
        ...

    async def analyze_code(self, code: str, language: str = "javascript") -> Dict[str, Any]:
        ...


class Detector(Protocol):
    async def detect(self, structure: ProjectStructure) -> List[Issue]:
        ...


__all__ = [
    "Detector",
    "IssueReporter",
    "RemoteReader",
    "RepositoryInfo",
    "Responder",
]
