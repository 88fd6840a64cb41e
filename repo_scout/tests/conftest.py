"""Shared fakes for the agent and cache tests."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from repo_scout.errors import RemoteError
from repo_scout.models import Issue, ProjectStructure

DEFAULT_ENTRIES = [
    {"name": "README.md", "path": "README.md", "size": 120, "type": "file"},
    {"name": "Dockerfile", "path": "Dockerfile", "size": 80, "type": "file"},
    {"name": "package.json", "path": "package.json", "size": 300, "type": "file"},
    {"name": "server.js", "path": "server.js", "size": 900, "type": "file"},
    {"name": "src", "path": "src", "type": "dir"},
]


class FakeReader:
    def __init__(
        self,
        entries: Optional[List[Dict[str, Any]]] = None,
        files: Optional[Dict[str, str]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.entries = list(DEFAULT_ENTRIES if entries is None else entries)
        self.files = dict(files or {})
        self.error = error
        self.list_calls = 0
        self.read_calls: List[str] = []

    async def list_files(self, path: str = "") -> List[Dict[str, Any]]:
        self.list_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.entries)

    async def read_file(self, path: str) -> str:
        self.read_calls.append(path)
        if path not in self.files:
            raise RemoteError(f"Not Found: {path}", status=404)
        return self.files[path]


class FakeResponder:
    def __init__(self, reply: str = "Fix the Dockerfile first.", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []
        self.chats: List[Dict[str, Optional[str]]] = []
        self.analyzed: List[str] = []

    async def generate(self, prompt: str, context: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def chat(self, message: str, context: Optional[str] = None) -> str:
        self.chats.append({"message": message, "context": context})
        if self.error is not None:
            raise self.error
        return f"echo: {message}"

    async def analyze_code(self, code: str, language: str = "javascript") -> Dict[str, Any]:
        self.analyzed.append(language)
        return {"issues": [], "language": language}


class FakeDetector:
    def __init__(self, issues: Optional[List[Issue]] = None, error: Optional[Exception] = None) -> None:
        self.issues = list(issues or [])
        self.error = error
        self.calls = 0

    async def detect(self, structure: ProjectStructure) -> List[Issue]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.issues)


class FakeReporter:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.filed: List[Dict[str, Any]] = []

    async def file_issue(self, title: str, body: str, labels=()) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        self.filed.append({"title": title, "body": body, "labels": list(labels)})
        return {"number": len(self.filed)}


class FakeRepository:
    def __init__(self, issues: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None) -> None:
        self.issues = list(issues or [])
        self.error = error

    async def get_repo_info(self) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        return {
            "name": "my-webapp-hf",
            "default_branch": "main",
            "stargazers_count": 42,
            "updated_at": "2026-10-01T12:30:00Z",
        }

    async def list_issues(self, state: str = "open") -> List[Dict[str, Any]]:
        if self.error is not None:
            raise self.error
        return list(self.issues)


MISSING_README = Issue(
    type="missing_file",
    severity="high",
    file="README.md",
    message="Critical file missing: README.md",
)


@pytest.fixture
def reader() -> FakeReader:
    return FakeReader(files={"server.js": "console.log('hi')", "README.md": "# demo"})


@pytest.fixture
def responder() -> FakeResponder:
    return FakeResponder()
