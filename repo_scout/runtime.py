"""Runtime glue that builds every component from Settings and owns their lifecycle."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from repo_scout.agents.chat import ChatAgent
from repo_scout.agents.docs import DocGenerator
from repo_scout.agents.scanner import ScannerAgent
from repo_scout.cache import ProjectStructureCache
from repo_scout.config import Settings, load_settings
from repo_scout.conversation import ConversationStore
from repo_scout.detector import ProjectDetector
from repo_scout.runner import Task, TaskQueue
from repo_scout.services.github import GitHubClient
from repo_scout.services.llm import LLMResponder

logger = logging.getLogger(__name__)


class ScoutService:
    """Construct the queue, cache, agents and clients once and pass them around."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        github: Optional[GitHubClient] = None,
        responder: Optional[Any] = None,
    ) -> None:
        self.settings = settings or Settings()
        cfg = self.settings

        self.github = github or GitHubClient(
            cfg.github.repository,
            token=cfg.github.token,
            branch=cfg.github.branch,
            api_url=cfg.github.api_url,
            timeout=cfg.github.timeout,
        )
        self.responder = responder or LLMResponder(
            model=cfg.llm.model,
            api_key=cfg.llm.api_key,
            base_url=cfg.llm.base_url,
            temperature=cfg.llm.temperature,
            history_window=cfg.llm.history_window,
        )

        self.task_queue = TaskQueue(
            default_priority=cfg.runner.priority,
            default_max_retries=cfg.runner.max_retries,
            default_timeout=cfg.runner.timeout_ms / 1000,
            backoff=cfg.runner.backoff_ms / 1000,
            history_limit=cfg.runner.history_limit,
        )
        self.cache = ProjectStructureCache(self.github, ttl=cfg.cache.ttl_seconds)
        self.detector = ProjectDetector(
            self.github,
            required_files=cfg.scanner.required_files,
            forbidden_files=cfg.scanner.forbidden_files,
        )
        self.scanner = ScannerAgent(
            cache=self.cache,
            detector=self.detector,
            reader=self.github,
            responder=self.responder,
            issue_reporter=self.github,
            auto_fix=cfg.scanner.auto_fix,
            interval=cfg.scanner.interval_ms / 1000,
            analyze_limit=cfg.scanner.analyze_limit,
            source_extensions=cfg.scanner.source_extensions,
            repository=self.github.repository,
            branch=self.github.branch,
        )
        self.conversations = ConversationStore(max_sessions=cfg.chat.max_sessions)
        self.chat = ChatAgent(
            store=self.conversations,
            responder=self.responder,
            scanner=self.scanner,
            repository=self.github,
            reader=self.github,
            context_messages=cfg.chat.context_messages,
            context_retry_seconds=cfg.cache.ttl_seconds,
        )
        self.docs = DocGenerator(cache=self.cache, reader=self.github, responder=self.responder)
        self._started = False

    @classmethod
    def from_config(cls, overrides=()) -> "ScoutService":
        return cls(load_settings(overrides))

    def start(self) -> None:
        """Begin periodic scanning when auto-fix is enabled. Needs a running loop."""
        if self._started:
            return
        if self.settings.scanner.auto_fix:
            self.scanner.start_periodic()
        else:
            logger.info("Auto-fix is disabled")
        self._started = True

    async def stop(self) -> None:
        try:
            self.scanner.shutdown()
        finally:
            self._started = False
            await self.github.aclose()

    def submit_scan(self, priority: Optional[int] = None) -> Task:
        """Queue a scan on the task queue; it runs on the next ``run_all``."""
        return self.task_queue.submit(
            f"scan-{uuid.uuid4().hex[:8]}",
            "project-scan",
            self.scanner.perform_scan,
            priority=priority,
        )


__all__ = ["ScoutService"]
