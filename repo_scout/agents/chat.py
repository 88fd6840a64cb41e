"""Chat agent: one inbound message in, one reply out."""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

from attrs import define, evolve, field

from repo_scout.agents.scanner import ScannerAgent
from repo_scout.conversation import ConversationStore
from repo_scout.interfaces import RemoteReader, RepositoryInfo, Responder
from repo_scout.models import Conversation, Message, ProjectStructure, Role

logger = logging.getLogger(__name__)

ContextLoader = Callable[[], Awaitable[ProjectStructure]]

HELP_TEXT = """🤖 AI Agent Help

Available Commands:
• /scan - Scan project for issues
• /status - Get project status
• /issues - List open GitHub issues
• /help - Show this help message

Or just chat normally for project assistance!

Examples:
- "What are the main components of this project?"
- "How do I deploy this?"
- "Analyze the Dockerfile for me\""""

ASSISTANT_PREAMBLE = "You are an AI assistant helping with software development."
ISSUES_SHOWN = 5


def _format_date(value: Optional[str]) -> str:
    if not value:
        return "unknown"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return value


@define(slots=False)
class ChatAgent:
    """Processes chat turns for any number of sessions.

    Messages starting with ``/scan``, ``/status``, ``/issues`` or ``/help``
    are answered locally; anything else goes to the responder together with a
    short context summary. A turn never raises: errors become the reply.
    After a failed project context load no new attempt is made for
    ``context_retry_seconds``.
    """

    store: ConversationStore
    responder: Responder
    scanner: ScannerAgent
    repository: RepositoryInfo
    reader: Optional[RemoteReader] = None
    context_loader: Optional[ContextLoader] = None
    context_messages: int = 6
    context_retry_seconds: float = 300.0
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    _context_retry_at: float = field(init=False, default=0.0)
    _commands: Dict[str, Callable[[Conversation], Awaitable[str]]] = field(init=False)

    def __attrs_post_init__(self) -> None:
        self._commands = {
            "/scan": self.handle_scan_command,
            "/status": self.handle_status_command,
            "/issues": self.handle_issues_command,
            "/help": self.handle_help_command,
        }

    def start(self, session_id: str) -> Conversation:
        return self.store.start(session_id)

    def history(self, session_id: str) -> List[Message]:
        return self.store.history(session_id)

    def clear(self, session_id: str) -> None:
        self.store.clear(session_id)

    def active_count(self) -> int:
        return self.store.active_count()

    async def process_message(self, session_id: str, text: str) -> str:
        conversation = self.store.get_or_create(session_id)
        if conversation.project_context is None and self.clock() >= self._context_retry_at:
            conversation.project_context = await self._load_context()

        conversation.messages.append(Message(role=Role.USER, content=text))
        try:
            reply = await self.handle_message(text, conversation)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Failed to process message for %s: %s", session_id, exc)
            reply = f"Sorry, I encountered an error: {exc}"
        conversation.messages.append(Message(role=Role.ASSISTANT, content=reply))
        return reply

    async def _load_context(self) -> Optional[ProjectStructure]:
        try:
            if self.context_loader is not None:
                return await self.context_loader()
            structure = await self.scanner.cache.get()
            readme = await self._read_readme()
            return evolve(structure, readme=readme)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Failed to load project context: %s", exc)
            self._context_retry_at = self.clock() + self.context_retry_seconds
            return None

    async def _read_readme(self) -> Optional[str]:
        if self.reader is None:
            return None
        try:
            return await self.reader.read_file("README.md")
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Failed to read README: %s", exc)
            return None

    async def handle_message(self, text: str, conversation: Conversation) -> str:
        for prefix, handler in self._commands.items():
            if text.startswith(prefix):
                return await handler(conversation)
        return await self.responder.chat(text, context=self.build_context(conversation))

    def build_context(self, conversation: Conversation) -> str:
        parts = [ASSISTANT_PREAMBLE]
        project = conversation.project_context
        if project is not None:
            parts.append(
                "\n\nProject Information:\n"
                f"- Files: {len(project.files)}\n"
                f"- Directories: {len(project.directories)}"
            )
        recent = conversation.messages[-self.context_messages:] if self.context_messages > 0 else []
        if recent:
            parts.append("\n\nRecent Context:\n")
            for message in recent:
                speaker = "User" if message.role is Role.USER else "Assistant"
                parts.append(f"{speaker}: {message.content}\n")
        return "".join(parts)

    async def handle_scan_command(self, conversation: Conversation) -> str:
        try:
            issues = await self.scanner.detect_issues()
        except Exception as exc:  # pylint: disable=broad-except
            return f"❌ Scan failed: {exc}"
        if not issues:
            return "✅ Scan complete! No issues detected in the project."
        listing = "\n".join(
            f"• [{issue.severity.upper()}] {issue.message} ({issue.file})" for issue in issues
        )
        return f"⚠️ Scan found {len(issues)} issues:\n\n{listing}"

    async def handle_status_command(self, conversation: Conversation) -> str:
        try:
            info = await self.repository.get_repo_info()
            issues = await self.repository.list_issues("open")
        except Exception as exc:  # pylint: disable=broad-except
            return f"❌ Failed to get status: {exc}"
        return (
            "📊 Project Status:\n"
            f"- Repository: {info.get('name')}\n"
            f"- Default Branch: {info.get('default_branch')}\n"
            f"- Stars: {info.get('stargazers_count')}\n"
            f"- Open Issues: {len(issues)}\n"
            f"- Last Updated: {_format_date(info.get('updated_at'))}"
        )

    async def handle_issues_command(self, conversation: Conversation) -> str:
        try:
            issues = await self.repository.list_issues("open")
        except Exception as exc:  # pylint: disable=broad-except
            return f"❌ Failed to get issues: {exc}"
        if not issues:
            return "✅ No open issues!"
        shown = issues[:ISSUES_SHOWN]
        listing = "\n".join(f"• #{issue.get('number')}: {issue.get('title')}" for issue in shown)
        return f"📋 Open Issues (showing {len(shown)} of {len(issues)}):\n\n{listing}"

    async def handle_help_command(self, conversation: Conversation) -> str:
        return HELP_TEXT


__all__ = ["ChatAgent", "HELP_TEXT"]
