"""In-memory conversation sessions keyed by session id."""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import List, Optional

from attrs import define, field

from repo_scout.models import Conversation, Message

logger = logging.getLogger(__name__)


@define(slots=True)
class ConversationStore:
    """Owns every live conversation.

    Sessions are kept in least-recently-used order; once ``max_sessions`` is
    exceeded the stalest one is dropped. ``None`` disables the bound.
    """

    max_sessions: Optional[int] = 1000
    _sessions: "OrderedDict[str, Conversation]" = field(init=False, factory=OrderedDict)

    def start(self, session_id: str) -> Conversation:
        conversation = Conversation(session_id=session_id)
        self._sessions[session_id] = conversation
        self._sessions.move_to_end(session_id)
        self._evict()
        logger.debug("Conversation started: %s", session_id)
        return conversation

    def get(self, session_id: str) -> Optional[Conversation]:
        conversation = self._sessions.get(session_id)
        if conversation is not None:
            self._sessions.move_to_end(session_id)
        return conversation

    def get_or_create(self, session_id: str) -> Conversation:
        conversation = self.get(session_id)
        if conversation is None:
            conversation = self.start(session_id)
        return conversation

    def history(self, session_id: str) -> List[Message]:
        conversation = self._sessions.get(session_id)
        return list(conversation.messages) if conversation is not None else []

    def clear(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        logger.debug("Conversation cleared: %s", session_id)

    def active_count(self) -> int:
        return len(self._sessions)

    def _evict(self) -> None:
        if self.max_sessions is None:
            return
        while len(self._sessions) > self.max_sessions:
            session_id, _ = self._sessions.popitem(last=False)
            logger.info("Evicted idle conversation: %s", session_id)


__all__ = ["ConversationStore"]
