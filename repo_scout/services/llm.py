"""LLM responder on top of the OpenAI SDK (any OpenAI-compatible endpoint)."""
from __future__ import annotations

import json
import logging
import re
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from attrs import define, field
from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

ANALYZE_TEMPLATE = """Analyze this {language} code for issues, security problems, and improvements:

```{language}
{code}
```

Provide:
1. Issues found (if any)
2. Security concerns (if any)
3. Performance improvements
4. Suggested fixes (with code snippets)

Format as JSON with keys: "issues", "security", "performance", "fixes\""""


@define
class LLMResponder:
    """Generate, chat and analyse code through a chat-completions API.

    Calls never raise: without an API key the responder answers with mock
    text, and API failures come back as an "unavailable" placeholder.
    """

    model: str = "gemini-2.0-flash"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.7
    history_window: int = 20
    client: Optional[Any] = field(default=None, repr=False)

    chat_history: Deque[Dict[str, str]] = field(init=False)

    def __attrs_post_init__(self) -> None:
        self.chat_history = deque(maxlen=max(1, self.history_window))
        if self.client is None and self.api_key:
            client_kwargs: Dict[str, Any] = {"api_key": self.api_key}
            if self.base_url:
                client_kwargs["base_url"] = self.base_url
            self.client = AsyncOpenAI(**client_kwargs)
        if self.client is None:
            logger.warning("LLM API key not configured; running in fallback/mock mode")
        else:
            logger.info("LLM client initialized (model=%s)", self.model)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def _complete(self, messages: List[Dict[str, str]]) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
        )
        return response.choices[0].message.content or ""

    async def generate(self, prompt: str, context: Optional[str] = None) -> str:
        if not self.enabled:
            logger.debug("LLM disabled; returning mock content")
            return f"Mock response for prompt: {prompt[:120]}..."
        full_prompt = f"{context}\n\n{prompt}" if context else prompt
        try:
            text = await self._complete([{"role": "user", "content": full_prompt}])
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("LLM generation failed: %s", exc)
            return f"LLM unavailable: {exc}"
        logger.debug("LLM response generated (%d chars)", len(text))
        return text

    async def chat(self, message: str, context: Optional[str] = None) -> str:
        if not self.enabled:
            reply = f"Mock chat reply: Received message '{message}'"
            self.chat_history.append({"role": "assistant", "content": reply})
            return reply

        messages: List[Dict[str, str]] = []
        if context:
            messages.append({"role": "system", "content": context})
        messages.extend(self.chat_history)
        messages.append({"role": "user", "content": message})
        try:
            reply = await self._complete(messages)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Chat failed: %s", exc)
            reply = f"LLM chat unavailable: {exc}"
            self.chat_history.append({"role": "assistant", "content": reply})
            return reply

        self.chat_history.append({"role": "user", "content": message})
        self.chat_history.append({"role": "assistant", "content": reply})
        return reply

    async def analyze_code(self, code: str, language: str = "javascript") -> Dict[str, Any]:
        response = await self.generate(ANALYZE_TEMPLATE.format(language=language, code=code))
        match = _JSON_BLOCK.search(response)
        if match is None:
            return {"raw": response}
        try:
            parsed = json.loads(match.group(0))
        except ValueError:
            return {"raw": response}
        return parsed if isinstance(parsed, dict) else {"raw": response}

    def clear_history(self) -> None:
        self.chat_history.clear()
        logger.debug("Chat history cleared")


__all__ = ["LLMResponder"]
