"""Remote service clients."""
from .github import GitHubClient
from .llm import LLMResponder

__all__ = ["GitHubClient", "LLMResponder"]
