"""Agent exports."""
from .chat import ChatAgent
from .docs import DocGenerator
from .scanner import ScannerAgent

__all__ = ["ChatAgent", "DocGenerator", "ScannerAgent"]
