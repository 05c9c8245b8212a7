"""Language-model access."""

from .client import ChatClient, LLMError

__all__ = ["ChatClient", "LLMError"]
