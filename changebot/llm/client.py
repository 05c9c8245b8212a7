"""Chat-completions client for OpenAI-compatible endpoints."""

import logging
from typing import Optional

import requests


class LLMError(RuntimeError):
    """Raised when the chat endpoint fails or returns an unusable reply."""


class ChatClient:
    """Minimal client for the ``/chat/completions`` endpoint."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini",
                 base_url: str = "https://api.openai.com/v1",
                 timeout: float = 60.0,
                 session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        self.model = model
        self.url = f"{base_url.rstrip('/')}/chat/completions"
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def complete(self, system: str, user: str) -> str:
        """Send one system+user message pair and return the reply text.

        Args:
            system: System instruction
            user: User message

        Returns:
            Content of the first choice

        Raises:
            LLMError: transport failure, timeout, non-success status or malformed reply
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }

        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise LLMError(f"Chat request failed: {e}") from e

        if not response.ok:
            raise LLMError(f"Chat request failed. Status Code: {response.status_code}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Malformed chat response: {e}") from e

        if not isinstance(content, str):
            raise LLMError(f"Chat response content is not text: {type(content).__name__}")

        self.logger.debug(f"Chat reply: {content}")
        return content
