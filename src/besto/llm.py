"""
Chat-completion client for Besto.

A thin pass-through to an OpenAI-compatible chat-completion API
(OpenRouter by default). One request, no retries.
"""

import logging
from typing import Any

import httpx

from besto.config import DEFAULT_BASE_URL, DEFAULT_MODEL, get_api_key, load_config
from besto.errors import LLMConfigError, LLMError

logger = logging.getLogger(__name__)


class ChatClient:
    """Posts chat messages and returns the first choice's content."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.config = config or load_config()
        self.llm_config = self.config.get("llm", {})
        self.api_key = get_api_key(self.config)
        self.model = self.llm_config.get("model", DEFAULT_MODEL)
        self.base_url = self.llm_config.get("base_url", DEFAULT_BASE_URL).rstrip("/")
        self.timeout = float(self.llm_config.get("timeout", 30.0))
        self.transport = transport

    def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Send messages and return the reply text.

        Raises LLMConfigError without an API key and LLMError on any
        non-2xx response or malformed payload.
        """
        if not self.api_key:
            raise LLMConfigError("OpenRouter API key not configured")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                        "HTTP-Referer": self.llm_config.get("referer", "https://besto.local"),
                        "X-Title": self.llm_config.get("title", "Besto Voice Assistant"),
                    },
                    json={
                        "model": self.model,
                        "messages": messages,
                        "temperature": temperature,
                        "max_tokens": max_tokens,
                    },
                )
        except httpx.HTTPError as e:
            logger.error("OpenRouter request failed: %s", e)
            raise LLMError(f"OpenRouter request failed: {e}") from e

        if not response.is_success:
            logger.error("OpenRouter API error: %s", response.text)
            raise LLMError(f"OpenRouter API error: {response.status_code}")

        try:
            data = response.json()
            logger.debug("OpenRouter response: %s", data)
            return data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Unexpected OpenRouter response: {e}") from e
