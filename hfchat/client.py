"""OpenAI-compatible chat completion client (Hugging Face, Ollama, proxies)."""

import logging
from typing import Optional

import httpx

from .config import ChatConfig

_log = logging.getLogger(__name__)


class ChatError(Exception):
    """A chat completion request failed; the message is shown to the user."""


class ChatClient:
    """Sends the bounded conversation to ``<base_url>/chat/completions``."""

    def __init__(self, config: ChatConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.client = httpx.Client(timeout=60.0, transport=transport)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Content-Type": "application/json",
        }

    def _payload(self, messages: list[dict]) -> dict:
        payload = {
            "model": self.config.model,
            "messages": messages,
        }
        if self.config.max_tokens is not None:
            payload["max_tokens"] = self.config.max_tokens
        if self.config.temperature is not None:
            payload["temperature"] = self.config.temperature
        return payload

    def complete(self, messages: list[dict]) -> str:
        """Return the assistant reply text for ``messages``."""
        url = f"{self.base_url}/chat/completions"
        try:
            response = self.client.post(url, json=self._payload(messages), headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ChatError(_status_message(e.response.status_code, str(e))) from e
        except httpx.TransportError as e:
            _log.debug("transport error talking to %s", url, exc_info=True)
            raise ChatError(
                "Connection Error: Cannot reach API. Check if service is running and HF_BASE_URL is correct."
            ) from e
        except ValueError as e:
            raise ChatError(f"API Error: invalid JSON response ({e})") from e

        if not isinstance(data, dict):
            raise ChatError("No response received")
        choices = data.get("choices") or []
        if not choices:
            raise ChatError("No response received")
        content = (choices[0].get("message") or {}).get("content")
        if content is None:
            raise ChatError("No content received")
        return content

    def close(self) -> None:
        self.client.close()


def _status_message(status: int, detail: str) -> str:
    if status == 404:
        return "Error 404: API endpoint not found. Check base_url and model."
    if status == 401:
        return "Error 401: Invalid API key. Please check your token."
    if status == 429:
        return "Error 429: Rate limit exceeded. Please wait and try again."
    return f"API Error: {detail}"
