"""Topic sentence generation through the OpenAI chat completions API."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional

import requests

from ..core.errors import TextGenerationError

LOGGER = logging.getLogger(__name__)

API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo"
REQUEST_TIMEOUT = 30

TOPIC_PROMPT = """Based on: "{context}"

Write one sentence starting with "I'd love to talk more with you about" for a coffee chat.

Example: "I'd love to talk more with you about your AI startup experience.\""""

_WRAPPING_QUOTES = re.compile(r"^[\"']|[\"']$")
_MESSAGE_PREFIX = re.compile(r"^\s*Message:\s*", re.IGNORECASE)


def has_meaningful_context(context: Optional[str]) -> bool:
    """Whether the context is worth a generation call."""
    if not context or len(context.strip()) < 5:
        return False
    cleaned = context.strip().lower()
    return len(cleaned) >= 10 and (" " in cleaned or len(cleaned) > 15)


class TopicGenerator:
    """Generates an optional conversation-topic sentence for a draft."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key or ""
        self._model = model
        self._http = session or requests.Session()

    def is_configured(self) -> bool:
        return self._api_key.startswith(("sk-", "AIza"))

    async def topic_sentence(self, name: str, context: str, event: str) -> Optional[str]:
        """Return one topic sentence, or None when unavailable for any reason."""
        if not context or len(context.strip()) < 10:
            return None
        if not self.is_configured():
            LOGGER.debug("No valid API key; skipping topic sentence for %s", name)
            return None
        try:
            raw = await asyncio.to_thread(self._call_chat, TOPIC_PROMPT.format(context=context))
        except TextGenerationError:
            LOGGER.warning("Topic sentence generation failed for %s (%s)", name, event, exc_info=True)
            return None
        cleaned = clean_response(raw)
        return cleaned or None

    def _call_chat(self, prompt: str) -> str:
        payload = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": 500,
            "temperature": 0.7,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        try:
            response = self._http.post(API_URL, json=payload, headers=headers, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise TextGenerationError(f"Request failed: {exc}") from exc
        if not response.ok:
            raise TextGenerationError(f"API error {response.status_code}: {response.text[:200]}")
        try:
            data = response.json()
        except ValueError as exc:
            raise TextGenerationError("Response was not JSON") from exc
        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""
        LOGGER.debug("Topic sentence response length %d", len(content))
        return content


def clean_response(response: str) -> str:
    text = _WRAPPING_QUOTES.sub("", response.strip())
    text = _MESSAGE_PREFIX.sub("", text)
    return text.strip()
