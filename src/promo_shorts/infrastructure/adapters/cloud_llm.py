"""
Cloud LLM Adapters — Gemini and OpenAI TextGenerator implementations.

Both talk to the vendors' REST endpoints through urllib and raise
TextGenerationError on any failure, so the provider chain can move on.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import TYPE_CHECKING, Any

from promo_shorts.domain.exceptions import TextGenerationError
from promo_shorts.domain.ports import TextGenerator

if TYPE_CHECKING:
    from promo_shorts.core.config import Settings

log = logging.getLogger(__name__)


def _post_json(url: str, body: dict[str, Any], headers: dict[str, str], timeout: float) -> Any:
    req = urllib.request.Request(
        url,
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json", **headers},
    )
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        return json.loads(resp.read().decode("utf-8"))


class GeminiTextGenerator(TextGenerator):
    """Google Gemini (primary provider)."""

    name = "gemini"

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.gemini.api_key
        self._model = settings.gemini.model
        self._base_url = settings.gemini.base_url.rstrip("/")
        self._timeout = settings.pipeline.text_timeout

    def generate(self, prompt: str) -> str:
        if not self._api_key:
            raise TextGenerationError("Gemini API key is missing (set GOOGLE_API_KEY)")

        url = (
            f"{self._base_url}/v1beta/models/{self._model}:generateContent?"
            + urllib.parse.urlencode({"key": self._api_key})
        )
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            data = _post_json(url, body, {}, self._timeout)
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts).strip()
        except (urllib.error.URLError, TimeoutError, ValueError, KeyError, IndexError) as e:
            raise TextGenerationError(f"Gemini generation failed: {e}", errors=[e]) from e


class OpenAITextGenerator(TextGenerator):
    """OpenAI chat completions (backup provider)."""

    name = "openai"

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai.api_key
        self._model = settings.openai.model
        self._base_url = settings.openai.base_url.rstrip("/")
        self._max_tokens = settings.openai.max_tokens
        self._temperature = settings.openai.temperature
        self._timeout = settings.pipeline.text_timeout

    def generate(self, prompt: str) -> str:
        if not self._api_key:
            raise TextGenerationError("OpenAI API key is missing (set OPENAI_API_KEY)")

        body = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }
        try:
            data = _post_json(
                f"{self._base_url}/v1/chat/completions",
                body,
                {"Authorization": f"Bearer {self._api_key}"},
                self._timeout,
            )
            return str(data["choices"][0]["message"]["content"]).strip()
        except (urllib.error.URLError, TimeoutError, ValueError, KeyError, IndexError) as e:
            raise TextGenerationError(f"OpenAI generation failed: {e}", errors=[e]) from e
