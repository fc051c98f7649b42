"""
Ollama Adapter — TextGenerator implementation.

Connects to a local Ollama server for keyword generation. Handy as a
last provider in the chain when no cloud key is configured.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import TYPE_CHECKING

from promo_shorts.core.resilience import retry_with_backoff
from promo_shorts.domain.exceptions import TextGenerationError
from promo_shorts.domain.ports import TextGenerator

if TYPE_CHECKING:
    from promo_shorts.core.config import Settings

log = logging.getLogger(__name__)


class OllamaTextGenerator(TextGenerator):
    """Local LLM text generation via the Ollama REST API."""

    name = "ollama"

    def __init__(self, settings: Settings) -> None:
        self._host = settings.ollama.host.rstrip("/")
        self._model = settings.ollama.model
        self._timeout = settings.pipeline.text_timeout

    def is_running(self) -> bool:
        """Check if the Ollama server is responding."""
        try:
            with urllib.request.urlopen(f"{self._host}/api/tags", timeout=3):
                return True
        except (urllib.error.URLError, TimeoutError):
            return False

    @retry_with_backoff(max_retries=2, base_delay=2.0, exceptions=(urllib.error.URLError,))
    def _post(self, payload: bytes) -> dict:
        req = urllib.request.Request(
            f"{self._host}/api/generate",
            data=payload,
            headers={"Content-Type": "application/json"},
        )
        with urllib.request.urlopen(req, timeout=self._timeout) as resp:
            return json.loads(resp.read().decode("utf-8"))

    def generate(self, prompt: str) -> str:
        payload = json.dumps({
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": 0.7, "top_p": 0.9, "num_predict": 120},
        }).encode("utf-8")

        try:
            result = self._post(payload)
        except (urllib.error.URLError, TimeoutError, ValueError) as e:
            raise TextGenerationError(f"Ollama generation failed: {e}", errors=[e]) from e

        text = str(result.get("response", "")).strip()
        if not text:
            raise TextGenerationError("Ollama returned an empty response")
        return text
