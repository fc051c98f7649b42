"""
ElevenLabs Adapter — SpeechProvider implementation.

Calls the ElevenLabs text-to-speech REST endpoint and returns MP3 bytes.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import TYPE_CHECKING

from promo_shorts.domain.entities import VoiceSettings
from promo_shorts.domain.exceptions import VoiceGenerationError
from promo_shorts.domain.ports import SpeechProvider

if TYPE_CHECKING:
    from promo_shorts.core.config import Settings

log = logging.getLogger(__name__)


class ElevenLabsSpeechProvider(SpeechProvider):
    """Multilingual neural voices from ElevenLabs."""

    name = "elevenlabs"

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.elevenlabs.api_key
        self._base_url = settings.elevenlabs.base_url.rstrip("/")
        self._timeout = settings.pipeline.speech_timeout

    def synthesize(self, text: str, voice_id: str, settings: VoiceSettings) -> bytes:
        if not self._api_key:
            raise VoiceGenerationError("ElevenLabs API key is missing (set ELEVENLABS_API_KEY)")

        payload = json.dumps({
            "text": text,
            "model_id": settings.model_id,
            "voice_settings": {
                "stability": settings.stability,
                "similarity_boost": settings.similarity_boost,
                "style": settings.style,
                "use_speaker_boost": settings.use_speaker_boost,
            },
        }).encode("utf-8")

        req = urllib.request.Request(
            f"{self._base_url}/v1/text-to-speech/{voice_id}",
            data=payload,
            headers={
                "Accept": "audio/mpeg",
                "Content-Type": "application/json",
                "xi-api-key": self._api_key,
            },
        )

        log.info("🎤 ElevenLabs: %d characters with voice %s", len(text), voice_id)
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                audio = resp.read()
        except urllib.error.HTTPError as e:
            raise VoiceGenerationError(
                f"ElevenLabs rejected the request: {self._error_detail(e)}", cause=e
            ) from e
        except (urllib.error.URLError, TimeoutError) as e:
            raise VoiceGenerationError(f"ElevenLabs request failed: {e}", cause=e) from e

        if not audio:
            raise VoiceGenerationError("ElevenLabs returned an empty audio body")
        return audio

    @staticmethod
    def _error_detail(error: urllib.error.HTTPError) -> str:
        """Extract ``detail.message`` from an error body, else the HTTP reason."""
        try:
            body = json.loads(error.read().decode("utf-8"))
            detail = body.get("detail")
            if isinstance(detail, dict) and detail.get("message"):
                return str(detail["message"])
            if detail:
                return str(detail)
        except (ValueError, OSError, AttributeError):
            pass
        return f"HTTP {error.code} {error.reason}"
