"""
Edge TTS Adapter — SpeechProvider implementation.

Uses Microsoft Edge's free TTS service. No API key required, which makes
it the offline-friendly alternative to ElevenLabs.
"""

from __future__ import annotations

import asyncio
import logging

import edge_tts

from promo_shorts.domain.entities import VoiceSettings
from promo_shorts.domain.exceptions import VoiceGenerationError
from promo_shorts.domain.ports import SpeechProvider

log = logging.getLogger(__name__)


class EdgeTTSSpeechProvider(SpeechProvider):
    """Synthesizes speech using Microsoft Edge TTS.

    ElevenLabs-specific tuning in VoiceSettings is ignored; Edge only
    takes a voice name and a speaking rate.
    """

    name = "edge"

    def __init__(self, rate: str = "+0%") -> None:
        self._rate = rate

    def synthesize(self, text: str, voice_id: str, settings: VoiceSettings) -> bytes:
        log.info("🔊 Edge TTS: %d characters with voice %s", len(text), voice_id)
        try:
            audio = asyncio.run(self._collect(text, voice_id))
        except Exception as e:
            raise VoiceGenerationError(f"Edge TTS synthesis failed: {e}", cause=e) from e

        if not audio:
            raise VoiceGenerationError("Edge TTS returned no audio")
        return audio

    async def _collect(self, text: str, voice_id: str) -> bytes:
        """Stream the synthesis and keep only the audio chunks."""
        communicate = edge_tts.Communicate(text, voice_id, rate=self._rate)
        audio = bytearray()
        async for chunk in communicate.stream():
            if chunk["type"] == "audio":
                audio.extend(chunk["data"])
        return bytes(audio)
