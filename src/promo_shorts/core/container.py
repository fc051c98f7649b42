"""
Dependency Injection Container — wires ports to adapters.

A simple, explicit DI container that resolves domain ports to their
concrete infrastructure adapters based on application settings.

Provider handles are long-lived: they are built once, on first use, and
shared by every run the process executes.

Usage:
    settings = Settings()
    container = Container(settings)
    search = container.video_search()
    speech = container.speech_provider()
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from promo_shorts.domain.entities import SearchConstraints, VoiceSettings
from promo_shorts.domain.voices import EDGE_VOICES, ELEVENLABS_VOICES

if TYPE_CHECKING:
    from promo_shorts.core.config import Settings
    from promo_shorts.domain.ports import (
        FragmentFetcher,
        MusicLibrary,
        SpeechProvider,
        TextGenerator,
        TranscodingEngine,
        VideoSearchProvider,
    )

log = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Lazily creates and caches adapter instances. Each adapter is created
    only when first requested and reused for subsequent calls.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        log.info("🔌 DI Container initialized")

    @property
    def settings(self) -> Settings:
        return self._settings

    @lru_cache(maxsize=1)
    def text_generator(self) -> TextGenerator:
        """Resolve TextGenerator → FallbackTextGenerator over configured providers.

        Cloud providers without an API key are left out of the chain.
        """
        from promo_shorts.application.text_generation import FallbackTextGenerator

        providers: list[TextGenerator] = []
        for name in self._settings.text_providers:
            if name == "gemini":
                if not self._settings.gemini.api_key:
                    log.warning("⚠️  GOOGLE_API_KEY not set, skipping Gemini")
                    continue
                from promo_shorts.infrastructure.adapters.cloud_llm import GeminiTextGenerator

                providers.append(GeminiTextGenerator(self._settings))
            elif name == "openai":
                if not self._settings.openai.api_key:
                    log.warning("⚠️  OPENAI_API_KEY not set, skipping OpenAI")
                    continue
                from promo_shorts.infrastructure.adapters.cloud_llm import OpenAITextGenerator

                providers.append(OpenAITextGenerator(self._settings))
            elif name == "ollama":
                from promo_shorts.infrastructure.adapters.ollama import OllamaTextGenerator

                providers.append(OllamaTextGenerator(self._settings))

        log.info("🤖 Text providers: %s", ", ".join(p.name for p in providers) or "none")
        return FallbackTextGenerator(providers)

    @lru_cache(maxsize=1)
    def video_search(self) -> VideoSearchProvider:
        """Resolve VideoSearchProvider → PexelsVideoSearch."""
        from promo_shorts.infrastructure.adapters.pexels import PexelsVideoSearch

        return PexelsVideoSearch(self._settings, timeout=self._settings.pipeline.search_timeout)

    def search_constraints(self) -> SearchConstraints:
        pexels = self._settings.pexels
        return SearchConstraints(
            duration_min=pexels.min_duration,
            duration_max=pexels.max_duration,
            orientation=pexels.orientation,
            per_page=pexels.per_page,
        )

    @lru_cache(maxsize=1)
    def speech_provider(self) -> SpeechProvider:
        """Resolve SpeechProvider → ElevenLabs or Edge TTS based on config."""
        if self._settings.tts_engine == "edge":
            from promo_shorts.infrastructure.adapters.edge_tts import EdgeTTSSpeechProvider

            log.info("🔊 TTS engine: Edge TTS (cloud, no key)")
            return EdgeTTSSpeechProvider()

        from promo_shorts.infrastructure.adapters.elevenlabs import ElevenLabsSpeechProvider

        log.info("🔊 TTS engine: ElevenLabs")
        return ElevenLabsSpeechProvider(self._settings)

    def voice_table(self) -> dict[str, str]:
        """Voice table matching the configured speech engine."""
        if self._settings.tts_engine == "edge":
            return dict(EDGE_VOICES)
        return dict(ELEVENLABS_VOICES)

    def voice_settings(self) -> VoiceSettings:
        cfg = self._settings.elevenlabs
        return VoiceSettings(
            model_id=cfg.model_id,
            stability=cfg.stability,
            similarity_boost=cfg.similarity_boost,
            style=cfg.style,
            use_speaker_boost=cfg.use_speaker_boost,
        )

    @lru_cache(maxsize=1)
    def fragment_fetcher(self) -> FragmentFetcher:
        """Resolve FragmentFetcher → HttpFragmentFetcher."""
        from promo_shorts.core.config import DOWNLOAD_RETRY_DELAY
        from promo_shorts.infrastructure.adapters.http_fetcher import HttpFragmentFetcher

        return HttpFragmentFetcher(
            timeout=self._settings.pipeline.fetch_timeout,
            max_retries=self._settings.max_retries,
            base_delay=DOWNLOAD_RETRY_DELAY,
        )

    @lru_cache(maxsize=1)
    def music_library(self) -> MusicLibrary:
        """Resolve MusicLibrary → DirectoryMusicLibrary."""
        from promo_shorts.infrastructure.adapters.music_library import DirectoryMusicLibrary

        return DirectoryMusicLibrary(self._settings.music_dir)

    @lru_cache(maxsize=1)
    def transcoding_engine(self) -> TranscodingEngine:
        """Resolve TranscodingEngine → FFmpegEngine."""
        from promo_shorts.infrastructure.adapters.ffmpeg import FFmpegEngine

        return FFmpegEngine(self._settings.ffmpeg_path)
