"""
Domain Ports — abstract interfaces for external collaborators.

Ports define the contracts that the pipeline requires from the outside world.
Infrastructure adapters implement these interfaces; the DI container builds
them once at startup and hands them to each run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from threading import Event

from promo_shorts.domain.entities import (
    MusicTrack,
    SearchConstraints,
    VideoCandidate,
    VoiceSettings,
)

ProgressCallback = Callable[[float], None]

# ═══════════════════════════════════════════════════════════════
# Generation Ports
# ═══════════════════════════════════════════════════════════════


class TextGenerator(ABC):
    """Port for Large Language Model text generation.

    Implementations: GeminiTextGenerator, OpenAITextGenerator,
    OllamaTextGenerator, FallbackTextGenerator
    """

    name: str = "text"

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Generate text from a prompt.

        Args:
            prompt: Input prompt.

        Returns:
            Generated text string.
        """


class SpeechProvider(ABC):
    """Port for text-to-speech synthesis.

    Implementations: ElevenLabsSpeechProvider, EdgeTTSSpeechProvider
    """

    name: str = "speech"

    @abstractmethod
    def synthesize(self, text: str, voice_id: str, settings: VoiceSettings) -> bytes:
        """Synthesize speech.

        Args:
            text: Text to speak.
            voice_id: Provider-specific voice identifier.
            settings: Voice tuning.

        Returns:
            Encoded audio bytes (MP3).

        Raises:
            VoiceGenerationError: If the provider rejects the request.
        """


# ═══════════════════════════════════════════════════════════════
# Asset Ports
# ═══════════════════════════════════════════════════════════════


class VideoSearchProvider(ABC):
    """Port for stock video search.

    Implementations: PexelsVideoSearch
    """

    @abstractmethod
    def search(self, query: str, constraints: SearchConstraints) -> list[VideoCandidate]:
        """Search for videos.

        Args:
            query: Free-text query.
            constraints: Duration window, orientation and page size.

        Returns:
            Candidates in provider ranking order (may be empty).

        Raises:
            AssetResolutionError: On transport or authentication failure.
        """


class FragmentFetcher(ABC):
    """Port for downloading a resolved fragment to local storage.

    Implementations: HttpFragmentFetcher
    """

    @abstractmethod
    def fetch(self, url: str, destination: Path, cancel: Event | None = None) -> Path:
        """Download ``url`` into ``destination`` and return the path.

        Args:
            url: Source URL.
            destination: File to write.
            cancel: Set by the caller when it stops waiting. Implementations
                should stop as soon as they see it and leave no file behind.
        """


class MusicLibrary(ABC):
    """Port for the shared pool of background music.

    Implementations: DirectoryMusicLibrary
    """

    @abstractmethod
    def pick(self) -> MusicTrack | None:
        """Pick one track, or None when the pool is empty."""


# ═══════════════════════════════════════════════════════════════
# Rendering Port
# ═══════════════════════════════════════════════════════════════


class TranscodingEngine(ABC):
    """Port for the external transcoding engine.

    Implementations: FFmpegEngine
    """

    @abstractmethod
    def build_command(self, args: list[str], output_path: Path) -> list[str]:
        """Return the full command line the engine would execute."""

    @abstractmethod
    async def transcode(
        self,
        args: list[str],
        output_path: Path,
        duration: float,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Run one transcoding job.

        Args:
            args: Inputs, filter graph and output options.
            output_path: File to write.
            duration: Expected output duration, used for progress percentages.
            on_progress: Called with a percentage (best effort, not monotonic).

        Raises:
            RenderError: If the engine exits with a failure.
        """
