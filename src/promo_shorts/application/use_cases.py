"""
Use Cases — application-level business operations.

Each use case represents a single, well-defined operation in the pipeline.
Use cases depend only on domain ports (interfaces), never on concrete
infrastructure implementations.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from threading import Event

from promo_shorts.domain.entities import (
    AssetReference,
    NarrationAsset,
    ScriptLine,
    SearchConstraints,
    VideoCandidate,
    VisualCue,
    VoiceSettings,
)
from promo_shorts.domain.exceptions import (
    ConfigurationError,
    TextGenerationError,
    VoiceGenerationError,
)
from promo_shorts.domain.ports import SpeechProvider, TextGenerator, VideoSearchProvider
from promo_shorts.domain.templates import PRODUCT_PLACEHOLDER, categorize, select_templates
from promo_shorts.domain.value_objects import Mood
from promo_shorts.domain.voices import select_voice

log = logging.getLogger(__name__)


class SynthesizeScriptUseCase:
    """Build the fixed-length promo script from templates.

    Flow: Subject → category → mood template set → substituted lines
    """

    def __init__(self, line_count: int = 10, seconds_per_line: float = 2.5) -> None:
        self._line_count = line_count
        self._seconds_per_line = seconds_per_line

    def execute(self, subject: str, mood: Mood | str, locale_hint: str = "en") -> list[ScriptLine]:
        """Synthesize the script.

        Args:
            subject: Product name (or URL) promoted by the video.
            mood: Script tone; unknown moods fall back to trendy.
            locale_hint: Target language. Templates are English only.

        Returns:
            Script lines in speaking order.

        Raises:
            ValueError: If the subject is empty.
        """
        if not subject.strip():
            raise ValueError("Subject cannot be empty")
        if isinstance(mood, str):
            mood = Mood.from_str(mood, default=Mood.TRENDY)

        category = categorize(subject)
        templates = select_templates(mood, category)[: self._line_count]
        lines = [
            ScriptLine(
                position=i,
                text=template.replace(PRODUCT_PLACEHOLDER, subject),
                seconds_per_line=self._seconds_per_line,
            )
            for i, template in enumerate(templates)
        ]
        log.info(
            "📝 Script: %d lines (category=%s, mood=%s, locale=%s)",
            len(lines),
            category.value,
            mood.value,
            locale_hint,
        )
        return lines


class GenerateVisualCueUseCase:
    """Ask the LLM for stock-footage keywords matching one script line.

    Flow: Script line + subject + mood → LLM → VisualCue
    """

    PROMPT = (
        'Create a specific visual search term for Pexels that shows "{subject}" '
        'related to this script line: "{line}".\n\n'
        "Give me 3-4 keywords that would find videos showing:\n"
        '- The actual product "{subject}"\n'
        "- People using or enjoying this product\n"
        "- The lifestyle/emotion from the script line\n"
        "- {mood} mood visuals\n\n"
        "Only return keywords, no explanation."
    )

    def __init__(self, text_generator: TextGenerator) -> None:
        self._generator = text_generator

    def execute(self, line: ScriptLine, subject: str, mood: Mood) -> VisualCue | None:
        """Generate the cue, or None when every provider failed."""
        prompt = self.PROMPT.format(subject=subject, line=line.text, mood=mood.value)
        try:
            raw = self._generator.generate(prompt)
        except TextGenerationError as e:
            log.warning("⚠️  Visual cue generation failed for line %d: %s", line.position + 1, e)
            return None

        text = self._clean(raw)
        if not text:
            log.warning("⚠️  Empty visual cue for line %d", line.position + 1)
            return None
        log.info("🔍 Search term %d: '%s'", line.position + 1, text)
        return VisualCue(position=line.position, text=text)

    @staticmethod
    def _clean(text: str) -> str:
        text = re.sub(r"[*_`#]", "", text)
        text = " ".join(text.split())
        return text.strip().strip('"').strip("'").strip()


class ResolveAssetUseCase:
    """Find one usable stock clip for a cue.

    Flow: "<subject> <cue>" search → (empty) cue-only search → first
    candidate in the duration window with the required quality tier.
    """

    def __init__(
        self,
        search: VideoSearchProvider,
        constraints: SearchConstraints | None = None,
        quality: str = "hd",
    ) -> None:
        self._search = search
        self._constraints = constraints or SearchConstraints()
        self._quality = quality

    def execute(self, cue: str, subject: str) -> AssetReference | None:
        """Resolve a cue to an asset.

        Search failures are expected and yield None rather than an error.
        A provider that is not configured raises ConfigurationError.
        """
        query = f"{subject} {cue}".strip()
        try:
            log.info("🔍 [PEXELS] Primary search: '%s'", query)
            candidates = self._search.search(query, self._constraints)
            if not candidates:
                log.info("🔄 [PEXELS] Fallback search: '%s'", cue)
                candidates = self._search.search(cue, self._constraints)
        except ConfigurationError:
            raise
        except Exception as e:
            log.warning("⚠️  [PEXELS] Search failed for '%s': %s", cue, e)
            return None

        reference = self.select(candidates)
        if reference is None:
            log.warning("⚠️  [PEXELS] No usable video for '%s'", cue)
        else:
            log.info("✅ [PEXELS] Found %s video: %s", self._quality.upper(), reference.provider_id)
        return reference

    def select(self, candidates: Sequence[VideoCandidate]) -> AssetReference | None:
        """First candidate within the duration window that has the quality tier."""
        low = self._constraints.duration_min
        high = self._constraints.duration_max
        for candidate in candidates:
            if not low <= candidate.duration_seconds <= high:
                continue
            for video_file in candidate.files:
                if video_file.quality == self._quality and video_file.link:
                    return AssetReference(
                        url=video_file.link,
                        provider_id=candidate.provider_id,
                        duration_seconds=candidate.duration_seconds,
                        quality=video_file.quality,
                        width=video_file.width,
                        height=video_file.height,
                    )
        return None


class SynthesizeNarrationUseCase:
    """Generate the voiceover for the whole script.

    Flow: Script lines → narration text → TTS → transient MP3
    """

    def __init__(
        self,
        provider: SpeechProvider,
        voice_table: dict[str, str],
        temp_dir: Path,
        voice_settings: VoiceSettings | None = None,
    ) -> None:
        self._provider = provider
        self._voice_table = voice_table
        self._temp_dir = Path(temp_dir)
        self._voice_settings = voice_settings or VoiceSettings()

    def select_voice(self, subject: str) -> str:
        return select_voice(subject, self._voice_table)

    @staticmethod
    def narration_text(lines: Sequence[ScriptLine]) -> str:
        return ". ".join(line.text for line in lines) + "."

    def output_path(self, run_id: int) -> Path:
        return self._temp_dir / f"voice-{run_id}.mp3"

    def execute(
        self,
        text: str,
        voice_id: str,
        run_id: int,
        locale: str = "en",
        duration_seconds: float = 25.0,
        cancel: Event | None = None,
    ) -> NarrationAsset:
        """Synthesize and persist the narration.

        Nothing is written once ``cancel`` is set.

        Raises:
            VoiceGenerationError: If synthesis fails or the file cannot be written.
        """
        log.info(
            "🎤 Generating voiceover with %s (voice=%s, locale=%s, %d chars)",
            self._provider.name,
            voice_id,
            locale,
            len(text),
        )
        try:
            audio = self._provider.synthesize(text, voice_id, self._voice_settings)
        except VoiceGenerationError:
            raise
        except Exception as e:
            raise VoiceGenerationError(f"Voice synthesis failed: {e}", cause=e) from e

        if cancel is not None and cancel.is_set():
            raise VoiceGenerationError("Voice generation cancelled before the narration was saved")

        path = self.output_path(run_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(audio)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise VoiceGenerationError(f"Could not write narration to {path}: {e}", cause=e) from e

        log.info("✅ Voiceover saved: %s", path.name)
        return NarrationAsset(path=path, voice_id=voice_id, duration_seconds=duration_seconds)
