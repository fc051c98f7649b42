"""
Domain Value Objects — immutable, self-validating types.

Value objects represent concepts defined by their attributes rather than
a unique identity. They are always immutable and validate their own invariants.
"""

from __future__ import annotations

from enum import Enum


class Mood(str, Enum):
    """Tone of the promotional script."""

    FUNNY = "funny"
    EXCITING = "exciting"
    TRENDY = "trendy"
    LUXURIOUS = "luxurious"

    @classmethod
    def from_str(cls, value: str, default: Mood | None = None) -> Mood:
        """Parse a mood string (case-insensitive).

        Unknown moods resolve to ``default`` when one is given, otherwise
        they raise.
        """
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        if default is not None:
            return default
        raise ValueError(
            f"Unsupported mood '{value}'. "
            f"Supported: {', '.join(m.value for m in cls)}"
        )


class ProductCategory(str, Enum):
    """Product category inferred from the subject name."""

    BEAUTY = "beauty"
    TECH = "tech"
    FASHION = "fashion"
    FOOD = "food"
    DEFAULT = "default"


class AudioMode(str, Enum):
    """Which audio tracks the caller asked for."""

    VOICE_AND_MUSIC = "voice+music"
    VOICE = "voice"
    MUSIC = "music"
    SILENT = "none"

    @property
    def wants_narration(self) -> bool:
        return self in (AudioMode.VOICE_AND_MUSIC, AudioMode.VOICE)

    @property
    def wants_music(self) -> bool:
        return self in (AudioMode.VOICE_AND_MUSIC, AudioMode.MUSIC)

    @classmethod
    def from_str(cls, value: str) -> AudioMode:
        """Parse an audio option such as ``voice+music`` or ``music``.

        An empty option means no audio. Anything else that names neither
        voice nor music raises.
        """
        normalized = value.strip().lower()
        if not normalized:
            return cls.SILENT
        for member in cls:
            if member.value == normalized:
                return member
        has_voice = "voice" in normalized
        has_music = "music" in normalized
        if has_voice and has_music:
            return cls.VOICE_AND_MUSIC
        if has_voice:
            return cls.VOICE
        if has_music:
            return cls.MUSIC
        raise ValueError(
            f"Unsupported audio option '{value}'. "
            f"Supported: {', '.join(m.value for m in cls)}"
        )


class AudioMixKind(str, Enum):
    """The four possible shapes of the audio mix."""

    NARRATION_AND_MUSIC = "narration_and_music"
    NARRATION_ONLY = "narration_only"
    MUSIC_ONLY = "music_only"
    SILENT = "silent"


class RunState(str, Enum):
    """Lifecycle state of a single pipeline run."""

    SCRIPT_PENDING = "script_pending"
    ASSETS_PENDING = "assets_pending"
    AUDIO_PENDING = "audio_pending"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.DONE, RunState.FAILED)


class FailureCategory(str, Enum):
    """Categorized reason a run failed."""

    SCRIPT_TOO_SHORT = "ScriptTooShort"
    NO_ASSETS_FOUND = "NoAssetsFound"
    VOICE_GENERATION_FAILED = "VoiceGenerationFailed"
    RENDER_ERROR = "RenderError"
    CONFIGURATION = "Configuration"
    UNEXPECTED = "Unexpected"


class RenderEventKind(str, Enum):
    """Events surfaced by the renderer."""

    START = "start"
    PROGRESS = "progress"
    END = "end"
    ERROR = "error"
