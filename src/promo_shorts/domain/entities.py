"""
Domain Entities — core business objects of a promo video run.

Every entity belongs to exactly one pipeline run. Nothing here performs
I/O; files referenced by path are owned and cleaned up by the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from promo_shorts.domain.value_objects import (
    AudioMode,
    FailureCategory,
    Mood,
    RenderEventKind,
    RunState,
)

DEFAULT_SUBJECT = "Amazing Product"


@dataclass(frozen=True)
class ScriptLine:
    """One spoken line of the script.

    Attributes:
        position: 0-based index in the script.
        text: The spoken text.
        seconds_per_line: Fixed timing slot of each line.
    """

    position: int
    text: str
    seconds_per_line: float = 2.5

    @property
    def start(self) -> float:
        return self.position * self.seconds_per_line

    @property
    def end(self) -> float:
        return (self.position + 1) * self.seconds_per_line


@dataclass(frozen=True)
class VisualCue:
    """Free-text search hint derived from one script line."""

    position: int
    text: str


@dataclass(frozen=True)
class SearchConstraints:
    """Filters sent to the video search provider."""

    duration_min: int = 8
    duration_max: int = 40
    orientation: str = "portrait"
    per_page: int = 20


@dataclass(frozen=True)
class VideoFile:
    """One downloadable encoding of a search candidate."""

    quality: str
    link: str
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class VideoCandidate:
    """A search hit as returned by the video search provider."""

    provider_id: str
    duration_seconds: float
    files: tuple[VideoFile, ...] = ()


@dataclass(frozen=True)
class AssetReference:
    """A resolved video fragment, already validated for duration and quality.

    Two references are the same asset when their download URL matches.
    """

    url: str
    provider_id: str = ""
    duration_seconds: float = 0.0
    quality: str = "hd"
    width: int = 0
    height: int = 0

    @property
    def identity(self) -> str:
        return self.url


@dataclass(frozen=True)
class VoiceSettings:
    """Speech provider tuning knobs."""

    model_id: str = "eleven_multilingual_v2"
    stability: float = 0.7
    similarity_boost: float = 0.8
    style: float = 0.4
    use_speaker_boost: bool = True


@dataclass
class NarrationAsset:
    """Rendered narration audio on transient storage.

    Attributes:
        path: Location of the audio file.
        voice_id: Identifier of the voice used.
        duration_seconds: Expected duration (the full video length).
    """

    path: Path
    voice_id: str
    duration_seconds: float = 25.0

    def __post_init__(self) -> None:
        self.path = Path(self.path)


@dataclass(frozen=True)
class MusicTrack:
    """A background music file from the shared, read-only pool."""

    path: Path


@dataclass(frozen=True)
class RenderEvent:
    """Start, progress or terminal event emitted while rendering."""

    kind: RenderEventKind
    percent: float | None = None
    message: str = ""
    output_path: Path | None = None


@dataclass(frozen=True)
class GenerationRequest:
    """What the caller asked the pipeline to make."""

    product_name: str = ""
    product_url: str = ""
    mood: Mood = Mood.TRENDY
    language: str = "en"
    audio_mode: AudioMode = AudioMode.VOICE_AND_MUSIC
    include_subtitles: bool = True

    @property
    def subject(self) -> str:
        return self.product_name.strip() or self.product_url.strip() or DEFAULT_SUBJECT


@dataclass
class RunMetadata:
    """Descriptive block returned alongside a successful run."""

    voice_id: str
    mood: Mood
    subtitles: bool
    total_lines: int
    video_clips: int
    duration_seconds: float = 25.0
    width: int = 1080
    height: int = 1920
    quality: str = "HD"
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def seconds_per_line(self) -> float:
        return self.duration_seconds / self.total_lines if self.total_lines else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration": f"Exactly {self.duration_seconds:g} seconds",
            "format": f"TikTok Ready ({self.width}x{self.height})",
            "quality": self.quality,
            "voiceId": self.voice_id,
            "mood": self.mood.value,
            "subtitles": self.subtitles,
            "scriptTiming": f"{self.seconds_per_line:g} seconds per line",
            "totalLines": self.total_lines,
            "videoClips": self.video_clips,
            "timings": {name: round(value, 3) for name, value in self.timings.items()},
        }


@dataclass(frozen=True)
class RunFailure:
    """Categorized failure of a run."""

    category: FailureCategory
    message: str
    detail: str = ""


@dataclass
class RunResult:
    """Final outcome of a pipeline run.

    Attributes:
        run_id: Millisecond timestamp identifying the run.
        success: Whether a video was produced.
        video_url: Public URL of the artifact (success only).
        output_path: Local path of the artifact (success only).
        script: Full script text, one line per row.
        script_lines: The individual script lines.
        search_terms: Visual cues generated per line.
        metadata: Descriptive block (success only).
        error: Failure descriptor (failure only).
    """

    run_id: int
    success: bool = False
    video_url: str = ""
    output_path: Path | None = None
    script: str = ""
    script_lines: list[str] = field(default_factory=list)
    search_terms: list[str] = field(default_factory=list)
    metadata: RunMetadata | None = None
    error: RunFailure | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize in the shape returned to the caller."""
        if not self.success:
            return {
                "success": False,
                "category": self.error.category.value if self.error else "",
                "message": self.error.message if self.error else "",
                "error": self.error.detail if self.error else "",
                "timestamp": self.run_id,
            }
        return {
            "success": True,
            "videoUrl": self.video_url,
            "script": self.script,
            "scriptLines": list(self.script_lines),
            "searchTerms": list(self.search_terms),
            "metadata": self.metadata.to_dict() if self.metadata else {},
        }


_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.SCRIPT_PENDING: frozenset({RunState.ASSETS_PENDING, RunState.FAILED}),
    RunState.ASSETS_PENDING: frozenset({RunState.AUDIO_PENDING, RunState.FAILED}),
    RunState.AUDIO_PENDING: frozenset({RunState.RENDERING, RunState.FAILED}),
    RunState.RENDERING: frozenset({RunState.DONE, RunState.FAILED}),
    RunState.DONE: frozenset(),
    RunState.FAILED: frozenset(),
}


@dataclass
class PipelineRun:
    """State of one pipeline run.

    The state machine only moves forward; no state is ever revisited.
    """

    run_id: int
    state: RunState = RunState.SCRIPT_PENDING
    history: list[RunState] = field(default_factory=list)
    failure: FailureCategory | None = None

    def __post_init__(self) -> None:
        if not self.history:
            self.history.append(self.state)

    def advance(self, target: RunState) -> None:
        """Move to ``target``.

        Raises:
            ValueError: If the transition is not allowed from the current state.
        """
        if target not in _TRANSITIONS[self.state]:
            raise ValueError(f"Invalid run transition {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)

    def fail(self, category: FailureCategory) -> None:
        """Transition to FAILED with a category."""
        self.advance(RunState.FAILED)
        self.failure = category
