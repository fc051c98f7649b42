"""
Composition Graph — declarative description of one render.

The graph is built once per run by the CompositionPlanner and consumed by
the Renderer. Input indices follow the order in which the renderer binds
files: fragments first, then narration, then music.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from promo_shorts.domain.value_objects import AudioMixKind

VIDEO_OUT = "outv"
AUDIO_OUT = "outa"


def format_seconds(value: float) -> str:
    """Format a duration for use inside a filter expression."""
    return f"{value:.3f}".rstrip("0").rstrip(".")


@dataclass(frozen=True)
class FragmentTransform:
    """Scale-to-cover, center-crop, trim and timestamp reset of one fragment."""

    input_index: int
    slice_seconds: float
    width: int
    height: int

    @property
    def label(self) -> str:
        return f"v{self.input_index}"

    def to_filter(self) -> str:
        size = f"{self.width}:{self.height}"
        return (
            f"[{self.input_index}:v]"
            f"scale={size}:force_original_aspect_ratio=increase,"
            f"crop={size},setsar=1,"
            f"trim=duration={format_seconds(self.slice_seconds)},"
            f"setpts=PTS-STARTPTS[{self.label}]"
        )


@dataclass(frozen=True)
class ConcatNode:
    """Video-only concatenation of all transformed fragments, in order."""

    labels: tuple[str, ...]

    @property
    def joins(self) -> int:
        return max(len(self.labels) - 1, 0)

    def to_filter(self) -> str:
        inputs = "".join(f"[{label}]" for label in self.labels)
        return f"{inputs}concat=n={len(self.labels)}:v=1:a=0[{VIDEO_OUT}]"


@dataclass(frozen=True)
class AudioTrack:
    """One audio input with its gain and trim length."""

    input_index: int
    gain: float
    trim_seconds: float
    label: str


@dataclass(frozen=True)
class AudioMixPlan:
    """Tagged audio mix: which tracks are present and how they combine."""

    kind: AudioMixKind
    tracks: tuple[AudioTrack, ...] = ()

    @property
    def has_audio(self) -> bool:
        return self.kind is not AudioMixKind.SILENT

    def to_filters(self) -> list[str]:
        if not self.has_audio:
            return []
        if self.kind is AudioMixKind.NARRATION_AND_MUSIC:
            filters = [self._track_filter(track, track.label) for track in self.tracks]
            inputs = "".join(f"[{track.label}]" for track in self.tracks)
            filters.append(
                f"{inputs}amix=inputs={len(self.tracks)}:duration=shortest[{AUDIO_OUT}]"
            )
            return filters
        return [self._track_filter(self.tracks[0], AUDIO_OUT)]

    @staticmethod
    def _track_filter(track: AudioTrack, out_label: str) -> str:
        return (
            f"[{track.input_index}:a]volume={track.gain:g},"
            f"atrim=duration={format_seconds(track.trim_seconds)}[{out_label}]"
        )


@dataclass(frozen=True)
class OutputSpec:
    """Encoding options that never depend on the assets."""

    width: int = 1080
    height: int = 1920
    duration_seconds: float = 25.0
    video_codec: str = "libx264"
    preset: str = "fast"
    crf: int = 23
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"
    sample_rate: int = 44100
    pixel_format: str = "yuv420p"
    movflags: str = "+faststart"


@dataclass(frozen=True)
class CompositionGraph:
    """Complete processing graph for one render."""

    fragments: tuple[FragmentTransform, ...]
    concat: ConcatNode
    audio: AudioMixPlan
    output: OutputSpec = field(default_factory=OutputSpec)

    @property
    def fragment_count(self) -> int:
        return len(self.fragments)

    @property
    def total_slice_seconds(self) -> float:
        return sum(fragment.slice_seconds for fragment in self.fragments)

    def filter_complex(self) -> str:
        parts = [fragment.to_filter() for fragment in self.fragments]
        parts.append(self.concat.to_filter())
        parts.extend(self.audio.to_filters())
        return ";".join(parts)

    def output_args(self) -> list[str]:
        out = self.output
        args = ["-map", f"[{VIDEO_OUT}]"]
        if self.audio.has_audio:
            args += ["-map", f"[{AUDIO_OUT}]"]
        args += ["-c:v", out.video_codec, "-preset", out.preset, "-crf", str(out.crf)]
        if self.audio.has_audio:
            args += [
                "-c:a", out.audio_codec,
                "-b:a", out.audio_bitrate,
                "-ar", str(out.sample_rate),
            ]
        else:
            args.append("-an")
        args += [
            "-t", format_seconds(out.duration_seconds),
            "-movflags", out.movflags,
            "-pix_fmt", out.pixel_format,
        ]
        return args
