"""
Composition Planner — builds the processing graph for one render.

Pure planning: no I/O, deterministic given its inputs. The shape of the
graph depends only on how many fragments were resolved and on which of
narration and music are present.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from promo_shorts.domain.composition import (
    AudioMixPlan,
    AudioTrack,
    CompositionGraph,
    ConcatNode,
    FragmentTransform,
    OutputSpec,
)
from promo_shorts.domain.entities import AssetReference, MusicTrack, NarrationAsset
from promo_shorts.domain.value_objects import AudioMixKind

log = logging.getLogger(__name__)

NARRATION_WITH_MUSIC_GAIN = 1.2
MUSIC_UNDER_NARRATION_GAIN = 0.15
NARRATION_ONLY_GAIN = 1.1
MUSIC_ONLY_GAIN = 0.4


def select_mix(
    narration_present: bool,
    music_present: bool,
    first_audio_input: int,
    trim_seconds: float,
) -> AudioMixPlan:
    """Pick one of the four mix variants.

    Audio inputs follow the fragments: narration first, then music.
    """
    if narration_present and music_present:
        return AudioMixPlan(
            kind=AudioMixKind.NARRATION_AND_MUSIC,
            tracks=(
                AudioTrack(first_audio_input, NARRATION_WITH_MUSIC_GAIN, trim_seconds, "voice"),
                AudioTrack(first_audio_input + 1, MUSIC_UNDER_NARRATION_GAIN, trim_seconds, "music"),
            ),
        )
    if narration_present:
        return AudioMixPlan(
            kind=AudioMixKind.NARRATION_ONLY,
            tracks=(AudioTrack(first_audio_input, NARRATION_ONLY_GAIN, trim_seconds, "voice"),),
        )
    if music_present:
        return AudioMixPlan(
            kind=AudioMixKind.MUSIC_ONLY,
            tracks=(AudioTrack(first_audio_input, MUSIC_ONLY_GAIN, trim_seconds, "music"),),
        )
    return AudioMixPlan(kind=AudioMixKind.SILENT)


class CompositionPlanner:
    """Turns resolved assets into a CompositionGraph."""

    def __init__(self, output: OutputSpec | None = None, max_fragments: int = 5) -> None:
        self._output = output or OutputSpec()
        self._max_fragments = max_fragments

    def plan(
        self,
        fragments: Sequence[AssetReference],
        narration: NarrationAsset | None,
        music: MusicTrack | None,
        total_duration: float | None = None,
    ) -> CompositionGraph:
        """Build the graph.

        Only the first ``max_fragments`` fragments are used; each gets an
        equal slice of the total duration.

        Raises:
            ValueError: If there is no fragment or the duration is not positive.
        """
        duration = self._output.duration_seconds if total_duration is None else total_duration
        if duration <= 0:
            raise ValueError(f"Total duration must be positive, got {duration}")
        kept = list(fragments)[: self._max_fragments]
        if not kept:
            raise ValueError("Cannot plan a composition without video fragments")

        slice_seconds = duration / len(kept)
        transforms = tuple(
            FragmentTransform(
                input_index=i,
                slice_seconds=slice_seconds,
                width=self._output.width,
                height=self._output.height,
            )
            for i in range(len(kept))
        )
        concat = ConcatNode(labels=tuple(t.label for t in transforms))
        audio = select_mix(narration is not None, music is not None, len(kept), duration)

        output = self._output
        if output.duration_seconds != duration:
            output = replace(output, duration_seconds=duration)

        log.info(
            "🎬 Planned %d segments of %.2fs, audio=%s",
            len(kept),
            slice_seconds,
            audio.kind.value,
        )
        return CompositionGraph(fragments=transforms, concat=concat, audio=audio, output=output)
