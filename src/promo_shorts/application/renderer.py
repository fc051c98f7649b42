"""
Renderer — binds a CompositionGraph to local files and runs the engine.

One engine invocation per run, no internal retries. Listeners receive a
START event with a command preview, best-effort PROGRESS events, then
exactly one of END or ERROR.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from promo_shorts.domain.composition import CompositionGraph
from promo_shorts.domain.entities import RenderEvent
from promo_shorts.domain.exceptions import RenderError
from promo_shorts.domain.ports import TranscodingEngine
from promo_shorts.domain.value_objects import AudioMixKind, RenderEventKind

log = logging.getLogger(__name__)

RenderListener = Callable[[RenderEvent], None]


@dataclass
class RenderInputs:
    """Local files bound to the graph's input indices.

    Fragments come first, then narration, then music. Fragments and
    narration belong to the run; music comes from the shared pool.
    """

    fragments: list[Path] = field(default_factory=list)
    narration: Path | None = None
    music: Path | None = None

    def ordered(self) -> list[Path]:
        paths = list(self.fragments)
        if self.narration is not None:
            paths.append(self.narration)
        if self.music is not None:
            paths.append(self.music)
        return paths

    def transient(self) -> list[Path]:
        paths = list(self.fragments)
        if self.narration is not None:
            paths.append(self.narration)
        return paths


def remove_files(paths: list[Path]) -> None:
    """Best-effort deletion; failures are logged and ignored."""
    for path in paths:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            log.warning("⚠️  Could not delete %s: %s", path, e)


class Renderer:
    """Drives the TranscodingEngine for one composition."""

    def __init__(self, engine: TranscodingEngine, timeout: float | None = None) -> None:
        self._engine = engine
        self._timeout = timeout

    def build_args(self, graph: CompositionGraph, inputs: RenderInputs) -> list[str]:
        """Engine arguments: one ``-i`` per input, the filter graph, output options."""
        self._check_inputs(graph, inputs)
        args: list[str] = []
        for path in inputs.ordered():
            args += ["-i", str(path)]
        args += ["-filter_complex", graph.filter_complex()]
        args += graph.output_args()
        return args

    async def render(
        self,
        graph: CompositionGraph,
        inputs: RenderInputs,
        output_path: Path,
        listener: RenderListener | None = None,
    ) -> Path:
        """Render the graph to ``output_path``.

        Raises:
            RenderError: If the engine fails or times out.
            asyncio.CancelledError: Re-raised after cleanup.
        """
        emit = listener or (lambda event: None)
        output_path = Path(output_path)
        args = self.build_args(graph, inputs)
        preview = shlex.join(self._engine.build_command(args, output_path))

        output_path.parent.mkdir(parents=True, exist_ok=True)
        log.info("🎬 Rendering %d fragments → %s", graph.fragment_count, output_path.name)
        log.debug("Command: %s", preview)
        emit(RenderEvent(kind=RenderEventKind.START, message=preview))

        def on_progress(percent: float) -> None:
            emit(RenderEvent(kind=RenderEventKind.PROGRESS, percent=percent))

        try:
            await asyncio.wait_for(
                self._engine.transcode(
                    args, output_path, graph.output.duration_seconds, on_progress
                ),
                timeout=self._timeout,
            )
        except asyncio.CancelledError:
            log.warning("🛑 Render cancelled, cleaning up")
            self._cleanup_failure(inputs, output_path)
            raise
        except asyncio.TimeoutError as e:
            message = f"Render timed out after {self._timeout:g}s"
            self._fail(emit, inputs, output_path, message)
            raise RenderError(message, cause=e) from e
        except RenderError as e:
            self._fail(emit, inputs, output_path, e.diagnostic or str(e))
            raise
        except Exception as e:
            self._fail(emit, inputs, output_path, str(e))
            raise RenderError(f"Render failed: {e}", cause=e) from e

        remove_files(inputs.transient())
        log.info("✅ Video rendered: %s", output_path)
        emit(RenderEvent(kind=RenderEventKind.END, percent=100.0, output_path=output_path))
        return output_path

    def _fail(
        self,
        emit: RenderListener,
        inputs: RenderInputs,
        output_path: Path,
        diagnostic: str,
    ) -> None:
        log.error("❌ Render failed: %s", diagnostic)
        self._cleanup_failure(inputs, output_path)
        emit(RenderEvent(kind=RenderEventKind.ERROR, message=diagnostic))

    @staticmethod
    def _cleanup_failure(inputs: RenderInputs, output_path: Path) -> None:
        remove_files([*inputs.transient(), output_path])

    @staticmethod
    def _check_inputs(graph: CompositionGraph, inputs: RenderInputs) -> None:
        if len(inputs.fragments) != graph.fragment_count:
            raise ValueError(
                f"Graph expects {graph.fragment_count} fragments, got {len(inputs.fragments)}"
            )
        kind = graph.audio.kind
        wants_narration = kind in (AudioMixKind.NARRATION_AND_MUSIC, AudioMixKind.NARRATION_ONLY)
        wants_music = kind in (AudioMixKind.NARRATION_AND_MUSIC, AudioMixKind.MUSIC_ONLY)
        if wants_narration != (inputs.narration is not None):
            raise ValueError(f"Narration input does not match audio mix {kind.value}")
        if wants_music != (inputs.music is not None):
            raise ValueError(f"Music input does not match audio mix {kind.value}")
