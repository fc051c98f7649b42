"""
Pipeline Orchestrator — sequences use cases into a complete workflow.

The orchestrator is the application-level coordinator that drives one
promo video run. It manages:
  - The forward-only run state machine
  - Asset accumulation with fallback escalation
  - Error categorization and transient file cleanup
  - Timing instrumentation

Each call to ``run()`` is an independent run; provider handles are shared.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from threading import Event
from typing import TYPE_CHECKING, Any

from promo_shorts.application.planner import CompositionPlanner
from promo_shorts.application.renderer import Renderer, RenderInputs, RenderListener, remove_files
from promo_shorts.application.use_cases import (
    GenerateVisualCueUseCase,
    ResolveAssetUseCase,
    SynthesizeNarrationUseCase,
    SynthesizeScriptUseCase,
)
from promo_shorts.core.timer import PipelineTimer
from promo_shorts.domain.composition import OutputSpec
from promo_shorts.domain.entities import (
    AssetReference,
    GenerationRequest,
    NarrationAsset,
    PipelineRun,
    RunFailure,
    RunMetadata,
    RunResult,
    ScriptLine,
    SearchConstraints,
    VoiceSettings,
)
from promo_shorts.domain.exceptions import (
    NoAssetsFoundError,
    PipelineError,
    RenderError,
    ScriptTooShortError,
    VoiceGenerationError,
)
from promo_shorts.domain.ports import (
    FragmentFetcher,
    MusicLibrary,
    SpeechProvider,
    TextGenerator,
    TranscodingEngine,
    VideoSearchProvider,
)
from promo_shorts.domain.value_objects import FailureCategory, Mood, RunState

if TYPE_CHECKING:
    from promo_shorts.core.config import Settings
    from promo_shorts.core.container import Container

log = logging.getLogger(__name__)

FAILURE_PREFIX = "TikTok video generation failed: "


def fallback_queries(subject: str, mood: Mood) -> list[str]:
    """Generic product queries tried when per-line cues found too few clips."""
    return [
        f"{subject} review",
        f"{subject} unboxing",
        f"{subject} lifestyle",
        f"{mood.value} {subject}",
        f"people using {subject}",
        f"{subject} benefits",
        f"{subject} showcase",
    ]


def sanitize_filename(subject: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "", subject)


def failure_message(category: FailureCategory, subject: str, detail: str) -> str:
    """Human-readable message for a failed run."""
    if category is FailureCategory.SCRIPT_TOO_SHORT:
        reason = "Could not generate proper 25-second script. Try different mood or product."
    elif category is FailureCategory.NO_ASSETS_FOUND:
        reason = f'No videos found for "{subject}". Try a more common product name.'
    elif category is FailureCategory.VOICE_GENERATION_FAILED:
        reason = "Voice generation failed. Check the speech provider API key and quota."
    elif category is FailureCategory.RENDER_ERROR:
        reason = "Video processing failed. Check FFmpeg installation."
    else:
        reason = detail
    return FAILURE_PREFIX + reason


class PipelineOrchestrator:
    """Runs the promo video pipeline.

    Flow: script → visual cues + asset resolution → fallback escalation
    → narration / music → fragment download → plan → render.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        text_generator: TextGenerator,
        video_search: VideoSearchProvider,
        speech_provider: SpeechProvider,
        voice_table: dict[str, str],
        fragment_fetcher: FragmentFetcher,
        music_library: MusicLibrary,
        engine: TranscodingEngine,
        constraints: SearchConstraints | None = None,
        voice_settings: VoiceSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._fetcher = fragment_fetcher
        self._music = music_library
        self._clock = clock

        pipeline = settings.pipeline
        video = settings.video
        self._script = SynthesizeScriptUseCase(
            line_count=pipeline.script_lines,
            seconds_per_line=video.duration_seconds / pipeline.script_lines,
        )
        self._cues = GenerateVisualCueUseCase(text_generator)
        self._resolver = ResolveAssetUseCase(
            video_search, constraints, quality=settings.pexels.quality
        )
        self._narration = SynthesizeNarrationUseCase(
            speech_provider, voice_table, settings.temp_dir, voice_settings
        )
        self._output_spec = OutputSpec(
            width=video.width,
            height=video.height,
            duration_seconds=video.duration_seconds,
            video_codec=video.video_codec,
            preset=video.preset,
            crf=video.crf,
            audio_codec=video.audio_codec,
            audio_bitrate=video.audio_bitrate,
            sample_rate=video.sample_rate,
            pixel_format=video.pixel_format,
        )
        self._planner = CompositionPlanner(self._output_spec, max_fragments=video.max_clips)
        self._renderer = Renderer(engine, timeout=pipeline.render_timeout)

    @classmethod
    def from_container(cls, container: Container) -> PipelineOrchestrator:
        """Wire an orchestrator from the DI container's shared providers."""
        return cls(
            settings=container.settings,
            text_generator=container.text_generator(),
            video_search=container.video_search(),
            speech_provider=container.speech_provider(),
            voice_table=container.voice_table(),
            fragment_fetcher=container.fragment_fetcher(),
            music_library=container.music_library(),
            engine=container.transcoding_engine(),
            constraints=container.search_constraints(),
            voice_settings=container.voice_settings(),
        )

    async def run(
        self,
        request: GenerationRequest,
        listener: RenderListener | None = None,
    ) -> RunResult:
        """Execute one run.

        Never raises for pipeline failures: they are reported in the
        returned RunResult. Cancellation is propagated after cleanup.
        """
        run_id = int(self._clock() * 1000)
        run = PipelineRun(run_id=run_id)
        timer = PipelineTimer()
        result = RunResult(run_id=run_id)
        transient: list[Path] = []
        subject = request.subject

        log.info("=" * 60)
        log.info("🎬 PROMO VIDEO RUN %s: '%s' (%s)", run_id, subject, request.mood.value)
        log.info("📅 %s", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        log.info("=" * 60)

        try:
            self._settings.ensure_directories()

            # ── Script ──
            with timer.step("Script"):
                lines = self._script.execute(subject, request.mood, request.language)
            minimum = self._settings.pipeline.min_script_lines
            if len(lines) < minimum:
                raise ScriptTooShortError(
                    f"Generated script has {len(lines)} lines, need at least {minimum}"
                )
            result.script = "\n".join(line.text for line in lines)
            result.script_lines = [line.text for line in lines]
            run.advance(RunState.ASSETS_PENDING)

            # ── Assets ──
            with timer.step("Assets"):
                assets = await self._accumulate_assets(
                    lines, subject, request.mood, result.search_terms
                )
            if not assets:
                raise NoAssetsFoundError(
                    f'Could not find any videos related to "{subject}"'
                )
            run.advance(RunState.AUDIO_PENDING)

            # ── Audio ──
            with timer.step("Audio"):
                music = self._music.pick() if request.audio_mode.wants_music else None
                narration = None
                voice_id = self._narration.select_voice(subject)
                if request.audio_mode.wants_narration:
                    narration = await self._synthesize_narration(
                        lines, voice_id, run_id, request, transient
                    )
            run.advance(RunState.RENDERING)

            # ── Download + Render ──
            kept = assets[: self._settings.video.max_clips]
            with timer.step("Download"):
                fragment_paths = await self._download(kept, run_id, transient)
            graph = self._planner.plan(kept, narration, music)
            output_path = self._settings.videos_dir / (
                f"tiktok-{sanitize_filename(subject)}-{run_id}.mp4"
            )
            inputs = RenderInputs(
                fragments=fragment_paths,
                narration=narration.path if narration else None,
                music=music.path if music else None,
            )
            with timer.step("Render"):
                await self._renderer.render(graph, inputs, output_path, listener)
            run.advance(RunState.DONE)

            result.success = True
            result.output_path = output_path
            result.video_url = (
                f"{self._settings.public_base_url.rstrip('/')}/videos/{output_path.name}"
            )
            result.metadata = RunMetadata(
                voice_id=voice_id,
                mood=request.mood,
                subtitles=request.include_subtitles,
                total_lines=len(lines),
                video_clips=graph.fragment_count,
                duration_seconds=self._output_spec.duration_seconds,
                width=self._output_spec.width,
                height=self._output_spec.height,
                timings=timer.as_dict(),
            )
            log.info("✅ RUN %s COMPLETE: %s", run_id, result.video_url)

        except asyncio.CancelledError:
            log.warning("🛑 Run %s cancelled", run_id)
            raise

        except PipelineError as e:
            log.error("❌ RUN %s FAILED at stage '%s': %s", run_id, e.stage, e)
            self._record_failure(run, result, e.category, subject, str(e))

        except Exception as e:
            log.exception("❌ UNEXPECTED ERROR in run %s: %s", run_id, e)
            self._record_failure(run, result, FailureCategory.UNEXPECTED, subject, str(e))

        finally:
            remove_files(transient)
            timer.summary()

        return result

    @staticmethod
    def _record_failure(
        run: PipelineRun,
        result: RunResult,
        category: FailureCategory,
        subject: str,
        detail: str,
    ) -> None:
        if not run.state.is_terminal:
            run.fail(category)
        result.success = False
        result.error = RunFailure(
            category=category,
            message=failure_message(category, subject, detail),
            detail=detail,
        )

    async def _in_thread(
        self,
        func: Callable[..., Any],
        *args: Any,
        timeout: float,
        cancel: Event | None = None,
    ) -> Any:
        """Run a blocking call in a worker thread under a stage timeout.

        Threads cannot be interrupted. When ``cancel`` is given it is passed
        as the last argument, and on timeout or cancellation it is set and
        the worker is awaited, so nothing is written after cleanup.
        """
        if cancel is None:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)

        worker = asyncio.ensure_future(asyncio.to_thread(func, *args, cancel))
        try:
            return await asyncio.wait_for(asyncio.shield(worker), timeout=timeout)
        except (asyncio.TimeoutError, asyncio.CancelledError):
            cancel.set()
            await asyncio.gather(worker, return_exceptions=True)
            raise

    async def _accumulate_assets(
        self,
        lines: Sequence[ScriptLine],
        subject: str,
        mood: Mood,
        search_terms: list[str],
    ) -> list[AssetReference]:
        """Per-line cue resolution, then fallback escalation.

        Cue resolution is sequential so fragment order follows the script.
        Duplicates (same URL) are skipped in both phases.
        """
        pipeline = self._settings.pipeline
        assets: list[AssetReference] = []
        seen: set[str] = set()

        def keep(reference: AssetReference | None) -> bool:
            if reference is None or reference.identity in seen:
                return False
            seen.add(reference.identity)
            assets.append(reference)
            return True

        log.info("🎬 Finding videos for '%s'...", subject)
        for line in lines[: pipeline.cue_lines]:
            if len(assets) >= pipeline.target_assets:
                break
            try:
                cue = await self._in_thread(
                    self._cues.execute, line, subject, mood, timeout=pipeline.text_timeout
                )
            except asyncio.TimeoutError:
                log.warning("⚠️  Visual cue timed out for line %d", line.position + 1)
                continue
            except Exception as e:
                log.warning("⚠️  Visual cue failed for line %d: %s", line.position + 1, e)
                continue
            if cue is None:
                continue
            search_terms.append(cue.text)
            if keep(await self._resolve(cue.text, subject)):
                log.info("✅ Found video %d/%d", len(assets), pipeline.target_assets)

        if len(assets) < pipeline.min_assets:
            log.info("🔄 Only %d videos, adding product-specific fallbacks...", len(assets))
            for query in fallback_queries(subject, mood):
                if len(assets) >= pipeline.target_assets:
                    break
                log.info("🔄 Trying fallback: '%s'", query)
                if keep(await self._resolve(query, subject)):
                    log.info("✅ Added fallback video")

        log.info("📊 Total videos found: %d", len(assets))
        return assets

    async def _resolve(self, cue: str, subject: str) -> AssetReference | None:
        # Primary and cue-only searches share one stage budget.
        timeout = self._settings.pipeline.search_timeout * 2
        try:
            return await self._in_thread(self._resolver.execute, cue, subject, timeout=timeout)
        except asyncio.TimeoutError:
            log.warning("⚠️  Search timed out for '%s'", cue)
            return None

    async def _synthesize_narration(
        self,
        lines: Sequence[ScriptLine],
        voice_id: str,
        run_id: int,
        request: GenerationRequest,
        transient: list[Path],
    ) -> NarrationAsset:
        text = self._narration.narration_text(lines)
        log.info("🎤 Script preview: '%s...'", text[:150])
        transient.append(self._narration.output_path(run_id))
        timeout = self._settings.pipeline.speech_timeout
        try:
            return await self._in_thread(
                self._narration.execute,
                text,
                voice_id,
                run_id,
                request.language,
                self._output_spec.duration_seconds,
                timeout=timeout,
                cancel=Event(),
            )
        except asyncio.TimeoutError as e:
            raise VoiceGenerationError(f"Voice generation timed out after {timeout:g}s", cause=e) from e

    async def _download(
        self,
        assets: Sequence[AssetReference],
        run_id: int,
        transient: list[Path],
    ) -> list[Path]:
        """Fetch fragments to the temp directory, in order."""
        timeout = self._settings.pipeline.download_timeout
        paths: list[Path] = []
        for i, asset in enumerate(assets):
            destination = self._settings.temp_dir / f"clip-{run_id}-{i}.mp4"
            transient.append(destination)
            log.info("⬇️  Downloading video %d/%d", i + 1, len(assets))
            try:
                path = await self._in_thread(
                    self._fetcher.fetch, asset.url, destination, timeout=timeout, cancel=Event()
                )
            except asyncio.TimeoutError as e:
                raise RenderError(f"Download of fragment {i} timed out after {timeout:g}s", cause=e) from e
            except PipelineError:
                raise
            except Exception as e:
                raise RenderError(f"Download of fragment {i} failed: {e}", cause=e) from e
            paths.append(path)
        return paths
