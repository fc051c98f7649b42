"""
FFmpeg Adapter — TranscodingEngine implementation.

Runs one ffmpeg process per render as an asyncio subprocess. Progress is
read from ``-progress pipe:1`` key/value lines; stderr is kept for the
failure diagnostic. Cancelling the coroutine kills the process.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from promo_shorts.domain.exceptions import RenderError
from promo_shorts.domain.ports import ProgressCallback, TranscodingEngine

log = logging.getLogger(__name__)

LOG_TAIL_LINES = 20


def parse_progress(line: str, duration: float) -> float | None:
    """Turn one ``-progress`` line into a percentage of ``duration``.

    ffmpeg reports ``out_time_us`` and ``out_time_ms``; both are in
    microseconds. Any other key, or an unparsable value, yields None.
    """
    key, _, value = line.strip().partition("=")
    if key not in ("out_time_us", "out_time_ms") or duration <= 0:
        return None
    try:
        seconds = int(value) / 1_000_000
    except ValueError:
        return None
    return max(0.0, min(100.0, seconds / duration * 100))


def log_tail(text: str, max_lines: int = LOG_TAIL_LINES) -> str:
    """Last lines of an ffmpeg log."""
    lines = [line for line in text.splitlines() if line.strip()]
    return "\n".join(lines[-max_lines:])


class FFmpegEngine(TranscodingEngine):
    """Transcodes with a local ffmpeg binary."""

    def __init__(self, ffmpeg_path: str = "ffmpeg") -> None:
        self._ffmpeg = ffmpeg_path

    def build_command(self, args: list[str], output_path: Path) -> list[str]:
        return [
            self._ffmpeg, "-y", "-hide_banner",
            *args,
            "-progress", "pipe:1", "-nostats",
            str(output_path),
        ]

    async def transcode(
        self,
        args: list[str],
        output_path: Path,
        duration: float,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        cmd = self.build_command(args, output_path)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise RenderError(f"ffmpeg binary not found: {self._ffmpeg}", cause=e) from e

        stderr_task = asyncio.create_task(proc.stderr.read())
        try:
            async for raw in proc.stdout:
                percent = parse_progress(raw.decode("utf-8", "replace"), duration)
                if percent is not None and on_progress:
                    on_progress(percent)
            returncode = await proc.wait()
            stderr = (await stderr_task).decode("utf-8", "replace")
        except asyncio.CancelledError:
            log.warning("🛑 Render cancelled, killing ffmpeg (pid %s)", proc.pid)
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
            stderr_task.cancel()
            raise

        if returncode != 0:
            tail = log_tail(stderr)
            raise RenderError(f"ffmpeg exited with code {returncode}", diagnostic=tail)
