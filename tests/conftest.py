"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from promo_shorts.core.config import Settings
from promo_shorts.domain.entities import (
    AssetReference,
    MusicTrack,
    NarrationAsset,
    VideoCandidate,
    VideoFile,
)
from promo_shorts.domain.exceptions import RenderError
from promo_shorts.domain.ports import TranscodingEngine


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        output_dir=tmp_path / "public",
        temp_dir=tmp_path / "tmp",
        music_dir=tmp_path / "music",
        public_base_url="http://localhost:3001",
    )


@pytest.fixture
def subject() -> str:
    return "Magic Glow Serum"


def make_candidate(
    provider_id: str,
    duration: float = 15,
    quality: str = "hd",
    link: str | None = None,
) -> VideoCandidate:
    link = link if link is not None else f"https://videos.example/{provider_id}.mp4"
    return VideoCandidate(
        provider_id=provider_id,
        duration_seconds=duration,
        files=(VideoFile(quality=quality, link=link, width=1080, height=1920),),
    )


def make_asset(n: int) -> AssetReference:
    return AssetReference(url=f"https://videos.example/{n}.mp4", provider_id=str(n))


def make_narration(path: Path | str = "voice.mp3") -> NarrationAsset:
    return NarrationAsset(path=Path(path), voice_id="21m00Tcm4TlvDq8ikWAM")


def make_music(path: Path | str = "music.mp3") -> MusicTrack:
    return MusicTrack(path=Path(path))


class FakeEngine(TranscodingEngine):
    """Records transcode calls; writes the output or fails on demand."""

    def __init__(
        self,
        progress: tuple[float, ...] = (40.0, 100.0),
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.calls: list[tuple[list[str], Path, float]] = []
        self._progress = progress
        self._error = error
        self._delay = delay

    def build_command(self, args: list[str], output_path: Path) -> list[str]:
        return ["ffmpeg", "-y", *args, str(output_path)]

    async def transcode(self, args, output_path, duration, on_progress=None) -> None:
        import asyncio

        self.calls.append((list(args), Path(output_path), duration))
        Path(output_path).write_bytes(b"partial")
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        for percent in self._progress:
            if on_progress:
                on_progress(percent)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def failing_engine() -> FakeEngine:
    return FakeEngine(error=RenderError("ffmpeg exited with code 1", diagnostic="Invalid data"))
