"""
Directory Music Library — MusicLibrary implementation.

Background tracks live in a shared directory that is only ever read;
runs pick a random file and never modify or delete it.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path

from promo_shorts.domain.entities import MusicTrack
from promo_shorts.domain.ports import MusicLibrary

log = logging.getLogger(__name__)

MUSIC_EXTENSIONS = (".wav", ".mp3", ".m4a")


class DirectoryMusicLibrary(MusicLibrary):
    """Random pick from the audio files of one directory."""

    def __init__(self, directory: Path, rng: random.Random | None = None) -> None:
        self._directory = Path(directory)
        self._rng = rng or random.Random()

    def tracks(self) -> list[Path]:
        if not self._directory.is_dir():
            return []
        return sorted(
            p for p in self._directory.iterdir()
            if p.is_file() and p.suffix.lower() in MUSIC_EXTENSIONS
        )

    def pick(self) -> MusicTrack | None:
        tracks = self.tracks()
        if not tracks:
            log.warning("⚠️  No music files found in %s", self._directory)
            return None
        choice = self._rng.choice(tracks)
        log.info("🎵 Selected background music: %s", choice.name)
        return MusicTrack(path=choice)
