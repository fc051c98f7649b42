"""
Pexels Adapter — VideoSearchProvider implementation.

Queries the Pexels video search API for portrait stock footage.
Uses raw urllib, like the other HTTP adapters.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import TYPE_CHECKING, Any

from promo_shorts.domain.entities import SearchConstraints, VideoCandidate, VideoFile
from promo_shorts.domain.exceptions import AssetResolutionError, ConfigurationError
from promo_shorts.domain.ports import VideoSearchProvider

if TYPE_CHECKING:
    from promo_shorts.core.config import Settings

log = logging.getLogger(__name__)


class PexelsVideoSearch(VideoSearchProvider):
    """Searches Pexels videos.

    A missing API key raises ConfigurationError, which fails the run.
    Every other failure (HTTP error, malformed body) is raised as
    AssetResolutionError so that callers can treat it as "no result".
    """

    def __init__(self, settings: Settings, timeout: float | None = None) -> None:
        self._api_key = settings.pexels.api_key
        self._base_url = settings.pexels.base_url.rstrip("/")
        self._timeout = timeout or settings.pipeline.search_timeout

    def search(self, query: str, constraints: SearchConstraints) -> list[VideoCandidate]:
        if not self._api_key:
            raise ConfigurationError("Pexels API key is missing (set PEXELS_API_KEY)")

        params = urllib.parse.urlencode({
            "query": query,
            "per_page": constraints.per_page,
            "orientation": constraints.orientation,
            "min_duration": constraints.duration_min,
            "max_duration": constraints.duration_max,
        })
        req = urllib.request.Request(
            f"{self._base_url}/videos/search?{params}",
            headers={"Authorization": self._api_key},
        )

        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                data = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            raise AssetResolutionError(f"Pexels search failed ({e.code}) for '{query}'", cause=e) from e
        except (urllib.error.URLError, TimeoutError, ValueError) as e:
            raise AssetResolutionError(f"Pexels search failed for '{query}': {e}", cause=e) from e

        candidates = [self._to_candidate(video) for video in data.get("videos") or []]
        log.debug("Pexels returned %d videos for '%s'", len(candidates), query)
        return candidates

    @staticmethod
    def _to_candidate(video: dict[str, Any]) -> VideoCandidate:
        files = tuple(
            VideoFile(
                quality=str(f.get("quality") or ""),
                link=str(f.get("link") or ""),
                width=int(f.get("width") or 0),
                height=int(f.get("height") or 0),
            )
            for f in video.get("video_files") or []
        )
        return VideoCandidate(
            provider_id=str(video.get("id", "")),
            duration_seconds=float(video.get("duration") or 0),
            files=files,
        )
