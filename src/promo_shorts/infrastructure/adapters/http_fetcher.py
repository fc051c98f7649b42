"""
HTTP Fragment Fetcher — FragmentFetcher implementation.

Downloads resolved stock clips to the run's temporary directory.
"""

from __future__ import annotations

import logging
import time
import urllib.error
import urllib.request
from collections.abc import Callable
from pathlib import Path
from threading import Event

from promo_shorts.core.resilience import retry_with_backoff
from promo_shorts.domain.exceptions import RenderError
from promo_shorts.domain.ports import FragmentFetcher

log = logging.getLogger(__name__)

USER_AGENT = "promo-shorts/1.0"
CHUNK_SIZE = 64 * 1024
RETRYABLE = (urllib.error.URLError, TimeoutError, ConnectionError)


class HttpFragmentFetcher(FragmentFetcher):
    """Streams a clip to disk, retrying transient network errors.

    A partial file is removed whenever an attempt fails. The cancel event
    is checked before each attempt and between chunks.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._timeout = timeout
        self._fetch_with_retry = retry_with_backoff(
            max_retries=max_retries,
            base_delay=base_delay,
            exceptions=RETRYABLE,
            sleep=sleep,
        )(self._fetch_once)

    def fetch(self, url: str, destination: Path, cancel: Event | None = None) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        path = self._fetch_with_retry(url, destination, cancel)
        log.info("📥 Downloaded %s (%.1f MB)", path.name, path.stat().st_size / 1e6)
        return path

    def _fetch_once(self, url: str, destination: Path, cancel: Event | None) -> Path:
        _check_cancel(cancel, destination)
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp, open(
                destination, "wb"
            ) as out:
                for chunk in iter(lambda: resp.read(CHUNK_SIZE), b""):
                    _check_cancel(cancel, destination)
                    out.write(chunk)
        except BaseException:
            destination.unlink(missing_ok=True)
            raise
        return destination


def _check_cancel(cancel: Event | None, destination: Path) -> None:
    if cancel is not None and cancel.is_set():
        raise RenderError(f"Download of {destination.name} cancelled")
