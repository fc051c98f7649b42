"""
Pipeline Timer — tracks elapsed time for each stage of a run.

One timer belongs to one run. The per-stage breakdown is returned to the
caller in the run metadata and logged as a summary at the end.

Usage:
    timer = PipelineTimer()
    with timer.step("script"):
        synthesize(...)
    timer.as_dict()  # {"script": 0.01}
"""

from __future__ import annotations

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


@dataclass
class StepTiming:
    """Timing record for a single stage."""

    name: str
    elapsed_seconds: float


@dataclass
class PipelineTimer:
    """Tracks elapsed time for each pipeline stage."""

    _start: float = field(default_factory=time.monotonic, init=False, repr=False)
    steps: list[StepTiming] = field(default_factory=list, init=False)

    @contextmanager
    def step(self, name: str) -> Generator[None, None, None]:
        """Time a stage; the record is kept even when the stage raises."""
        started = time.monotonic()
        log.info("⏱️  Starting: %s", name)
        try:
            yield
        finally:
            elapsed = time.monotonic() - started
            self.steps.append(StepTiming(name=name, elapsed_seconds=elapsed))
            log.info("⏱️  %s finished in %.1fs", name, elapsed)

    def as_dict(self) -> dict[str, float]:
        """Per-stage elapsed seconds plus the running total."""
        timings = {s.name: s.elapsed_seconds for s in self.steps}
        timings["total"] = self.total_elapsed
        return timings

    def summary(self) -> float:
        """Log a formatted timing summary and return the total."""
        total = self.total_elapsed
        log.info("=" * 50)
        log.info("⏱️  TIMING SUMMARY")
        for s in self.steps:
            log.info("  %-30s %6.1fs", s.name, s.elapsed_seconds)
        log.info("  %-30s %6.1fs", "TOTAL", total)
        log.info("=" * 50)
        return total

    @property
    def total_elapsed(self) -> float:
        return time.monotonic() - self._start
