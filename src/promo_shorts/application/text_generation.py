"""
Provider chain for text generation.

Providers are tried in order; the first success wins. When all fail the
raised TextGenerationError carries every underlying error.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from promo_shorts.domain.exceptions import TextGenerationError
from promo_shorts.domain.ports import TextGenerator

log = logging.getLogger(__name__)


class FallbackTextGenerator(TextGenerator):
    """Ordered list of text providers, stopping at the first success."""

    name = "fallback"

    def __init__(self, providers: Sequence[TextGenerator]) -> None:
        self._providers = list(providers)

    @property
    def providers(self) -> list[TextGenerator]:
        return list(self._providers)

    def generate(self, prompt: str) -> str:
        errors: list[Exception] = []
        for provider in self._providers:
            try:
                return provider.generate(prompt)
            except Exception as e:
                log.warning("⚠️  [AI] %s failed: %s", provider.name, e)
                errors.append(e)

        if not errors:
            raise TextGenerationError("No text-generation provider is configured")
        summary = "; ".join(f"{p.name}: {e}" for p, e in zip(self._providers, errors))
        raise TextGenerationError(f"All text-generation providers failed ({summary})", errors=errors)
