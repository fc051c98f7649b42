"""
Domain Exceptions — typed error hierarchy for the pipeline.

Each pipeline stage has its own exception type, enabling precise error
handling at the orchestration layer. Fatal errors carry the
FailureCategory reported back to the caller.
"""

from __future__ import annotations

from promo_shorts.domain.value_objects import FailureCategory


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    category: FailureCategory = FailureCategory.UNEXPECTED

    def __init__(self, message: str, stage: str = "", cause: Exception | None = None):
        self.stage = stage
        self.cause = cause
        super().__init__(message)


class ConfigurationError(PipelineError):
    """Raised when configuration is missing or invalid."""

    category = FailureCategory.CONFIGURATION

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="configuration", cause=cause)


class ScriptTooShortError(PipelineError):
    """Raised when the script has fewer lines than the minimum floor."""

    category = FailureCategory.SCRIPT_TOO_SHORT

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="script", cause=cause)


class TextGenerationError(PipelineError):
    """Raised when every text-generation provider failed.

    ``errors`` holds the underlying exception of each provider, in the
    order they were tried.
    """

    def __init__(self, message: str, errors: list[Exception] | None = None):
        self.errors = list(errors or [])
        super().__init__(
            message,
            stage="text_generation",
            cause=self.errors[-1] if self.errors else None,
        )


class AssetResolutionError(PipelineError):
    """Raised by search adapters; absorbed by the resolver (non-fatal)."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="asset_resolution", cause=cause)


class NoAssetsFoundError(PipelineError):
    """Raised when no video fragment could be found after fallback escalation."""

    category = FailureCategory.NO_ASSETS_FOUND

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="asset_resolution", cause=cause)


class VoiceGenerationError(PipelineError):
    """Raised when speech synthesis fails or times out."""

    category = FailureCategory.VOICE_GENERATION_FAILED

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="voice_generation", cause=cause)


SynthesisError = VoiceGenerationError


class RenderError(PipelineError):
    """Raised when fetching inputs or transcoding fails."""

    category = FailureCategory.RENDER_ERROR

    def __init__(self, message: str, cause: Exception | None = None, diagnostic: str = ""):
        self.diagnostic = diagnostic
        super().__init__(message, stage="render", cause=cause)
