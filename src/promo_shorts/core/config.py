"""
Configuration — type-safe settings via Pydantic BaseSettings.

Loads from environment variables or .env file. Each external service has
its own nested config group for clean separation and validation.

Usage:
    settings = Settings()  # auto-loads from .env
    print(settings.pexels.api_key)
    print(settings.video.duration_seconds)
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from promo_shorts.core.resilience import backoff_delay

TEXT_PROVIDERS = {"gemini", "openai", "ollama"}
TTS_ENGINES = {"elevenlabs", "edge"}
DOWNLOAD_RETRY_DELAY = 1.0


class PexelsConfig(BaseSettings):
    """Pexels video search configuration."""

    model_config = SettingsConfigDict(env_prefix="PEXELS_")

    api_key: str = ""
    base_url: str = "https://api.pexels.com"
    per_page: int = 20
    min_duration: int = 8
    max_duration: int = 40
    orientation: str = "portrait"
    quality: str = "hd"


class ElevenLabsConfig(BaseSettings):
    """ElevenLabs speech synthesis configuration."""

    model_config = SettingsConfigDict(env_prefix="ELEVENLABS_")

    api_key: str = ""
    base_url: str = "https://api.elevenlabs.io"
    model_id: str = "eleven_multilingual_v2"
    stability: float = 0.7
    similarity_boost: float = 0.8
    style: float = 0.4
    use_speaker_boost: bool = True


class GeminiConfig(BaseSettings):
    """Google Gemini text generation configuration."""

    model_config = SettingsConfigDict(env_prefix="GOOGLE_")

    api_key: str = ""
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com"


class OpenAIConfig(BaseSettings):
    """OpenAI text generation configuration (backup provider)."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: str = ""
    model: str = "gpt-3.5-turbo"
    base_url: str = "https://api.openai.com"
    max_tokens: int = 800
    temperature: float = 0.7


class OllamaConfig(BaseSettings):
    """Ollama local LLM configuration."""

    model_config = SettingsConfigDict(env_prefix="OLLAMA_")

    host: str = "http://localhost:11434"
    model: str = "gemma3:12b"


class VideoConfig(BaseSettings):
    """Output video settings."""

    width: int = 1080
    height: int = 1920
    duration_seconds: float = 25.0
    max_clips: int = 5
    video_codec: str = "libx264"
    preset: str = "fast"
    crf: int = 23
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"
    sample_rate: int = 44100
    pixel_format: str = "yuv420p"

    model_config = SettingsConfigDict(env_prefix="VIDEO_")


class PipelineConfig(BaseSettings):
    """Asset accumulation thresholds and per-stage timeouts (seconds)."""

    script_lines: int = 10
    min_script_lines: int = 8
    cue_lines: int = 5
    min_assets: int = 3
    target_assets: int = 5
    text_timeout: float = 30.0
    search_timeout: float = 20.0
    speech_timeout: float = 60.0
    fetch_timeout: float = 30.0
    download_timeout: float = 120.0
    render_timeout: float = 600.0

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    @model_validator(mode="after")
    def validate_counts(self) -> PipelineConfig:
        if self.min_script_lines > self.script_lines:
            raise ValueError("min_script_lines cannot exceed script_lines")
        if self.min_assets > self.target_assets:
            raise ValueError("min_assets cannot exceed target_assets")
        return self


class Settings(BaseSettings):
    """Root application settings — aggregates all config groups.

    Load order:
        1. Environment variables
        2. .env file (if present)
        3. Default values

    Usage:
        settings = Settings()
        settings = Settings(_env_file=".env.local")
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    output_dir: Path = Path("public")
    temp_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    music_dir: Path = Path("public/music")
    public_base_url: str = "http://localhost:3001"

    # Nested configs
    pexels: PexelsConfig = Field(default_factory=PexelsConfig)
    elevenlabs: ElevenLabsConfig = Field(default_factory=ElevenLabsConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    video: VideoConfig = Field(default_factory=VideoConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    # Engines
    tts_engine: str = "elevenlabs"  # "elevenlabs" or "edge"
    text_providers: list[str] = Field(default_factory=lambda: ["gemini", "openai"])
    ffmpeg_path: str = "ffmpeg"
    max_retries: int = 3  # download attempts per fragment

    @field_validator("tts_engine")
    @classmethod
    def validate_tts_engine(cls, v: str) -> str:
        if v not in TTS_ENGINES:
            raise ValueError(f"tts_engine must be one of {TTS_ENGINES}")
        return v

    @field_validator("text_providers")
    @classmethod
    def validate_text_providers(cls, v: list[str]) -> list[str]:
        unknown = [name for name in v if name not in TEXT_PROVIDERS]
        if unknown:
            raise ValueError(f"Unknown text providers {unknown}; allowed: {TEXT_PROVIDERS}")
        return v

    @model_validator(mode="after")
    def validate_download_budget(self) -> Settings:
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        budget = self.download_retry_budget
        if self.pipeline.download_timeout < budget:
            raise ValueError(
                f"download_timeout ({self.pipeline.download_timeout:g}s) must cover "
                f"{self.max_retries} fetch attempts and their backoff ({budget:g}s)"
            )
        return self

    @property
    def download_retry_budget(self) -> float:
        """Worst-case time of one fragment download, retries included."""
        delays = sum(
            backoff_delay(attempt, DOWNLOAD_RETRY_DELAY, 30.0)
            for attempt in range(1, self.max_retries)
        )
        return self.pipeline.fetch_timeout * self.max_retries + delays

    @property
    def videos_dir(self) -> Path:
        return self.output_dir / "videos"

    def ensure_directories(self) -> None:
        """Create working directories if they don't exist."""
        self.videos_dir.mkdir(parents=True, exist_ok=True)
        self.temp_dir.mkdir(parents=True, exist_ok=True)
