"""SPEECHPACE global configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class PaceSettings(BaseModel):
    """Per-run pacing parameters. Passed by value, never mutated by the core."""

    model_config = ConfigDict(frozen=True)

    silence_threshold: float = Field(default=0.07, gt=0.0, le=1.0)
    min_silence_duration: float = Field(default=0.7, ge=0.2, le=2.0)  # seconds
    pause_multiplier: float = Field(default=1.5, ge=0.5, le=3.0)

    def min_silence_samples(self, sample_rate: int) -> int:
        """Silence window length in samples at ``sample_rate``."""
        return int(round(sample_rate * self.min_silence_duration))


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Pacing defaults (slider start positions)
    silence_threshold: float = 0.07
    min_silence_duration: float = 0.7
    pause_multiplier: float = 1.5

    # MP3 encoding
    mp3_bitrate_kbps: int = 128
    mp3_quality: int = 2  # LAME: 0 = best, 9 = fastest

    # Cooperative yield before merge validation / concatenation
    merge_yield_s: float = 0.05

    model_config = {"env_prefix": "SPEECHPACE_"}

    def default_pace_settings(self) -> PaceSettings:
        """Build validated pacing parameters from the configured defaults."""
        return PaceSettings(
            silence_threshold=self.silence_threshold,
            min_silence_duration=self.min_silence_duration,
            pause_multiplier=self.pause_multiplier,
        )


settings = Settings()
