"""Configuration models for each engine component."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from wavesync.errors import ConfigError


class DecoderConfig(BaseModel):
    """Configuration for decoding and track loading."""

    sample_rate: int = Field(default=44100, ge=8000, le=192000)
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_wait_seconds: float = Field(default=0.5, ge=0.0, le=30.0)
    ffmpeg_fallback: bool = True
    probe_metadata: bool = True


class FeatureConfig(BaseModel):
    """Configuration for the feature extractor."""

    frame_size: int = Field(default=2048, ge=256, le=16384)
    hop_size: int = Field(default=4096, ge=256, le=32768)
    max_duration_seconds: float = Field(default=30.0, gt=0.0, le=600.0)
    mfcc_stride: int = Field(default=3, ge=1, le=10)  # keep every Nth frame's MFCCs
    mfcc_coefficients: int = Field(default=13, ge=2, le=40)
    mel_bands: int = Field(default=26, ge=8, le=128)
    onset_rms_threshold: float = Field(default=0.1, ge=0.0, le=1.0)
    onset_rise_ratio: float = Field(default=1.5, ge=1.0, le=10.0)
    waveform_points: int = Field(default=150, ge=10, le=4000)


class CorrelationConfig(BaseModel):
    """Configuration for the three offset estimators."""

    max_offset_seconds: float = Field(default=5.0, gt=0.0, le=60.0)
    basic_window_seconds: float = Field(default=10.0, gt=0.0, le=120.0)
    basic_step_seconds: float = Field(default=0.1, gt=0.0, le=1.0)
    mfcc_max_frames: int = Field(default=1000, ge=10)
    mfcc_time_base: Literal["exact", "approximate"] = "exact"
    mfcc_step_frames: int = Field(default=10, ge=1)  # approximate time base only
    mfcc_max_offset_frames: int = Field(default=500, ge=1)  # approximate time base only
    mfcc_seconds_per_frame: float = Field(default=0.01, gt=0.0)  # approximate time base only
    mfcc_refine: bool = True
    mfcc_refine_steps: float = Field(default=1.5, gt=0.0, le=10.0)  # search span, in MFCC lag steps
    onset_interval_tolerance: float = Field(default=0.1, gt=0.0, le=1.0)
    onset_match_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    onset_fallback_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    onset_beat_fallback: bool = False


class SuggestionConfig(BaseModel):
    """Configuration for ranking candidates into suggestions."""

    method_weights: dict[str, float] = Field(
        default_factory=lambda: {
            "mfcc": 0.5,
            "onset": 0.3,
            "basic-correlation": 0.2,
        }
    )
    default_weight: float = Field(default=0.1, ge=0.0, le=1.0)
    top_n: int = Field(default=3, ge=1, le=20)
    fine_adjust_seconds: float = Field(default=0.05, ge=0.0, le=1.0)
    auto_select: Literal["best", "nearest"] = "best"


class OffsetConfig(BaseModel):
    """Range and granularity of accepted offsets."""

    max_offset_seconds: float = Field(default=5.0, gt=0.0, le=60.0)
    granularity_seconds: float = Field(default=0.1, gt=0.0, le=1.0)
    nudge_seconds: float = Field(default=0.1, gt=0.0, le=1.0)
    drag_span_seconds: float = Field(default=10.0, gt=0.0, le=120.0)


class PlaybackConfig(BaseModel):
    """Configuration for the synchronized playback controller."""

    frame_interval_seconds: float = Field(default=1 / 60, gt=0.0, le=1.0)
    end_progress_threshold: float = Field(default=0.999, gt=0.0, le=1.0)
    fallback_duration_seconds: float = Field(default=10.0, gt=0.0)
    output_device: int | str | None = None
    output_blocksize: int = Field(default=0, ge=0)


class SyncConfig(BaseModel):
    """All component configurations."""

    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    features: FeatureConfig = Field(default_factory=FeatureConfig)
    correlation: CorrelationConfig = Field(default_factory=CorrelationConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    offset: OffsetConfig = Field(default_factory=OffsetConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)


def load_config(path: Path | str | None) -> SyncConfig:
    """Load a SyncConfig from YAML, or return defaults when path is None."""
    if path is None:
        return SyncConfig()

    from wavesync.utils.io import read_yaml

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = read_yaml(path)
    except Exception as e:
        raise ConfigError(f"Cannot parse {path}: {e}") from e

    try:
        return SyncConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e
