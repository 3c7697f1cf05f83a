"""Decoded tracks and the features derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np


class TrackRole(str, Enum):
    """Which side of the pair a track plays."""

    PRIMARY = "video"
    SECONDARY = "audio"


@dataclass(frozen=True)
class AudioTrack:
    """One decoded source. Never mutated; replaced when the locator changes."""

    locator: str
    role: TrackRole
    samples: np.ndarray  # float32, mono
    sample_rate: int
    waveform: list[float]
    metadata_duration: float | None = None
    is_placeholder: bool = False

    @property
    def duration_seconds(self) -> float:
        return len(self.samples) / self.sample_rate

    @property
    def playback_duration(self) -> float:
        """Duration used to normalize playback progress.

        Container metadata wins over the sample count: it governs the clock of
        the media element that actually plays.
        """
        if self.metadata_duration:
            return self.metadata_duration
        return self.duration_seconds


@dataclass(frozen=True)
class FeatureSet:
    """Frame-level features over the first seconds of a track.

    Frames are frame_size samples long and start every hop_size samples.
    MFCC vectors are kept for every mfcc_stride-th frame only.
    """

    sample_rate: int
    hop_size: int
    mfcc_stride: int
    spectral_centroids: np.ndarray = field(default_factory=lambda: np.zeros(0))
    rms: np.ndarray = field(default_factory=lambda: np.zeros(0))
    onsets: list[float] = field(default_factory=list)
    mfcc_frames: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    is_placeholder: bool = False

    @property
    def frame_count(self) -> int:
        return len(self.rms)

    @property
    def has_mfcc(self) -> bool:
        return len(self.mfcc_frames) > 0

    @property
    def mfcc_frame_seconds(self) -> float:
        """Time between two stored MFCC vectors."""
        return self.mfcc_stride * self.hop_size / self.sample_rate

    @classmethod
    def empty(cls, sample_rate: int, hop_size: int, mfcc_stride: int) -> FeatureSet:
        return cls(
            sample_rate=sample_rate,
            hop_size=hop_size,
            mfcc_stride=mfcc_stride,
            is_placeholder=True,
        )
