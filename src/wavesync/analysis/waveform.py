"""Reduced-resolution waveforms for display, plus deterministic placeholders."""

from __future__ import annotations

import numpy as np

from wavesync.models.track import TrackRole

WAVEFORM_POINTS = 150
NORMALIZE_FLOOR = 0.01
PLACEHOLDER_SAMPLES = 1000


def build_waveform(samples: np.ndarray, points: int = WAVEFORM_POINTS) -> list[float]:
    """Block-average absolute amplitude into `points` values in [0, 1].

    Display only; never used for offset computation. Inputs shorter than
    `points` get one sample per block and zero-filled blocks after the end.
    """
    data = np.abs(np.asarray(samples, dtype=np.float64))
    block_size = max(len(data) // points, 1)

    usable = min(len(data), block_size * points)
    padded = np.zeros(block_size * points)
    padded[:usable] = data[:usable]
    blocks = padded.reshape(points, block_size).mean(axis=1)

    blocks = np.nan_to_num(blocks, nan=0.0, posinf=0.0)
    peak = max(float(blocks.max(initial=0.0)), NORMALIZE_FLOOR)
    return [float(v) for v in np.clip(blocks / peak, 0.0, 1.0)]


def placeholder_samples(count: int = PLACEHOLDER_SAMPLES) -> np.ndarray:
    """Fixed sinusoid substituted for audio that could not be decoded."""
    return np.sin(np.arange(count) * 0.01).astype(np.float32)


def placeholder_waveform(role: TrackRole, points: int = WAVEFORM_POINTS) -> list[float]:
    """Fixed display curve for an undecodable track, distinct per role."""
    i = np.arange(points)
    if role == TrackRole.PRIMARY:
        curve = np.sin(i * 0.1) * 0.3 + 0.5
    else:
        curve = np.cos(i * 0.08) * 0.3 + 0.5
    return [float(v) for v in curve]
