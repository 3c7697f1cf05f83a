"""Cepstral-vector similarity over frame lags."""

from __future__ import annotations

import numpy as np

from wavesync.models.config import CorrelationConfig
from wavesync.models.suggestion import CorrelationCandidate, CorrelationMethod
from wavesync.models.track import FeatureSet


def lag_grid(primary: FeatureSet, config: CorrelationConfig) -> tuple[range, float]:
    """Frame lags to scan and the seconds one lag unit stands for.

    "approximate" reproduces the fixed 0.01 s per frame conversion, which is
    only right for one particular frame geometry; "exact" derives the step
    from hop_size * mfcc_stride / sample_rate and bounds the lags by the
    search range.
    """
    if config.mfcc_time_base == "approximate":
        max_lag = config.mfcc_max_offset_frames
        return range(-max_lag, max_lag + 1, config.mfcc_step_frames), config.mfcc_seconds_per_frame

    seconds_per_frame = primary.mfcc_frame_seconds
    max_lag = int(config.max_offset_seconds / seconds_per_frame)
    return range(-max_lag, max_lag + 1), seconds_per_frame


def mfcc_correlation(
    primary: FeatureSet,
    secondary: FeatureSet,
    config: CorrelationConfig | None = None,
) -> list[CorrelationCandidate]:
    """Mean cosine similarity of overlapping MFCC vectors for each lag."""
    config = config or CorrelationConfig()
    a = _unit_rows(primary.mfcc_frames[:config.mfcc_max_frames])
    b = _unit_rows(secondary.mfcc_frames[:config.mfcc_max_frames])

    if a.shape[1] != b.shape[1]:
        raise ValueError(
            f"MFCC vectors differ in length ({a.shape[1]} vs {b.shape[1]})"
        )

    lags, seconds_per_frame = lag_grid(primary, config)

    results: list[CorrelationCandidate] = []
    for lag in lags:
        start = max(0, -lag)
        stop = min(len(a), len(b) - lag)
        if stop > start:
            sims = np.einsum("ij,ij->i", a[start:stop], b[start + lag:stop + lag])
            similarity = float(sims.mean())
        else:
            similarity = 0.0

        results.append(CorrelationCandidate(
            offset_seconds=round(lag * seconds_per_frame, 2),
            confidence=similarity,
            method=CorrelationMethod.MFCC.value,
        ))

    return results


def _unit_rows(frames: np.ndarray) -> np.ndarray:
    """Normalize each vector; zero vectors stay zero (similarity 0)."""
    frames = np.asarray(frames, dtype=np.float64)
    if frames.ndim != 2:
        frames = frames.reshape(len(frames), -1)
    norms = np.linalg.norm(frames, axis=1, keepdims=True)
    return np.divide(frames, norms, out=np.zeros_like(frames), where=norms > 0)
