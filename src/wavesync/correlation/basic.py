"""Sample-domain cross-correlation over a coarse grid of lags."""

from __future__ import annotations

import numpy as np
from scipy.signal import correlate

from wavesync.models.config import CorrelationConfig
from wavesync.models.suggestion import CorrelationCandidate, CorrelationMethod


def basic_correlation(
    primary: np.ndarray,
    secondary: np.ndarray,
    sample_rate: int,
    config: CorrelationConfig | None = None,
) -> list[CorrelationCandidate]:
    """Score every lag in +/- max_offset_seconds, one step per basic_step_seconds.

    The score of a lag is the dot product of the overlapping samples divided
    by the overlap length, so it is signed and not bounded to [-1, 1]. Sample
    i of the primary is paired with sample i + lag of the secondary, hence a
    secondary whose content is delayed by k seconds peaks at +k.
    """
    config = config or CorrelationConfig()
    window = int(sample_rate * config.basic_window_seconds)
    s1 = np.asarray(primary[:window], dtype=np.float64)
    s2 = np.asarray(secondary[:window], dtype=np.float64)

    step = max(int(sample_rate * config.basic_step_seconds), 1)
    steps = int(round(config.max_offset_seconds / config.basic_step_seconds))

    results: list[CorrelationCandidate] = []
    for i in range(-steps, steps + 1):
        lag = i * step
        start = max(0, -lag)
        stop = min(len(s1), len(s2) - lag)
        count = stop - start
        score = float(np.dot(s1[start:stop], s2[start + lag:stop + lag]) / count) if count > 0 else 0.0

        results.append(CorrelationCandidate(
            offset_seconds=round(lag / sample_rate, 2),
            confidence=score,
            method=CorrelationMethod.BASIC.value,
        ))

    return results


def refine_offset(
    primary: np.ndarray,
    secondary: np.ndarray,
    sample_rate: int,
    center_seconds: float,
    span_seconds: float,
    config: CorrelationConfig | None = None,
) -> float | None:
    """Sample-accurate correlation peak within center +/- span.

    Uses the same pairing and overlap normalization as basic_correlation,
    computed for every lag at once with an FFT correlation. The search is
    limited to +/- max_offset_seconds. Returns None when no lag in the
    window overlaps.
    """
    config = config or CorrelationConfig()
    window = int(sample_rate * config.basic_window_seconds)
    s1 = np.asarray(primary[:window], dtype=np.float64)
    s2 = np.asarray(secondary[:window], dtype=np.float64)
    if len(s1) == 0 or len(s2) == 0:
        return None

    limit = config.max_offset_seconds
    low = int(np.ceil(max(center_seconds - span_seconds, -limit) * sample_rate))
    high = int(np.floor(min(center_seconds + span_seconds, limit) * sample_rate))

    # full[k] pairs s1[n] with s2[n + k - (len(s1) - 1)]
    full = correlate(s2, s1, mode="full", method="fft")
    lags = np.arange(-(len(s1) - 1), len(s2))
    overlap = np.minimum(len(s1), len(s2) - lags) - np.maximum(0, -lags)

    in_window = (lags >= low) & (lags <= high) & (overlap > 0)
    if not np.any(in_window):
        return None

    scores = full[in_window] / overlap[in_window]
    best_lag = int(lags[in_window][np.argmax(scores)])
    return round(best_lag / sample_rate, 2)
