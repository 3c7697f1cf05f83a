"""Frame-level feature extraction: spectral centroid, RMS, onsets, MFCCs."""

from __future__ import annotations

import librosa
import numpy as np
from librosa.util.exceptions import ParameterError
from scipy.signal import lfilter

from wavesync.errors import FeatureExtractionError
from wavesync.models.config import FeatureConfig
from wavesync.models.track import FeatureSet
from wavesync.utils.progress import log_step, log_warning


def extract_features(
    samples: np.ndarray,
    sample_rate: int,
    config: FeatureConfig | None = None,
) -> FeatureSet:
    """Compute per-frame features over the first max_duration_seconds.

    Frames do not overlap (hop is larger than the frame), trading precision
    for speed. A frame that fails is dropped from every feature array and
    processing continues with the next one.

    Onset rule: frame i > 0 is an onset when its RMS exceeds the threshold and
    rises by more than onset_rise_ratio over the previous extracted frame.
    """
    config = config or FeatureConfig()
    frame_size = config.frame_size
    hop_size = config.hop_size

    max_samples = min(len(samples), int(sample_rate * config.max_duration_seconds))
    data = np.asarray(samples[:max_samples], dtype=np.float32)

    num_frames = (len(data) - frame_size) // hop_size + 1 if len(data) >= frame_size else 0

    centroids: list[float] = []
    rms_values: list[float] = []
    onsets: list[float] = []
    mfccs: list[np.ndarray] = []
    last_rms = 0.0
    skipped = 0

    for i in range(num_frames):
        start = i * hop_size
        frame = data[start:start + frame_size]

        try:
            centroid, rms, mfcc = _frame_features(i, frame, sample_rate, config)
        except FeatureExtractionError as e:
            skipped += 1
            log_warning(f"Feature extraction skipped a frame: {e}")
            continue

        centroids.append(centroid)
        rms_values.append(rms)

        if (
            i > 0
            and rms > config.onset_rms_threshold
            and rms > config.onset_rise_ratio * last_rms
        ):
            onsets.append(start / sample_rate)
        last_rms = rms

        if i % config.mfcc_stride == 0:
            mfccs.append(mfcc)

    log_step(
        "Features",
        f"{len(rms_values)} frames, {len(onsets)} onsets, {len(mfccs)} MFCC vectors"
        + (f" ({skipped} frames skipped)" if skipped else ""),
    )

    return FeatureSet(
        sample_rate=sample_rate,
        hop_size=hop_size,
        mfcc_stride=config.mfcc_stride,
        spectral_centroids=np.asarray(centroids),
        rms=np.asarray(rms_values),
        onsets=onsets,
        mfcc_frames=(
            np.vstack(mfccs) if mfccs else np.zeros((0, config.mfcc_coefficients))
        ),
    )


def _frame_features(
    index: int,
    frame: np.ndarray,
    sample_rate: int,
    config: FeatureConfig,
) -> tuple[float, float, np.ndarray]:
    """Return (spectral centroid in Hz, RMS, MFCC vector) for one frame.

    Each call sees exactly one analysis frame, so librosa runs with
    center=False and a hop equal to the frame length.
    """
    n_fft = config.frame_size
    if len(frame) != n_fft:
        raise FeatureExtractionError(index, f"short frame ({len(frame)} samples)")
    if not np.all(np.isfinite(frame)):
        raise FeatureExtractionError(index, "non-finite samples")

    frame_args = dict(n_fft=n_fft, hop_length=n_fft, center=False, window="hann")
    try:
        rms = librosa.feature.rms(y=frame, frame_length=n_fft, hop_length=n_fft, center=False)
        centroid = librosa.feature.spectral_centroid(y=frame, sr=sample_rate, **frame_args)
        mel = librosa.feature.melspectrogram(
            y=frame, sr=sample_rate, n_mels=config.mel_bands, power=2.0, **frame_args
        )
        # log1p keeps silent bands at 0 instead of the dB floor
        mfcc = librosa.feature.mfcc(S=np.log1p(mel), n_mfcc=config.mfcc_coefficients)
    except ParameterError as e:
        raise FeatureExtractionError(index, str(e)) from e

    return float(centroid[0, 0]), float(rms[0, 0]), mfcc[:, 0].astype(np.float64)


def detect_beats(
    samples: np.ndarray,
    sample_rate: int,
    features: FeatureSet | None = None,
    *,
    threshold: float = 0.5,
    min_interval_seconds: float = 0.25,
    cutoff_hz: float = 200.0,
) -> list[float]:
    """Beat timestamps in seconds.

    Uses the onsets of `features` when there are any; otherwise low-pass
    filters the signal and picks local maxima above `threshold` that are at
    least `min_interval_seconds` apart.
    """
    if features is not None and features.onsets:
        return list(features.onsets)

    filtered = low_pass(np.asarray(samples, dtype=np.float64), sample_rate, cutoff_hz)
    if len(filtered) < 3:
        return []

    min_gap = int(min_interval_seconds * sample_rate)
    inner = filtered[1:-1]
    peaks = np.flatnonzero(
        (inner > threshold) & (inner > filtered[:-2]) & (inner > filtered[2:])
    ) + 1

    beats: list[float] = []
    last = -min_gap
    for idx in peaks:
        if idx - last > min_gap:
            beats.append(idx / sample_rate)
            last = idx
    return beats


def low_pass(signal: np.ndarray, sample_rate: int, cutoff_hz: float = 200.0) -> np.ndarray:
    """One-pole RC low-pass filter."""
    if len(signal) == 0:
        return signal
    rc = 1.0 / (cutoff_hz * 2 * np.pi)
    dt = 1.0 / sample_rate
    alpha = dt / (rc + dt)
    # y[n] = y[n-1] + alpha * (x[n] - y[n-1]), seeded with y[0] = x[0]
    filtered, _ = lfilter([alpha], [1.0, alpha - 1.0], signal[1:], zi=[(1.0 - alpha) * signal[0]])
    return np.concatenate(([signal[0]], filtered))
