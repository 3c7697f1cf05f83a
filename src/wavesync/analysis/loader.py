"""Load one track: decode with retries, build its waveform, extract features."""

from __future__ import annotations

from pathlib import Path

from wavesync.analysis.decode import DecodingContext
from wavesync.analysis.features import extract_features
from wavesync.analysis.waveform import (
    build_waveform,
    placeholder_samples,
    placeholder_waveform,
)
from wavesync.errors import DecodeError
from wavesync.models.config import SyncConfig
from wavesync.models.track import AudioTrack, FeatureSet, TrackRole
from wavesync.utils.progress import log_step, log_warning
from wavesync.utils.retry import retry_decode


def load_track(
    context: DecodingContext,
    locator: str | Path,
    role: TrackRole,
    config: SyncConfig | None = None,
) -> tuple[AudioTrack, FeatureSet]:
    """Decode a track and derive its waveform and features.

    Decoding is retried `decoder.max_retries` more times. When every attempt
    fails, deterministic placeholder data is returned (flagged with
    is_placeholder) so the caller always gets a usable pair.
    """
    config = config or SyncConfig()
    locator = str(locator)
    log_step("Load", f"Analyzing {role.value} track: {locator}")

    decode = retry_decode(
        max_attempts=config.decoder.max_retries + 1,
        wait_seconds=config.decoder.retry_wait_seconds,
    )(context.decode)

    try:
        samples, sample_rate = decode(locator)
    except DecodeError as e:
        log_warning(
            f"All decode attempts failed for {role.value} track ({e.reason}). "
            "Using placeholder data."
        )
        return placeholder_track(locator, role, context.sample_rate, config), FeatureSet.empty(
            context.sample_rate, config.features.hop_size, config.features.mfcc_stride
        )

    track = AudioTrack(
        locator=locator,
        role=role,
        samples=samples,
        sample_rate=sample_rate,
        waveform=build_waveform(samples, config.features.waveform_points),
        metadata_duration=context.probe_duration(locator),
    )

    try:
        features = extract_features(samples, sample_rate, config.features)
    except Exception as e:
        log_warning(f"Feature extraction failed for {role.value} track: {e}. Using basic features.")
        features = FeatureSet.empty(
            sample_rate, config.features.hop_size, config.features.mfcc_stride
        )

    if track.metadata_duration is not None:
        drift = abs(track.metadata_duration - track.duration_seconds)
        if drift > 0.05:
            log_warning(
                f"{role.value} duration mismatch: metadata {track.metadata_duration:.2f}s, "
                f"samples {track.duration_seconds:.2f}s. Playback follows metadata."
            )

    return track, features


def placeholder_track(
    locator: str,
    role: TrackRole,
    sample_rate: int,
    config: SyncConfig | None = None,
) -> AudioTrack:
    """Stand-in track used when a resource cannot be decoded."""
    config = config or SyncConfig()
    return AudioTrack(
        locator=locator,
        role=role,
        samples=placeholder_samples(),
        sample_rate=sample_rate,
        waveform=placeholder_waveform(role, config.features.waveform_points),
        is_placeholder=True,
    )
