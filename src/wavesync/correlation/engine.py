"""Run every offset estimator over a track pair."""

from __future__ import annotations

from collections import Counter
from typing import Callable

from wavesync.analysis.features import detect_beats
from wavesync.correlation.basic import basic_correlation, refine_offset
from wavesync.correlation.mfcc import lag_grid, mfcc_correlation
from wavesync.correlation.onset import onset_correlation
from wavesync.errors import CorrelationComputationError
from wavesync.models.config import CorrelationConfig
from wavesync.models.suggestion import CorrelationCandidate, CorrelationMethod
from wavesync.models.track import AudioTrack, FeatureSet
from wavesync.utils.progress import log_step, log_warning


def find_candidates(
    primary: AudioTrack,
    primary_features: FeatureSet,
    secondary: AudioTrack,
    secondary_features: FeatureSet,
    config: CorrelationConfig | None = None,
) -> list[CorrelationCandidate]:
    """Collect candidates from basic correlation, MFCC and onset matching.

    A method that raises is logged and contributes nothing; the others still
    run. MFCC needs cepstral frames on both sides and onset matching needs
    onsets on both sides.
    """
    config = config or CorrelationConfig()
    candidates: list[CorrelationCandidate] = []

    candidates += _run_isolated(
        CorrelationMethod.BASIC,
        lambda: basic_correlation(
            primary.samples, secondary.samples, primary.sample_rate, config
        ),
    )

    if primary_features.has_mfcc and secondary_features.has_mfcc:
        mfcc_candidates = _run_isolated(
            CorrelationMethod.MFCC,
            lambda: mfcc_correlation(primary_features, secondary_features, config),
        )
        if config.mfcc_refine and mfcc_candidates:
            mfcc_candidates = _refine_best(
                mfcc_candidates, primary, primary_features, secondary, config
            )
        candidates += mfcc_candidates

    primary_onsets = primary_features.onsets
    secondary_onsets = secondary_features.onsets
    if config.onset_beat_fallback:
        primary_onsets = primary_onsets or detect_beats(primary.samples, primary.sample_rate)
        secondary_onsets = secondary_onsets or detect_beats(secondary.samples, secondary.sample_rate)

    if primary_onsets and secondary_onsets:
        candidates += _run_isolated(
            CorrelationMethod.ONSET,
            lambda: onset_correlation(primary_onsets, secondary_onsets, config),
        )

    counts = Counter(c.method for c in candidates)
    log_step(
        "Correlate",
        f"{len(candidates)} candidates ("
        + ", ".join(f"{method}: {n}" for method, n in counts.items())
        + ")",
    )
    return candidates


def _refine_best(
    candidates: list[CorrelationCandidate],
    primary: AudioTrack,
    primary_features: FeatureSet,
    secondary: AudioTrack,
    config: CorrelationConfig,
) -> list[CorrelationCandidate]:
    """Move the top MFCC candidate onto the sample correlation peak near it.

    MFCC lags are a frame stride apart (about 0.28 s at 44.1 kHz), coarser
    than the offset granularity. The other MFCC candidates keep their grid
    offsets.
    """
    best = max(candidates, key=lambda c: c.confidence)
    lags, seconds_per_frame = lag_grid(primary_features, config)
    span = lags.step * seconds_per_frame * config.mfcc_refine_steps

    try:
        refined = refine_offset(
            primary.samples,
            secondary.samples,
            primary.sample_rate,
            best.offset_seconds,
            span,
            config,
        )
    except Exception as e:
        log_warning(f"MFCC offset refinement failed: {e}")
        return candidates

    if refined is None or refined == best.offset_seconds:
        return candidates

    log_step("Correlate", f"MFCC peak {best.offset_seconds:+.2f}s refined to {refined:+.2f}s")
    return [
        c.model_copy(update={"offset_seconds": refined}) if c is best else c
        for c in candidates
    ]


def _run_isolated(
    method: CorrelationMethod,
    compute: Callable[[], list[CorrelationCandidate]],
) -> list[CorrelationCandidate]:
    try:
        return compute()
    except Exception as e:
        log_warning(str(CorrelationComputationError(method.value, e)))
        return []
