"""Onset rhythm matching."""

from __future__ import annotations

from wavesync.models.config import CorrelationConfig
from wavesync.models.suggestion import CorrelationCandidate, CorrelationMethod


def onset_correlation(
    primary_onsets: list[float],
    secondary_onsets: list[float],
    config: CorrelationConfig | None = None,
) -> list[CorrelationCandidate]:
    """Match inter-onset-interval patterns between two onset lists.

    Each run of three consecutive onsets forms a pattern of two intervals. Two
    patterns match when both intervals differ by less than the tolerance; a
    match proposes the distance between the patterns' first onsets. When
    nothing matches, the first onsets of both tracks are aligned with lower
    confidence. Offsets outside the search range are dropped.
    """
    config = config or CorrelationConfig()
    if not primary_onsets or not secondary_onsets:
        return []

    tolerance = config.onset_interval_tolerance
    # patterns either match or not, so a match always scores the full strength
    match_strength = 1.0
    match_confidence = config.onset_match_confidence + (1.0 - config.onset_match_confidence) * match_strength
    max_offset = config.max_offset_seconds

    secondary_patterns = [
        (secondary_onsets[j], secondary_onsets[j + 1] - secondary_onsets[j],
         secondary_onsets[j + 2] - secondary_onsets[j + 1])
        for j in range(len(secondary_onsets) - 2)
    ]

    results: list[CorrelationCandidate] = []
    for i in range(len(primary_onsets) - 2):
        p0 = primary_onsets[i]
        p_first = primary_onsets[i + 1] - p0
        p_second = primary_onsets[i + 2] - primary_onsets[i + 1]

        for s0, s_first, s_second in secondary_patterns:
            matched = abs(p_first - s_first) < tolerance and abs(p_second - s_second) < tolerance
            if not matched:
                continue

            offset = s0 - p0
            if abs(offset) <= max_offset:
                results.append(CorrelationCandidate(
                    offset_seconds=round(offset, 2),
                    confidence=match_confidence,
                    method=CorrelationMethod.ONSET.value,
                ))

    if not results:
        offset = secondary_onsets[0] - primary_onsets[0]
        if abs(offset) <= max_offset:
            results.append(CorrelationCandidate(
                offset_seconds=round(offset, 2),
                confidence=config.onset_fallback_confidence,
                method=CorrelationMethod.ONSET.value,
            ))

    return results
