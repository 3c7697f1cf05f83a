"""Rank correlation candidates into a short list of offsets."""

from __future__ import annotations

from collections import Counter

from wavesync.models.config import OffsetConfig, SuggestionConfig
from wavesync.models.suggestion import CorrelationCandidate, SyncSuggestions
from wavesync.suggestions.offsets import round_offset
from wavesync.utils.progress import log_step


def weighted_score(candidate: CorrelationCandidate, config: SuggestionConfig) -> float:
    """Confidence scaled by how much the producing method is trusted."""
    weight = config.method_weights.get(candidate.method, config.default_weight)
    return candidate.confidence * weight


def rank_suggestions(
    candidates: list[CorrelationCandidate],
    config: SuggestionConfig | None = None,
    offset_config: OffsetConfig | None = None,
) -> SyncSuggestions:
    """Turn raw candidates into the suggestion list shown to the user.

    Steps:
    1. Sort by weighted score, highest first (stable for equal scores)
    2. Keep the top_n distinct offsets
    3. Add best +/- fine_adjust_seconds and 0.0
    4. Round, deduplicate, drop out-of-range offsets, sort by |offset|

    The function is pure: ranking the same candidates twice gives the same
    result. The weighted scores are only used for ordering.
    """
    config = config or SuggestionConfig()
    offset_config = offset_config or OffsetConfig()
    granularity = offset_config.granularity_seconds
    limit = offset_config.max_offset_seconds

    ranked = sorted(candidates, key=lambda c: weighted_score(c, config), reverse=True)

    primary: list[float] = []
    seen: set[float] = set()
    for candidate in ranked:
        key = round_offset(candidate.offset_seconds, granularity)
        if key in seen:
            continue
        seen.add(key)
        primary.append(candidate.offset_seconds)
        if len(primary) == config.top_n:
            break

    offsets = list(primary)
    best = ranked[0] if ranked else None
    if best is not None:
        offsets.append(best.offset_seconds + config.fine_adjust_seconds)
        offsets.append(best.offset_seconds - config.fine_adjust_seconds)
    offsets.append(0.0)

    unique: list[float] = []
    for offset in offsets:
        rounded = round_offset(offset, granularity)
        if -limit <= rounded <= limit and rounded not in unique:
            unique.append(rounded)
    unique.sort(key=abs)

    best_offset = round_offset(best.offset_seconds, granularity) if best is not None else None
    if config.auto_select == "best" and best_offset is not None and best_offset in unique:
        selected = best_offset
    else:
        selected = unique[0] if unique else None

    log_step(
        "Suggest",
        f"{len(unique)} suggestions {unique}, selected {selected:+.1f}s"
        + (f" (best: {best.method})" if best is not None else ""),
    )

    return SyncSuggestions(
        offsets=unique,
        selected=selected,
        best_offset=best_offset,
        best_method=best.method if best is not None else None,
        candidate_counts=dict(Counter(c.method for c in candidates)),
    )
