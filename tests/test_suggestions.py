"""Tests for suggestion ranking and manual offset adjustment."""

import math

import pytest

from wavesync.models.config import OffsetConfig, SuggestionConfig
from wavesync.models.suggestion import CorrelationCandidate
from wavesync.suggestions.aggregate import rank_suggestions, weighted_score
from wavesync.suggestions.offsets import (
    clamp_offset,
    drag_offset,
    nudge_offset,
    offset_to_pixels,
    round_offset,
)


def candidate(offset: float, confidence: float, method: str = "mfcc") -> CorrelationCandidate:
    return CorrelationCandidate(offset_seconds=offset, confidence=confidence, method=method)


@pytest.fixture
def mixed():
    return [
        candidate(1.0, 0.9, "mfcc"),                # 0.45
        candidate(2.0, 0.9, "basic-correlation"),   # 0.18
        candidate(-3.0, 0.95, "onset"),             # 0.285
    ]


class TestWeightedScore:
    def test_known_methods(self):
        config = SuggestionConfig()

        assert weighted_score(candidate(0, 1.0, "mfcc"), config) == pytest.approx(0.5)
        assert weighted_score(candidate(0, 1.0, "onset"), config) == pytest.approx(0.3)
        assert weighted_score(candidate(0, 1.0, "basic-correlation"), config) == pytest.approx(0.2)

    def test_unknown_method_uses_default_weight(self):
        assert weighted_score(candidate(0, 1.0, "spectral"), SuggestionConfig()) == pytest.approx(0.1)


class TestRankSuggestions:
    def test_full_pipeline(self, mixed):
        result = rank_suggestions(mixed)

        assert result.offsets == [0.0, 1.0, 1.1, 2.0, -3.0]
        assert result.best_offset == 1.0
        assert result.best_method == "mfcc"
        assert result.selected == 1.0
        assert result.candidate_counts == {"mfcc": 1, "basic-correlation": 1, "onset": 1}

    def test_zero_is_always_offered(self, mixed):
        assert 0.0 in rank_suggestions(mixed)
        assert 0.0 in rank_suggestions([candidate(4.0, 1.0)])

    def test_empty_candidates(self):
        result = rank_suggestions([])

        assert result.offsets == [0.0]
        assert result.selected == 0.0
        assert result.best_offset is None
        assert result.best_method is None

    def test_out_of_range_offsets_are_dropped(self):
        result = rank_suggestions([candidate(7.0, 1.0), candidate(4.98, 0.5)])

        assert all(-5.0 <= o <= 5.0 for o in result.offsets)
        assert 5.0 in result
        assert result.selected == 0.0

    def test_offsets_are_rounded_and_unique(self):
        candidates = [
            candidate(0.96, 0.9),
            candidate(1.04, 0.8),
            candidate(-0.25, 0.7),
            candidate(2.449, 0.6),
        ]

        result = rank_suggestions(candidates)

        assert len(result.offsets) == len(set(result.offsets))
        for offset in result.offsets:
            assert offset * 10 == pytest.approx(round(offset * 10))
        assert -0.3 in result

    def test_sorted_by_magnitude(self, mixed):
        offsets = rank_suggestions(mixed).offsets

        assert [abs(o) for o in offsets] == sorted(abs(o) for o in offsets)

    def test_top_n_limits_distinct_offsets(self):
        candidates = [candidate(float(k), 1.0 - k / 10) for k in range(1, 5)]

        result = rank_suggestions(candidates, SuggestionConfig(top_n=2))

        assert 3.0 not in result
        assert 4.0 not in result
        assert result.offsets == [0.0, 1.0, 1.1, 2.0]

    def test_equal_scores_keep_input_order(self):
        result = rank_suggestions([candidate(2.0, 0.5), candidate(-1.0, 0.5)])

        assert result.best_offset == 2.0

    def test_ranking_is_idempotent(self, mixed):
        assert rank_suggestions(mixed) == rank_suggestions(mixed)

    def test_nearest_selection(self, mixed):
        result = rank_suggestions(mixed, SuggestionConfig(auto_select="nearest"))

        assert result.selected == 0.0

    def test_weights_decide_the_best(self):
        candidates = [candidate(2.0, 1.0, "custom"), candidate(3.0, 0.3, "basic-correlation")]

        assert rank_suggestions(candidates).best_offset == 2.0

    def test_custom_range(self):
        result = rank_suggestions(
            [candidate(8.0, 1.0)], offset_config=OffsetConfig(max_offset_seconds=10.0)
        )

        assert result.selected == 8.0


class TestOffsets:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (0.04, 0.0),
            (0.05, 0.1),
            (-0.05, -0.1),
            (-0.25, -0.3),
            (1.05, 1.1),
            (0.95, 1.0),
            (-0.04, 0.0),
        ],
    )
    def test_round_half_away_from_zero(self, raw, expected):
        assert round_offset(raw) == pytest.approx(expected)

    def test_rounding_never_gives_negative_zero(self):
        assert math.copysign(1.0, round_offset(-0.01)) == 1.0

    @pytest.mark.parametrize(
        "raw,expected",
        [(7.3, 5.0), (-12.0, -5.0), (1.26, 1.3), (float("nan"), 0.0), (float("inf"), 5.0)],
    )
    def test_clamp(self, raw, expected):
        assert clamp_offset(raw) == pytest.approx(expected)

    def test_nudge(self):
        assert nudge_offset(0.3, 1) == pytest.approx(0.4)
        assert nudge_offset(0.0, -1) == pytest.approx(-0.1)
        assert nudge_offset(5.0, 1) == 5.0
        assert nudge_offset(-5.0, -1) == -5.0

    def test_drag_maps_width_to_span(self):
        assert drag_offset(0.0, 80, 800) == pytest.approx(1.0)
        assert drag_offset(1.0, -400, 800) == pytest.approx(-4.0)
        assert drag_offset(0.0, 1000, 800) == 5.0

    def test_drag_without_width_keeps_offset(self):
        assert drag_offset(2.04, 100, 0) == pytest.approx(2.0)

    def test_pixels(self):
        assert offset_to_pixels(2.5, 800) == pytest.approx(200.0)
        assert offset_to_pixels(-1.0, 500) == pytest.approx(-50.0)
