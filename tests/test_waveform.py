"""Tests for the display waveform and placeholder data."""

import numpy as np
import pytest

from wavesync.analysis.waveform import (
    WAVEFORM_POINTS,
    build_waveform,
    placeholder_samples,
    placeholder_waveform,
)
from wavesync.models.track import TrackRole
from tests.conftest import noise


class TestBuildWaveform:
    @pytest.mark.parametrize("length", [1, 10, 149, 150, 151, 4410, 80000])
    def test_always_150_points_in_unit_range(self, length):
        samples = noise(length / 8000, seed=length)[:length]
        if len(samples) == 0:
            samples = np.array([0.5], dtype=np.float32)

        waveform = build_waveform(samples)

        assert len(waveform) == WAVEFORM_POINTS
        assert all(0.0 <= v <= 1.0 for v in waveform)

    def test_loudest_block_normalizes_to_one(self):
        samples = np.concatenate([np.full(1500, 0.1), np.full(1500, 0.4)]).astype(np.float32)

        waveform = build_waveform(samples)

        assert max(waveform) == pytest.approx(1.0)
        assert waveform[0] == pytest.approx(0.25)

    def test_silence_uses_floor_instead_of_dividing_by_zero(self):
        waveform = build_waveform(np.zeros(3000, dtype=np.float32))

        assert waveform == [0.0] * WAVEFORM_POINTS

    def test_quiet_signal_stays_below_one(self):
        # Peak block 0.005 is under the 0.01 floor
        waveform = build_waveform(np.full(1500, 0.005, dtype=np.float32))

        assert max(waveform) == pytest.approx(0.5)

    def test_short_input_pads_with_zero_blocks(self):
        waveform = build_waveform(np.array([0.2, -0.4, 0.1], dtype=np.float32))

        assert waveform[:3] == pytest.approx([0.5, 1.0, 0.25])
        assert waveform[3:] == [0.0] * (WAVEFORM_POINTS - 3)

    def test_custom_point_count(self):
        assert len(build_waveform(noise(1.0), points=40)) == 40


class TestPlaceholders:
    def test_samples_are_a_fixed_sinusoid(self):
        samples = placeholder_samples()

        assert len(samples) == 1000
        assert samples[100] == pytest.approx(np.sin(1.0), abs=1e-6)
        np.testing.assert_array_equal(samples, placeholder_samples())

    def test_waveform_differs_per_role(self):
        primary = placeholder_waveform(TrackRole.PRIMARY)
        secondary = placeholder_waveform(TrackRole.SECONDARY)

        assert len(primary) == len(secondary) == WAVEFORM_POINTS
        assert primary[0] == pytest.approx(0.5)
        assert secondary[0] == pytest.approx(0.8)
        assert all(0.0 <= v <= 1.0 for v in primary + secondary)
