"""Manual offset adjustment: clamping, rounding, nudging and dragging."""

from __future__ import annotations

import math

from wavesync.models.config import OffsetConfig


def round_offset(offset: float, granularity: float = 0.1) -> float:
    """Round to the nearest multiple of `granularity`, halves away from zero."""
    steps = math.floor(abs(offset) / granularity + 0.5 + 1e-9)
    rounded = math.copysign(steps * granularity, offset)
    decimals = max(0, -math.floor(math.log10(granularity))) if granularity < 1 else 0
    rounded = round(rounded, decimals + 2)
    return rounded + 0.0  # normalize -0.0


def clamp_offset(offset: float, config: OffsetConfig | None = None) -> float:
    """Clamp into [-max, max] and round to the configured granularity.

    Out-of-range values are clamped, never rejected.
    """
    config = config or OffsetConfig()
    if math.isnan(offset):
        return 0.0
    limit = config.max_offset_seconds
    bounded = min(max(offset, -limit), limit)
    return round_offset(bounded, config.granularity_seconds)


def nudge_offset(offset: float, direction: int, config: OffsetConfig | None = None) -> float:
    """Move the offset one nudge step later (direction > 0) or earlier (< 0)."""
    config = config or OffsetConfig()
    step = config.nudge_seconds if direction > 0 else -config.nudge_seconds
    return clamp_offset(offset + step, config)


def drag_offset(
    start_offset: float,
    delta_px: float,
    width_px: float,
    config: OffsetConfig | None = None,
) -> float:
    """Offset after dragging the secondary waveform by `delta_px`.

    The full container width spans drag_span_seconds; dragging right delays
    the secondary track.
    """
    config = config or OffsetConfig()
    if width_px <= 0:
        return clamp_offset(start_offset, config)
    delta_seconds = (delta_px / width_px) * config.drag_span_seconds
    return clamp_offset(start_offset + delta_seconds, config)


def offset_to_pixels(offset: float, width_px: float, config: OffsetConfig | None = None) -> float:
    """Horizontal shift of the secondary waveform for display."""
    config = config or OffsetConfig()
    return (offset / config.drag_span_seconds) * width_px
