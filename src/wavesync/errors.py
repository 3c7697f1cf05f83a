"""Exception types raised across wavesync."""

from __future__ import annotations


class WavesyncError(Exception):
    """Base class for wavesync errors."""


class ConfigError(WavesyncError):
    """Raised when a configuration file cannot be read or validated."""


class DecodeError(WavesyncError):
    """Raised when a resource is unreachable, empty, or undecodable."""

    def __init__(self, locator: str, reason: str):
        self.locator = locator
        self.reason = reason
        super().__init__(f"Cannot decode {locator}: {reason}")


class FeatureExtractionError(WavesyncError):
    """Raised when a single analysis frame cannot be processed."""

    def __init__(self, frame_index: int, reason: str):
        self.frame_index = frame_index
        super().__init__(f"Frame {frame_index}: {reason}")


class CorrelationComputationError(WavesyncError):
    """Raised when one correlation method fails unexpectedly."""

    def __init__(self, method: str, cause: Exception):
        self.method = method
        self.cause = cause
        super().__init__(f"{method} correlation failed: {cause}")


class PlaybackStartError(WavesyncError):
    """Raised when an audio source refuses to begin playback."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to play {source} audio: {reason}")
