"""Data models for wavesync."""

from wavesync.models.config import SyncConfig, load_config
from wavesync.models.playback import PlaybackMode, PlaybackSnapshot, PlaybackState
from wavesync.models.suggestion import (
    CorrelationCandidate,
    CorrelationMethod,
    SyncSuggestions,
)
from wavesync.models.track import AudioTrack, FeatureSet, TrackRole

__all__ = [
    "SyncConfig",
    "load_config",
    "PlaybackMode",
    "PlaybackSnapshot",
    "PlaybackState",
    "CorrelationCandidate",
    "CorrelationMethod",
    "SyncSuggestions",
    "AudioTrack",
    "FeatureSet",
    "TrackRole",
]
