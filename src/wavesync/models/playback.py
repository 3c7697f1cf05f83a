"""Observable playback state."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class PlaybackMode(str, Enum):
    BOTH = "both"
    PRIMARY_ONLY = "primary-only"
    SECONDARY_ONLY = "secondary-only"


class PlaybackState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    PLAYING = "playing"


class PlaybackSnapshot(BaseModel):
    """What observers see of the current playback session."""

    state: PlaybackState = PlaybackState.IDLE
    mode: PlaybackMode = PlaybackMode.BOTH
    offset_seconds: float = 0.0
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    notice: str | None = None

    @property
    def is_playing(self) -> bool:
        return self.state != PlaybackState.IDLE
