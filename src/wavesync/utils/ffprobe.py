"""FFprobe wrapper for container metadata."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from pathlib import Path


@dataclass
class MediaInfo:
    """What ffprobe reports about a media file's first audio stream."""

    path: str
    container_duration: float | None
    stream_duration: float | None
    sample_rate: int
    channels: int
    has_video: bool

    @property
    def duration_seconds(self) -> float | None:
        """Container duration when known, else the audio stream's."""
        return self.container_duration or self.stream_duration


def probe_media(path: Path | str) -> MediaInfo:
    """Probe a media file with FFprobe.

    Raises FileNotFoundError for a missing file or missing ffprobe,
    CalledProcessError when ffprobe rejects the file and ValueError when
    there is no audio stream.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Media file not found: {path}")

    result = subprocess.run(
        [
            "ffprobe",
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            str(path),
        ],
        capture_output=True,
        text=True,
        check=True,
    )

    data = json.loads(result.stdout)
    streams = data.get("streams", [])
    audio = next((s for s in streams if s.get("codec_type") == "audio"), None)
    if audio is None:
        raise ValueError(f"No audio stream found in: {path}")

    return MediaInfo(
        path=str(path),
        container_duration=_seconds(data.get("format", {}).get("duration")),
        stream_duration=_seconds(audio.get("duration")),
        sample_rate=int(audio.get("sample_rate", 0)),
        channels=int(audio.get("channels", 0)),
        has_video=any(s.get("codec_type") == "video" for s in streams),
    )


def _seconds(value) -> float | None:
    # ffprobe reports "N/A" for streams without a known length
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds > 0 else None
