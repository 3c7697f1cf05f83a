"""FFmpeg runner used to pull an audio stream out of video containers."""

from __future__ import annotations

import subprocess
from pathlib import Path

FFMPEG_BASE = ["ffmpeg", "-y", "-hide_banner", "-loglevel", "error"]


class FFmpegError(Exception):
    """Raised when an FFmpeg command exits non-zero."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
        super().__init__(f"ffmpeg exited with {returncode}: {detail}")


def run_ffmpeg(args: list[str]) -> None:
    """Run ffmpeg quietly. FileNotFoundError means ffmpeg is not installed."""
    cmd = FFMPEG_BASE + args
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        raise FFmpegError(cmd, result.returncode, result.stderr)


def extract_audio(
    input_path: Path | str,
    output_path: Path | str,
    *,
    sample_rate: int = 44100,
    channels: int = 1,
) -> None:
    """Decode the first audio stream of a media file into a 32-bit float WAV."""
    run_ffmpeg([
        "-i", str(input_path),
        "-vn",
        "-map", "0:a:0",
        "-c:a", "pcm_f32le",
        "-ar", str(sample_rate),
        "-ac", str(channels),
        str(output_path),
    ])
