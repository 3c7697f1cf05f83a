"""Decoder adapter: resource locator -> mono float32 samples at a common rate."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from math import gcd
from pathlib import Path
from urllib.parse import unquote, urlparse

import numpy as np
import soundfile as sf
from scipy.signal import resample_poly

from wavesync.errors import DecodeError
from wavesync.models.config import DecoderConfig
from wavesync.utils.ffmpeg import FFmpegError, extract_audio
from wavesync.utils.ffprobe import probe_media
from wavesync.utils.progress import log_step, log_warning


def resolve_locator(locator: str | Path) -> Path:
    """Turn a filesystem path or file:// URL into a Path."""
    text = str(locator)
    parsed = urlparse(text)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if parsed.scheme and len(parsed.scheme) > 1:
        raise DecodeError(text, f"unsupported scheme '{parsed.scheme}'")
    return Path(text)


class DecodingContext:
    """Decoding handle shared by both tracks of a session.

    Every decode is resampled to the context's sample rate so both tracks can
    be compared sample for sample. The context owns a scratch directory for
    audio pulled out of video containers; close() removes it and the context
    cannot be used afterwards.
    """

    def __init__(self, config: DecoderConfig | None = None):
        self.config = config or DecoderConfig()
        self.sample_rate = self.config.sample_rate
        self._scratch: Path | None = None
        self._closed = False
        self._extracted = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def decode(self, locator: str | Path) -> tuple[np.ndarray, int]:
        """Decode the first channel of a resource.

        Raises DecodeError when the resource is missing, empty or undecodable.
        """
        if self._closed:
            raise DecodeError(str(locator), "decoding context is closed")

        path = resolve_locator(locator)
        if not path.exists():
            raise DecodeError(str(locator), "file not found")
        if path.stat().st_size == 0:
            raise DecodeError(str(locator), "empty file")

        try:
            audio, sr = sf.read(str(path), dtype="float32", always_2d=True)
        except (sf.LibsndfileError, RuntimeError) as e:
            if not self.config.ffmpeg_fallback:
                raise DecodeError(str(locator), str(e)) from e
            audio, sr = self._decode_with_ffmpeg(path)

        samples = audio[:, 0] if audio.size else np.zeros(0, dtype=np.float32)
        if len(samples) == 0:
            raise DecodeError(str(locator), "no samples")

        if sr != self.sample_rate:
            samples = _resample(samples, sr, self.sample_rate)

        log_step(
            "Decode",
            f"{path.name}: {len(samples)} samples @ {self.sample_rate}Hz "
            f"({len(samples) / self.sample_rate:.2f}s)",
        )
        return np.ascontiguousarray(samples, dtype=np.float32), self.sample_rate

    def probe_duration(self, locator: str | Path) -> float | None:
        """Container duration from ffprobe, or None when it cannot be read."""
        if not self.config.probe_metadata:
            return None
        try:
            info = probe_media(resolve_locator(locator))
        except (DecodeError, OSError, subprocess.CalledProcessError, ValueError) as e:
            log_warning(f"No metadata duration for {locator}: {e}")
            return None

        if info.duration_seconds is not None:
            kind = "video container" if info.has_video else "audio file"
            log_step("Decode", f"{Path(info.path).name}: {kind}, {info.duration_seconds:.2f}s")
        return info.duration_seconds

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._scratch is not None:
            shutil.rmtree(self._scratch, ignore_errors=True)
            self._scratch = None

    def _decode_with_ffmpeg(self, path: Path) -> tuple[np.ndarray, int]:
        """Pull the audio stream out of a container soundfile cannot read."""
        if self._scratch is None:
            self._scratch = Path(tempfile.mkdtemp(prefix="wavesync-"))

        self._extracted += 1
        wav_path = self._scratch / f"extract-{self._extracted:03d}.wav"
        log_step("Decode", f"Extracting audio stream from {path.name} with ffmpeg")

        try:
            extract_audio(path, wav_path, sample_rate=self.sample_rate)
            return sf.read(str(wav_path), dtype="float32", always_2d=True)
        except (FFmpegError, OSError, sf.LibsndfileError, RuntimeError) as e:
            raise DecodeError(str(path), str(e)) from e
        finally:
            wav_path.unlink(missing_ok=True)

    def __enter__(self) -> DecodingContext:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _resample(samples: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
    divisor = gcd(source_rate, target_rate)
    up = target_rate // divisor
    down = source_rate // divisor
    return resample_poly(samples, up, down).astype(np.float32)
