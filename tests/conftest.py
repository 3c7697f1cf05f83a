"""Shared fixtures: synthetic signals, WAV files and a fast config."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from wavesync.models.config import SyncConfig

SAMPLE_RATE = 8000


def noise(seconds: float, *, seed: int = 0, sample_rate: int = SAMPLE_RATE, amplitude: float = 0.3) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return (rng.standard_normal(int(seconds * sample_rate)) * amplitude).astype(np.float32)


def shifted(signal: np.ndarray, seconds: float, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Delay by `seconds` of leading silence, or cut the start when negative."""
    n = int(round(abs(seconds) * sample_rate))
    if seconds >= 0:
        return np.concatenate([np.zeros(n, dtype=np.float32), signal])
    return signal[n:].copy()


def write_wav(path: Path, samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> Path:
    sf.write(str(path), samples, sample_rate, subtype="FLOAT")
    return path


@pytest.fixture
def config() -> SyncConfig:
    """Defaults, except: low sample rate, no retry waits, no external tools."""
    cfg = SyncConfig()
    cfg.decoder.sample_rate = SAMPLE_RATE
    cfg.decoder.retry_wait_seconds = 0.0
    cfg.decoder.ffmpeg_fallback = False
    cfg.decoder.probe_metadata = False
    return cfg


@pytest.fixture
def wav_pair(tmp_path: Path) -> tuple[Path, Path]:
    """A 6 s noise 'video' track and the same audio delayed by 1 s."""
    base = noise(6.0, seed=1)
    video = write_wav(tmp_path / "video.wav", base)
    audio = write_wav(tmp_path / "audio.wav", shifted(base, 1.0))
    return video, audio
