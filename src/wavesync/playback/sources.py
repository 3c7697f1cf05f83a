"""Audio sources the playback controller can drive."""

from __future__ import annotations

import threading
import time
from typing import Callable, Protocol

import numpy as np

from wavesync.errors import PlaybackStartError
from wavesync.models.track import AudioTrack


class AudioSource(Protocol):
    """An independently clocked player for one track."""

    name: str

    def play(self) -> None: ...
    def pause(self) -> None: ...
    def seek(self, seconds: float) -> None: ...
    def close(self) -> None: ...

    @property
    def current_time(self) -> float: ...

    @property
    def duration(self) -> float: ...

    @property
    def ended(self) -> bool: ...

    @property
    def playing(self) -> bool: ...


class ClockSource:
    """A silent source whose position follows a monotonic clock.

    Stands in for a real player in dry runs and tests. `fail_on_play` makes
    play() raise PlaybackStartError, like an environment that blocks
    autonomous playback.
    """

    def __init__(
        self,
        name: str,
        duration: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        fail_on_play: bool = False,
    ):
        self.name = name
        self._duration = duration
        self._clock = clock
        self.fail_on_play = fail_on_play
        self._position = 0.0
        self._resumed_at: float | None = None
        self.started_at: float | None = None
        self.play_count = 0
        self.closed = False

    def play(self) -> None:
        if self.fail_on_play:
            raise PlaybackStartError(self.name, "playback blocked")
        if self._resumed_at is None:
            now = self._clock()
            self._resumed_at = now
            self.started_at = now
            self.play_count += 1

    def pause(self) -> None:
        if self._resumed_at is not None:
            self._position = self.current_time
            self._resumed_at = None

    def seek(self, seconds: float) -> None:
        self._position = min(max(seconds, 0.0), self._duration)
        if self._resumed_at is not None:
            self._resumed_at = self._clock()

    def close(self) -> None:
        self.pause()
        self.closed = True

    @property
    def current_time(self) -> float:
        if self._resumed_at is None:
            return self._position
        return min(self._position + self._clock() - self._resumed_at, self._duration)

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def ended(self) -> bool:
        return self._duration > 0 and self.current_time >= self._duration

    @property
    def playing(self) -> bool:
        return self._resumed_at is not None and not self.ended


class DeviceSource:
    """Plays a decoded track on an output device through sounddevice.

    The PortAudio callback runs on its own thread and pulls samples from the
    buffer; position and end-of-buffer are guarded by a lock.
    """

    def __init__(
        self,
        name: str,
        samples: np.ndarray,
        sample_rate: int,
        *,
        duration: float | None = None,
        device: int | str | None = None,
        blocksize: int = 0,
    ):
        self.name = name
        self._samples = np.ascontiguousarray(samples, dtype=np.float32)
        self._sample_rate = sample_rate
        self._duration = duration or len(self._samples) / sample_rate
        self._device = device
        self._blocksize = blocksize
        self._lock = threading.Lock()
        self._frame = 0
        self._playing = False
        self._ended = False
        self._stream = None

    @classmethod
    def from_track(
        cls,
        track: AudioTrack,
        *,
        device: int | str | None = None,
        blocksize: int = 0,
    ) -> DeviceSource:
        return cls(
            track.role.value,
            track.samples,
            track.sample_rate,
            duration=track.playback_duration,
            device=device,
            blocksize=blocksize,
        )

    def play(self) -> None:
        try:
            import sounddevice as sd
        except OSError as e:
            # PortAudio shared library missing
            raise PlaybackStartError(self.name, str(e)) from e

        with self._lock:
            if self._ended:
                self._frame = 0
                self._ended = False
            self._playing = True

        try:
            if self._stream is None:
                self._stream = sd.OutputStream(
                    samplerate=self._sample_rate,
                    channels=1,
                    dtype="float32",
                    device=self._device,
                    blocksize=self._blocksize,
                    callback=self._callback,
                )
            if not self._stream.active:
                self._stream.start()
        except (sd.PortAudioError, OSError, ValueError) as e:
            with self._lock:
                self._playing = False
            raise PlaybackStartError(self.name, str(e)) from e

    def pause(self) -> None:
        with self._lock:
            self._playing = False
        # abort() returns at once; stop() waits for queued buffers to drain
        if self._stream is not None and self._stream.active:
            self._stream.abort()

    def seek(self, seconds: float) -> None:
        with self._lock:
            self._frame = min(max(int(seconds * self._sample_rate), 0), len(self._samples))
            self._ended = False

    def close(self) -> None:
        self.pause()
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    @property
    def current_time(self) -> float:
        with self._lock:
            return self._frame / self._sample_rate

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def ended(self) -> bool:
        with self._lock:
            return self._ended

    @property
    def playing(self) -> bool:
        with self._lock:
            return self._playing

    def _callback(self, outdata, frames, time_info, status) -> None:
        with self._lock:
            if not self._playing:
                outdata.fill(0)
                return

            chunk = self._samples[self._frame:self._frame + frames]
            outdata[:len(chunk), 0] = chunk
            outdata[len(chunk):] = 0
            self._frame += len(chunk)

            if self._frame >= len(self._samples):
                self._ended = True
                self._playing = False
