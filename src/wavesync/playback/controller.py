"""Synchronized dual-track playback with a relative start delay."""

from __future__ import annotations

import asyncio
from typing import Callable

from wavesync.errors import PlaybackStartError
from wavesync.models.config import PlaybackConfig
from wavesync.models.playback import PlaybackMode, PlaybackSnapshot, PlaybackState
from wavesync.playback.sources import AudioSource
from wavesync.utils.progress import log_error, log_step


class _SessionToken:
    """Invalidated the moment its playback session is cancelled."""

    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False


class PlaybackController:
    """Start two sources with a relative delay and report unified progress.

    State machine: idle -> starting -> playing -> idle. Leaving `playing`
    for any reason (natural end, stop(), offset or mode change, close())
    goes through stop(), which runs synchronously: both sources are paused,
    pending deferred starts and the progress task are cancelled and progress
    returns to 0 before any observer runs again.

    Must be used from a running asyncio event loop.
    """

    def __init__(
        self,
        primary: AudioSource,
        secondary: AudioSource,
        config: PlaybackConfig | None = None,
        *,
        on_change: Callable[[PlaybackSnapshot], None] | None = None,
        on_notice: Callable[[str], None] | None = None,
    ):
        self.primary = primary
        self.secondary = secondary
        self.config = config or PlaybackConfig()
        self.on_change = on_change
        self.on_notice = on_notice

        self._snapshot = PlaybackSnapshot()
        self._token: _SessionToken | None = None
        self._reference: AudioSource | None = None
        self._deferred: asyncio.Task | None = None
        self._ticker: asyncio.Task | None = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False

    @property
    def snapshot(self) -> PlaybackSnapshot:
        return self._snapshot

    @property
    def is_playing(self) -> bool:
        return self._snapshot.is_playing

    @property
    def progress(self) -> float:
        return self._snapshot.progress

    @property
    def reference(self) -> AudioSource | None:
        """The source that started first in the current session."""
        return self._reference

    def start(self, mode: PlaybackMode, offset_seconds: float) -> None:
        """Start a session.

        offset >= 0: primary now, secondary after `offset` seconds.
        offset < 0: secondary now, primary after `|offset|` seconds.
        Single-track modes start only their source, without delay.

        Raises PlaybackStartError (after returning to idle) when the
        immediate source refuses to play.
        """
        if self._closed:
            raise RuntimeError("Playback controller is closed")

        loop = asyncio.get_running_loop()
        if self.is_playing:
            self.stop()

        mode = PlaybackMode(mode)
        token = _SessionToken()
        self._token = token
        self._idle.clear()
        self._update(
            state=PlaybackState.STARTING,
            mode=mode,
            offset_seconds=offset_seconds,
            progress=0.0,
            notice=None,
        )

        for source in (self.primary, self.secondary):
            source.pause()
            source.seek(0.0)

        immediate, delayed, delay = self._plan(mode, offset_seconds)
        self._reference = immediate

        try:
            immediate.play()
            if delayed is not None and delay <= 0:
                delayed.play()
        except PlaybackStartError as e:
            self._abort(e)
            raise

        if delayed is not None and delay > 0:
            self._deferred = loop.create_task(self._start_later(delayed, delay, token))

        self._ticker = loop.create_task(self._track_progress(token))
        self._update(state=PlaybackState.PLAYING)
        log_step(
            "Playback",
            f"{mode.value}: {immediate.name} started"
            + (f", {delayed.name} in {delay:.2f}s" if delayed is not None and delay > 0 else ""),
        )

    def stop(self) -> None:
        """Return to idle from any state. Safe to call repeatedly."""
        if self._token is not None:
            self._token.cancelled = True
            self._token = None

        current = _current_task()
        for task in (self._deferred, self._ticker):
            if task is not None and task is not current and not task.done():
                task.cancel()
        self._deferred = None
        self._ticker = None

        self.primary.pause()
        self.secondary.pause()
        self._reference = None

        was_playing = self.is_playing
        self._update(state=PlaybackState.IDLE, progress=0.0)
        self._idle.set()
        if was_playing:
            log_step("Playback", "Stopped")

    def toggle(self, mode: PlaybackMode, offset_seconds: float) -> bool:
        """Stop when already playing `mode`, otherwise (re)start in `mode`.

        Returns True when playback is running afterwards.
        """
        mode = PlaybackMode(mode)
        if self.is_playing and self._snapshot.mode == mode:
            self.stop()
            return False
        self.start(mode, offset_seconds)
        return True

    def offset_changed(self, offset_seconds: float) -> None:
        """Any offset change while playing ends the session; there is no re-sync."""
        if self.is_playing and offset_seconds != self._snapshot.offset_seconds:
            log_step("Playback", "Offset changed, stopping preview")
            self.stop()

    async def wait_finished(self) -> None:
        """Wait until the controller is idle again."""
        await self._idle.wait()

    def close(self) -> None:
        """Stop and release both sources."""
        if self._closed:
            return
        self.stop()
        self._closed = True
        self.primary.close()
        self.secondary.close()

    def _plan(
        self, mode: PlaybackMode, offset_seconds: float
    ) -> tuple[AudioSource, AudioSource | None, float]:
        """(source started now, source started later, delay in seconds)."""
        if mode == PlaybackMode.PRIMARY_ONLY:
            return self.primary, None, 0.0
        if mode == PlaybackMode.SECONDARY_ONLY:
            return self.secondary, None, 0.0
        if offset_seconds >= 0:
            return self.primary, self.secondary, offset_seconds
        return self.secondary, self.primary, abs(offset_seconds)

    async def _start_later(self, source: AudioSource, delay: float, token: _SessionToken) -> None:
        await asyncio.sleep(delay)
        if token.cancelled:
            return
        try:
            source.play()
        except PlaybackStartError as e:
            self._abort(e)

    async def _track_progress(self, token: _SessionToken) -> None:
        """Recompute progress once per frame from the reference source."""
        interval = self.config.frame_interval_seconds
        while True:
            await asyncio.sleep(interval)
            if token.cancelled or self._reference is None:
                return

            reference = self._reference
            duration = reference.duration
            if duration <= 0:
                duration = self.config.fallback_duration_seconds
            progress = min(max(reference.current_time / duration, 0.0), 1.0)
            self._update(progress=progress)

            if progress >= self.config.end_progress_threshold or reference.ended:
                log_step("Playback", f"{reference.name} ended")
                self.stop()
                return

    def _abort(self, error: PlaybackStartError) -> None:
        """Tear the whole session down so no source keeps playing alone."""
        self.stop()
        notice = f"{error}. Check that audio output is allowed to start."
        log_error(notice)
        self._update(notice=notice)
        if self.on_notice is not None:
            self.on_notice(notice)

    def _update(self, **changes) -> None:
        self._snapshot = self._snapshot.model_copy(update=changes)
        if self.on_change is not None:
            self.on_change(self._snapshot)


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
