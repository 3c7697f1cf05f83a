"""One video/audio pair: analysis, accepted offset and preview playback."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Callable

from wavesync.analysis.decode import DecodingContext
from wavesync.analysis.loader import load_track
from wavesync.correlation.engine import find_candidates
from wavesync.models.config import SyncConfig
from wavesync.models.playback import PlaybackMode, PlaybackSnapshot
from wavesync.models.suggestion import SyncSuggestions
from wavesync.models.track import AudioTrack, FeatureSet, TrackRole
from wavesync.playback.controller import PlaybackController
from wavesync.playback.sources import AudioSource, DeviceSource
from wavesync.suggestions.aggregate import rank_suggestions
from wavesync.suggestions.offsets import clamp_offset, drag_offset, nudge_offset
from wavesync.utils.progress import log, log_step, log_success, log_warning

SourceFactory = Callable[[AudioTrack, SyncConfig], AudioSource]


def device_source_factory(track: AudioTrack, config: SyncConfig) -> AudioSource:
    return DeviceSource.from_track(
        track,
        device=config.playback.output_device,
        blocksize=config.playback.output_blocksize,
    )


class SyncSession:
    """Owns the tracks, features, suggestions and player of one source pair.

    Everything derived from the sources is replaced wholesale when they
    change (set_sources) and released by close(). The decoding context is
    created on first use and closed on teardown.
    """

    def __init__(
        self,
        video: str | Path,
        audio: str | Path,
        config: SyncConfig | None = None,
        *,
        context: DecodingContext | None = None,
        source_factory: SourceFactory = device_source_factory,
        on_offset_change: Callable[[float], None] | None = None,
        on_playback_change: Callable[[PlaybackSnapshot], None] | None = None,
        on_notice: Callable[[str], None] | None = None,
    ):
        self.config = config or SyncConfig()
        self.video = str(video)
        self.audio = str(audio)
        self.source_factory = source_factory
        self.on_offset_change = on_offset_change
        self.on_playback_change = on_playback_change
        self.on_notice = on_notice

        self._context = context
        self._offset = 0.0
        self._selected: float | None = None
        self._suggestions: SyncSuggestions | None = None
        self._tracks: dict[TrackRole, AudioTrack] = {}
        self._features: dict[TrackRole, FeatureSet] = {}
        self._controller: PlaybackController | None = None
        self._analyzing_generation: int | None = None
        self._load_lock = asyncio.Lock()
        self._generation = 0
        self._closed = False

    # -- state -----------------------------------------------------------

    @property
    def offset(self) -> float:
        """The accepted offset: in range, at the configured granularity."""
        return self._offset

    @property
    def selected_suggestion(self) -> float | None:
        return self._selected

    @property
    def suggestions(self) -> SyncSuggestions | None:
        return self._suggestions

    @property
    def is_analyzing(self) -> bool:
        return self._analyzing_generation == self._generation

    @property
    def playback(self) -> PlaybackSnapshot:
        if self._controller is None:
            return PlaybackSnapshot(offset_seconds=self._offset)
        return self._controller.snapshot

    @property
    def controller(self) -> PlaybackController | None:
        return self._controller

    def track(self, role: TrackRole) -> AudioTrack | None:
        return self._tracks.get(role)

    def features(self, role: TrackRole) -> FeatureSet | None:
        return self._features.get(role)

    def waveform(self, role: TrackRole) -> list[float]:
        track = self._tracks.get(role)
        return list(track.waveform) if track is not None else []

    # -- analysis --------------------------------------------------------

    async def analyze(self) -> SyncSuggestions | None:
        """Find offset suggestions and auto-apply the selected one.

        Returns None without doing anything while another analysis of the
        current sources is still running. An analysis of sources replaced by
        set_sources() does not block one of the new pair.
        """
        self._ensure_open()
        if self.is_analyzing:
            log_warning("Analysis already in progress, ignoring request")
            return None

        generation = self._generation
        self._analyzing_generation = generation
        self._suggestions = None
        started = time.monotonic()
        try:
            await self._load_pair(generation)
            if generation != self._generation:
                log_warning("Sources changed during analysis, discarding results")
                return None

            primary = self._tracks[TrackRole.PRIMARY]
            secondary = self._tracks[TrackRole.SECONDARY]
            if primary.is_placeholder or secondary.is_placeholder:
                log_warning("Analyzing placeholder audio; suggestions are not meaningful")

            candidates = find_candidates(
                primary,
                self._features[TrackRole.PRIMARY],
                secondary,
                self._features[TrackRole.SECONDARY],
                self.config.correlation,
            )
            suggestions = rank_suggestions(
                candidates, self.config.suggestions, self.config.offset
            )
            self._suggestions = suggestions

            if suggestions.selected is not None:
                self.apply_suggestion(suggestions.selected)

            log_success(
                f"Analysis finished in {time.monotonic() - started:.2f}s: "
                f"offset {self._offset:+.1f}s"
            )
            return suggestions
        finally:
            if self._analyzing_generation == generation:
                self._analyzing_generation = None

    async def _load_pair(self, generation: int) -> None:
        """Load whichever tracks are missing.

        analyze() and preview() may both be waiting here; the lock keeps the
        shared decoding context to one decode at a time and lets the second
        caller reuse what the first loaded.
        """
        async with self._load_lock:
            for role in (TrackRole.PRIMARY, TrackRole.SECONDARY):
                if generation != self._generation:
                    return
                await self._load(role, generation)

    async def _load(self, role: TrackRole, generation: int) -> None:
        if role in self._tracks:
            return
        locator = self.video if role == TrackRole.PRIMARY else self.audio
        context = self._get_context()
        track, features = await asyncio.to_thread(
            load_track, context, locator, role, self.config
        )
        if generation != self._generation:
            return
        self._tracks[role] = track
        self._features[role] = features

    def _get_context(self) -> DecodingContext:
        if self._context is None:
            log_step("Decode", "Opening decoding context")
            self._context = DecodingContext(self.config.decoder)
        return self._context

    # -- offset ----------------------------------------------------------

    def set_offset(self, offset: float) -> float:
        """Accept a manual offset (clamped and rounded, never rejected).

        Manual changes clear the selected suggestion. A running preview
        stops.
        """
        self._selected = None
        return self._accept(offset)

    def apply_suggestion(self, offset: float) -> float:
        accepted = self._accept(offset)
        self._selected = accepted
        return accepted

    def nudge(self, direction: int) -> float:
        return self.set_offset(nudge_offset(self._offset, direction, self.config.offset))

    def drag(self, start_offset: float, delta_px: float, width_px: float) -> float:
        return self.set_offset(
            drag_offset(start_offset, delta_px, width_px, self.config.offset)
        )

    def _accept(self, offset: float) -> float:
        accepted = clamp_offset(offset, self.config.offset)
        changed = accepted != self._offset
        self._offset = accepted
        if self._controller is not None:
            self._controller.offset_changed(accepted)
        if changed and self.on_offset_change is not None:
            self.on_offset_change(accepted)
        return accepted

    # -- playback --------------------------------------------------------

    async def preview(self, mode: PlaybackMode = PlaybackMode.BOTH) -> PlaybackController:
        """Play the pair with the accepted offset (toggles off when already playing `mode`)."""
        self._ensure_open()
        await self._load_pair(self._generation)
        if len(self._tracks) < 2:
            raise RuntimeError("Sources changed while loading the preview")

        if self._controller is None:
            self._controller = PlaybackController(
                self.source_factory(self._tracks[TrackRole.PRIMARY], self.config),
                self.source_factory(self._tracks[TrackRole.SECONDARY], self.config),
                self.config.playback,
                on_change=self.on_playback_change,
                on_notice=self.on_notice,
            )

        self._controller.toggle(mode, self._offset)
        return self._controller

    def stop_preview(self) -> None:
        if self._controller is not None:
            self._controller.stop()

    # -- teardown --------------------------------------------------------

    def set_sources(self, video: str | Path, audio: str | Path) -> None:
        """Switch to a new pair; everything derived from the old pair is released."""
        self._ensure_open()
        self._teardown()
        self.video = str(video)
        self.audio = str(audio)
        log("Sources changed, previous analysis discarded")

    def close(self) -> None:
        if self._closed:
            return
        self._teardown()
        self._closed = True

    def _teardown(self) -> None:
        self._generation += 1
        if self._controller is not None:
            self._controller.close()
            self._controller = None
        if self._context is not None:
            self._context.close()
            self._context = None
        self._tracks.clear()
        self._features.clear()
        self._suggestions = None
        self._selected = None

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Sync session is closed")

    async def __aenter__(self) -> SyncSession:
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()
