"""wavesync preview — play a video/audio pair with an offset applied."""

from __future__ import annotations

import asyncio

import click
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from wavesync.errors import ConfigError, PlaybackStartError
from wavesync.models.config import SyncConfig, load_config
from wavesync.models.playback import PlaybackMode
from wavesync.models.track import AudioTrack
from wavesync.playback.sources import AudioSource, ClockSource
from wavesync.session import SyncSession, device_source_factory
from wavesync.utils.progress import console, log, log_error


def clock_source_factory(track: AudioTrack, config: SyncConfig) -> AudioSource:
    return ClockSource(track.role.value, track.playback_duration)


@click.command()
@click.argument("video", type=click.Path(exists=True, dir_okay=False))
@click.argument("audio", type=click.Path(exists=True, dir_okay=False))
@click.option("--offset", type=float, default=None, help="Offset in seconds (clamped to the allowed range)")
@click.option("--auto", "auto_offset", is_flag=True, help="Analyze first and use the selected suggestion")
@click.option(
    "--mode",
    default=PlaybackMode.BOTH.value,
    type=click.Choice([m.value for m in PlaybackMode]),
    help="Which tracks to play",
)
@click.option("--dry-run", is_flag=True, help="Simulate playback without an audio device")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(),
    help="Path to a sync config YAML",
)
def preview_cmd(
    video: str,
    audio: str,
    offset: float | None,
    auto_offset: bool,
    mode: str,
    dry_run: bool,
    config_path: str | None,
) -> None:
    """Play VIDEO's audio and AUDIO together, offset by --offset seconds."""
    if offset is not None and auto_offset:
        log_error("Use either --offset or --auto, not both")
        raise SystemExit(2)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        log_error(str(e))
        raise SystemExit(1)

    factory = clock_source_factory if dry_run else device_source_factory
    try:
        asyncio.run(run_preview(video, audio, config, PlaybackMode(mode), offset, auto_offset, factory))
    except PlaybackStartError as e:
        log_error(str(e))
        raise SystemExit(1)
    except KeyboardInterrupt:
        log("Preview interrupted")


async def run_preview(
    video: str,
    audio: str,
    config: SyncConfig,
    mode: PlaybackMode,
    offset: float | None,
    auto_offset: bool,
    source_factory,
) -> float:
    """Play the pair until the reference track ends. Returns the offset used."""
    session = SyncSession(video, audio, config, source_factory=source_factory)
    try:
        if auto_offset:
            await session.analyze()
        else:
            session.set_offset(offset or 0.0)

        log(f"Previewing {mode.value} with offset {session.offset:+.1f}s")
        controller = await session.preview(mode)

        with Progress(
            TextColumn("[bold cyan]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task(mode.value, total=1.0)
            while controller.is_playing:
                progress.update(task, completed=controller.progress)
                await asyncio.sleep(0.1)
            progress.update(task, completed=1.0)

        return session.offset
    finally:
        session.close()
