"""wavesync analyze — suggest offsets for a video/audio pair."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from wavesync.errors import ConfigError
from wavesync.models.config import SyncConfig, load_config
from wavesync.models.suggestion import SyncSuggestions
from wavesync.models.track import TrackRole
from wavesync.session import SyncSession
from wavesync.utils.io import write_json
from wavesync.utils.progress import log_error, log_success, show_summary

console = Console()


@click.command()
@click.argument("video", type=click.Path(exists=True, dir_okay=False))
@click.argument("audio", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(),
    help="Path to a sync config YAML",
)
@click.option(
    "--output", "-o",
    default=None,
    type=click.Path(),
    help="Write a JSON report here",
)
def analyze_cmd(video: str, audio: str, config_path: str | None, output: str | None) -> None:
    """Analyze VIDEO and AUDIO and print ranked offset suggestions."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        log_error(str(e))
        raise SystemExit(1)

    started = time.monotonic()
    try:
        suggestions, report = asyncio.run(run_analysis(video, audio, config))
    except Exception as e:
        log_error(f"Analysis failed: {e}")
        raise SystemExit(1)

    _print_suggestions(suggestions)

    details = {
        "Video": Path(video).name,
        "Audio": Path(audio).name,
        "Accepted offset": f"{report['offset_seconds']:+.1f}s",
        "Best method": suggestions.best_method or "—",
        "Candidates": sum(suggestions.candidate_counts.values()),
    }
    placeholders = [role for role, t in report["tracks"].items() if t["placeholder"]]
    if placeholders:
        details["Placeholder data"] = ", ".join(placeholders)
    show_summary("Analysis", details, time.monotonic() - started)

    if output:
        write_json(output, report)
        log_success(f"Report: {output}")


async def run_analysis(
    video: str, audio: str, config: SyncConfig
) -> tuple[SyncSuggestions, dict]:
    """Analyze one pair and return its suggestions with a JSON report."""
    session = SyncSession(video, audio, config)
    try:
        suggestions = await session.analyze()
        if suggestions is None:
            raise RuntimeError("analysis did not run")
        return suggestions, build_report(session, suggestions)
    finally:
        session.close()


def build_report(session: SyncSession, suggestions: SyncSuggestions) -> dict:
    """JSON-serializable analysis report."""
    tracks = {}
    for role in TrackRole:
        track = session.track(role)
        if track is None:
            continue
        tracks[role.value] = {
            "locator": track.locator,
            "sample_rate": track.sample_rate,
            "duration_seconds": round(track.duration_seconds, 3),
            "metadata_duration": track.metadata_duration,
            "placeholder": track.is_placeholder,
            "waveform": [round(v, 4) for v in track.waveform],
        }

    return {
        "offset_seconds": session.offset,
        "suggestions": suggestions.model_dump(mode="json"),
        "tracks": tracks,
    }


def _print_suggestions(suggestions: SyncSuggestions) -> None:
    table = Table(title="Sync Suggestions")
    table.add_column("#", style="dim")
    table.add_column("Offset", justify="right")
    table.add_column("")

    for i, offset in enumerate(suggestions.offsets, start=1):
        marks = []
        if offset == suggestions.selected:
            marks.append("[green]selected[/green]")
        if offset == suggestions.best_offset:
            marks.append("best match")
        table.add_row(str(i), f"{offset:+.1f}s", ", ".join(marks))

    console.print(table)
