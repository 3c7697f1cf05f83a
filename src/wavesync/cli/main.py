"""Root CLI group for wavesync."""

from __future__ import annotations

import click

from wavesync import __version__
from wavesync.utils.progress import set_quiet


@click.group()
@click.version_option(version=__version__, prog_name="wavesync")
@click.option("--quiet", "-q", is_flag=True, help="Only print warnings, errors and results")
def cli(quiet: bool) -> None:
    """wavesync — line up a separately recorded audio track with a video."""
    set_quiet(quiet)


# Import and register subcommands
from wavesync.cli.analyze_cmd import analyze_cmd  # noqa: E402
from wavesync.cli.preview_cmd import preview_cmd  # noqa: E402
from wavesync.cli.config_cmd import config_cmd  # noqa: E402

cli.add_command(analyze_cmd, "analyze")
cli.add_command(preview_cmd, "preview")
cli.add_command(config_cmd, "config")
