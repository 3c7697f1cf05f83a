"""wavesync config — manage sync configuration files."""

from __future__ import annotations

from pathlib import Path

import click

from wavesync.errors import ConfigError
from wavesync.models.config import SyncConfig, load_config
from wavesync.utils.io import write_yaml
from wavesync.utils.progress import log_error, log_success


@click.group()
def config_cmd() -> None:
    """Create or check a sync config file."""


@config_cmd.command("init")
@click.option(
    "--output", "-o",
    default="wavesync.yaml",
    type=click.Path(),
    help="Where to write the config",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_cmd(output: str, force: bool) -> None:
    """Write a config file holding every default value."""
    path = Path(output)
    if path.exists() and not force:
        log_error(f"{path} already exists (use --force to overwrite)")
        raise SystemExit(1)

    write_yaml(path, SyncConfig().model_dump(mode="json"))
    log_success(f"Config written: {path}")


@config_cmd.command("check")
@click.argument("path", type=click.Path())
def check_cmd(path: str) -> None:
    """Validate a config file."""
    try:
        load_config(path)
    except ConfigError as e:
        log_error(str(e))
        raise SystemExit(1)
    log_success(f"{path} is valid")
