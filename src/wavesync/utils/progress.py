"""Console logging for analysis and playback, using Rich."""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console(stderr=True)

_quiet = False


def set_quiet(quiet: bool) -> None:
    """Silence step and info messages; warnings and errors still print."""
    global _quiet
    _quiet = quiet


def _stamp() -> str:
    return datetime.now().strftime("%H:%M:%S.%f")[:-3]


def log(message: str, *, style: str = "bold") -> None:
    """Log a timestamped message."""
    if _quiet:
        return
    console.print(f"[dim]\\[{_stamp()}][/dim] {message}", style=style, highlight=False)


def log_step(step: str, message: str) -> None:
    """Log a step of the sync pipeline (Decode, Features, Correlate, ...)."""
    if _quiet:
        return
    console.print(
        f"[dim]\\[{_stamp()}][/dim] [bold cyan]{step}[/bold cyan] {message}",
        highlight=False,
    )


def log_success(message: str) -> None:
    log(f"[green]✓[/green] {message}", style="")


def log_warning(message: str) -> None:
    console.print(f"[dim]\\[{_stamp()}][/dim] [yellow]⚠[/yellow] {message}", highlight=False)


def log_error(message: str) -> None:
    console.print(f"[dim]\\[{_stamp()}][/dim] [red]✗[/red] {message}", highlight=False)


def show_summary(title: str, details: dict, duration_seconds: float | None = None) -> None:
    """Show a key/value summary panel, e.g. after an analysis run."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()

    for key, value in details.items():
        table.add_row(key, str(value))

    if duration_seconds is not None:
        table.add_row("Elapsed", f"{duration_seconds:.2f}s")

    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="green"))
