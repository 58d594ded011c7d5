"""Console output: timestamped log lines, summaries and transfer progress.

Everything goes to stderr so command output on stdout (tables, chat
answers) stays clean. The live player screen owns the terminal while it
runs, so nothing here should be called between its start and close.
"""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.table import Table

console = Console(stderr=True)

MARKERS = {
    "success": "[green]✓[/green]",
    "warning": "[yellow]⚠[/yellow]",
    "error": "[red]✗[/red]",
}


def _stamp() -> str:
    return f"[dim]\\[{datetime.now():%H:%M:%S}][/dim]"


def log(message: str, *, style: str = "bold") -> None:
    console.print(f"{_stamp()} {message}", style=style, highlight=False)


def log_step(step: str, message: str) -> None:
    """Log the start of a named step, e.g. ``log_step("Transcribe", path)``."""
    console.print(f"{_stamp()} [bold cyan]{step}[/bold cyan] {message}", highlight=False)


def _log_marked(kind: str, message: str) -> None:
    log(f"{MARKERS[kind]} {message}", style="")


def log_success(message: str) -> None:
    _log_marked("success", message)


def log_warning(message: str) -> None:
    _log_marked("warning", message)


def log_error(message: str) -> None:
    _log_marked("error", message)


def show_summary(title: str, details: dict) -> None:
    """Print ``details`` as a two-column panel."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    for key, value in details.items():
        table.add_row(key, str(value))
    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="green"))


def transfer_progress() -> Progress:
    """Progress bar for byte transfers whose size may be unknown."""
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>6.2f}%"),
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
        console=console,
    )
