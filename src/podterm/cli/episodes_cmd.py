"""podterm episodes — list the synced episode catalog."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from podterm.cli.context import AppContext
from podterm.errors import CatalogError
from podterm.transcript.store import TranscriptStore
from podterm.utils.progress import log_error
from podterm.utils.timecode import format_duration

console = Console()

DOWNLOAD_ICONS = {
    True: "[green]●[/green]",
    False: "[dim]○[/dim]",
}

TRANSCRIPT_ICONS = {
    "complete": "[green]✓[/green]",
    "started": "[yellow]◑[/yellow]",
    "none": "[dim]—[/dim]",
}


@click.command()
@click.option("--search", "-s", default=None, help="Filter by title or podcast")
@click.option("--limit", "-n", default=30, type=int, help="Maximum rows to show")
@click.option("--downloaded", is_flag=True, help="Only downloaded episodes")
@click.pass_obj
def episodes_cmd(app: AppContext, search: str | None, limit: int, downloaded: bool) -> None:
    """List episodes from the synced catalog."""
    try:
        catalog = app.catalog()
    except CatalogError as e:
        log_error(str(e))
        raise SystemExit(1)

    episodes = catalog.search(search) if search else list(catalog)
    if downloaded:
        episodes = [e for e in episodes if app.paths.is_downloaded(e)]

    table = Table(title=f"Episodes ({min(len(episodes), limit)} of {len(episodes)})")
    table.add_column("ID", style="dim")
    table.add_column("Podcast")
    table.add_column("Title", style="bold")
    table.add_column("Published")
    table.add_column("Duration", justify="right")
    table.add_column("DL", justify="center")
    table.add_column("TX", justify="center")

    for ep in episodes[:limit]:
        transcript_path = app.paths.transcript_path(ep)
        if not transcript_path.exists():
            tx = "none"
        else:
            tx = "complete" if _is_complete(transcript_path) else "started"
        table.add_row(
            ep.uuid[:8],
            ep.podcast_title,
            ("★ " if ep.starred else "") + ep.title,
            ep.published_at.strftime("%Y-%m-%d") if ep.published_at else "—",
            format_duration(ep.duration),
            DOWNLOAD_ICONS[app.paths.is_downloaded(ep)],
            TRANSCRIPT_ICONS[tx],
        )

    console.print(table)


def _is_complete(path) -> bool:
    return TranscriptStore().load(path).loaded
