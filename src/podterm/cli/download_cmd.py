"""podterm download — fetch episode audio."""

from __future__ import annotations

from pathlib import Path

import click

from podterm.cli.context import AppContext
from podterm.errors import DownloadError
from podterm.models.episode import Episode
from podterm.services.download import download_episode
from podterm.utils.progress import log, log_error, log_success, transfer_progress


def ensure_downloaded(app: AppContext, episode: Episode) -> Path:
    """Download the episode unless it is already on disk, showing progress."""
    target = app.paths.download_path(episode)
    if app.paths.is_downloaded(episode):
        return target

    progress = transfer_progress()
    task_id = progress.add_task("Downloading", total=None)

    def on_progress(received: int, total: int | None) -> None:
        progress.update(task_id, completed=received, total=total)

    with progress:
        path = download_episode(
            episode,
            app.paths,
            app.config.download,
            on_progress=on_progress,
        )
    log_success(f"Downloaded {episode.title} → {path}")
    return path


@click.command()
@click.argument("episode_id")
@click.pass_obj
def download_cmd(app: AppContext, episode_id: str) -> None:
    """Download the audio for EPISODE_ID (uuid or unique prefix)."""
    episode = app.episode(episode_id)
    if app.paths.is_downloaded(episode):
        log(f"[dim]Already downloaded: {app.paths.download_path(episode)}[/dim]")
        return
    try:
        ensure_downloaded(app, episode)
    except DownloadError as e:
        log_error(str(e))
        raise SystemExit(1)
