"""podterm transcribe — run the transcription tool in the foreground."""

from __future__ import annotations

import click

from podterm.cli.context import AppContext
from podterm.cli.download_cmd import ensure_downloaded
from podterm.errors import DownloadError, PlayerProcessError
from podterm.services.transcription import TranscriptionRegistry
from podterm.transcript.store import TranscriptStore
from podterm.utils.progress import (
    console,
    log,
    log_error,
    log_step,
    log_success,
    show_summary,
)
from podterm.utils.timecode import format_duration


@click.command()
@click.argument("episode_id")
@click.option("--force", is_flag=True, help="Replace an existing transcript")
@click.pass_obj
def transcribe_cmd(app: AppContext, episode_id: str, force: bool) -> None:
    """Transcribe EPISODE_ID, downloading it first if needed."""
    episode = app.episode(episode_id)
    try:
        ensure_downloaded(app, episode)
    except DownloadError as e:
        log_error(str(e))
        raise SystemExit(1)

    transcript_path = app.paths.transcript_path(episode)
    store = TranscriptStore()
    existing = store.load(transcript_path)
    if existing.loaded and not force:
        log(f"[dim]Transcript already complete ({existing.count} segments): {transcript_path}[/dim]")
        return
    if force:
        transcript_path.unlink(missing_ok=True)

    registry = TranscriptionRegistry(
        app.config.transcription,
        app.paths,
        terminate_timeout=app.config.player.terminate_timeout_seconds,
    )
    try:
        registry.start(episode)
    except PlayerProcessError as e:
        log_error(str(e))
        raise SystemExit(1)

    log_step("Transcribe", f"{episode.title} → {transcript_path}")
    try:
        with console.status("Transcribing...", spinner="dots") as status:
            def report() -> None:
                snapshot = store.load(transcript_path)
                status.update(f"Transcribing... {snapshot.count} segments so far")

            outcome = registry.wait(
                episode.uuid,
                poll=app.config.transcription.poll_interval_seconds,
                on_poll=report,
            )
    except KeyboardInterrupt:
        registry.stop_all()
        log_error("Transcription cancelled")
        raise SystemExit(130)

    transcript = store.load(transcript_path)
    if outcome != "completed" or not transcript.loaded:
        log_error(f"Transcription {outcome}: {transcript.diagnostic or 'incomplete output'}")
        raise SystemExit(1)
    log_success(f"Transcribed {transcript.count} segments")
    show_summary("Transcript", {
        "Episode": episode.title,
        "Segments": transcript.count,
        "Last timestamp": format_duration(transcript.last_timestamp),
        "File": transcript_path,
    })
