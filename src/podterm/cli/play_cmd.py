"""podterm play — the interactive player."""

from __future__ import annotations

import signal
import sys

import click
from rich.console import Console

from podterm.cli.context import AppContext
from podterm.cli.download_cmd import ensure_downloaded
from podterm.errors import DownloadError
from podterm.models.episode import Episode
from podterm.models.transcript import Transcript
from podterm.player.keys import TerminalKeys
from podterm.player.session import PlaybackSession
from podterm.player.view import LiveRenderer
from podterm.services.chat import TranscriptChat, create_client, run_chat_repl
from podterm.services.transcription import TranscriptionRegistry
from podterm.utils.ffplay import player_available
from podterm.utils.ffprobe import probe_duration
from podterm.utils.progress import log_error, log_warning


def _raise_exit(signum, frame) -> None:
    raise SystemExit(128 + signum)


@click.command()
@click.argument("episode_id")
@click.option("--autoplay/--no-autoplay", default=True, help="Start playing immediately")
@click.option("--transcribe/--no-transcribe", "auto_transcribe", default=None,
              help="Start transcription if there is no transcript (default from config)")
@click.pass_obj
def play_cmd(app: AppContext, episode_id: str, autoplay: bool, auto_transcribe: bool | None) -> None:
    """Play EPISODE_ID with a synchronized transcript."""
    if not sys.stdin.isatty():
        log_error("The player needs an interactive terminal")
        raise SystemExit(1)

    episode = app.episode(episode_id)
    try:
        audio_path = ensure_downloaded(app, episode)
    except DownloadError as e:
        log_error(str(e))
        raise SystemExit(1)

    if not episode.duration:
        duration = probe_duration(audio_path)
        if duration:
            episode = episode.model_copy(update={"duration": duration})

    player = app.config.player
    if not player_available(player.binary):
        log_warning(f"{player.binary} not found on PATH; playback will fail")

    if auto_transcribe is None:
        auto_transcribe = app.config.transcription.auto_start

    console = Console()

    def launch_chat(ep: Episode, transcript: Transcript) -> None:
        chat = TranscriptChat(ep, transcript, app.config.chat, create_client())
        run_chat_repl(chat, console)

    registry = TranscriptionRegistry(
        app.config.transcription,
        app.paths,
        terminate_timeout=player.terminate_timeout_seconds,
    )
    previous = signal.signal(signal.SIGTERM, _raise_exit)
    try:
        session = PlaybackSession(
            episode,
            audio_path=audio_path,
            transcript_path=app.paths.transcript_path(episode),
            config=player,
            keys=TerminalKeys().open(),
            renderer=LiveRenderer(console),
            transcriptions=registry,
            auto_transcribe=auto_transcribe,
            poll_interval=app.config.transcription.poll_interval_seconds,
            chat=launch_chat,
        )
        session.run(autoplay=autoplay)
    finally:
        signal.signal(signal.SIGTERM, previous)
