"""podterm chat — ask questions about a finished transcript."""

from __future__ import annotations

import click
from rich.console import Console

from podterm.cli.context import AppContext
from podterm.errors import ChatUnavailable
from podterm.services.chat import TranscriptChat, create_client, run_chat_repl
from podterm.transcript.store import TranscriptStore
from podterm.utils.progress import log_error


@click.command()
@click.argument("episode_id")
@click.pass_obj
def chat_cmd(app: AppContext, episode_id: str) -> None:
    """Chat about the transcript of EPISODE_ID."""
    episode = app.episode(episode_id)
    transcript = TranscriptStore().load(app.paths.transcript_path(episode))
    if not transcript.loaded:
        reason = transcript.diagnostic or "no transcript yet"
        log_error(f"Transcript not complete for {episode.title}: {reason}")
        raise SystemExit(1)

    try:
        chat = TranscriptChat(episode, transcript, app.config.chat, create_client())
    except ChatUnavailable as e:
        log_error(f"Chat unavailable: {e}")
        raise SystemExit(1)
    run_chat_repl(chat, Console())
