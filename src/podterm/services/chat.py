"""Chat about a finished transcript via the Claude API."""

from __future__ import annotations

import os
from typing import Any, Callable

from rich.console import Console
from rich.markdown import Markdown

from podterm.errors import ChatUnavailable
from podterm.models.config import ChatConfig
from podterm.models.episode import Episode
from podterm.models.transcript import Transcript
from podterm.utils.retry import retry_api

SYSTEM_PROMPT = """You are answering questions about one podcast episode.

Podcast: {podcast_title}
Episode: {title}

Show notes:
{notes}

Full transcript, one line per segment as [MM:SS] Speaker: text:
{transcript_text}

Answer from the transcript. Cite timestamps as [MM:SS] when you refer to a
specific moment. Say so plainly when the transcript does not cover a question."""

EXIT_WORDS = {"q", "quit", "exit"}


def create_client(api_key: str | None = None) -> Any:
    """Build an Anthropic client, or raise ChatUnavailable explaining why not."""
    api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise ChatUnavailable("ANTHROPIC_API_KEY not set")
    try:
        import anthropic
    except ImportError as e:
        raise ChatUnavailable(
            "anthropic package not installed. Install with: pip install anthropic"
        ) from e
    return anthropic.Anthropic(api_key=api_key)


def transient_errors() -> tuple[type[BaseException], ...]:
    """Anthropic errors worth retrying: dropped connections, rate limits, 5xx."""
    import anthropic

    return (
        anthropic.APIConnectionError,
        anthropic.RateLimitError,
        anthropic.InternalServerError,
    )


class TranscriptChat:
    """A multi-turn conversation grounded in one transcript."""

    def __init__(self, episode: Episode, transcript: Transcript, config: ChatConfig, client: Any):
        if not transcript.items:
            raise ChatUnavailable(f"No transcript available for: {episode.title}")
        self.episode = episode
        self.config = config
        self.history: list[dict[str, str]] = []
        self._client = client
        self._system = SYSTEM_PROMPT.format(
            podcast_title=episode.podcast_title,
            title=episode.title,
            notes=episode.notes or "(none)",
            transcript_text=transcript.as_text(),
        )

    def ask(self, question: str) -> str:
        """Send ``question`` with the conversation so far and return the answer."""
        messages = self.history + [{"role": "user", "content": question}]
        send = retry_api(
            self.config.max_attempts,
            min_wait=self.config.retry_wait_seconds,
            retry_on=transient_errors(),
        )(self._client.messages.create)
        message = send(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            system=self._system,
            messages=messages,
        )
        answer = "".join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        ).strip()
        self.history = messages + [{"role": "assistant", "content": answer}]
        return answer


def run_chat_repl(
    chat: TranscriptChat,
    console: Console,
    *,
    prompt: Callable[[], str] | None = None,
) -> int:
    """Interactive question loop; an empty line, ``q`` or EOF ends it.

    Returns the number of questions answered.
    """
    read = prompt or (lambda: console.input("[bold cyan]>[/bold cyan] "))
    console.print(f"[cyan]Chatting about: {chat.episode.title}[/cyan]")
    console.print("[dim]Ask about the transcript. Empty line or 'q' to go back.[/dim]\n")

    answered = 0
    while True:
        try:
            question = read().strip()
        except EOFError:
            break
        if not question or question.lower() in EXIT_WORDS:
            break

        try:
            with console.status("Thinking...", spinner="dots"):
                answer = chat.ask(question)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            continue

        console.print(Markdown(answer))
        console.print()
        answered += 1

    console.print("[cyan]Goodbye![/cyan]")
    return answered
