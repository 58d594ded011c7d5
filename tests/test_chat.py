"""Tests for transcript chat with a fake Anthropic client."""

from __future__ import annotations

import io
from types import SimpleNamespace

import anthropic
import httpx
import pytest
from rich.console import Console

from podterm.errors import ChatUnavailable
from podterm.models.config import ChatConfig
from podterm.models.transcript import Transcript, TranscriptSegment
from podterm.services.chat import TranscriptChat, create_client, run_chat_repl


class FakeMessages:
    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return SimpleNamespace(content=[
            SimpleNamespace(type="text", text=answer),
            SimpleNamespace(type="tool_use", id="ignored"),
        ])


def fake_client(*answers):
    return SimpleNamespace(messages=FakeMessages(answers))


@pytest.fixture
def transcript():
    return Transcript(
        items=(
            TranscriptSegment(timestamp=5, text="Tides come twice a day", speaker="Speaker 1"),
            TranscriptSegment(timestamp=65, text="Because of the moon"),
        ),
        started=True,
        loaded=True,
    )


def test_ask_sends_transcript_and_history(episode, transcript):
    client = fake_client("Twice [00:05].", "The moon [01:05].")
    chat = TranscriptChat(episode, transcript, ChatConfig(), client)

    assert chat.ask("How often?") == "Twice [00:05]."
    assert chat.ask("Why?") == "The moon [01:05]."

    first, second = client.messages.calls
    assert "[00:05] Speaker 1: Tides come twice a day" in first["system"]
    assert "[01:05] Because of the moon" in first["system"]
    assert "All about tides." in first["system"]
    assert first["model"] == "claude-sonnet-4-6"
    assert [m["role"] for m in second["messages"]] == ["user", "assistant", "user"]
    assert len(chat.history) == 4


def test_empty_transcript_is_unavailable(episode):
    with pytest.raises(ChatUnavailable):
        TranscriptChat(episode, Transcript(started=True), ChatConfig(), fake_client())


def test_create_client_without_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    with pytest.raises(ChatUnavailable, match="ANTHROPIC_API_KEY"):
        create_client()


def test_repl_answers_until_quit(episode, transcript):
    chat = TranscriptChat(episode, transcript, ChatConfig(), fake_client("Twice.", ValueError("bad request")))
    questions = iter(["How often?", "Broken?", "q", "never asked"])
    out = io.StringIO()

    answered = run_chat_repl(chat, Console(file=out, width=80), prompt=lambda: next(questions))

    assert answered == 1
    assert "Twice." in out.getvalue()
    assert "Error: bad request" in out.getvalue()
    assert next(questions) == "never asked"


def test_repl_ends_on_eof(episode, transcript):
    chat = TranscriptChat(episode, transcript, ChatConfig(), fake_client())

    def eof():
        raise EOFError

    assert run_chat_repl(chat, Console(file=io.StringIO()), prompt=eof) == 0


def connection_error():
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return anthropic.APIConnectionError(request=request)


def test_transient_error_is_retried(episode, transcript):
    client = fake_client(connection_error(), "Twice.")
    chat = TranscriptChat(episode, transcript, ChatConfig(retry_wait_seconds=0.0), client)

    assert chat.ask("How often?") == "Twice."
    assert len(client.messages.calls) == 2
    assert len(chat.history) == 2


def test_retries_stop_at_max_attempts(episode, transcript):
    client = fake_client(connection_error(), connection_error(), "never reached")
    config = ChatConfig(max_attempts=2, retry_wait_seconds=0.0)
    chat = TranscriptChat(episode, transcript, config, client)

    with pytest.raises(anthropic.APIConnectionError):
        chat.ask("How often?")

    assert len(client.messages.calls) == 2
    assert chat.history == []


def test_request_errors_are_not_retried(episode, transcript):
    client = fake_client(ValueError("bad request"), "unused")
    chat = TranscriptChat(episode, transcript, ChatConfig(retry_wait_seconds=0.0), client)

    with pytest.raises(ValueError):
        chat.ask("How often?")

    assert len(client.messages.calls) == 1
