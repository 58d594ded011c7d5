"""Tests for rendering session snapshots."""

from __future__ import annotations

import io

from rich.console import Console

from conftest import SAMPLE_ITEMS
from podterm.models.playback import PlaybackStatus
from podterm.models.transcript import Transcript
from podterm.player.view import SessionView, render_view
from podterm.transcript.cursor import CursorState
from podterm.transcript.store import segment_from_record


def render(view, height=24):
    console = Console(file=io.StringIO(), width=100, height=height, record=True)
    console.print(render_view(view))
    return console.export_text()


def make_view(episode, **overrides):
    fields = dict(
        episode=episode,
        position=70,
        duration=600,
        status=PlaybackStatus.PLAYING,
        transcript=Transcript(
            items=tuple(segment_from_record(r) for r in SAMPLE_ITEMS),
            started=True,
            loaded=True,
        ),
        cursor=CursorState(active_index=2, scroll_offset=0),
        viewport_height=9,
        transcript_status="available",
        chat_ready=True,
    )
    fields.update(overrides)
    return SessionView(**fields)


def test_player_panel(episode):
    text = render(make_view(episode))

    assert "Tides and the Moon" in text
    assert "01:10 / 10:00" in text
    assert "Playing" in text
    assert "Chat ready" in text


def test_transcript_rows(episode):
    text = render(make_view(episode))

    assert "The moon does most of the work" in text
    assert "3/4" in text


def test_no_transcript(episode):
    text = render(make_view(episode, transcript=None, transcript_status="none", chat_ready=False))

    assert "No transcript available" in text


def test_transcribing_progress(episode):
    view = make_view(
        episode,
        transcript=Transcript(started=True),
        transcript_status="transcribing",
        transcription_progress=40,
    )

    assert "Transcribing... 40%" in render(view)


def test_error_line(episode):
    view = make_view(episode, status=PlaybackStatus.PAUSED, error_message="Player exited with status 1")
    text = render(view)

    assert "Player exited with status 1" in text
    assert "Paused" in text
