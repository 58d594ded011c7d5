"""Rich rendering of the player screen."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from podterm.models.episode import Episode
from podterm.models.playback import PlaybackStatus
from podterm.models.transcript import Transcript
from podterm.transcript.cursor import CursorState
from podterm.utils.timecode import format_duration

PLAYER_HEIGHT = 8
KEYS_HEIGHT = 1
PANEL_BORDER_ROWS = 2

TRANSCRIPT_BADGES = {
    "transcribing": "[yellow](Transcribing...)[/yellow]",
    "partial": "[yellow](Partial transcript)[/yellow]",
    "available": "[cyan](Transcript available)[/cyan]",
    "none": "",
}


@dataclass(frozen=True)
class SessionView:
    """Everything one frame needs, captured at the end of a tick."""

    episode: Episode
    position: int
    duration: int
    status: PlaybackStatus
    transcript: Transcript | None
    cursor: CursorState
    viewport_height: int
    transcript_status: str = "none"
    transcription_progress: int = 0
    chat_ready: bool = False
    playback_enabled: bool = True
    status_message: str | None = None
    error_message: str | None = None
    seek_step: int = 30


def render_view(view: SessionView) -> Layout:
    layout = Layout()
    layout.split_column(
        Layout(_player_panel(view), name="player", size=PLAYER_HEIGHT),
        Layout(_transcript_panel(view), name="transcript"),
        Layout(_key_help(view), name="keys", size=KEYS_HEIGHT),
    )
    return layout


def _player_panel(view: SessionView) -> Panel:
    ep = view.episode
    published = ep.published_at.strftime("%Y-%m-%d") if ep.published_at else "unknown date"

    heading = Text(f"{ep.title} ", style="bold")
    heading.append_text(Text.from_markup(TRANSCRIPT_BADGES.get(view.transcript_status, "")))
    if view.chat_ready:
        heading.append_text(Text.from_markup(" [green](Chat ready)[/green]"))
    heading.no_wrap = True
    heading.overflow = "ellipsis"

    if view.error_message:
        message = Text(view.error_message, style="red", no_wrap=True, overflow="ellipsis")
    elif view.status_message:
        message = Text(view.status_message, style="dim", no_wrap=True, overflow="ellipsis")
    else:
        message = Text("")

    state = "▶ Playing" if view.status is PlaybackStatus.PLAYING else "⏸ Paused"
    if not view.playback_enabled:
        state = "Playback unavailable"
    clock = Text(
        f"{format_duration(view.position)} / {format_duration(view.duration)}   {state}",
        justify="center",
    )

    body = Group(
        heading,
        Text(f"{ep.podcast_title} · {published}", style="dim", no_wrap=True, overflow="ellipsis"),
        message,
        ProgressBar(total=max(view.duration, 1), completed=min(view.position, max(view.duration, 1))),
        clock,
    )
    return Panel(body, title="Audio Player", border_style="blue")


def _transcript_panel(view: SessionView) -> Panel:
    transcript = view.transcript
    if transcript is None or not transcript.items:
        if view.transcript_status == "transcribing":
            note = f"Transcribing... {view.transcription_progress}%"
        else:
            note = "No transcript available"
        return Panel(Text(note, style="dim"), title="Transcript", border_style="dim")

    items = transcript.items
    start = view.cursor.scroll_offset
    end = min(start + view.viewport_height, len(items))

    table = Table.grid(expand=True)
    table.add_column(no_wrap=True, overflow="ellipsis")
    for idx in range(start, end):
        seg = items[idx]
        line = Text(f"{format_duration(seg.timestamp)} ")
        if seg.speaker:
            line.append(f"{seg.speaker} ", style="cyan")
        line.append(seg.text)
        if idx == view.cursor.active_index:
            line.stylize("bold white on blue")
        elif idx < view.cursor.active_index:
            line.stylize("dim")
        table.add_row(line)

    arrows = ("↑ " if start > 0 else "") + ("↓" if end < len(items) else "")
    subtitle = f"{view.cursor.active_index + 1}/{len(items)} {arrows}".strip()
    return Panel(table, title="Transcript", subtitle=subtitle, border_style="blue")


def _key_help(view: SessionView) -> Text:
    chat = "[green]Available[/green]" if view.chat_ready else "[yellow]Unavailable[/yellow]"
    parts = [
        "Enter: Play/Pause",
        f"←/→: Seek {view.seek_step}s",
        "↑/↓: Navigate",
        "PgUp/PgDn: Page",
        f"c: Chat ({chat})",
        "q: Quit",
    ]
    return Text.from_markup(" | ".join(parts), justify="center", overflow="ellipsis")


class LiveRenderer:
    """Paints ``SessionView`` frames in the terminal's alternate screen."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self._live: Live | None = None

    def viewport_height(self) -> int:
        height = self.console.size.height
        return max(height - PLAYER_HEIGHT - KEYS_HEIGHT - PANEL_BORDER_ROWS, 1)

    def start(self) -> None:
        if self._live is None:
            self._live = Live(
                console=self.console,
                screen=True,
                auto_refresh=False,
                redirect_stdout=False,
                redirect_stderr=False,
            )
            self._live.start()

    def close(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Leave the alternate screen, e.g. while the chat prompt runs."""
        was_live = self._live is not None
        self.close()
        try:
            yield
        finally:
            if was_live:
                self.start()

    def __call__(self, view: SessionView) -> None:
        if self._live is None:
            self.start()
        self._live.update(render_view(view), refresh=True)
