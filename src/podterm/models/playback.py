"""Playback state snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from podterm.player.process import ExternalProcessHandle


class PlaybackStatus(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"
    CLOSED = "closed"


@dataclass(frozen=True)
class PlaybackState:
    """Read-only view of a session's playback state.

    ``process_handle`` is set exactly when ``playing`` is true.
    """

    position_seconds: int
    playing: bool
    status: PlaybackStatus
    process_handle: ExternalProcessHandle | None = None
    start_wall_clock: float | None = None
