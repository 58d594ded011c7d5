"""Playback position derived from the wall clock.

The decoder reports nothing back, so position is ``now - start`` where
``start`` is the clock reading at which offset zero would have played.
"""

from __future__ import annotations

import time
from typing import Callable


class PositionTracker:
    """Tracks the playback offset of one episode.

    A ``duration`` of 0 means the length is unknown: positions are then only
    bounded below and end-of-media is left to the decoder exiting.
    """

    def __init__(self, duration: int, *, clock: Callable[[], float] = time.monotonic):
        self.duration = max(int(duration), 0)
        self._clock = clock
        self._position = 0
        self._start_clock: float | None = None
        self._started = False

    @property
    def running(self) -> bool:
        return self._start_clock is not None

    @property
    def start_wall_clock(self) -> float | None:
        return self._start_clock

    @property
    def stored_position(self) -> int:
        """Last position recorded while stopped (or the offset playback began at)."""
        return self._position

    def clamp(self, position: int) -> int:
        position = max(int(position), 0)
        if self.duration:
            position = min(position, self.duration)
        return position

    def start(self, offset: int | None = None) -> None:
        """Begin tracking from ``offset`` (default: the stored position)."""
        if offset is not None:
            self._position = self.clamp(offset)
        self._start_clock = self._clock() - self._position
        self._started = True

    def stop(self) -> int:
        """Stop tracking and pin the stored position to the last tracked value."""
        if self.running:
            self._position = self.current_position()
            self._start_clock = None
        return self._position

    def seek_to(self, position: int) -> int:
        """Move to ``position``; keeps running from there if currently running."""
        self._position = self.clamp(position)
        if self.running:
            self._start_clock = self._clock() - self._position
        return self._position

    def current_position(self) -> int:
        if not self.running:
            return self._position
        elapsed = int(self._clock() - self._start_clock)
        return self.clamp(max(elapsed, self._position))

    def has_reached_end(self) -> bool:
        if not self._started or not self.duration:
            return False
        return self.current_position() >= self.duration
