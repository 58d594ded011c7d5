"""Maps a playback position to the active transcript segment and scroll window."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Sequence

from podterm.models.transcript import TranscriptSegment


@dataclass(frozen=True)
class CursorState:
    active_index: int = 0
    scroll_offset: int = 0


def active_index_for(items: Sequence[TranscriptSegment], position: int) -> int:
    """Greatest index whose timestamp is <= position, or 0 if none is.

    Salvaged transcripts can be slightly out of order, so this scans instead
    of bisecting whenever the timestamps are not sorted.
    """
    if not items:
        return 0
    timestamps = [seg.timestamp for seg in items]
    if all(a <= b for a, b in zip(timestamps, timestamps[1:])):
        return max(bisect_right(timestamps, position) - 1, 0)
    for idx in range(len(timestamps) - 1, -1, -1):
        if timestamps[idx] <= position:
            return idx
    return 0


def max_scroll(item_count: int, viewport_height: int) -> int:
    return max(item_count - viewport_height, 0)


def scroll_target(active_index: int, item_count: int, viewport_height: int) -> int:
    """Scroll offset that puts the active segment a third of the way down."""
    target = max(active_index - viewport_height // 3, 0)
    return min(target, max_scroll(item_count, viewport_height))


class TranscriptCursor:
    """Tracks the highlighted segment and the visible window.

    The window follows the active segment whenever it changes. Between
    changes a manual page offset is kept so the user can read ahead.
    """

    def __init__(self, page_size: int = 10):
        self.page_size = page_size
        self.state = CursorState()
        self._item_count = 0
        self._viewport_height = 0
        self._following = True

    @property
    def active_index(self) -> int:
        return self.state.active_index

    @property
    def scroll_offset(self) -> int:
        return self.state.scroll_offset

    def update(
        self,
        items: Sequence[TranscriptSegment],
        position: int,
        viewport_height: int,
    ) -> CursorState:
        viewport_height = max(viewport_height, 1)
        active = active_index_for(items, position)

        if (
            self._following
            or active != self.state.active_index
            or viewport_height != self._viewport_height
        ):
            scroll = scroll_target(active, len(items), viewport_height)
            self._following = True
        else:
            scroll = min(self.state.scroll_offset, max_scroll(len(items), viewport_height))

        self._item_count = len(items)
        self._viewport_height = viewport_height
        self.state = CursorState(active_index=active, scroll_offset=scroll)
        return self.state

    def previous(self, items: Sequence[TranscriptSegment]) -> TranscriptSegment | None:
        """Step to the previous segment; None when already at the first."""
        return self._step(items, -1)

    def next(self, items: Sequence[TranscriptSegment]) -> TranscriptSegment | None:
        """Step to the next segment; None when already at the last."""
        return self._step(items, 1)

    def _step(self, items: Sequence[TranscriptSegment], delta: int) -> TranscriptSegment | None:
        if not items:
            return None
        active = min(self.state.active_index, len(items) - 1)
        # Segments sharing a timestamp resolve to the last of them, so step
        # past them or the seek lands back on the current one.
        target = active + delta
        while 0 <= target < len(items) and items[target].timestamp == items[active].timestamp:
            target += delta
        if not 0 <= target < len(items):
            return None
        scroll = scroll_target(target, len(items), max(self._viewport_height, 1))
        self.state = CursorState(active_index=target, scroll_offset=scroll)
        self._following = True
        return items[target]

    def page_up(self) -> None:
        self._page(-self.page_size)

    def page_down(self) -> None:
        self._page(self.page_size)

    def _page(self, delta: int) -> None:
        limit = max_scroll(self._item_count, max(self._viewport_height, 1))
        offset = min(max(self.state.scroll_offset + delta, 0), limit)
        self.state = CursorState(active_index=self.state.active_index, scroll_offset=offset)
        self._following = False
