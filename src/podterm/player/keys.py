"""Non-blocking single-keypress input from a POSIX terminal."""

from __future__ import annotations

import os
import select
import sys
import termios
import tty
from contextlib import contextmanager
from typing import Iterator, Protocol, TextIO

ENTER = "enter"
LEFT = "left"
RIGHT = "right"
UP = "up"
DOWN = "down"
PAGE_UP = "page_up"
PAGE_DOWN = "page_down"
CTRL_C = "ctrl_c"
ESCAPE = "escape"

KEY_SEQUENCES = {
    b"\r": ENTER,
    b"\n": ENTER,
    b"\x03": CTRL_C,
    b"\x1b": ESCAPE,
    b"\x1b[A": UP,
    b"\x1b[B": DOWN,
    b"\x1b[C": RIGHT,
    b"\x1b[D": LEFT,
    b"\x1bOA": UP,
    b"\x1bOB": DOWN,
    b"\x1bOC": RIGHT,
    b"\x1bOD": LEFT,
    b"\x1b[5~": PAGE_UP,
    b"\x1b[6~": PAGE_DOWN,
}

# Bytes of an escape sequence arrive together; this only bounds the wait
# for the rest of one that was split across reads.
_SEQUENCE_WAIT_SECONDS = 0.01
_MAX_SEQUENCE_BYTES = 8


class KeySource(Protocol):
    """Where the player reads keypresses from."""

    def read_key(self, timeout: float) -> str | None: ...
    def suspended(self): ...
    def close(self) -> None: ...


def decode_key(data: bytes) -> str | None:
    """Name a keypress from its raw bytes; printable keys map to themselves."""
    if not data:
        return None
    if data in KEY_SEQUENCES:
        return KEY_SEQUENCES[data]
    if data.startswith(b"\x1b"):
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


class TerminalKeys:
    """Reads keys from a tty in cbreak mode.

    ISIG stays enabled, so Ctrl-C still raises KeyboardInterrupt in the
    main thread.
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdin
        self._fd = self._stream.fileno()
        self._saved: list | None = None

    def open(self) -> TerminalKeys:
        if self._saved is None:
            self._saved = termios.tcgetattr(self._fd)
            tty.setcbreak(self._fd)
        return self

    def close(self) -> None:
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Give the terminal back in cooked mode, e.g. for the chat prompt."""
        was_open = self._saved is not None
        self.close()
        try:
            yield
        finally:
            if was_open:
                self.open()

    def read_key(self, timeout: float) -> str | None:
        """Wait at most ``timeout`` seconds for one keypress."""
        if not self._ready(timeout):
            return None
        data = os.read(self._fd, 1)
        if data == b"\x1b":
            while len(data) < _MAX_SEQUENCE_BYTES and self._ready(_SEQUENCE_WAIT_SECONDS):
                data += os.read(self._fd, 1)
                if len(data) >= 3 and (data[-1:].isalpha() or data.endswith(b"~")):
                    break
        elif data and data[0] >= 0xC0:
            # rest of a UTF-8 character
            expected = 2 if data[0] < 0xE0 else 3 if data[0] < 0xF0 else 4
            while len(data) < expected and self._ready(_SEQUENCE_WAIT_SECONDS):
                data += os.read(self._fd, 1)
        return decode_key(data)

    def _ready(self, timeout: float) -> bool:
        readable, _, _ = select.select([self._fd], [], [], max(timeout, 0))
        return bool(readable)

    def __enter__(self) -> TerminalKeys:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
