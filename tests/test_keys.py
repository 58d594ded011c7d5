"""Tests for keypress decoding."""

from __future__ import annotations

import pytest

from podterm.player import keys as k
from podterm.player.keys import decode_key


@pytest.mark.parametrize("data, expected", [
    (b"\r", k.ENTER),
    (b"\n", k.ENTER),
    (b"\x1b[A", k.UP),
    (b"\x1bOB", k.DOWN),
    (b"\x1b[C", k.RIGHT),
    (b"\x1b[D", k.LEFT),
    (b"\x1b[5~", k.PAGE_UP),
    (b"\x1b[6~", k.PAGE_DOWN),
    (b"\x03", k.CTRL_C),
    (b"c", "c"),
    (b"q", "q"),
    ("é".encode(), "é"),
])
def test_decode_known_keys(data, expected):
    assert decode_key(data) == expected


def test_unknown_escape_sequence_is_ignored():
    assert decode_key(b"\x1b[15~") is None


def test_empty_read():
    assert decode_key(b"") is None


def test_truncated_utf8():
    assert decode_key(b"\xc3") is None
