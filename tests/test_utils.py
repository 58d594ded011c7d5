"""Tests for small helpers: timecodes and decoder commands."""

from __future__ import annotations

import pytest

from podterm.utils.ffplay import build_ffplay_command
from podterm.utils.ffprobe import build_ffprobe_command, probe_duration
from podterm.utils.io import atomic_output
from podterm.utils.timecode import format_duration, parse_timestamp


@pytest.mark.parametrize("value, seconds", [
    ("00:05", 5),
    ("1:02", 62),
    ("75:10", 4510),
    ("1:02:03", 3723),
    (" 00:30 ", 30),
    (12, 12),
    (12.9, 12),
])
def test_parse_timestamp(value, seconds):
    assert parse_timestamp(value) == seconds


@pytest.mark.parametrize("value", [
    "", "soon", "1:xx", "1:2:3:4", -1, True, None, float("inf"), float("nan"),
])
def test_parse_timestamp_rejects(value):
    with pytest.raises(ValueError):
        parse_timestamp(value)


def test_format_duration():
    assert format_duration(0) == "00:00"
    assert format_duration(70) == "01:10"
    assert format_duration(3723) == "01:02:03"
    assert format_duration(None) == "--:--"


def test_ffplay_command():
    assert build_ffplay_command("/tmp/a b.mp3", 42) == [
        "ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", "-ss", "42", "/tmp/a b.mp3",
    ]
    assert build_ffplay_command("x.mp3", -3, binary="/opt/ffplay")[0] == "/opt/ffplay"
    assert build_ffplay_command("x.mp3", -3)[5:7] == ["-ss", "0"]


def test_probe_duration_missing_file(tmp_path):
    assert probe_duration(tmp_path / "missing.mp3") == 0


def test_atomic_output_replaces_only_on_success(tmp_path):
    target = tmp_path / "out.txt"
    with atomic_output(target) as f:
        f.write("first")

    with pytest.raises(RuntimeError):
        with atomic_output(target) as f:
            f.write("second")
            raise RuntimeError("interrupted")

    assert target.read_text() == "first"
    assert list(tmp_path.glob("*.part")) == []


def test_ffprobe_command():
    assert build_ffprobe_command("ep.mp3") == [
        "ffprobe", "-v", "error", "-show_entries", "format=duration", "-print_format", "json", "ep.mp3",
    ]


def test_probe_duration_without_ffprobe(tmp_path):
    audio = tmp_path / "ep.mp3"
    audio.write_bytes(b"ID3")

    assert probe_duration(audio, binary=str(tmp_path / "no-ffprobe")) == 0
