"""FFplay command builder."""

from __future__ import annotations

import shutil
from pathlib import Path


def build_ffplay_command(
    audio_path: Path | str,
    offset_seconds: int = 0,
    *,
    binary: str = "ffplay",
) -> list[str]:
    """Build the argv that plays ``audio_path`` headless from ``offset_seconds``.

    ffplay cannot seek a running instance, so every seek spawns a new
    process with a fresh ``-ss`` offset.
    """
    return [
        binary,
        "-nodisp",
        "-autoexit",
        "-loglevel", "quiet",
        "-ss", str(max(int(offset_seconds), 0)),
        str(audio_path),
    ]


def player_available(binary: str = "ffplay") -> bool:
    """Return True if the decoder binary is on PATH."""
    return shutil.which(binary) is not None
