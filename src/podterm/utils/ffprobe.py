"""FFprobe duration lookup for episodes whose catalog entry has none."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

PROBE_TIMEOUT_SECONDS = 15.0


def build_ffprobe_command(path: Path | str, *, binary: str = "ffprobe") -> list[str]:
    return [
        binary,
        "-v", "error",
        "-show_entries", "format=duration",
        "-print_format", "json",
        str(path),
    ]


def probe_duration(path: Path | str, *, binary: str = "ffprobe") -> int:
    """Whole seconds of audio in ``path``.

    Returns 0, which the player treats as unknown length, when the file is
    missing, ffprobe is not installed, or its output has no duration.
    """
    path = Path(path)
    if not path.is_file():
        return 0
    try:
        result = subprocess.run(
            build_ffprobe_command(path, binary=binary),
            capture_output=True,
            text=True,
            check=True,
            timeout=PROBE_TIMEOUT_SECONDS,
        )
        duration = json.loads(result.stdout).get("format", {}).get("duration")
        return max(int(float(duration)), 0) if duration else 0
    except (OSError, ValueError, subprocess.SubprocessError):
        return 0
