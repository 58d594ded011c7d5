"""Transcript loading, including salvage of documents still being written.

The transcription tool streams its JSON output straight into the transcript
file, so while it runs the file is a truncated document such as::

    {"items": [{"timestamp": "00:05", "text": "hello"}, {"timestamp": "00:1

``TranscriptStore.load`` is polled about once a second against that growing
file. It never raises: a complete document is parsed strictly, an incomplete
one is scanned for segment objects that decode on their own, and a file with
no ``"items"`` key at all is read line by line.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from podterm.models.transcript import Transcript, TranscriptSegment
from podterm.utils.timecode import parse_timestamp

ITEMS_MARKER = '"items"'

_LINE_TIMESTAMP = re.compile(r"(\d{1,2}):(\d{2})")
_LINE_PREFIX = re.compile(r".*?\d{1,2}:\d{2}")
_SPEAKER = re.compile(r"Speaker\s*\d+", re.IGNORECASE)

_decoder = json.JSONDecoder()


class TranscriptStore:
    """Reads transcript snapshots from disk."""

    def load(self, path: Path | str) -> Transcript:
        path = Path(path)
        if not path.exists():
            return Transcript(started=False)

        try:
            data = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Transcript(
                started=True,
                diagnostic=f"Unreadable transcript {path.name}: {e}",
            )

        try:
            document = json.loads(data)
        except json.JSONDecodeError as e:
            return self._load_partial(data, f"Transcript incomplete ({e.msg})")

        try:
            return self._load_document(document)
        except (TypeError, ValueError, AttributeError, OverflowError) as e:
            return Transcript(
                started=True,
                diagnostic=f"Unexpected transcript structure: {e}",
            )

    def _load_document(self, document: Any) -> Transcript:
        if not isinstance(document, dict):
            raise TypeError(f"expected an object, got {type(document).__name__}")

        raw_items = document.get("items")
        if raw_items is None:
            return Transcript(started=True, diagnostic="Transcript has no items yet")
        if not isinstance(raw_items, list):
            raise TypeError("'items' is not a list")
        if not raw_items:
            return Transcript(started=True, diagnostic="Transcript has no items yet")

        items = []
        skipped = 0
        for raw in raw_items:
            segment = segment_from_record(raw)
            if segment is None:
                skipped += 1
            else:
                items.append(segment)

        diagnostic = f"Skipped {skipped} malformed item(s)" if skipped else None
        return Transcript(
            items=tuple(items),
            started=True,
            loaded=True,
            diagnostic=diagnostic,
        )

    def _load_partial(self, data: str, reason: str) -> Transcript:
        if ITEMS_MARKER in data:
            items = extract_segment_objects(data)
        else:
            items = extract_segment_lines(data)
        return Transcript(
            items=tuple(items),
            started=True,
            partial=True,
            diagnostic=f"{reason}; recovered {len(items)} segment(s)",
        )


def segment_from_record(raw: Any) -> TranscriptSegment | None:
    """Build a segment from a decoded ``{timestamp, text, speaker}`` record.

    Returns None when either required field is missing or unusable.
    """
    if not isinstance(raw, dict):
        return None
    text = raw.get("text")
    timestamp = raw.get("timestamp")
    if not isinstance(text, str) or timestamp is None:
        return None
    try:
        seconds = parse_timestamp(timestamp)
    except (ValueError, OverflowError):
        return None
    speaker = raw.get("speaker")
    if speaker is not None and not isinstance(speaker, str):
        speaker = str(speaker)
    return TranscriptSegment(timestamp=seconds, text=text, speaker=speaker or None)


def extract_segment_objects(data: str) -> list[TranscriptSegment]:
    """Salvage every self-contained segment object from a broken document.

    Each ``{`` is tried as the start of an independent JSON value. A value
    that decodes to a segment record is kept and the scan resumes after it,
    so braces inside its strings are never rescanned. Anything else,
    including the unterminated outer document, is skipped one character at
    a time so that records nested inside it are still reached.
    """
    items: list[TranscriptSegment] = []
    pos = data.find("{")
    while pos != -1:
        try:
            value, end = _decoder.raw_decode(data, pos)
        except json.JSONDecodeError:
            value, end = None, pos + 1

        segment = segment_from_record(value)
        if segment is not None:
            items.append(segment)
            next_start = end
        else:
            next_start = pos + 1
        pos = data.find("{", next_start)
    return items


def extract_segment_lines(data: str) -> list[TranscriptSegment]:
    """Read ``mm:ss text`` lines from plain streaming output."""
    items: list[TranscriptSegment] = []
    for line in data.splitlines():
        match = _LINE_TIMESTAMP.search(line)
        if not match:
            continue
        text = _LINE_PREFIX.sub("", line, count=1).strip()
        if not text:
            continue
        speaker = _SPEAKER.search(line)
        items.append(TranscriptSegment(
            timestamp=int(match.group(1)) * 60 + int(match.group(2)),
            text=text,
            speaker=speaker.group(0) if speaker else None,
        ))
    return items
