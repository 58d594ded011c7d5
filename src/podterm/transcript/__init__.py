"""Transcript loading and position-to-segment mapping."""

from podterm.transcript.cursor import CursorState, TranscriptCursor
from podterm.transcript.store import TranscriptStore

__all__ = ["CursorState", "TranscriptCursor", "TranscriptStore"]
