"""Transcript data models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TranscriptSegment(BaseModel):
    """One timestamped line of transcribed speech."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(ge=0)
    text: str
    speaker: str | None = None


class Transcript(BaseModel):
    """An immutable snapshot of the transcript file as read from disk.

    ``started`` means the backing file exists, ``loaded`` that a complete
    document was parsed and ``partial`` that segments were salvaged from an
    incomplete one.
    """

    model_config = ConfigDict(frozen=True)

    items: tuple[TranscriptSegment, ...] = ()
    started: bool = False
    loaded: bool = False
    partial: bool = False
    diagnostic: str | None = None

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def last_timestamp(self) -> int:
        return self.items[-1].timestamp if self.items else 0

    def as_text(self) -> str:
        """Render as plain ``[MM:SS] Speaker: text`` lines."""
        lines = []
        for seg in self.items:
            minutes, seconds = divmod(seg.timestamp, 60)
            speaker = f"{seg.speaker}: " if seg.speaker else ""
            lines.append(f"[{minutes:02d}:{seconds:02d}] {speaker}{seg.text}")
        return "\n".join(lines)
