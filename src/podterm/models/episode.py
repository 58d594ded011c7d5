"""Episode model."""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def parameterize(text: str) -> str:
    """Turn a title into a lowercase, dash-separated filename stem."""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower())
    return slug.strip("-")


class Episode(BaseModel):
    """A podcast episode as recorded in the synced catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uuid: str
    title: str = "Unknown Title"
    podcast_title: str = Field(
        default="Unknown Podcast",
        validation_alias=AliasChoices("podcast_title", "podcastTitle"),
    )
    published_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("published_at", "published"),
    )
    audio_url: str = Field(default="", validation_alias=AliasChoices("audio_url", "url"))
    duration: int = Field(default=0, ge=0)
    notes: str | None = Field(default=None, validation_alias=AliasChoices("notes", "show_notes"))
    starred: bool = False
    played: bool = False

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, value):
        if value is None or value == "":
            return 0
        return max(int(float(value)), 0)

    @field_validator("published_at", mode="before")
    @classmethod
    def _coerce_published(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        return value

    @property
    def filename(self) -> str:
        stem = parameterize(self.title) or "episode"
        return f"{stem}-{self.uuid[:6]}.mp3"
