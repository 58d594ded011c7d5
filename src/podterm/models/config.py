"""Configuration models for each podterm component."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from podterm.utils.io import read_yaml

DEFAULT_CONFIG_PATH = "podterm.yaml"


class PathsConfig(BaseModel):
    """Where episodes, transcripts and the synced catalog live."""

    transcripts_dir: str = "data/transcripts"
    downloads_dir: str = "mp3s"
    catalog: str = "data/episodes.json"


class PlayerConfig(BaseModel):
    """Configuration for the interactive player."""

    binary: str = "ffplay"
    tick_seconds: float = Field(default=0.1, ge=0.02, le=1.0)
    seek_step_seconds: int = Field(default=30, ge=1, le=600)
    terminate_timeout_seconds: float = Field(default=2.0, ge=0.1, le=30.0)
    page_size: int = Field(default=10, ge=1, le=100)


class TranscriptionConfig(BaseModel):
    """Configuration for the external transcription tool."""

    binary: str = "llm"
    model: str = "gemini-2.5-pro-exp-03-25"
    schema_multi: str = "timestamp str: mm:ss,text,speaker"
    prompt: str = "transcript"
    auto_start: bool = True
    poll_interval_seconds: float = Field(default=1.0, ge=0.1, le=30.0)


class ChatConfig(BaseModel):
    """Configuration for transcript chat."""

    model: str = "claude-sonnet-4-6"
    max_tokens: int = Field(default=2048, ge=256, le=16384)
    max_attempts: int = Field(default=3, ge=1, le=10)
    retry_wait_seconds: float = Field(default=1.0, ge=0.0, le=60.0)


class DownloadConfig(BaseModel):
    """Configuration for episode downloads."""

    chunk_size: int = Field(default=64 * 1024, ge=1024)
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=600.0)
    max_attempts: int = Field(default=3, ge=1, le=10)
    retry_wait_seconds: float = Field(default=1.0, ge=0.0, le=60.0)


class AppConfig(BaseModel):
    """All component configurations."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    player: PlayerConfig = Field(default_factory=PlayerConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)


def load_config(path: Path | str | None = None) -> AppConfig:
    """Load ``podterm.yaml``; a missing file yields the defaults."""
    path = Path(path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        return AppConfig()
    return AppConfig(**read_yaml(path))
