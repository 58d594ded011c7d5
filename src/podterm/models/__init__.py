"""Pydantic data models for podterm."""

from podterm.models.config import (
    AppConfig,
    ChatConfig,
    DownloadConfig,
    PathsConfig,
    PlayerConfig,
    TranscriptionConfig,
)
from podterm.models.episode import Episode
from podterm.models.playback import PlaybackState, PlaybackStatus
from podterm.models.transcript import Transcript, TranscriptSegment

__all__ = [
    "AppConfig",
    "ChatConfig",
    "DownloadConfig",
    "PathsConfig",
    "PlayerConfig",
    "TranscriptionConfig",
    "Episode",
    "PlaybackState",
    "PlaybackStatus",
    "Transcript",
    "TranscriptSegment",
]
