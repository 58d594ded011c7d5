"""Exception types for podterm."""

from __future__ import annotations


class PodtermError(Exception):
    """Base class for podterm errors."""


class PlayerProcessError(PodtermError):
    """Raised when the external decoder cannot be spawned."""

    def __init__(self, argv: list[str], cause: BaseException):
        self.argv = argv
        self.cause = cause
        super().__init__(f"Failed to start {argv[0] if argv else 'player'}: {cause}")


class SetupError(PodtermError):
    """Raised when playback cannot be set up for an episode."""


class ChatUnavailable(PodtermError):
    """Raised when transcript chat cannot be started."""


class DownloadError(PodtermError):
    """Raised when an episode download fails."""


class CatalogError(PodtermError):
    """Raised when the episode catalog cannot be read."""
