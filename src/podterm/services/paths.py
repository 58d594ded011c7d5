"""Where an episode's audio and transcript live on disk."""

from __future__ import annotations

from pathlib import Path

from podterm.models.config import PathsConfig
from podterm.models.episode import Episode


class EpisodePaths:
    """Derives per-episode file paths from the configured directories."""

    def __init__(self, config: PathsConfig, root: Path | str | None = None):
        self.config = config
        self.root = Path(root) if root is not None else Path.cwd()

    def _resolve(self, value: str) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.root / path

    @property
    def transcripts_dir(self) -> Path:
        return self._resolve(self.config.transcripts_dir)

    @property
    def downloads_dir(self) -> Path:
        return self._resolve(self.config.downloads_dir)

    @property
    def catalog_path(self) -> Path:
        return self._resolve(self.config.catalog)

    def download_path(self, episode: Episode) -> Path:
        return self.downloads_dir / episode.filename

    def transcript_path(self, episode: Episode) -> Path:
        return self.transcripts_dir / Path(episode.filename).with_suffix(".json").name

    def is_downloaded(self, episode: Episode) -> bool:
        path = self.download_path(episode)
        return path.is_file() and path.stat().st_size > 0

    def ensure_directories(self) -> None:
        self.transcripts_dir.mkdir(parents=True, exist_ok=True)
        self.downloads_dir.mkdir(parents=True, exist_ok=True)
