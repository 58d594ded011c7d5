"""Shared state handed to every subcommand."""

from __future__ import annotations

from dataclasses import dataclass

from podterm.errors import CatalogError
from podterm.models.config import AppConfig
from podterm.models.episode import Episode
from podterm.services.catalog import EpisodeCatalog
from podterm.services.paths import EpisodePaths
from podterm.utils.progress import log_error


@dataclass
class AppContext:
    """Loaded configuration plus the paths derived from it."""

    config: AppConfig
    paths: EpisodePaths

    def catalog(self) -> EpisodeCatalog:
        return EpisodeCatalog.load(self.paths.catalog_path)

    def episode(self, episode_id: str) -> Episode:
        """Look up an episode or exit with an error message."""
        try:
            return self.catalog().get(episode_id)
        except CatalogError as e:
            log_error(str(e))
            raise SystemExit(1)
