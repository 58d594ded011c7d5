"""Episode catalog previously synced from the podcast provider."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from pydantic import ValidationError

from podterm.errors import CatalogError
from podterm.models.episode import Episode
from podterm.utils.io import read_json


class EpisodeCatalog:
    """Read-only collection of episodes, newest first."""

    def __init__(self, episodes: list[Episode]):
        self._episodes = sorted(
            episodes,
            key=lambda e: e.published_at.timestamp() if e.published_at else 0.0,
            reverse=True,
        )
        self._by_uuid = {e.uuid: e for e in self._episodes}

    @classmethod
    def load(cls, path: Path | str) -> EpisodeCatalog:
        """Load a catalog file.

        Accepts a list of episode records, ``{"episodes": [...]}``, or a
        mapping of uuid to record.
        """
        path = Path(path)
        if not path.exists():
            raise CatalogError(f"Episode catalog not found: {path}")
        try:
            data = read_json(path)
        except (OSError, ValueError) as e:
            raise CatalogError(f"Cannot read episode catalog {path}: {e}") from e

        if isinstance(data, dict) and isinstance(data.get("episodes"), list):
            records = data["episodes"]
        elif isinstance(data, dict):
            records = [
                {"uuid": uuid, **record} if isinstance(record, dict) else record
                for uuid, record in data.items()
            ]
        elif isinstance(data, list):
            records = data
        else:
            raise CatalogError(f"Unexpected catalog format in {path}")

        episodes = []
        for i, record in enumerate(records):
            try:
                episodes.append(Episode.model_validate(record))
            except ValidationError as e:
                raise CatalogError(f"Invalid episode record #{i} in {path}: {e}") from e
        return cls(episodes)

    def __iter__(self) -> Iterator[Episode]:
        return iter(self._episodes)

    def __len__(self) -> int:
        return len(self._episodes)

    def get(self, key: str) -> Episode:
        """Find an episode by uuid or unique uuid prefix."""
        if key in self._by_uuid:
            return self._by_uuid[key]
        matches = [e for e in self._episodes if e.uuid.startswith(key)]
        if len(matches) == 1:
            return matches[0]
        if not matches:
            raise CatalogError(f"No episode matches: {key}")
        raise CatalogError(f"Ambiguous episode id {key!r} ({len(matches)} matches)")

    def search(self, query: str) -> list[Episode]:
        """Episodes whose title or podcast title contains ``query``."""
        q = query.lower()
        return [
            e for e in self._episodes
            if q in e.title.lower() or q in e.podcast_title.lower()
        ]
