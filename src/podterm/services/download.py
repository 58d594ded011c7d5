"""Episode audio download."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import requests

from podterm.errors import DownloadError
from podterm.models.config import DownloadConfig
from podterm.models.episode import Episode
from podterm.services.paths import EpisodePaths
from podterm.utils.io import atomic_output
from podterm.utils.retry import retry_api

ProgressCallback = Callable[[int, "int | None"], None]


def download_episode(
    episode: Episode,
    paths: EpisodePaths,
    config: DownloadConfig,
    *,
    on_progress: ProgressCallback | None = None,
    session: requests.Session | None = None,
) -> Path:
    """Stream the episode audio to its download path.

    The body goes to a temp file that replaces the target only once the
    transfer finishes, so a partial download never looks downloaded.
    ``on_progress(received_bytes, total_bytes_or_None)`` is called per chunk.
    """
    if not episode.audio_url:
        raise DownloadError(f"Episode has no audio URL: {episode.title}")

    target = paths.download_path(episode)
    http = session or requests.Session()

    @retry_api(config.max_attempts, min_wait=config.retry_wait_seconds)
    def fetch() -> Path:
        with http.get(episode.audio_url, stream=True, timeout=config.timeout_seconds) as response:
            try:
                response.raise_for_status()
            except requests.HTTPError as e:
                # 4xx will not change on retry; 5xx and transport errors might.
                if response.status_code < 500:
                    raise DownloadError(
                        f"Download failed for {episode.title}: HTTP {response.status_code}"
                    ) from e
                raise
            total = int(response.headers.get("Content-Length", 0)) or None
            with atomic_output(target, "wb") as out:
                received = 0
                for chunk in response.iter_content(chunk_size=config.chunk_size):
                    if not chunk:
                        continue
                    out.write(chunk)
                    received += len(chunk)
                    if on_progress is not None:
                        on_progress(received, total)
                if received == 0:
                    raise DownloadError(f"Empty response for {episode.audio_url}")
        return target

    try:
        return fetch()
    except DownloadError:
        raise
    except (requests.RequestException, OSError) as e:
        raise DownloadError(f"Download failed for {episode.title}: {e}") from e
