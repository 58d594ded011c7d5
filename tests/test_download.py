"""Tests for episode downloads with a fake HTTP session."""

from __future__ import annotations

import pytest
import requests

from podterm.errors import DownloadError
from podterm.models.config import DownloadConfig
from podterm.models.episode import Episode
from podterm.services.download import download_episode

CONFIG = DownloadConfig(max_attempts=2, retry_wait_seconds=0.0)


class FakeResponse:
    def __init__(self, chunks, status=200):
        self.chunks = chunks
        self.status_code = status
        self.headers = {"Content-Length": str(sum(len(c) for c in chunks))}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def iter_content(self, chunk_size):
        yield from self.chunks


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        return self.responses.pop(0)


def test_download_writes_file_and_reports_progress(episode, paths):
    session = FakeSession(FakeResponse([b"abc", b"", b"defg"]))
    progress = []

    path = download_episode(
        episode, paths, CONFIG,
        on_progress=lambda received, total: progress.append((received, total)),
        session=session,
    )

    assert path == paths.download_path(episode)
    assert path.read_bytes() == b"abcdefg"
    assert progress == [(3, 7), (7, 7)]
    assert session.requests[0][1]["stream"] is True
    assert list(path.parent.glob("*.part")) == []


def test_http_error_is_retried(episode, paths):
    session = FakeSession(FakeResponse([], status=503), FakeResponse([b"data"]))

    path = download_episode(episode, paths, CONFIG, session=session)

    assert path.read_bytes() == b"data"
    assert len(session.requests) == 2


def test_persistent_server_error_raises_download_error(episode, paths):
    session = FakeSession(FakeResponse([], status=503), FakeResponse([], status=503))

    with pytest.raises(DownloadError, match="Download failed"):
        download_episode(episode, paths, CONFIG, session=session)

    assert len(session.requests) == 2
    assert not paths.is_downloaded(episode)


def test_client_error_is_not_retried(episode, paths):
    session = FakeSession(FakeResponse([], status=404), FakeResponse([b"data"]))

    with pytest.raises(DownloadError, match="HTTP 404"):
        download_episode(episode, paths, CONFIG, session=session)

    assert len(session.requests) == 1
    assert not paths.is_downloaded(episode)


def test_empty_body(episode, paths):
    session = FakeSession(FakeResponse([]))

    with pytest.raises(DownloadError, match="Empty response"):
        download_episode(episode, paths, CONFIG, session=session)

    assert not paths.download_path(episode).exists()
    assert list(paths.downloads_dir.glob("*.part")) == []


def test_missing_url(paths):
    with pytest.raises(DownloadError, match="no audio URL"):
        download_episode(Episode(uuid="x1"), paths, CONFIG, session=FakeSession())
