"""Shared fixtures and fakes for podterm tests."""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path

import pytest

from podterm.errors import PlayerProcessError
from podterm.models.config import AppConfig, PlayerConfig
from podterm.models.episode import Episode
from podterm.player.session import PlaybackSession
from podterm.services.paths import EpisodePaths


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeHandle:
    """Stands in for ExternalProcessHandle without spawning anything."""

    def __init__(self, argv: list[str], pid: int):
        self.argv = argv
        self.pid = pid
        self.pgid = pid
        self.alive = True
        self.returncode: int | None = None
        self.terminate_calls = 0
        self.survives_terminate = False

    def is_alive(self) -> bool:
        return self.alive

    def terminate(self, timeout: float = 2.0) -> bool:
        self.terminate_calls += 1
        if self.survives_terminate:
            return False
        if self.alive:
            self.alive = False
            self.returncode = -15
        return True

    def exit(self, returncode: int) -> None:
        self.alive = False
        self.returncode = returncode


class FakeSpawner:
    """Records spawned decoders and how many were alive at each spawn."""

    def __init__(self):
        self.handles: list[FakeHandle] = []
        self.alive_at_spawn: list[int] = []
        self.fail = False

    def __call__(self, argv: list[str]) -> FakeHandle:
        if self.fail:
            raise PlayerProcessError(argv, FileNotFoundError(argv[0]))
        self.alive_at_spawn.append(len(self.alive()))
        handle = FakeHandle(argv, pid=40000 + len(self.handles))
        self.handles.append(handle)
        return handle

    def alive(self) -> list[FakeHandle]:
        return [h for h in self.handles if h.alive]

    @property
    def last(self) -> FakeHandle:
        return self.handles[-1]


class ScriptedKeys:
    """Key source that replays a fixed list of keys, then reports none."""

    def __init__(self, keys=()):
        self.keys = list(keys)
        self.suspend_count = 0
        self.close_count = 0
        self.timeouts: list[float] = []

    def push(self, *keys: str) -> None:
        self.keys.extend(keys)

    def read_key(self, timeout: float) -> str | None:
        self.timeouts.append(timeout)
        return self.keys.pop(0) if self.keys else None

    @contextmanager
    def suspended(self):
        self.suspend_count += 1
        yield

    def close(self) -> None:
        self.close_count += 1


class FakeRenderer:
    def __init__(self, height: int = 9):
        self.height = height
        self.frames = []
        self.suspend_count = 0
        self.close_count = 0
        self.fail = False

    def __call__(self, view) -> None:
        if self.fail:
            raise RuntimeError("render failed")
        self.frames.append(view)

    def viewport_height(self) -> int:
        return self.height

    @contextmanager
    def suspended(self):
        self.suspend_count += 1
        yield

    def close(self) -> None:
        self.close_count += 1


def write_transcript(path: Path, items: list[dict]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"items": items}), encoding="utf-8")
    return path


SAMPLE_ITEMS = [
    {"timestamp": "00:00", "text": "Welcome to the show", "speaker": "Speaker 1"},
    {"timestamp": "00:30", "text": "Today we talk about tides", "speaker": "Speaker 2"},
    {"timestamp": "01:05", "text": "The moon does most of the work", "speaker": "Speaker 1"},
    {"timestamp": "10:00", "text": "Thanks for listening", "speaker": "Speaker 2"},
]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def spawner():
    return FakeSpawner()


@pytest.fixture
def keys():
    return ScriptedKeys()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def episode():
    return Episode(
        uuid="abc123def456",
        title="Tides and the Moon",
        podcast_title="Ocean Hour",
        duration=600,
        audio_url="https://example.com/tides.mp3",
        notes="All about tides.",
    )


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def paths(tmp_path, config):
    return EpisodePaths(config.paths, root=tmp_path)


@pytest.fixture
def audio_file(paths, episode):
    path = paths.download_path(episode)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"ID3" + b"\x00" * 128)
    return path


@pytest.fixture
def transcript_file(paths, episode):
    return write_transcript(paths.transcript_path(episode), SAMPLE_ITEMS)


@pytest.fixture
def make_session(episode, paths, audio_file, keys, renderer, spawner, clock):
    """Build PlaybackSessions wired to fakes; every one is closed afterwards."""
    created = []

    def factory(ep: Episode | None = None, **overrides) -> PlaybackSession:
        kwargs = dict(
            audio_path=audio_file,
            transcript_path=paths.transcript_path(episode),
            config=PlayerConfig(),
            keys=keys,
            renderer=renderer,
            spawn=spawner,
            clock=clock,
            poll_interval=60.0,
        )
        kwargs.update(overrides)
        session = PlaybackSession(ep or episode, **kwargs)
        created.append(session)
        return session

    yield factory
    for session in created:
        session.close()
