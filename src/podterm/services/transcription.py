"""Launches and tracks the external transcription tool.

The tool (the ``llm`` CLI by default) writes its structured JSON answer to
stdout, which is redirected straight into the episode's transcript file. The
player polls that file while the job runs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from podterm.errors import PlayerProcessError
from podterm.models.config import TranscriptionConfig
from podterm.models.episode import Episode
from podterm.player.process import DEFAULT_TERMINATE_TIMEOUT, ExternalProcessHandle
from podterm.services.paths import EpisodePaths

CommandBuilder = Callable[[Episode, Path], list[str]]


@dataclass
class TranscriptionJob:
    """One running (or finished) transcription of an episode."""

    episode_uuid: str
    output_path: Path
    handle: ExternalProcessHandle
    started_at: float = field(default_factory=time.monotonic)
    cancelled: bool = False

    @property
    def running(self) -> bool:
        return self.handle.is_alive()

    @property
    def status(self) -> str:
        if self.cancelled:
            return "cancelled"
        if self.running:
            return "running"
        return "completed" if self.handle.returncode == 0 else "failed"


class TranscriptionRegistry:
    """Transcription jobs owned by one player session or CLI command."""

    def __init__(
        self,
        config: TranscriptionConfig,
        paths: EpisodePaths,
        *,
        command_builder: CommandBuilder | None = None,
        terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT,
    ):
        self.config = config
        self.paths = paths
        self._command_builder = command_builder or self.build_command
        self._terminate_timeout = terminate_timeout
        self._jobs: dict[str, TranscriptionJob] = {}

    def build_command(self, episode: Episode, audio_path: Path) -> list[str]:
        return [
            self.config.binary,
            "-m", self.config.model,
            "-a", str(audio_path),
            "--schema-multi", self.config.schema_multi,
            self.config.prompt,
        ]

    def get(self, episode_uuid: str) -> TranscriptionJob | None:
        return self._jobs.get(episode_uuid)

    def is_running(self, episode_uuid: str) -> bool:
        job = self._jobs.get(episode_uuid)
        return job is not None and job.running

    def status(self, episode_uuid: str) -> str | None:
        job = self._jobs.get(episode_uuid)
        return job.status if job else None

    def should_transcribe(self, episode: Episode) -> bool:
        """True if the episode is downloaded and has no transcript output yet."""
        if not self.paths.is_downloaded(episode) or self.is_running(episode.uuid):
            return False
        output = self.paths.transcript_path(episode)
        return not output.exists() or output.stat().st_size == 0

    def start(self, episode: Episode) -> TranscriptionJob:
        """Start transcribing ``episode``; returns the running job if there is one.

        Raises PlayerProcessError if the tool cannot be started.
        """
        existing = self._jobs.get(episode.uuid)
        if existing is not None and existing.running:
            return existing

        output_path = self.paths.transcript_path(episode)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        argv = self._command_builder(episode, self.paths.download_path(episode))

        try:
            with open(output_path, "wb") as out:
                handle = ExternalProcessHandle.spawn(argv, stdout=out)
        except PlayerProcessError:
            output_path.unlink(missing_ok=True)
            raise

        job = TranscriptionJob(episode_uuid=episode.uuid, output_path=output_path, handle=handle)
        self._jobs[episode.uuid] = job
        return job

    def wait(self, episode_uuid: str, *, poll: float = 0.5, on_poll: Callable[[], None] | None = None) -> str:
        """Block until the job for ``episode_uuid`` finishes; returns its status."""
        job = self._jobs[episode_uuid]
        while job.running:
            if on_poll is not None:
                on_poll()
            time.sleep(poll)
        return job.status

    def stop_all(self) -> list[str]:
        """Terminate every running job and delete its incomplete output.

        Returns the uuids of jobs whose process group could not be killed.
        """
        leaked = []
        for uuid, job in self._jobs.items():
            if not job.running:
                continue
            job.cancelled = True
            if not job.handle.terminate(self._terminate_timeout):
                leaked.append(uuid)
            job.output_path.unlink(missing_ok=True)
        return leaked
