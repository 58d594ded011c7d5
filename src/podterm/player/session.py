"""Interactive playback session: decoder supervision, transcript sync, tick loop.

State machine::

    stopped --play--> playing <--toggle--> paused
    playing --end of media--> paused (pinned at duration)
    any --chat--> paused --chat done--> playing (if it was playing)
    any --quit/error--> closed

Every tick reads at most one key (the bounded read is also the tick's
pacing), applies it, takes the newest background snapshots, checks the
decoder, recomputes position and cursor, then renders one frame.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, ContextManager, Protocol

from podterm.errors import ChatUnavailable, PlayerProcessError, SetupError
from podterm.models.config import PlayerConfig
from podterm.models.episode import Episode
from podterm.models.playback import PlaybackState, PlaybackStatus
from podterm.models.transcript import Transcript, TranscriptSegment
from podterm.player import keys as k
from podterm.player.keys import KeySource
from podterm.player.position import PositionTracker
from podterm.player.process import ExternalProcessHandle
from podterm.player.tasks import LatestValue, SupervisedTask
from podterm.player.view import SessionView
from podterm.services.transcription import TranscriptionRegistry
from podterm.transcript.cursor import TranscriptCursor
from podterm.transcript.store import TranscriptStore
from podterm.utils.ffplay import build_ffplay_command
from podterm.utils.progress import log_warning

# An exit this close to the end is ffplay's -autoexit, not a failure.
END_TOLERANCE_SECONDS = 2

TASK_JOIN_SECONDS = 2.0

ChatLauncher = Callable[[Episode, Transcript], None]
Spawner = Callable[[list[str]], ExternalProcessHandle]


def check_audio_file(path: Path) -> None:
    """Raise SetupError unless ``path`` is a non-empty file."""
    if not path.exists():
        raise SetupError(f"Audio file not found: {path}")
    if path.stat().st_size == 0:
        raise SetupError("Audio file is empty (0 bytes). Try downloading again.")


class Renderer(Protocol):
    def __call__(self, view: SessionView) -> None: ...
    def viewport_height(self) -> int: ...
    def suspended(self) -> ContextManager[None]: ...
    def close(self) -> None: ...


class PlaybackSession:
    """Owns one decoder process, one position tracker and the transcript view."""

    def __init__(
        self,
        episode: Episode,
        *,
        audio_path: Path,
        transcript_path: Path,
        config: PlayerConfig,
        keys: KeySource,
        renderer: Renderer,
        transcriptions: TranscriptionRegistry | None = None,
        auto_transcribe: bool = False,
        poll_interval: float = 1.0,
        chat: ChatLauncher | None = None,
        store: TranscriptStore | None = None,
        spawn: Spawner = ExternalProcessHandle.spawn,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.episode = episode
        self.audio_path = Path(audio_path)
        self.transcript_path = Path(transcript_path)
        self.config = config
        self._keys = keys
        self._renderer = renderer
        self._transcriptions = transcriptions
        self._auto_transcribe = auto_transcribe
        self._poll_interval = poll_interval
        self._chat = chat
        self._store = store or TranscriptStore()
        self._spawn = spawn

        self._tracker = PositionTracker(episode.duration, clock=clock)
        self._cursor = TranscriptCursor(page_size=config.page_size)
        self._handle: ExternalProcessHandle | None = None
        self._status = PlaybackStatus.STOPPED

        self._transcript: Transcript | None = None
        self._transcript_cell: LatestValue[Transcript] = LatestValue()
        self._poller: SupervisedTask | None = None
        self._retired_pollers: list[SupervisedTask] = []
        self._transcription_outcome: str | None = None

        self.status_message: str | None = None
        self.error_message: str | None = None
        self._setup_error: str | None = None
        self._quit_requested = False
        self._closed = False
        self._leaked: list[str] = []

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def run(self, *, autoplay: bool = False) -> None:
        """Run the tick loop until quit; teardown happens on every exit path."""
        try:
            self.setup()
            if autoplay:
                self.play()
            while not self._quit_requested:
                self.tick()
        finally:
            self.close()

    def setup(self) -> None:
        """Check the audio file, load the transcript, start background work."""
        try:
            check_audio_file(self.audio_path)
        except SetupError as e:
            self._setup_error = str(e)
        self.error_message = self._setup_error

        self._adopt(self._store.load(self.transcript_path))

        if (
            self._setup_error is None
            and self._auto_transcribe
            and self._transcriptions is not None
            and self._transcriptions.should_transcribe(self.episode)
        ):
            try:
                self._transcriptions.start(self.episode)
                self.status_message = "Transcription started. This may take a few minutes."
            except PlayerProcessError as e:
                self.error_message = f"Failed to start transcription: {e}"

        if self._transcribing() or (self._transcript.started and not self._transcript.loaded):
            self._start_poller()

    def close(self) -> None:
        """Stop pollers, kill the decoder group, stop owned jobs, restore the terminal.

        Safe to call any number of times.
        """
        if self._closed:
            return
        self._closed = True
        self._quit_requested = True
        try:
            tasks = self._retired_pollers + ([self._poller] if self._poller is not None else [])
            for task in tasks:
                if not task.stop(TASK_JOIN_SECONDS):
                    self._leaked.append(f"task {task.name}")
            self._stop_process()
            if self._transcriptions is not None:
                for uuid in self._transcriptions.stop_all():
                    self._leaked.append(f"transcription {uuid}")
        finally:
            self._status = PlaybackStatus.CLOSED
            try:
                self._keys.close()
            finally:
                self._renderer.close()

        for what in self._leaked:
            log_warning(f"Could not stop {what} during shutdown")

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------ #
    # Tick
    # ------------------------------------------------------------------ #
    def tick(self) -> SessionView:
        key = self._keys.read_key(self.config.tick_seconds)
        if key is not None:
            self.handle_key(key)

        self._absorb_background()
        self._check_process()
        if self._status is PlaybackStatus.PLAYING and self._tracker.has_reached_end():
            self._reach_end()

        viewport = self._renderer.viewport_height()
        self._cursor.update(self.items, self.position, viewport)

        view = self.view(viewport)
        if not self._closed:
            self._renderer(view)
        return view

    def handle_key(self, key: str) -> None:
        step = self.config.seek_step_seconds
        if key == k.ENTER:
            self.toggle()
        elif key == k.RIGHT:
            self.seek_by(step)
        elif key == k.LEFT:
            self.seek_by(-step)
        elif key == k.UP:
            self.previous_segment()
        elif key == k.DOWN:
            self.next_segment()
        elif key == k.PAGE_UP:
            self._cursor.page_up()
        elif key == k.PAGE_DOWN:
            self._cursor.page_down()
        elif key == "c":
            self.enter_chat()
        elif key in ("q", k.CTRL_C):
            self.quit()

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #
    @property
    def playing(self) -> bool:
        return self._status is PlaybackStatus.PLAYING

    @property
    def position(self) -> int:
        return self._tracker.current_position()

    @property
    def playback_enabled(self) -> bool:
        return self._setup_error is None

    def toggle(self) -> None:
        if self.playing:
            self.pause()
        else:
            self.play()

    def play(self) -> bool:
        if not self.playback_enabled:
            self.error_message = self._setup_error
            return False
        if self.playing:
            return True
        return self._start_process(self._tracker.stored_position)

    def pause(self) -> None:
        if self.playing:
            self._stop_process()
            self._status = PlaybackStatus.PAUSED

    def quit(self) -> None:
        self.pause()
        self._quit_requested = True

    def seek_by(self, delta: int) -> int:
        return self.seek_to(self.position + delta)

    def seek_to(self, position: int) -> int:
        """Move to ``position``; a playing decoder is respawned there."""
        if self.playing:
            self._start_process(position)
        else:
            self._tracker.seek_to(position)
        return self._tracker.current_position()

    def previous_segment(self) -> None:
        segment = self._cursor.previous(self.items)
        if segment is not None:
            self.seek_to(segment.timestamp)

    def next_segment(self) -> None:
        segment = self._cursor.next(self.items)
        if segment is not None:
            self.seek_to(segment.timestamp)

    def _start_process(self, offset: int) -> bool:
        """Terminate any running decoder, then spawn one at ``offset``.

        This is the only place a decoder is spawned, so a session never has
        two alive at once.
        """
        self._stop_process()
        offset = self._tracker.seek_to(offset)
        argv = build_ffplay_command(self.audio_path, offset, binary=self.config.binary)
        try:
            handle = self._spawn(argv)
        except PlayerProcessError as e:
            self._status = PlaybackStatus.PAUSED
            self.error_message = str(e)
            return False

        self._handle = handle
        self._tracker.start(offset)
        self._status = PlaybackStatus.PLAYING
        if self.error_message and self.error_message != self._setup_error:
            self.error_message = None
        return True

    def _stop_process(self) -> None:
        """Terminate the decoder group (if any) and pin the tracked position."""
        self._tracker.stop()
        handle, self._handle = self._handle, None
        if handle is not None and not handle.terminate(self.config.terminate_timeout_seconds):
            self._leaked.append(f"player process group {handle.pgid}")
            self.error_message = f"Player process {handle.pid} did not exit"

    def _check_process(self) -> None:
        if not self.playing or self._handle is None or self._handle.is_alive():
            return
        returncode = self._handle.returncode
        position = self._tracker.current_position()
        near_end = not self._tracker.duration or position >= self._tracker.duration - END_TOLERANCE_SECONDS
        if returncode in (0, None) and near_end:
            self._reach_end()
            return
        self._stop_process()
        self._status = PlaybackStatus.PAUSED
        self.error_message = f"Player exited with status {returncode}"

    def _reach_end(self) -> None:
        self._stop_process()
        if self._tracker.duration:
            self._tracker.seek_to(self._tracker.duration)
        self._status = PlaybackStatus.PAUSED
        self.status_message = "End of episode"

    # ------------------------------------------------------------------ #
    # Transcript
    # ------------------------------------------------------------------ #
    @property
    def transcript(self) -> Transcript | None:
        return self._transcript

    @property
    def items(self) -> tuple[TranscriptSegment, ...]:
        return self._transcript.items if self._transcript is not None else ()

    @property
    def cursor(self) -> TranscriptCursor:
        return self._cursor

    def _adopt(self, snapshot: Transcript) -> bool:
        """Take a new snapshot unless it has fewer segments than the current one."""
        if self._transcript is not None and snapshot.count < self._transcript.count:
            return False
        self._transcript = snapshot
        return True

    def _transcribing(self) -> bool:
        return self._transcriptions is not None and self._transcriptions.is_running(self.episode.uuid)

    def _start_poller(self) -> None:
        """Ensure a live poller; one that was told to stop is replaced, not reused."""
        self._retired_pollers = [t for t in self._retired_pollers if t.is_alive()]
        if self._poller is not None and self._poller.is_alive():
            if not self._poller.stopping:
                return
            self._retired_pollers.append(self._poller)
        self._poller = SupervisedTask(
            f"transcript-poller-{self.episode.uuid[:6]}",
            self._poll_transcript,
            self._poll_interval,
        ).start()

    def _poll_transcript(self) -> None:
        self._transcript_cell.publish(self._store.load(self.transcript_path))

    def _absorb_background(self) -> None:
        snapshot = self._transcript_cell.take()
        if snapshot is not None:
            self._adopt(snapshot)

        if self._poller is not None and self._poller.error is not None:
            self.error_message = f"Transcript polling failed: {self._poller.error}"
            self._poller.error = None

        if self._transcriptions is not None:
            outcome = self._transcriptions.status(self.episode.uuid)
            if outcome != self._transcription_outcome:
                self._transcription_outcome = outcome
                if outcome == "completed":
                    self.status_message = "Transcription completed"
                elif outcome == "failed":
                    self.error_message = "Transcription failed"
                elif outcome == "running":
                    self._start_poller()

        if (
            self._poller is not None
            and not self._poller.stopping
            and not self._transcribing()
            and self._transcript is not None
            and self._transcript.loaded
        ):
            self._poller.stop(timeout=0)

    def transcript_status(self) -> str:
        if self._transcribing():
            return "transcribing"
        if self._transcript is not None and self._transcript.loaded:
            return "available"
        if self._transcript is not None and self._transcript.items:
            return "partial"
        return "none"

    def transcription_progress(self) -> int:
        if self._transcript is None or not self._transcript.items or not self._tracker.duration:
            return 0
        if self._transcript.loaded and not self._transcribing():
            return 100
        return min(round(self._transcript.last_timestamp * 100 / self._tracker.duration), 99)

    @property
    def chat_ready(self) -> bool:
        return (
            self._chat is not None
            and self._transcript is not None
            and self._transcript.loaded
            and not self._transcribing()
        )

    # ------------------------------------------------------------------ #
    # Chat
    # ------------------------------------------------------------------ #
    def enter_chat(self) -> None:
        """Suspend playback and the screen while the chat prompt runs."""
        if self._chat is None:
            self.error_message = "Chat unavailable"
            return
        if not self.chat_ready:
            self.error_message = "Chat unavailable - waiting for transcription to complete"
            return

        was_playing = self.playing
        self.pause()
        failure = None
        try:
            with self._renderer.suspended(), self._keys.suspended():
                self._chat(self.episode, self._transcript)
        except ChatUnavailable as e:
            failure = f"Chat unavailable: {e}"
        if was_playing and not self._quit_requested:
            self.play()
        if failure:
            self.error_message = failure

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            position_seconds=self.position,
            playing=self.playing,
            status=self._status,
            process_handle=self._handle,
            start_wall_clock=self._tracker.start_wall_clock,
        )

    def view(self, viewport_height: int | None = None) -> SessionView:
        return SessionView(
            episode=self.episode,
            position=self.position,
            duration=self._tracker.duration,
            status=self._status,
            transcript=self._transcript,
            cursor=self._cursor.state,
            viewport_height=viewport_height or self._renderer.viewport_height(),
            transcript_status=self.transcript_status(),
            transcription_progress=self.transcription_progress(),
            chat_ready=self.chat_ready,
            playback_enabled=self.playback_enabled,
            status_message=self.status_message,
            error_message=self.error_message,
            seek_step=self.config.seek_step_seconds,
        )
