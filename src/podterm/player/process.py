"""Supervision of an external process running as its own process-group leader."""

from __future__ import annotations

import os
import signal
import subprocess
import time
from typing import IO

from podterm.errors import PlayerProcessError

DEFAULT_TERMINATE_TIMEOUT = 2.0
_GROUP_POLL_SECONDS = 0.02


class ExternalProcessHandle:
    """One spawned process group.

    The child is started in a new session, so it leads a process group whose
    id equals its pid. Signals go to the whole group, which also reaches any
    helpers the decoder forks.
    """

    def __init__(self, process: subprocess.Popen, argv: list[str]):
        self._process = process
        self.argv = argv
        self.pid = process.pid
        self.pgid = process.pid
        self._terminated = False

    @classmethod
    def spawn(
        cls,
        argv: list[str],
        *,
        stdout: IO | int | None = None,
    ) -> ExternalProcessHandle:
        """Start ``argv`` as a new process-group leader.

        Raises PlayerProcessError when the program cannot be started.
        """
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=stdout if stdout is not None else subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            raise PlayerProcessError(argv, e) from e
        return cls(process, argv)

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    def is_alive(self) -> bool:
        """True while the group leader is running.

        Reaps the leader without blocking, so an exited decoder never lingers
        as a zombie that still answers signal probes.
        """
        if self._terminated or self._process.poll() is not None:
            return False
        try:
            os.killpg(self.pgid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True
        return True

    def terminate(self, timeout: float = DEFAULT_TERMINATE_TIMEOUT) -> bool:
        """Stop the process group: SIGTERM, bounded wait, then SIGKILL.

        A group that is already gone counts as terminated. Returns False only
        when the group survived SIGKILL as well; callers log that and carry on.
        """
        if self._terminated:
            return True

        deadline = time.monotonic() + timeout
        if not self._signal_group(signal.SIGTERM) or self._wait_group(deadline):
            self._terminated = True
            return True

        self._signal_group(signal.SIGKILL)
        stopped = self._wait_group(time.monotonic() + timeout)
        self._terminated = stopped
        return stopped

    def _signal_group(self, sig: signal.Signals) -> bool:
        """Send ``sig`` to the group; False if there is no such group."""
        try:
            os.killpg(self.pgid, sig)
        except ProcessLookupError:
            self._reap()
            return False
        return True

    def _wait_group(self, deadline: float) -> bool:
        """Wait until the leader is reaped and the group is empty."""
        try:
            self._process.wait(timeout=max(deadline - time.monotonic(), 0))
        except subprocess.TimeoutExpired:
            return False

        while True:
            try:
                os.killpg(self.pgid, 0)
            except (ProcessLookupError, PermissionError):
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(_GROUP_POLL_SECONDS)

    def _reap(self) -> None:
        self._process.poll()

    def __repr__(self) -> str:
        return f"ExternalProcessHandle(pid={self.pid}, argv={self.argv!r})"
