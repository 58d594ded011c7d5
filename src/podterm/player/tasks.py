"""Supervised background tasks that publish snapshots to the tick loop."""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

_UNSET = object()


class LatestValue(Generic[T]):
    """Single-writer / single-reader cell holding the most recent snapshot.

    The writer publishes whole immutable values; the reader takes the newest
    one at the top of a tick. Intermediate values may be dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: object = _UNSET
        self._version = 0

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            self._version += 1

    def take(self) -> T | None:
        """Return the value published since the last take, or None."""
        with self._lock:
            value, self._value = self._value, _UNSET
        return None if value is _UNSET else value  # type: ignore[return-value]

    def peek(self) -> T | None:
        with self._lock:
            value = self._value
        return None if value is _UNSET else value  # type: ignore[return-value]

    @property
    def version(self) -> int:
        with self._lock:
            return self._version


class SupervisedTask:
    """A daemon thread that runs ``step`` every ``interval`` seconds.

    ``step`` returns False to finish early. Exceptions end the task and are
    kept in ``error`` for the owner to report. ``stop`` signals the thread
    and joins it with a bounded wait.
    """

    def __init__(self, name: str, step: Callable[[], bool | None], interval: float):
        self.name = name
        self.interval = interval
        self.error: BaseException | None = None
        self._step = step
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> SupervisedTask:
        self._thread.start()
        return self

    @property
    def started(self) -> bool:
        return self._thread.ident is not None

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def stop(self, timeout: float = 2.0) -> bool:
        """Signal the task and wait up to ``timeout`` for it to finish.

        Returns False if the thread is still running afterwards. Being a
        daemon thread it cannot outlive the interpreter.
        """
        self._stop.set()
        if self.started and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                keep_going = self._step()
            except Exception as e:
                self.error = e
                return
            if keep_going is False:
                return
            self._stop.wait(self.interval)
