# src/listeners.py
"""Listener capability consumed by FileTailer, plus two ready-made listeners."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, List, Protocol

if TYPE_CHECKING:
    from tailer import FileTailer


class TailerListener(Protocol):
    """
    Callbacks a FileTailer drives. All of them run on the tailer's own thread,
    so an implementation must not block for long or tailing stalls.

    A listener may additionally define ``on_end_of_file()``; the tailer calls
    it after each poll that consumed everything available.
    """

    def on_init(self, tailer: "FileTailer") -> None: ...

    def on_file_not_found(self) -> None: ...

    def on_file_rotated(self) -> None: ...

    def on_new_line(self, line: str) -> None: ...

    def on_error(self, error: Exception) -> None: ...


class TailerListenerAdapter:
    """No-op listener; subclass it and override only the callbacks you need."""

    def on_init(self, tailer: "FileTailer") -> None:
        pass

    def on_file_not_found(self) -> None:
        pass

    def on_file_rotated(self) -> None:
        pass

    def on_new_line(self, line: str) -> None:
        pass

    def on_error(self, error: Exception) -> None:
        pass

    def on_end_of_file(self) -> None:
        pass


class CollectingListener(TailerListenerAdapter):
    """
    Records every event it receives. Safe to inspect from another thread
    while the tailer is running.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._lines: List[str] = []
        self.errors: List[Exception] = []
        self.tailer = None
        self.initialised = 0
        self.not_found = 0
        self.rotated = 0
        self.end_of_file = 0

    @property
    def lines(self) -> List[str]:
        with self._cond:
            return list(self._lines)

    def clear(self) -> None:
        with self._cond:
            self._lines.clear()

    def wait_for_lines(self, count: int, timeout: float = 5.0) -> bool:
        """Block until at least ``count`` lines were collected or ``timeout`` elapses."""
        deadline = time.monotonic() + timeout
        with self._cond:
            while len(self._lines) < count:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            return True

    def on_init(self, tailer: "FileTailer") -> None:
        self.tailer = tailer
        self.initialised += 1

    def on_file_not_found(self) -> None:
        self.not_found += 1

    def on_file_rotated(self) -> None:
        self.rotated += 1

    def on_new_line(self, line: str) -> None:
        with self._cond:
            self._lines.append(line)
            self._cond.notify_all()

    def on_error(self, error: Exception) -> None:
        self.errors.append(error)

    def on_end_of_file(self) -> None:
        self.end_of_file += 1
