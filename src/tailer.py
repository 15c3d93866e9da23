# src/tailer.py
"""
Polling file tailer.

A FileTailer watches one path and hands every line appended to it to a
listener. It survives the file being absent, truncated or replaced (log
rotation). ``run()`` is a plain blocking call; run it on a thread of your
own or use ``FileTailer.create`` to get a daemon thread.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from dataclasses import replace
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

from pydantic import ValidationError

from errors import (
    ConfigurationError,
    FileUnavailable,
    IOFailure,
    ListenerError,
    RotationDetected,
)
from listeners import TailerListener
from models import TailerState, TailerStatus
from schemas import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_ENCODING,
    DEFAULT_POLL_INTERVAL_MS,
    TailerConfig,
)

logger = logging.getLogger(__name__)

# Alternation order matters: \r\n must win over a lone \r.
_LINE_END = re.compile(rb"\r\n|\r|\n")
# How many already-read bytes are re-checked to tell an append from a rewrite
_FINGERPRINT_SIZE = 64


def split_lines(data: bytes) -> Tuple[List[bytes], bytes]:
    """
    Split ``data`` into complete lines and the unterminated remainder.

    Lines end at ``\\n``, ``\\r\\n`` or a lone ``\\r``; terminators are dropped.
    A ``\\r`` at the very end stays in the remainder because the next read may
    carry the ``\\n`` that completes it.
    """
    lines: List[bytes] = []
    start = 0
    for match in _LINE_END.finditer(data):
        if match.end() == len(data) and match.group() == b"\r":
            break
        lines.append(data[start:match.start()])
        start = match.end()
    return lines, data[start:]


class FileTailer:
    """
    Follows a file and calls ``listener.on_new_line(line)`` for each complete
    line appended to it.
    """

    def __init__(
        self,
        path: Union[str, Path],
        listener: TailerListener,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        from_start: bool = True,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        *,
        reopen: bool = False,
        encoding: str = DEFAULT_ENCODING,
    ):
        if listener is None:
            raise ConfigurationError("A listener is required")
        try:
            config = TailerConfig(
                path=path if path is not None else "",
                poll_interval_ms=poll_interval_ms,
                from_start=from_start,
                buffer_size=buffer_size,
                reopen=reopen,
                encoding=encoding,
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid tailer configuration for {path!r}", underlying=exc) from exc

        self._listener = listener
        self._reopen = config.reopen
        self._encoding = config.encoding
        self._state = TailerState(
            path=config.path,
            poll_interval_ms=config.poll_interval_ms,
            from_start=config.from_start,
            buffer_size=config.buffer_size,
        )
        self._stop_event = threading.Event()
        self._status = TailerStatus.STOPPED
        self._handle: Optional[BinaryIO] = None
        # (st_dev, st_ino) of the file last_read_position refers to
        self._identity: Optional[Tuple[int, int]] = None
        self._seen = False
        # Bytes read past last_read_position that do not end a line yet
        self._pending = bytearray()
        # Last bytes read before _read_offset, compared when the file changes
        self._tail = b""
        self.thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, config: TailerConfig, listener: TailerListener) -> "FileTailer":
        return cls(
            config.path,
            listener,
            poll_interval_ms=config.poll_interval_ms,
            from_start=config.from_start,
            buffer_size=config.buffer_size,
            reopen=config.reopen,
            encoding=config.encoding,
        )

    @classmethod
    def create(
        cls,
        path: Union[str, Path],
        listener: TailerListener,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        from_start: bool = True,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        *,
        reopen: bool = False,
        encoding: str = DEFAULT_ENCODING,
        daemon: bool = True,
    ) -> "FileTailer":
        """Build a tailer and start ``run()`` on a new thread."""
        tailer = cls(
            path,
            listener,
            poll_interval_ms,
            from_start,
            buffer_size,
            reopen=reopen,
            encoding=encoding,
        )
        tailer.start(daemon=daemon)
        return tailer

    @property
    def path(self) -> str:
        return self._state.path

    @property
    def poll_interval_ms(self) -> int:
        return self._state.poll_interval_ms

    @property
    def from_start(self) -> bool:
        return self._state.from_start

    @property
    def buffer_size(self) -> int:
        return self._state.buffer_size

    @property
    def is_running(self) -> bool:
        return self._state.running

    @property
    def status(self) -> TailerStatus:
        return self._status

    @property
    def state(self) -> TailerState:
        """Snapshot of the tailer's bookkeeping."""
        return replace(self._state)

    def run(self) -> None:
        """
        Poll the file until stop() is called. Blocks the calling thread.
        A tailer that has been stopped stays stopped.
        """
        self._state.running = True
        self._status = TailerStatus.WATCHING
        logger.info(
            "Tailing %s every %d ms (from_start=%s)",
            self.path, self.poll_interval_ms, self.from_start,
        )
        self._notify("on_init", self)
        try:
            while not self._stop_event.is_set():
                self.poll()
                self._stop_event.wait(self._state.poll_interval)
        finally:
            self._close_handle()
            self._state.running = False
            self._status = TailerStatus.STOPPED
            logger.info("Stopped tailing %s", self.path)

    def start(self, daemon: bool = True) -> threading.Thread:
        """Run the tailer on a thread of its own; a second call is a no-op."""
        if self.thread and self.thread.is_alive():
            return self.thread
        self.thread = threading.Thread(
            target=self.run,
            name=f"tailer-{Path(self.path).name}",
            daemon=daemon,
        )
        self.thread.start()
        return self.thread

    def stop(self) -> None:
        """Ask the run loop to exit at the next poll boundary. Does not wait."""
        if not self._stop_event.is_set():
            logger.debug("Stop requested for %s", self.path)
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the thread started by create() to finish."""
        if self.thread is not None:
            self.thread.join(timeout)

    def poll(self) -> None:
        """
        Run one poll cycle. run() calls this every poll interval; a caller with
        its own scheduler may call it directly instead.
        """
        if self._stop_event.is_set():
            return
        try:
            try:
                stat = self._stat()
                self._check_identity(stat)
            except RotationDetected as rotation:
                logger.info("%s", rotation)
                self._close_handle()
                self._identity = (stat.st_dev, stat.st_ino)
                self._reset()
                self._notify("on_file_rotated")
            self._status = TailerStatus.WATCHING
            if stat.st_size > self._read_offset:
                self._read_available()
            self._state.last_modified_time = stat.st_mtime
            self._state.last_file_size = stat.st_size
        except FileUnavailable as missing:
            self._file_missing(missing)
            return
        except OSError as exc:
            self._close_handle()
            self._notify("on_error", IOFailure(f"Failed to read {self.path}", underlying=exc))
            return
        if self._reopen:
            self._close_handle()
        self._notify("on_end_of_file")

    @property
    def _read_offset(self) -> int:
        """File offset of the next byte to read."""
        return self._state.last_read_position + len(self._pending)

    def _reset(self, position: int = 0) -> None:
        self._state.reset_position(position)
        self._pending.clear()
        self._tail = b""

    def _stat(self) -> os.stat_result:
        try:
            return os.stat(self.path)
        except FileNotFoundError as exc:
            raise FileUnavailable(f"File not found: {self.path}", underlying=exc) from exc

    def _check_identity(self, stat: os.stat_result) -> None:
        identity = (stat.st_dev, stat.st_ino)
        if self._identity is None:
            if self._seen:
                raise RotationDetected(f"{self.path} reappeared")
            start = 0 if self.from_start else stat.st_size
            self._reset(start)
            self._tail = self._read_tail(start)
            self._seen = True
            self._identity = identity
            logger.info("Found %s, starting at offset %d", self.path, start)
        elif identity != self._identity:
            raise RotationDetected(f"{self.path} was replaced")
        elif stat.st_size < self._read_offset:
            raise RotationDetected(
                f"{self.path} was truncated ({stat.st_size} < {self._read_offset})"
            )
        elif self._changed(stat) and self._read_tail(self._read_offset) != self._tail:
            # Same inode number and no shrink, but the bytes already read are gone:
            # rewritten in place, or replaced by a file that reused the inode.
            raise RotationDetected(f"{self.path} was rewritten")

    def _changed(self, stat: os.stat_result) -> bool:
        return (
            stat.st_size != self._state.last_file_size
            or stat.st_mtime != self._state.last_modified_time
        )

    def _open(self) -> BinaryIO:
        if self._handle is None:
            try:
                self._handle = open(self.path, "rb")
            except FileNotFoundError as exc:
                raise FileUnavailable(f"File vanished: {self.path}", underlying=exc) from exc
        return self._handle

    def _read_tail(self, end: int) -> bytes:
        """Return up to _FINGERPRINT_SIZE bytes of the file ending at ``end``."""
        if end <= 0:
            return b""
        handle = self._open()
        begin = max(0, end - _FINGERPRINT_SIZE)
        handle.seek(begin)
        return handle.read(end - begin)

    def _read_available(self) -> None:
        handle = self._open()
        handle.seek(self._read_offset)
        while True:
            chunk = handle.read(self.buffer_size)
            if not chunk:
                break
            self._tail = (self._tail + chunk)[-_FINGERPRINT_SIZE:]
            self._feed(chunk)
        if self._pending:
            logger.debug("Holding %d bytes of unterminated line from %s", len(self._pending), self.path)

    def _feed(self, chunk: bytes) -> None:
        """
        Emit the lines completed by ``chunk``. Only ``chunk`` is scanned; the
        unterminated fragment is kept in _pending and prefixed to the next line.
        """
        pending = self._pending
        if pending.endswith(b"\r"):
            # held back by split_lines; it ends a line whether or not \n follows
            line = bytes(pending[:-1])
            consumed = len(pending)
            if chunk.startswith(b"\n"):
                chunk = chunk[1:]
                consumed += 1
            pending.clear()
            self._state.last_read_position += consumed
            self._emit(line)

        lines, rest = split_lines(chunk)
        if lines:
            self._state.last_read_position += len(pending) + len(chunk) - len(rest)
            lines[0] = bytes(pending) + lines[0]
            pending.clear()
            for raw in lines:
                self._emit(raw)
        pending += rest

    def _emit(self, raw: bytes) -> None:
        self._notify("on_new_line", raw.decode(self._encoding, errors="replace"))

    def _file_missing(self, missing: FileUnavailable) -> None:
        self._close_handle()
        self._identity = None
        self._reset()
        if self._status is TailerStatus.MISSING:
            return
        self._status = TailerStatus.MISSING
        logger.warning("%s", missing)
        self._notify("on_file_not_found")

    def _close_handle(self) -> None:
        if self._handle is None:
            return
        try:
            self._handle.close()
        except OSError:
            logger.debug("Ignoring error while closing %s", self.path, exc_info=True)
        self._handle = None

    def _notify(self, name: str, *args) -> None:
        callback = getattr(self._listener, name, None)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as exc:
            logger.exception("Listener %s failed for %s", name, self.path)
            if name != "on_error":
                self._notify("on_error", ListenerError(f"Listener {name} raised", underlying=exc))
