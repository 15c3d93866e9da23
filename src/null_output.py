# src/null_output.py
"""A byte stream that throws away everything written to it."""

from __future__ import annotations

import io


class NullOutputStream(io.RawIOBase):
    """
    Write-only sink, the ``/dev/null`` of streams. It never closes: ``close()``
    is accepted but the stream keeps swallowing writes, so the shared
    NULL_OUTPUT_STREAM instance cannot be broken by one caller.
    """

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        with memoryview(b) as view:
            return view.nbytes

    def writelines(self, lines) -> None:
        for line in lines:
            self.write(line)

    def close(self) -> None:
        pass

    @property
    def closed(self) -> bool:
        return False


NULL_OUTPUT_STREAM = NullOutputStream()

__all__ = ["NullOutputStream", "NULL_OUTPUT_STREAM"]
