# src/errors.py

from typing import Optional


class TailError(Exception):
    """
    Base exception for the file tailing library.
    All other exceptions should inherit from this.
    """
    def __init__(self, message: str, *, underlying: Optional[Exception] = None):
        super().__init__(message)
        self.underlying = underlying

    def __str__(self):
        if self.underlying:
            return f"{self.args[0]} (caused by {self.underlying})"
        return self.args[0]


class ConfigurationError(TailError):
    """
    Raised when a tailer is constructed with invalid arguments or a config file
    cannot be loaded.
    """


class FileUnavailable(TailError):
    """
    Raised inside the poll loop when the watched file is missing.
    Never escapes the tailer; listeners see it as on_file_not_found().
    """


class RotationDetected(TailError):
    """
    Raised inside the poll loop when the watched file was replaced or truncated.
    Never escapes the tailer; listeners see it as on_file_rotated().
    """


class IOFailure(TailError):
    """
    Passed to on_error() when opening or reading the watched file fails.
    """


class ListenerError(TailError):
    """
    Passed to on_error() when one of the listener's own callbacks raised.
    """
