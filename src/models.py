# src/models.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TailerStatus(str, Enum):
    """Coarse lifecycle state of a FileTailer."""

    STOPPED = "stopped"
    WATCHING = "watching"
    MISSING = "missing"


@dataclass
class TailerState:
    """
    Mutable bookkeeping for one tailer. Only the tailer's own run loop writes
    to it; callers get copies through FileTailer.state.
    """
    path: str
    poll_interval_ms: int
    from_start: bool
    buffer_size: int
    running: bool = False
    last_read_position: int = 0
    last_file_size: int = 0
    last_modified_time: Optional[float] = None

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0

    def reset_position(self, position: int = 0) -> None:
        self.last_read_position = position
        self.last_file_size = position
