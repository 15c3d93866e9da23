# src/schemas.py
"""Pydantic schemas describing how a tailer is configured."""

from __future__ import annotations

import codecs
import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_POLL_INTERVAL_MS = 1000
DEFAULT_BUFFER_SIZE = 4096
DEFAULT_ENCODING = "utf-8"


class TailerConfig(BaseModel):
    """Validated construction parameters for a FileTailer."""

    model_config = ConfigDict(extra="forbid")

    path: str = Field(
        description="File to follow. It does not have to exist yet.",
        min_length=1,
    )
    poll_interval_ms: int = Field(
        default=DEFAULT_POLL_INTERVAL_MS,
        gt=0,
        description="Fixed delay between two polls, in milliseconds.",
    )
    from_start: bool = Field(
        default=True,
        description="Deliver content already present when the file is first seen.",
    )
    buffer_size: int = Field(
        default=DEFAULT_BUFFER_SIZE,
        gt=0,
        description="Number of bytes requested per read.",
    )
    reopen: bool = Field(
        default=False,
        description="Close the file after every poll and reopen it on the next one.",
    )
    encoding: str = Field(default=DEFAULT_ENCODING, min_length=1)

    @field_validator("path", mode="before")
    @classmethod
    def _check_path(cls, value: Any) -> Any:
        if isinstance(value, os.PathLike):
            value = os.fspath(value)
        # Spaces are legal in file names, so the value is kept as given.
        if isinstance(value, str) and not value.strip():
            raise ValueError("path must not be blank")
        return value

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {value}") from exc
        return value
