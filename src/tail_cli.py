# src/tail_cli.py
"""`tail-follow`: follow a file like ``tail -F`` using FileTailer."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import click

from config_loader import load_config
from errors import ConfigurationError
from listeners import TailerListenerAdapter
from logging_config import setup_logging
from tailer import FileTailer

logger = logging.getLogger(__name__)


class EchoListener(TailerListenerAdapter):
    """Writes tailed lines to stdout and tailer events to stderr."""

    def __init__(self, path: str):
        self.path = path

    def on_new_line(self, line: str) -> None:
        click.echo(line)

    def on_file_not_found(self) -> None:
        click.echo(f"tail-follow: {self.path}: waiting for file to appear", err=True)

    def on_file_rotated(self) -> None:
        click.echo(f"tail-follow: {self.path}: file replaced, following new file", err=True)

    def on_error(self, error: Exception) -> None:
        click.echo(f"tail-follow: {error}", err=True)


def _build_tailer(path, config_file, overrides) -> FileTailer:
    if config_file is not None:
        config = load_config(config_file, {"path": path, **overrides})
        return FileTailer.from_config(config, EchoListener(config.path))
    if not path:
        raise click.UsageError("PATH is required unless --config is given")
    options = {key: value for key, value in overrides.items() if value is not None}
    return FileTailer(path, EchoListener(path), **options)


@click.command(name="tail-follow")
@click.argument("path", required=False)
@click.option("--interval", "poll_interval_ms", type=int, default=None, help="Poll interval in milliseconds.")
@click.option("--from-start/--from-end", "from_start", default=None, help="Print existing content first, or only new lines.")
@click.option("--buffer-size", type=int, default=None, help="Bytes per read.")
@click.option("--reopen/--keep-open", "reopen", default=None, help="Reopen the file on every poll.")
@click.option("--encoding", default=None, help="Text encoding of the file.")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with tailer settings; command-line options win.",
)
@click.option("--duration", type=float, default=None, help="Stop after this many seconds.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None)
def main(
    path: Optional[str],
    poll_interval_ms: Optional[int],
    from_start: Optional[bool],
    buffer_size: Optional[int],
    reopen: Optional[bool],
    encoding: Optional[str],
    config_file: Optional[Path],
    duration: Optional[float],
    log_level: str,
    log_file: Optional[Path],
) -> None:
    """Print lines appended to PATH, surviving rotation and truncation."""
    setup_logging(log_file=log_file, level=log_level)
    overrides = {
        "poll_interval_ms": poll_interval_ms,
        "from_start": from_start,
        "buffer_size": buffer_size,
        "reopen": reopen,
        "encoding": encoding,
    }
    try:
        tailer = _build_tailer(path, config_file, overrides)
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    deadline = time.monotonic() + duration if duration is not None else None
    tailer.start()
    try:
        while tailer.thread.is_alive():
            if deadline is not None and time.monotonic() >= deadline:
                break
            tailer.join(0.2)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
    finally:
        tailer.stop()
        tailer.join()


if __name__ == "__main__":
    main()
