# src/logging_config.py
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO, Union

DEFAULT_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'
DEFAULT_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
    log_file: Optional[Path] = None,
    level: Union[int, str] = logging.INFO,
    stream: Optional[TextIO] = None,
    fmt: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
):
    """
    Configure the root logger with a console handler and an optional file handler.
    Handlers installed by an earlier call are replaced, so calling it twice is harmless.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        if getattr(handler, '_tail_follow', False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(fmt, datefmt=datefmt)

    # Console handler; stdout is reserved for tailed lines
    ch = logging.StreamHandler(stream if stream is not None else sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    ch._tail_follow = True
    root.addHandler(ch)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding='utf-8')
        fh.setLevel(level)
        fh.setFormatter(formatter)
        fh._tail_follow = True
        root.addHandler(fh)
