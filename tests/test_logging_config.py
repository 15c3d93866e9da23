import io
import logging
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from logging_config import setup_logging  # noqa: E402


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_repeated_setup_keeps_a_single_console_handler():
    first, second = io.StringIO(), io.StringIO()
    setup_logging(stream=first)
    setup_logging(stream=second, level="debug")

    logging.getLogger("tailer").debug("hello %s", "there")
    assert first.getvalue() == ""
    assert "DEBUG [tailer] hello there" in second.getvalue()
    assert logging.getLogger().level == logging.DEBUG


def test_file_handler_is_created(tmp_path):
    log_file = tmp_path / "logs" / "tail.log"
    setup_logging(log_file=log_file, stream=io.StringIO())
    logging.getLogger("tailer").warning("rotated")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "WARNING [tailer] rotated" in log_file.read_text(encoding="utf-8")


def test_unknown_level_is_rejected():
    with pytest.raises(ValueError):
        setup_logging(level="chatty", stream=io.StringIO())
