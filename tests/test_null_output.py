import io
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from null_output import NULL_OUTPUT_STREAM, NullOutputStream  # noqa: E402


def test_writes_are_swallowed():
    sink = NullOutputStream()
    assert sink.writable() is True
    assert sink.readable() is False
    assert sink.seekable() is False
    assert sink.write(b"string") == 6
    assert sink.write(bytearray(b"some string")[3:8]) == 5
    assert sink.write(memoryview(b"\x0f")) == 1
    sink.writelines([b"a", b"bc"])
    sink.flush()


def test_close_does_not_break_the_stream():
    sink = NullOutputStream()
    sink.close()
    assert sink.closed is False
    assert sink.write(b"allowed") == 7

    with NULL_OUTPUT_STREAM as shared:
        shared.write(b"x")
    assert NULL_OUTPUT_STREAM.write(b"still fine") == 10


def test_can_back_buffered_and_text_wrappers():
    buffered = io.BufferedWriter(NullOutputStream())
    text = io.TextIOWrapper(buffered, encoding="utf-8")
    text.write("nothing to see here\n" * 1000)
    text.flush()
