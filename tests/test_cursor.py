"""
Tests for the byte cursors and the mmap file source.
"""

import io

import pytest

from ggufmeta.io.cursor import ByteCursor, StreamCursor
from ggufmeta.io.file_reader import LocalFileSource
from ggufmeta.model_formats.gguf.gguf import GGUFIOError, TruncatedError


class _FailingStream:
    def __init__(self, data: bytes, fail_after: int):
        self._buf = io.BytesIO(data)
        self._fail_after = fail_after

    def read(self, n: int) -> bytes:
        if self._buf.tell() >= self._fail_after:
            raise OSError("disk on fire")
        return self._buf.read(min(n, self._fail_after - self._buf.tell()))


@pytest.mark.parametrize("make", [ByteCursor, lambda b: StreamCursor(io.BytesIO(b))])
def test_sequential_reads(make):
    cur = make(b"\x01\x02\x03\x04\x05\x06\x07")
    assert cur.read_exact(1) == b"\x01"
    assert cur.unpack("<H") == (0x0302,)
    assert cur.offset == 3
    assert cur.read_exact(0) == b""
    with pytest.raises(TruncatedError) as exc:
        cur.read_exact(10)
    assert exc.value.offset == 3
    assert exc.value.needed == 10
    assert exc.value.available == 4


def test_stream_cursor_short_reads_are_joined():
    class Trickle(io.RawIOBase):
        def __init__(self, data):
            self._data = data

        def readable(self):
            return True

        def read(self, n=-1):
            chunk, self._data = self._data[:1], self._data[1:]
            return chunk

    cur = StreamCursor(Trickle(b"abcdef"))
    assert cur.read_exact(4) == b"abcd"
    assert cur.offset == 4


def test_stream_cursor_wraps_os_errors():
    cur = StreamCursor(_FailingStream(b"\x00" * 16, fail_after=4))
    cur.read_exact(4)
    with pytest.raises(GGUFIOError) as exc:
        cur.read_exact(4)
    assert isinstance(exc.value.__cause__, OSError)


def test_mapped_file(tmp_path):
    p = tmp_path / "blob.bin"
    p.write_bytes(b"GGUF")
    with LocalFileSource(str(p)).open() as mf:
        assert mf.size == 4
        assert bytes(mf.view) == b"GGUF"


def test_mapped_empty_file(tmp_path):
    p = tmp_path / "empty.bin"
    p.write_bytes(b"")
    with LocalFileSource(str(p)).open() as mf:
        assert mf.size == 0
        assert len(mf.view) == 0


def test_mapped_file_view_requires_enter(tmp_path):
    mf = LocalFileSource(str(tmp_path / "x")).open()
    with pytest.raises(RuntimeError):
        mf.view
