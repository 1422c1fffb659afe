"""
Sequential byte cursors over in-memory buffers and binary streams.

Both cursors only move forward and raise ``TruncatedError`` when a read asks
for more bytes than the source can still supply.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Tuple, Union

from ggufmeta.model_formats.gguf.gguf import GGUFIOError, TruncatedError

# Upper bound for a single stream read; large declared lengths are read in chunks
_CHUNK = 1 << 20


class ByteCursor:
    """Cursor over a bytes-like buffer; offsets and lengths are in bytes."""

    __slots__ = ("_buf", "offset")

    def __init__(self, buf: Union[bytes, bytearray, memoryview], offset: int = 0):
        view = buf if isinstance(buf, memoryview) else memoryview(buf)
        # Byte views are kept as-is so their owner (e.g. MappedFile) can release them.
        if view.itemsize != 1 or view.ndim != 1:
            view = view.cast("B")
        self._buf = view
        self.offset = offset

    @property
    def remaining(self) -> int:
        return len(self._buf) - self.offset

    def read_exact(self, n: int) -> bytes:
        if n > self.remaining:
            raise TruncatedError(self.offset, n, self.remaining)
        start = self.offset
        self.offset += n
        return bytes(self._buf[start : self.offset])

    def unpack(self, fmt: str) -> Tuple:
        size = struct.calcsize(fmt)
        if size > self.remaining:
            raise TruncatedError(self.offset, size, self.remaining)
        vals = struct.unpack_from(fmt, self._buf, self.offset)
        self.offset += size
        return vals


class StreamCursor:
    """Cursor over a readable binary stream such as an open file."""

    __slots__ = ("_fp", "offset")

    def __init__(self, fp: BinaryIO):
        self._fp = fp
        self.offset = 0

    def read_exact(self, n: int) -> bytes:
        chunks = []
        got = 0
        while got < n:
            try:
                chunk = self._fp.read(min(n - got, _CHUNK))
            except OSError as e:
                raise GGUFIOError(f"I/O failure: {e}", offset=self.offset + got) from e
            if not chunk:
                raise TruncatedError(self.offset, n, got)
            chunks.append(chunk)
            got += len(chunk)
        self.offset += n
        return b"".join(chunks)

    def unpack(self, fmt: str) -> Tuple:
        return struct.unpack(fmt, self.read_exact(struct.calcsize(fmt)))


Cursor = Union[ByteCursor, StreamCursor]
