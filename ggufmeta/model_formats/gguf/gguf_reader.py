# ggufmeta/model_formats/gguf/gguf_reader.py
"""
GGUF container reader: magic, header, then the metadata key/value table.
"""

from __future__ import annotations

import os
from typing import BinaryIO, List, Optional, Union

from loguru import logger

from ggufmeta.io.cursor import ByteCursor, Cursor, StreamCursor
from ggufmeta.io.file_reader import LocalFileSource
from ggufmeta.observability import Timer

from .gguf import (
    GGUF_MAGIC,
    GGUFContainer,
    GGUFHeader,
    GGUFIOError,
    GGUFKV,
    InvalidUtf8Error,
    NotGGUFError,
    ReaderStateError,
)
from .gguf_values import DEFAULT_OPTIONS, ReaderOptions, decode_value, read_string, read_value_type

Source = Union[str, "os.PathLike[str]", bytes, bytearray, memoryview, BinaryIO]


class GGUFReader:
    """Single-use reader; one instance decodes exactly one source."""

    def __init__(self, options: Optional[ReaderOptions] = None):
        self.options = options or DEFAULT_OPTIONS
        self._done = False

    def read(self, source: Source) -> GGUFContainer:
        """Decode the header and metadata section of ``source``.

        ``source`` may be a path, a bytes-like buffer or a readable binary
        stream. Paths are memory-mapped for the duration of the call.

        Raises:
            GGUFParseError: any subclass, on the first malformation found.
            ReaderStateError: if this reader was already used.
        """
        if self._done:
            raise ReaderStateError("GGUFReader instances are single-use")
        self._done = True

        if isinstance(source, (str, os.PathLike)):
            path = os.fspath(source)
            try:
                with LocalFileSource(path).open() as mf:
                    return self._read_cursor(ByteCursor(mf.view), name=path)
            except OSError as e:
                raise GGUFIOError(f"Cannot read {path}: {e}") from e
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self._read_cursor(ByteCursor(source), name="<buffer>")
        return self._read_cursor(StreamCursor(source), name=getattr(source, "name", "<stream>"))

    def _read_cursor(self, cur: Cursor, *, name: str) -> GGUFContainer:
        with Timer("gguf_read") as t:
            header = self._read_header(cur)
            logger.debug(
                "{name}: GGUF v{version}, tensors={n_tensors}, kv={n_kv}",
                name=name,
                version=header.version,
                n_tensors=header.n_tensors,
                n_kv=header.n_kv,
            )
            kv = self._read_metadata(cur, header.n_kv)
        logger.debug(
            "{name}: decoded {count} metadata entries ({end} bytes) in {ms:.2f}ms",
            name=name,
            count=len(kv),
            end=cur.offset,
            ms=t.duration_ms,
        )
        return GGUFContainer(header=header, kv=tuple(kv))

    def _read_header(self, cur: Cursor) -> GGUFHeader:
        magic = cur.read_exact(4)
        if magic != GGUF_MAGIC:
            raise NotGGUFError(f"Invalid magic {magic!r}; not GGUF", offset=0)
        (version,) = cur.unpack("<I")
        (n_tensors,) = cur.unpack("<Q")
        (n_kv,) = cur.unpack("<Q")
        return GGUFHeader(version=version, n_tensors=n_tensors, n_kv=n_kv)

    def _read_metadata(self, cur: Cursor, n_kv: int) -> List[GGUFKV]:
        kv: List[GGUFKV] = []
        for _ in range(n_kv):
            start = cur.offset
            try:
                key = read_string(cur)
            except InvalidUtf8Error as e:
                raise InvalidUtf8Error("Metadata key is not UTF-8", offset=e.offset) from None
            value_type = read_value_type(cur)
            value, _ = decode_value(value_type, cur, options=self.options)
            kv.append(
                GGUFKV(
                    key=key,
                    type=value_type,
                    value=value,
                    offset_start=start,
                    offset_end=cur.offset,
                )
            )
        return kv


def read_gguf(source: Source, *, options: Optional[ReaderOptions] = None) -> GGUFContainer:
    """Decode ``source`` with a fresh GGUFReader."""
    return GGUFReader(options).read(source)
