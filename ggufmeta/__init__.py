"""
ggufmeta
========

Pure-Python decoder for the header and metadata section of GGUF model files,
with zero-copy mmap file access, rich console reporting and JSON export.
"""
from __future__ import annotations

from importlib.metadata import version as _pkg_version

from ggufmeta.model_formats.gguf.gguf import (
    GGUFArray,
    GGUFContainer,
    GGUFHeader,
    GGUFIOError,
    GGUFKV,
    GGUFParseError,
    InvalidBoolError,
    InvalidUtf8Error,
    NestingTooDeepError,
    NotGGUFError,
    ReaderStateError,
    TruncatedError,
    UnknownValueTypeError,
)
from ggufmeta.model_formats.gguf.gguf_reader import GGUFReader, read_gguf
from ggufmeta.model_formats.gguf.gguf_types import GGUFValueType
from ggufmeta.model_formats.gguf.gguf_values import ReaderOptions

__all__ = [
    "__version__",
    "GGUFArray",
    "GGUFContainer",
    "GGUFHeader",
    "GGUFIOError",
    "GGUFKV",
    "GGUFParseError",
    "GGUFReader",
    "GGUFValueType",
    "InvalidBoolError",
    "InvalidUtf8Error",
    "NestingTooDeepError",
    "NotGGUFError",
    "ReaderOptions",
    "ReaderStateError",
    "TruncatedError",
    "UnknownValueTypeError",
    "read_gguf",
]

try:
    # Read version dynamically from installed package metadata
    __version__: str = _pkg_version("ggufmeta")
except Exception:  # pragma: no cover - fallback for development environments
    __version__ = "0.0.0-dev"
