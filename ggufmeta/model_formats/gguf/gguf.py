# ggufmeta/model_formats/gguf/gguf.py
"""
GGUF shared structures and exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .gguf_types import GGUFValueType

GGUF_MAGIC = b"GGUF"


@dataclass(frozen=True)
class GGUFArray:
    """Immutable homogeneous array value; ``count`` always equals ``len(items)``."""

    element_type: GGUFValueType
    count: int
    items: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
        if self.count != len(self.items):
            raise ValueError(f"count {self.count} does not match {len(self.items)} items")

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def to_python(self) -> List[Any]:
        """Nested plain-list view of the array."""
        return [v.to_python() if isinstance(v, GGUFArray) else v for v in self.items]


@dataclass(frozen=True)
class GGUFKV:
    key: str
    type: GGUFValueType
    value: Any
    offset_start: int
    offset_end: int  # exclusive

    @property
    def is_array(self) -> bool:
        return self.type is GGUFValueType.ARRAY

    def to_python(self) -> Any:
        return self.value.to_python() if isinstance(self.value, GGUFArray) else self.value


@dataclass(frozen=True)
class GGUFHeader:
    version: int
    n_tensors: int
    n_kv: int


HEADER_SIZE = 24  # magic + version + tensor count + kv count


@dataclass(frozen=True)
class GGUFContainer:
    """Decoded GGUF header plus the metadata table in file order."""

    header: GGUFHeader
    kv: Tuple[GGUFKV, ...]

    @property
    def version(self) -> int:
        return self.header.version

    @property
    def tensor_count(self) -> int:
        return self.header.n_tensors

    @property
    def metadata_entry_count(self) -> int:
        return self.header.n_kv

    @property
    def metadata_end_offset(self) -> int:
        return self.kv[-1].offset_end if self.kv else HEADER_SIZE

    def __len__(self) -> int:
        return len(self.kv)

    def __iter__(self) -> Iterator[GGUFKV]:
        return iter(self.kv)

    def keys(self) -> List[str]:
        return [item.key for item in self.kv]

    def get(self, key: str) -> Optional[GGUFKV]:
        """First entry stored under ``key`` (duplicates are kept in file order)."""
        for item in self.kv:
            if item.key == key:
                return item
        return None

    def get_all(self, key: str) -> List[GGUFKV]:
        return [item for item in self.kv if item.key == key]

    def to_python(self) -> Dict[str, Any]:
        """Plain-dict view; later duplicates overwrite earlier ones."""
        return {item.key: item.to_python() for item in self.kv}


class GGUFParseError(Exception):
    """Raised when a GGUF file is malformed."""

    def __init__(self, message: str, *, offset: Optional[int] = None):
        if offset is not None:
            message = f"{message} (at byte offset {offset})"
        super().__init__(message)
        self.offset = offset


class NotGGUFError(GGUFParseError):
    """The magic marker is not ``GGUF``."""


class TruncatedError(GGUFParseError):
    """Fewer bytes remain than a field requires."""

    def __init__(self, offset: int, needed: int, available: int):
        super().__init__(
            f"Truncated: needed {needed} bytes, {available} available", offset=offset
        )
        self.needed = needed
        self.available = available


class UnknownValueTypeError(GGUFParseError):
    def __init__(self, code: int, *, offset: Optional[int] = None):
        super().__init__(f"Unknown GGUF value type {code}", offset=offset)
        self.code = code


class InvalidUtf8Error(GGUFParseError):
    """A key or string payload is not valid UTF-8."""


class InvalidBoolError(GGUFParseError):
    """Bool byte other than 0 or 1 (strict mode only)."""


class NestingTooDeepError(GGUFParseError):
    """Array nesting exceeds the configured maximum depth."""


class GGUFIOError(GGUFParseError):
    """The underlying byte source failed."""


class ReaderStateError(RuntimeError):
    """A GGUFReader was asked to read a second source."""
