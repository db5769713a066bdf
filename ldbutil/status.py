"""Error types carrying the outcome of storage operations."""

from __future__ import annotations

import enum
from typing import ClassVar, Optional, Union


class StatusCode(enum.IntEnum):
    """Kinds of outcome an operation can report."""

    OK = 0
    NOT_FOUND = 1
    CORRUPTION = 2
    NOT_SUPPORTED = 3
    INVALID_ARGUMENT = 4
    IO_ERROR = 5


_PREFIXES = {
    StatusCode.NOT_FOUND: "NotFound",
    StatusCode.CORRUPTION: "Corruption: ",
    StatusCode.NOT_SUPPORTED: "Not implemented: ",
    StatusCode.INVALID_ARGUMENT: "Invalid argument: ",
    StatusCode.IO_ERROR: "IO error: ",
}


def _as_text(value: Union[str, bytes, bytearray, memoryview]) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", "backslashreplace")
    return str(value)


class StatusError(Exception):
    """Base class of all failures; ``message`` holds the combined text."""

    code: ClassVar[Optional[StatusCode]] = None

    def __init__(self, message="", detail=""):
        text = _as_text(message)
        extra = _as_text(detail)
        if extra:
            text = f"{text}: {extra}"
        super().__init__(text)
        self.message = text

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        prefix = _PREFIXES.get(self.code, f"Unknown code({int(self.code)}): ")
        return prefix + self.message


class NotFoundError(StatusError):
    """The requested item does not exist."""

    code = StatusCode.NOT_FOUND


class CorruptionError(StatusError):
    """Stored data failed a consistency check."""

    code = StatusCode.CORRUPTION


class NotSupportedError(StatusError):
    """The requested operation is not implemented."""

    code = StatusCode.NOT_SUPPORTED


class InvalidArgumentError(StatusError):
    """An argument was not acceptable."""

    code = StatusCode.INVALID_ARGUMENT


class StorageIOError(StatusError):
    """An operating-system level input or output operation failed."""

    code = StatusCode.IO_ERROR