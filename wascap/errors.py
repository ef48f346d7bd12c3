"""
wascap error model.

Every failure surfaced by the embed/extract pipeline is a ``WascapError``
subclass carrying an ``ErrorKind``, so callers can tell tampering
(``INVALID_MODULE_HASH``) apart from plain corruption (``PARSE``).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    PARSE = "parse"
    SERIALIZATION = "serialization"
    ENCODING = "encoding"
    TOKEN_DECODE = "token_decode"
    INVALID_MODULE_HASH = "invalid_module_hash"
    SIGNING = "signing"
    IO = "io"


class WascapError(Exception):
    """Base class for all wascap errors."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class ParseError(WascapError):
    """Input bytes are not a structurally valid WebAssembly module."""

    kind = ErrorKind.PARSE

    def __init__(self, message: str, offset: Optional[int] = None):
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.offset = offset


class SerializationError(WascapError):
    kind = ErrorKind.SERIALIZATION


class EncodingError(WascapError):
    """The embedded token section is not valid UTF-8."""

    kind = ErrorKind.ENCODING


class TokenDecodeError(WascapError):
    """The token is malformed or its signature does not verify."""

    kind = ErrorKind.TOKEN_DECODE


class InvalidModuleHash(WascapError):
    """The token's declared module hash does not match the module content."""

    kind = ErrorKind.INVALID_MODULE_HASH

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"module hash mismatch: token declares {expected or '<empty>'}, "
            f"module hashes to {actual}"
        )
        self.expected = expected
        self.actual = actual


class SigningError(WascapError):
    kind = ErrorKind.SIGNING


class HashIOError(WascapError):
    """Reading the byte stream failed while computing a digest."""

    kind = ErrorKind.IO
