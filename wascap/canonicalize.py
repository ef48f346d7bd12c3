"""
Canonical module hashing.

The canonical hash of a module is SHA-256 over its serialized bytes with the
claims-carrying ``"jwt"`` custom section removed. The token cannot attest to
itself, so stripping it makes embedding idempotent: re-embedding replaces
the section without changing the hash being signed.

Serialization goes through ``wascap.module.serialize``, so incidental layout
differences in the raw input (e.g. padded LEB128 section sizes) do not
affect the result.
"""

from __future__ import annotations

import io

from .crypto import encode_hex, sha256_digest
from .module import Module, clear_custom_section, parse, serialize

JWT_SECTION = "jwt"


def canonical_bytes(module: Module) -> bytes:
    """Serialized form of *module* without its token section."""
    return serialize(clear_custom_section(module, JWT_SECTION))


def canonical_hash(module: Module) -> str:
    """Uppercase hex SHA-256 of ``canonical_bytes(module)``."""
    return encode_hex(sha256_digest(io.BytesIO(canonical_bytes(module))))


def canonical_hash_of_bytes(data: bytes) -> str:
    return canonical_hash(parse(data))
