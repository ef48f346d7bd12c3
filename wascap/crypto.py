"""
Cryptographic primitives for wascap.

- Chunked SHA-256 hashing of module bytes (uppercase hex rendering)
- Ed25519 key generation, seed import/export and public-key encoding

All operations are deterministic and use the `cryptography` library.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import io
from dataclasses import dataclass
from typing import BinaryIO

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from .errors import HashIOError

HASH_CHUNK_SIZE = 1024


# ---------------------------------------------------------------------------
# SHA-256 utilities
# ---------------------------------------------------------------------------

def sha256_digest(stream: BinaryIO) -> bytes:
    """Fold *stream* into a SHA-256 state, one chunk at a time."""
    ctx = hashlib.sha256()
    try:
        while True:
            chunk = stream.read(HASH_CHUNK_SIZE)
            if not chunk:
                break
            ctx.update(chunk)
    except OSError as e:
        raise HashIOError(f"failed reading stream while hashing: {e}") from e
    return ctx.digest()


def encode_hex(digest: bytes) -> str:
    """Uppercase hex, no separators."""
    return base64.b16encode(digest).decode("ascii")


def sha256_hex_upper(data: bytes) -> str:
    return encode_hex(sha256_digest(io.BytesIO(data)))


# ---------------------------------------------------------------------------
# Ed25519 key management
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KeyPair:
    private_key: Ed25519PrivateKey
    public_key: Ed25519PublicKey
    kid: str  # key identifier (hex of public key hash)

    @property
    def encoded_public_key(self) -> str:
        """Public key string used as issuer/subject identity in claims."""
        return public_key_b64(self.public_key)


def _kid(pk: Ed25519PublicKey) -> str:
    return hashlib.sha256(public_key_bytes(pk)).hexdigest()[:16]


def generate_keypair() -> KeyPair:
    """Generate a fresh Ed25519 key pair."""
    sk = Ed25519PrivateKey.generate()
    return keypair_from_private_key(sk)


def keypair_from_private_key(sk: Ed25519PrivateKey) -> KeyPair:
    pk = sk.public_key()
    return KeyPair(private_key=sk, public_key=pk, kid=_kid(pk))


def keypair_from_seed_b64(seed_b64: str) -> KeyPair:
    """Rebuild a key pair from a base64 32-byte Ed25519 seed."""
    try:
        raw = base64.b64decode(seed_b64.strip(), validate=True)
    except binascii.Error as e:
        raise ValueError(f"seed is not valid base64: {e}") from e
    return keypair_from_private_key(load_private_key(raw))


def public_key_bytes(pk: Ed25519PublicKey) -> bytes:
    return pk.public_bytes(Encoding.Raw, PublicFormat.Raw)


def public_key_b64(pk: Ed25519PublicKey) -> str:
    return base64.b64encode(public_key_bytes(pk)).decode()


def load_public_key(raw: bytes) -> Ed25519PublicKey:
    return Ed25519PublicKey.from_public_bytes(raw)


def load_public_key_b64(b64: str) -> Ed25519PublicKey:
    return load_public_key(base64.b64decode(b64, validate=True))


def serialize_private_key(sk: Ed25519PrivateKey) -> bytes:
    return sk.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())


def seed_b64(kp: KeyPair) -> str:
    return base64.b64encode(serialize_private_key(kp.private_key)).decode()


def load_private_key(raw: bytes) -> Ed25519PrivateKey:
    return Ed25519PrivateKey.from_private_bytes(raw)
