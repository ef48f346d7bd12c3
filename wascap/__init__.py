"""wascap — signed capability claims embedded in WebAssembly modules."""

from .schema import Claims, Token, TokenValidation
from .crypto import (
    KeyPair,
    generate_keypair,
    keypair_from_seed_b64,
    public_key_b64,
    load_public_key_b64,
)
from .errors import (
    EncodingError,
    ErrorKind,
    HashIOError,
    InvalidModuleHash,
    ParseError,
    SerializationError,
    SigningError,
    TokenDecodeError,
    WascapError,
)
from .module import Module, Section, SectionId, parse, serialize
from .canonicalize import JWT_SECTION, canonical_hash
from .tokens import decode_token, encode_claims, validate_token
from .claims import embed_claims, extract_claims, sign_buffer_with_claims
from .timestamps import Clock, FixedClock, SystemClock, days_from_now

__all__ = [
    "Claims",
    "Token",
    "TokenValidation",
    "KeyPair",
    "generate_keypair",
    "keypair_from_seed_b64",
    "public_key_b64",
    "load_public_key_b64",
    "EncodingError",
    "ErrorKind",
    "HashIOError",
    "InvalidModuleHash",
    "ParseError",
    "SerializationError",
    "SigningError",
    "TokenDecodeError",
    "WascapError",
    "Module",
    "Section",
    "SectionId",
    "parse",
    "serialize",
    "JWT_SECTION",
    "canonical_hash",
    "decode_token",
    "encode_claims",
    "validate_token",
    "embed_claims",
    "extract_claims",
    "sign_buffer_with_claims",
    "Clock",
    "FixedClock",
    "SystemClock",
    "days_from_now",
]
