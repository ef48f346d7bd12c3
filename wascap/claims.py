"""
Embedding and extracting signed claims in WebAssembly modules.

The token lives in a custom section named ``"jwt"``. Custom sections are
ignored by WebAssembly runtimes, so a signed module still loads anywhere.

Embedding:
  1. Parse + re-serialize the input (normalized form).
  2. Canonical hash = SHA-256 of the normalized module minus ``"jwt"``.
  3. Copy the claims with ``module_hash`` set, sign them.
  4. Parse the input again, replace the ``"jwt"`` section, serialize.

Extraction parses, decodes and verifies the token, then recomputes the
canonical hash and requires an exact match with the declared one.
"""

from __future__ import annotations

import logging
from typing import Optional

from .canonicalize import JWT_SECTION, canonical_bytes, canonical_hash
from .crypto import KeyPair
from .errors import EncodingError, InvalidModuleHash
from .module import BytesLike, parse, serialize, set_custom_section
from .schema import Claims, Token
from .timestamps import DEFAULT_CLOCK, Clock, days_from_now
from .tokens import decode_token, encode_claims

logger = logging.getLogger(__name__)


def extract_claims(contents: BytesLike) -> Optional[Token]:
    """
    Extract and verify the claims embedded in a module.

    Returns None when the module carries no token. Raises ``ParseError``,
    ``EncodingError``, ``TokenDecodeError`` or ``InvalidModuleHash``.
    """
    module = parse(contents)

    payload = module.get_custom_section(JWT_SECTION)
    if payload is None:
        logger.info("Module carries no claims token")
        return None

    try:
        jwt = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(f"'{JWT_SECTION}' section is not valid UTF-8: {e}") from e

    claims = decode_token(jwt)
    actual = canonical_hash(module)

    if actual != claims.module_hash:
        logger.warning(
            f"Module hash mismatch for subject {claims.subject}: "
            f"token {claims.module_hash[:16]}..., module {actual[:16]}..."
        )
        raise InvalidModuleHash(expected=claims.module_hash, actual=actual)

    return Token(jwt=jwt, claims=claims)


def embed_claims(orig_bytecode: BytesLike, claims: Claims, kp: KeyPair) -> bytes:
    """
    Sign *claims* for this module and embed them as a ``"jwt"`` custom section.

    The caller's claims object is not modified; the signed copy carries the
    module's canonical hash. Returns the new module bytes.
    """
    clean = parse(serialize(parse(orig_bytecode)))
    unsigned_bytes = canonical_bytes(clean)
    module_hash = canonical_hash(clean)

    signed_claims = claims.model_copy(update={"module_hash": module_hash})
    encoded = encode_claims(signed_claims, kp).encode("utf-8")

    module = set_custom_section(parse(orig_bytecode), JWT_SECTION, encoded)
    out = serialize(module)

    logger.info(
        f"Embedded claims {signed_claims.id} for {signed_claims.subject} "
        f"(hash {module_hash[:16]}..., {len(out) - len(unsigned_bytes):+d} bytes)"
    )
    return out


def sign_buffer_with_claims(
    buf: BytesLike,
    mod_kp: KeyPair,
    acct_kp: KeyPair,
    expires_in_days: Optional[int] = None,
    not_before_days: Optional[int] = None,
    caps: Optional[list[str]] = None,
    tags: Optional[list[str]] = None,
    clock: Clock = DEFAULT_CLOCK,
) -> bytes:
    """
    Build claims for *buf* and embed them, signed by the account key.

    The account key pair is the issuer, the module key pair the subject.
    Day offsets become absolute epoch seconds relative to *clock*.
    """
    claims = Claims.with_dates(
        issuer=acct_kp.encoded_public_key,
        subject=mod_kp.encoded_public_key,
        caps=list(caps) if caps is not None else None,
        tags=list(tags) if tags is not None else None,
        not_before=days_from_now(not_before_days, clock),
        expires=days_from_now(expires_in_days, clock),
        clock=clock,
    )
    return embed_claims(buf, claims, acct_kp)
