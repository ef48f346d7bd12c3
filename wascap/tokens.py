"""
Compact signed claims tokens.

Tokens are JWS compact serializations (``header.payload.signature``) signed
with EdDSA (Ed25519) through PyJWT. The issuer's public key travels in the
``iss`` claim, so a token is self-verifying: decoding reads the issuer,
loads its key and checks the signature against it.

Validity windows (``nbf``/``exp``) are not enforced on decode; extraction
must still work for expired modules. Use ``validate_token`` to report them.
"""

from __future__ import annotations

import logging

import jwt
from pydantic import ValidationError

from .crypto import KeyPair, load_public_key_b64
from .errors import SigningError, TokenDecodeError
from .schema import Claims, TokenValidation
from .timestamps import DEFAULT_CLOCK, Clock, format_epoch

logger = logging.getLogger(__name__)

ALGORITHM = "EdDSA"

_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
}


def encode_claims(claims: Claims, keypair: KeyPair) -> str:
    """Sign *claims* with *keypair* and return the compact token."""
    if claims.issuer != keypair.encoded_public_key:
        # The token is verified against ``iss``; any other signer is unverifiable.
        raise SigningError(
            f"claims issuer {claims.issuer!r} does not match signing key {keypair.kid}"
        )
    try:
        return jwt.encode(
            claims.to_payload(),
            keypair.private_key,
            algorithm=ALGORITHM,
            headers={"kid": keypair.kid},
        )
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise SigningError(f"failed to sign claims: {e}") from e


def _read_unverified(token: str) -> dict:
    try:
        header = jwt.get_unverified_header(token)
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        raise TokenDecodeError(f"malformed token: {e}") from e
    if header.get("alg") != ALGORITHM:
        raise TokenDecodeError(f"unsupported token algorithm {header.get('alg')!r}")
    return payload


def _verify_signature(token: str, issuer: object) -> dict:
    if not isinstance(issuer, str) or not issuer:
        raise TokenDecodeError("token has no issuer")
    try:
        public_key = load_public_key_b64(issuer)
    except ValueError as e:
        raise TokenDecodeError(f"issuer is not an Ed25519 public key: {e}") from e
    try:
        return jwt.decode(token, public_key, algorithms=[ALGORITHM], options=_DECODE_OPTIONS)
    except jwt.InvalidSignatureError as e:
        raise TokenDecodeError("token signature verification failed") from e
    except jwt.PyJWTError as e:
        raise TokenDecodeError(f"invalid token: {e}") from e


def _to_claims(payload: dict) -> Claims:
    try:
        return Claims.model_validate(payload)
    except ValidationError as e:
        raise TokenDecodeError(f"token payload is not a valid claims set: {e}") from e


def decode_token(token: str) -> Claims:
    """Decode *token* and verify its signature against the issuer key."""
    unverified = _read_unverified(token)
    payload = _verify_signature(token, unverified.get("iss"))
    return _to_claims(payload)


def validate_token(token: str, clock: Clock = DEFAULT_CLOCK) -> TokenValidation:
    """
    Report the validity window and signature status of *token*.

    Only a structurally malformed token raises; a bad signature is reported
    as ``signature_valid=False``.
    """
    claims = _to_claims(_read_unverified(token))
    try:
        _verify_signature(token, claims.issuer)
        signature_valid = True
    except TokenDecodeError as e:
        logger.warning(f"Token signature invalid for issuer {claims.issuer}: {e}")
        signature_valid = False

    now = clock.now()
    expired = claims.expires is not None and claims.expires < now
    cannot_use_yet = claims.not_before is not None and claims.not_before > now

    return TokenValidation(
        expired=expired,
        expires_human="never" if claims.expires is None else format_epoch(claims.expires, clock),
        not_before_human=(
            "immediately" if claims.not_before is None
            else format_epoch(claims.not_before, clock)
        ),
        cannot_use_yet=cannot_use_yet,
        signature_valid=signature_valid,
    )
