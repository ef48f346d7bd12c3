"""
wascap FastAPI server.

Endpoints:
  GET  /wascap/issuer   — public key this server signs with
  POST /wascap/sign     — embed a signed claims token into a module
  POST /wascap/verify   — extract and verify a module's claims
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, HTTPException

from wascap.claims import embed_claims, extract_claims
from wascap.crypto import KeyPair, generate_keypair, keypair_from_seed_b64
from wascap.errors import InvalidModuleHash, ParseError, WascapError
from wascap.schema import Claims
from wascap.timestamps import days_from_now
from wascap.tokens import validate_token

from .models import (
    IssuerResponse,
    SignRequest,
    SignResponse,
    VerifyRequest,
    VerifyResponse,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load the issuer key before serving so a bad seed fails startup.
    get_issuer()
    yield


app = FastAPI(
    title="wascap — WebAssembly capability claims",
    description="Embed and verify signed claims in WebAssembly modules",
    version="0.1.0",
    lifespan=lifespan,
)


# ── Server configuration ────────────────────────────────────────────────────

@dataclass
class ServerConfig:
    issuer_seed: Optional[str] = None   # base64 Ed25519 seed; None = ephemeral key
    issuer_name: str = "wascap-server"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        seed = os.environ.get("WASCAP_ISSUER_SEED") or None
        if seed is not None:
            try:
                keypair_from_seed_b64(seed)
            except ValueError as e:
                raise ValueError(f"WASCAP_ISSUER_SEED is not a base64 Ed25519 seed: {e}") from e
        return cls(
            issuer_seed=seed,
            issuer_name=os.environ.get("WASCAP_ISSUER_NAME", "wascap-server"),
        )


# ---------------------------------------------------------------------------
# Global state (single issuer key per process)
# ---------------------------------------------------------------------------
_config: ServerConfig | None = None
_issuer: KeyPair | None = None


def get_config() -> ServerConfig:
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def get_issuer() -> KeyPair:
    global _issuer
    if _issuer is None:
        config = get_config()
        if config.issuer_seed:
            _issuer = keypair_from_seed_b64(config.issuer_seed)
        else:
            _issuer = generate_keypair()
            logger.warning(f"WASCAP_ISSUER_SEED not set, using ephemeral issuer key {_issuer.kid}")
    return _issuer


def _decode_module(module_b64: str) -> bytes:
    try:
        return base64.b64decode(module_b64, validate=True)
    except binascii.Error as e:
        raise HTTPException(status_code=400, detail=f"module is not valid base64: {e}")


# ---------------------------------------------------------------------------
# GET /wascap/issuer
# ---------------------------------------------------------------------------

@app.get("/wascap/issuer", response_model=IssuerResponse)
async def issuer():
    kp = get_issuer()
    return IssuerResponse(issuer=kp.encoded_public_key, kid=kp.kid, name=get_config().issuer_name)


# ---------------------------------------------------------------------------
# POST /wascap/sign
# ---------------------------------------------------------------------------

@app.post("/wascap/sign", response_model=SignResponse)
async def sign(req: SignRequest):
    """Sign a module with the server's issuer key."""
    kp = get_issuer()
    module_bytes = _decode_module(req.module)
    subject = req.subject or generate_keypair().encoded_public_key

    claims = Claims.with_dates(
        issuer=kp.encoded_public_key,
        subject=subject,
        caps=req.caps,
        tags=req.tags,
        not_before=days_from_now(req.not_before_days),
        expires=days_from_now(req.expires_in_days),
    )
    try:
        signed = embed_claims(module_bytes, claims, kp)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WascapError as e:
        raise HTTPException(status_code=500, detail=str(e))

    token = extract_claims(signed)
    return SignResponse(
        module=base64.b64encode(signed).decode(),
        jwt=token.jwt,
        issuer=token.claims.issuer,
        subject=token.claims.subject,
        module_hash=token.claims.module_hash,
    )


# ---------------------------------------------------------------------------
# POST /wascap/verify
# ---------------------------------------------------------------------------

@app.post("/wascap/verify", response_model=VerifyResponse)
async def verify(req: VerifyRequest):
    """Extract a module's claims and report hash, signature and date status."""
    module_bytes = _decode_module(req.module)

    try:
        token = extract_claims(module_bytes)
    except InvalidModuleHash as e:
        return VerifyResponse(
            token_present=True,
            valid_hash=False,
            errors=[f"TAMPERED: {e.message}"],
        )
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WascapError as e:
        return VerifyResponse(token_present=True, valid_hash=False, errors=[str(e)])

    if token is None:
        return VerifyResponse(token_present=False, valid_hash=False, errors=["no claims token"])

    errors: list[str] = []
    validation = validate_token(token.jwt)
    if validation.expired:
        errors.append(f"token expired {validation.expires_human}")
    if validation.cannot_use_yet:
        errors.append(f"token not valid before {validation.not_before_human}")

    trusted = req.issuer is None or req.issuer == token.claims.issuer
    if not trusted:
        errors.append(f"untrusted issuer {token.claims.issuer}")

    return VerifyResponse(
        token_present=True,
        valid_hash=True,
        trusted_issuer=trusted,
        claims=token.claims,
        validation=validation,
        errors=errors,
    )
