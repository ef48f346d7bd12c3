"""Request/response models for the wascap API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from wascap.schema import Claims, TokenValidation


# ---------------------------------------------------------------------------
# POST /wascap/sign
# ---------------------------------------------------------------------------

class SignRequest(BaseModel):
    module: str = Field(..., min_length=1)  # base64 module bytes
    subject: Optional[str] = None  # defaults to a fresh module key
    caps: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    expires_in_days: Optional[int] = Field(default=None, ge=0)
    not_before_days: Optional[int] = Field(default=None, ge=0)


class SignResponse(BaseModel):
    module: str  # base64 signed module bytes
    jwt: str
    issuer: str
    subject: str
    module_hash: str


# ---------------------------------------------------------------------------
# POST /wascap/verify
# ---------------------------------------------------------------------------

class VerifyRequest(BaseModel):
    module: str = Field(..., min_length=1)
    issuer: Optional[str] = None  # optional issuer pinning


class VerifyResponse(BaseModel):
    token_present: bool
    valid_hash: bool
    trusted_issuer: bool = True
    claims: Optional[Claims] = None
    validation: Optional[TokenValidation] = None
    errors: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# GET /wascap/issuer
# ---------------------------------------------------------------------------

class IssuerResponse(BaseModel):
    issuer: str
    kid: str
    name: str
