"""
wascap claims schema — Pydantic v2 models.

Claims are serialized with JWT registered claim names (``iss``, ``sub``,
``iat``, ``nbf``, ``exp``, ``jti``) plus the wascap-specific ``hash``,
``caps`` and ``tags``. Python attribute names stay descriptive; aliases
are used on the wire.

All timestamps are Unix epoch seconds.
All hash fields are uppercase SHA-256 hex digests.
"""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .timestamps import DEFAULT_CLOCK, Clock


class Claims(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    issuer: str = Field(alias="iss")
    subject: str = Field(alias="sub")
    issued_at: int = Field(default=0, alias="iat", ge=0)
    not_before: Optional[int] = Field(default=None, alias="nbf", ge=0)
    expires: Optional[int] = Field(default=None, alias="exp", ge=0)
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, alias="jti")
    module_hash: str = Field(default="", alias="hash")
    caps: Optional[list[str]] = None
    tags: Optional[list[str]] = None

    @classmethod
    def with_dates(
        cls,
        issuer: str,
        subject: str,
        caps: Optional[list[str]] = None,
        tags: Optional[list[str]] = None,
        not_before: Optional[int] = None,
        expires: Optional[int] = None,
        clock: Clock = DEFAULT_CLOCK,
    ) -> "Claims":
        """Build claims issued now, with an empty module hash."""
        return cls(
            issuer=issuer,
            subject=subject,
            caps=caps,
            tags=tags,
            issued_at=clock.now(),
            not_before=not_before,
            expires=expires,
        )

    def to_payload(self) -> dict:
        """JWT payload dict; unset optional claims are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Token(BaseModel):
    """A raw compact token paired with its verified, decoded claims."""
    jwt: str
    claims: Claims


class TokenValidation(BaseModel):
    expired: bool
    expires_human: str
    not_before_human: str
    cannot_use_yet: bool
    signature_valid: bool

    @property
    def usable(self) -> bool:
        return self.signature_valid and not self.expired and not self.cannot_use_yet
