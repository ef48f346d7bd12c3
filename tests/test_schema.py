"""Tests for wascap claims schema validation."""

import pytest
from pydantic import ValidationError

from wascap.schema import Claims, Token, TokenValidation
from wascap.timestamps import FixedClock


class TestClaims:
    def test_defaults(self):
        c = Claims(issuer="iss", subject="sub")
        assert c.module_hash == ""
        assert c.issued_at == 0
        assert c.caps is None
        assert c.tags is None
        assert len(c.id) == 32

    def test_unique_ids(self):
        assert Claims(issuer="i", subject="s").id != Claims(issuer="i", subject="s").id

    def test_payload_uses_registered_names(self):
        c = Claims(issuer="i", subject="s", issued_at=5, expires=10, caps=["a"])
        payload = c.to_payload()
        assert payload == {
            "iss": "i",
            "sub": "s",
            "iat": 5,
            "exp": 10,
            "jti": c.id,
            "hash": "",
            "caps": ["a"],
        }

    def test_validate_from_payload(self):
        c = Claims.model_validate({"iss": "i", "sub": "s", "iat": 1, "jti": "x", "hash": "AB"})
        assert c.issuer == "i"
        assert c.id == "x"
        assert c.module_hash == "AB"

    def test_payload_roundtrip(self):
        c = Claims(issuer="i", subject="s", tags=["t"], not_before=3)
        assert Claims.model_validate(c.to_payload()) == c

    def test_missing_subject(self):
        with pytest.raises(ValidationError):
            Claims.model_validate({"iss": "i"})

    def test_negative_timestamp(self):
        with pytest.raises(ValidationError):
            Claims(issuer="i", subject="s", expires=-1)

    def test_frozen(self):
        c = Claims(issuer="i", subject="s")
        with pytest.raises(ValidationError):
            c.module_hash = "X"

    def test_copy_with_hash_leaves_original(self):
        c = Claims(issuer="i", subject="s")
        signed = c.model_copy(update={"module_hash": "AB"})
        assert c.module_hash == ""
        assert signed.module_hash == "AB"
        assert signed.id == c.id

    def test_with_dates(self):
        c = Claims.with_dates("i", "s", caps=["x"], expires=99, clock=FixedClock(42))
        assert c.issued_at == 42
        assert c.expires == 99
        assert c.not_before is None
        assert c.caps == ["x"]


class TestToken:
    def test_pairs_text_and_claims(self):
        c = Claims(issuer="i", subject="s")
        t = Token(jwt="a.b.c", claims=c)
        assert t.claims.subject == "s"


class TestTokenValidation:
    def _v(self, **kw):
        base = dict(
            expired=False,
            expires_human="never",
            not_before_human="immediately",
            cannot_use_yet=False,
            signature_valid=True,
        )
        base.update(kw)
        return TokenValidation(**base)

    def test_usable(self):
        assert self._v().usable

    @pytest.mark.parametrize(
        "field,value",
        [("expired", True), ("cannot_use_yet", True), ("signature_valid", False)],
    )
    def test_not_usable(self, field, value):
        assert not self._v(**{field: value}).usable
