"""
wascap Attack Harness — tamper transformations on signed modules.

Each attack takes the bytes of a signed module and returns mutated bytes:
  M1: payload flip (change one byte of a non-custom section)
  M2: section drop (remove a non-custom section)
  M3: section inject (add an unrelated custom section)
  M4: token transplant (move a valid token onto a different module)
  M5: token strip (remove the "jwt" section)
  M6: claim edit (widen capabilities inside the token, keep signature)
  M7: re-sign (attacker replaces the token with one signed by their own key)

M1–M4 must surface as InvalidModuleHash, M6 as TokenDecodeError, M5 as
"no token". M7 produces a fully valid token; only pinning the expected
issuer detects it.
"""

from __future__ import annotations

import base64
import json
from typing import Optional

from wascap.canonicalize import JWT_SECTION
from wascap.claims import embed_claims, extract_claims
from wascap.crypto import KeyPair, generate_keypair
from wascap.module import Module, Section, SectionId, parse, serialize


def _first_code_like_section(module: Module) -> int:
    """Index of the section to corrupt: CODE if present, else the first non-custom."""
    candidates = [i for i, s in enumerate(module.sections) if not s.is_custom and len(s)]
    if not candidates:
        raise ValueError("module has no non-empty non-custom sections to tamper with")
    for i in candidates:
        if module.sections[i].id == SectionId.CODE:
            return i
    return candidates[0]


def m1_payload_flip(module_bytes: bytes, offset: int = -1) -> bytes:
    """
    M1: Flip every bit of one payload byte in a non-custom section.
    The framing stays valid, so this MUST surface as a hash mismatch.
    """
    module = parse(module_bytes)
    idx = _first_code_like_section(module)
    target = module.sections[idx]

    payload = bytearray(target.payload)
    payload[offset] ^= 0xFF
    sections = list(module.sections)
    sections[idx] = Section(id=target.id, payload=bytes(payload), name=target.name)
    return serialize(Module(sections=tuple(sections), version=module.version))


def m2_section_drop(module_bytes: bytes, section_id: Optional[SectionId] = None) -> bytes:
    """M2: Remove a non-custom section (default: the last one)."""
    module = parse(module_bytes)
    non_custom = [s for s in module.sections if not s.is_custom]
    if not non_custom:
        raise ValueError("module has no non-custom sections to drop")
    victim = non_custom[-1] if section_id is None else next(
        s for s in non_custom if s.id == section_id
    )
    kept = tuple(s for s in module.sections if s is not victim)
    return serialize(Module(sections=kept, version=module.version))


def m3_section_inject(
    module_bytes: bytes,
    name: str = "producers",
    payload: bytes = b"\x01\x0cprocessed-by\x01\x06tamper\x051.0.0",
) -> bytes:
    """M3: Append an unrelated custom section after signing."""
    module = parse(module_bytes)
    section = Section(id=SectionId.CUSTOM, payload=payload, name=name)
    return serialize(Module(sections=module.sections + (section,), version=module.version))


def m4_token_transplant(donor_bytes: bytes, target_bytes: bytes) -> bytes:
    """M4: Copy the donor's valid token onto a different (unsigned) module."""
    token = parse(donor_bytes).get_custom_section(JWT_SECTION)
    if token is None:
        raise ValueError("donor module carries no token")
    return serialize(parse(target_bytes).with_custom_section(JWT_SECTION, token))


def m5_token_strip(module_bytes: bytes) -> bytes:
    """M5: Remove the token entirely; the module then reads as unsigned."""
    return serialize(parse(module_bytes).without_custom_section(JWT_SECTION))


def _b64url_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def m6_claim_edit(module_bytes: bytes, extra_cap: str = "wascc:extras") -> bytes:
    """
    M6: Edit the token payload (grant an extra capability) without
    re-signing. The module hash is untouched, so this MUST surface as a
    signature failure.
    """
    module = parse(module_bytes)
    token = module.get_custom_section(JWT_SECTION)
    if token is None:
        raise ValueError("module carries no token")

    header, payload, signature = token.decode("utf-8").split(".")
    claims = json.loads(_b64url_decode(payload))
    claims["caps"] = list(claims.get("caps") or []) + [extra_cap]
    forged_payload = _b64url_encode(json.dumps(claims, separators=(",", ":")).encode())
    forged = f"{header}.{forged_payload}.{signature}".encode("utf-8")
    return serialize(module.with_custom_section(JWT_SECTION, forged))


def m7_resign(module_bytes: bytes, attacker: Optional[KeyPair] = None) -> bytes:
    """
    M7: Replace the token with one issued by the attacker's own key, keeping
    subject and capabilities. The result verifies; issuer pinning catches it.
    """
    attacker = attacker or generate_keypair()
    original = extract_claims(module_bytes)
    if original is None:
        raise ValueError("module carries no token")
    forged = original.claims.model_copy(
        update={"issuer": attacker.encoded_public_key, "module_hash": ""}
    )
    return embed_claims(module_bytes, forged, attacker)


# ---------------------------------------------------------------------------
# Attack registry
# ---------------------------------------------------------------------------

# Single-module attacks detectable by extract_claims alone (M1–M3, M5, M6)
ATTACKS = {
    "M1_payload_flip": lambda m: m1_payload_flip(m),
    "M2_section_drop": lambda m: m2_section_drop(m),
    "M3_section_inject": lambda m: m3_section_inject(m),
    "M5_token_strip": lambda m: m5_token_strip(m),
    "M6_claim_edit": lambda m: m6_claim_edit(m),
}

# Attacks that produce a verifiable token; detection needs issuer pinning.
ISSUER_PINNING_ATTACKS = {
    "M7_resign": lambda m: m7_resign(m),
}


def run_all_attacks(module_bytes: bytes) -> dict[str, bytes]:
    """Run all single-module attacks and return {attack_name: tampered_bytes}."""
    return {name: attack_fn(module_bytes) for name, attack_fn in ATTACKS.items()}
