"""
WebAssembly module container codec.

A module is kept as an ordered tuple of sections with opaque payloads; only
the framing (magic, version, section ids and sizes, custom-section names) is
interpreted. That keeps serialization canonical and stable:

  1. Sections are written in exactly the order they were parsed/appended.
  2. Section sizes and name lengths use minimal LEB128.
  3. Payload bytes are copied verbatim.

Modules are immutable values. Section edits return a new ``Module``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Union

from .codec import BinaryReader, BinaryWriter
from .errors import ParseError, SerializationError, WascapError

MAGIC = b"\x00asm"
VERSION = 1

BytesLike = Union[bytes, bytearray, memoryview]


class SectionId(IntEnum):
    CUSTOM = 0
    TYPE = 1
    IMPORT = 2
    FUNCTION = 3
    TABLE = 4
    MEMORY = 5
    GLOBAL = 6
    EXPORT = 7
    START = 8
    ELEMENT = 9
    CODE = 10
    DATA = 11
    DATA_COUNT = 12
    TAG = 13


# Required relative order of non-custom sections. Each may appear at most once.
_SECTION_RANK = {
    sid: rank
    for rank, sid in enumerate(
        [
            SectionId.TYPE,
            SectionId.IMPORT,
            SectionId.FUNCTION,
            SectionId.TABLE,
            SectionId.MEMORY,
            SectionId.TAG,
            SectionId.GLOBAL,
            SectionId.EXPORT,
            SectionId.START,
            SectionId.ELEMENT,
            SectionId.DATA_COUNT,
            SectionId.CODE,
            SectionId.DATA,
        ],
        start=1,
    )
}
_KNOWN_IDS = frozenset(int(sid) for sid in SectionId)


@dataclass(frozen=True)
class Section:
    id: SectionId
    payload: bytes = field(repr=False)
    name: Optional[str] = None  # custom sections only

    @property
    def is_custom(self) -> bool:
        return self.id == SectionId.CUSTOM

    def __len__(self) -> int:
        return len(self.payload)


@dataclass(frozen=True)
class Module:
    sections: tuple[Section, ...] = ()
    version: int = VERSION

    @property
    def custom_sections(self) -> dict[str, bytes]:
        """Name → payload view. The first section with a given name wins."""
        view: dict[str, bytes] = {}
        for s in self.sections:
            if s.is_custom:
                view.setdefault(s.name, s.payload)
        return view

    def get_custom_section(self, name: str) -> Optional[bytes]:
        for s in self.sections:
            if s.is_custom and s.name == name:
                return s.payload
        return None

    def without_custom_section(self, name: str) -> "Module":
        kept = tuple(s for s in self.sections if not (s.is_custom and s.name == name))
        return Module(sections=kept, version=self.version)

    def with_custom_section(self, name: str, payload: BytesLike) -> "Module":
        cleared = self.without_custom_section(name)
        section = Section(id=SectionId.CUSTOM, payload=bytes(payload), name=name)
        return Module(sections=cleared.sections + (section,), version=self.version)


# ---------------------------------------------------------------------------
# Parse / serialize
# ---------------------------------------------------------------------------

def parse(data: BytesLike) -> Module:
    """Parse raw module bytes. Raises ``ParseError`` on malformed input."""
    buf = bytes(data)
    if len(buf) < 8:
        raise ParseError(f"input too short for a module header ({len(buf)} bytes)")
    if buf[:4] != MAGIC:
        raise ParseError(f"bad magic {buf[:4].hex()}", 0)

    reader = BinaryReader(buf, offset=4)
    version = reader.u32le()
    if version != VERSION:
        raise ParseError(f"unsupported version {version}", 4)

    sections: list[Section] = []
    last_rank = 0
    while not reader.eof:
        header_at = reader.offset
        raw_id = reader.u8()
        size = reader.u32_leb()
        body_at = reader.offset
        body = reader.bytes(size)

        if raw_id == SectionId.CUSTOM:
            sub = BinaryReader(buf, offset=body_at, end=body_at + size)
            name = sub.name()
            payload = buf[sub.offset:body_at + size]
            sections.append(Section(id=SectionId.CUSTOM, payload=payload, name=name))
            continue

        try:
            section_id = SectionId(raw_id)
        except ValueError:
            raise ParseError(f"unknown section id {raw_id}", header_at) from None
        rank = _SECTION_RANK[section_id]
        if rank <= last_rank:
            raise ParseError(
                f"section {section_id.name} is duplicated or out of order", header_at
            )
        last_rank = rank
        sections.append(Section(id=section_id, payload=body))

    return Module(sections=tuple(sections), version=version)


def serialize(module: Module) -> bytes:
    """Serialize *module* canonically."""
    writer = BinaryWriter()
    writer.bytes(MAGIC)
    writer.u32le(module.version)
    try:
        for s in module.sections:
            if s.id not in _KNOWN_IDS:
                raise SerializationError(f"unknown section id {s.id}")
            body = BinaryWriter()
            if s.is_custom:
                if s.name is None:
                    raise SerializationError("custom section has no name")
                body.name(s.name)
            body.bytes(s.payload)
            writer.u8(int(s.id))
            writer.len_prefixed_bytes(body.to_bytes())
    except WascapError:
        raise
    except (TypeError, ValueError) as e:
        raise SerializationError(f"cannot serialize module: {e}") from e
    return writer.to_bytes()


# ---------------------------------------------------------------------------
# Custom-section helpers
# ---------------------------------------------------------------------------

def get_custom_section(module: Module, name: str) -> Optional[bytes]:
    return module.get_custom_section(name)


def set_custom_section(module: Module, name: str, payload: BytesLike) -> Module:
    """Return a copy of *module* with exactly one *name* section, appended last."""
    return module.with_custom_section(name, payload)


def clear_custom_section(module: Module, name: str) -> Module:
    """Return a copy of *module* without any *name* sections."""
    return module.without_custom_section(name)
