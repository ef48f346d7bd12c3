"""Tests for the WebAssembly module container codec."""

import pytest

from wascap.errors import ParseError, SerializationError
from wascap.module import (
    Module,
    Section,
    SectionId,
    clear_custom_section,
    get_custom_section,
    parse,
    serialize,
    set_custom_section,
)

from conftest import ADD_WASM, ADD_WASM_PADDED, ADD_WASM_WITH_NAME


class TestParse:
    def test_sections_in_order(self):
        module = parse(ADD_WASM)
        assert [s.id for s in module.sections] == [
            SectionId.TYPE,
            SectionId.FUNCTION,
            SectionId.EXPORT,
            SectionId.CODE,
        ]
        assert module.version == 1

    def test_custom_section_name_and_payload(self):
        module = parse(ADD_WASM_WITH_NAME)
        first = module.sections[0]
        assert first.is_custom
        assert first.name == "name"
        assert first.payload == b"hello"

    def test_header_only_module(self):
        assert parse(ADD_WASM[:8]).sections == ()

    def test_accepts_bytearray(self):
        assert parse(bytearray(ADD_WASM)) == parse(ADD_WASM)

    def test_bad_magic(self):
        with pytest.raises(ParseError):
            parse(b"\x00wasm" + ADD_WASM[5:])

    def test_bad_version(self):
        with pytest.raises(ParseError):
            parse(ADD_WASM[:4] + b"\x02\x00\x00\x00" + ADD_WASM[8:])

    def test_too_short(self):
        with pytest.raises(ParseError):
            parse(b"\x00asm")

    def test_truncated_section(self):
        with pytest.raises(ParseError):
            parse(ADD_WASM[:-1])

    def test_truncated_section_header(self):
        with pytest.raises(ParseError):
            parse(ADD_WASM + b"\x01")

    def test_unknown_section_id(self):
        with pytest.raises(ParseError):
            parse(ADD_WASM + b"\x7f\x00")

    def test_duplicate_section(self):
        with pytest.raises(ParseError):
            parse(ADD_WASM + bytes.fromhex("0a 09 01 07 00 20 00 20 01 6a 0b"))

    def test_out_of_order_section(self):
        # type section after code section
        with pytest.raises(ParseError):
            parse(ADD_WASM + bytes.fromhex("01 01 00"))

    def test_custom_sections_may_appear_anywhere(self):
        trailing = ADD_WASM + bytes.fromhex("00 04 03 6a 77 74")
        module = parse(trailing)
        assert module.sections[-1].name == "jwt"
        assert module.sections[-1].payload == b""

    def test_custom_name_past_section_end(self):
        # section size 2, name length 5
        with pytest.raises(ParseError):
            parse(ADD_WASM + bytes.fromhex("00 02 05 61"))

    def test_not_wasm(self):
        with pytest.raises(ParseError):
            parse(b"this is not a module at all")


class TestSerialize:
    def test_roundtrip_is_identity_for_canonical_input(self):
        assert serialize(parse(ADD_WASM)) == ADD_WASM
        assert serialize(parse(ADD_WASM_WITH_NAME)) == ADD_WASM_WITH_NAME

    def test_padded_leb_is_normalized(self):
        assert serialize(parse(ADD_WASM_PADDED)) == ADD_WASM

    def test_serialize_is_idempotent(self):
        once = serialize(parse(ADD_WASM_PADDED))
        assert serialize(parse(once)) == once

    def test_unknown_section_id(self):
        module = Module(sections=(Section(id=99, payload=b""),))
        with pytest.raises(SerializationError):
            serialize(module)

    def test_custom_section_without_name(self):
        module = Module(sections=(Section(id=SectionId.CUSTOM, payload=b"x"),))
        with pytest.raises(SerializationError):
            serialize(module)


class TestCustomSections:
    def test_get_absent(self):
        assert get_custom_section(parse(ADD_WASM), "jwt") is None

    def test_set_appends_at_end(self):
        module = set_custom_section(parse(ADD_WASM_WITH_NAME), "jwt", b"token")
        assert module.sections[-1].name == "jwt"
        assert get_custom_section(module, "jwt") == b"token"

    def test_set_replaces_existing(self):
        module = set_custom_section(parse(ADD_WASM_WITH_NAME), "name", b"bye")
        names = [s.name for s in module.sections if s.is_custom]
        assert names == ["name"]
        assert module.sections[0].id == SectionId.TYPE
        assert module.sections[-1].payload == b"bye"

    def test_set_collapses_duplicates(self):
        dup = Module(
            sections=(
                Section(id=SectionId.CUSTOM, payload=b"a", name="jwt"),
                Section(id=SectionId.CUSTOM, payload=b"b", name="jwt"),
            )
        )
        module = set_custom_section(dup, "jwt", b"c")
        assert [s.payload for s in module.sections] == [b"c"]

    def test_first_match_wins(self):
        dup = Module(
            sections=(
                Section(id=SectionId.CUSTOM, payload=b"a", name="jwt"),
                Section(id=SectionId.CUSTOM, payload=b"b", name="jwt"),
            )
        )
        assert get_custom_section(dup, "jwt") == b"a"
        assert dup.custom_sections == {"jwt": b"a"}

    def test_clear(self):
        module = clear_custom_section(parse(ADD_WASM_WITH_NAME), "name")
        assert serialize(module) == ADD_WASM

    def test_clear_absent_is_noop(self):
        module = parse(ADD_WASM)
        assert clear_custom_section(module, "jwt") == module

    def test_transforms_do_not_mutate(self):
        module = parse(ADD_WASM_WITH_NAME)
        set_custom_section(module, "jwt", b"token")
        clear_custom_section(module, "name")
        assert serialize(module) == ADD_WASM_WITH_NAME

    def test_modules_are_frozen(self):
        module = parse(ADD_WASM)
        with pytest.raises(AttributeError):
            module.sections = ()
