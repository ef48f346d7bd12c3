"""Shared fixtures: small hand-assembled WebAssembly modules and key pairs."""

import pytest

from wascap.crypto import generate_keypair
from wascap.schema import Claims

# (func (export "add") (param i32 i32) (result i32) local.get 0 local.get 1 i32.add)
ADD_WASM = bytes.fromhex(
    "00 61 73 6d 01 00 00 00"          # magic + version
    "01 07 01 60 02 7f 7f 01 7f"       # type:     (i32, i32) -> i32
    "03 02 01 00"                      # function: type 0
    "07 07 01 03 61 64 64 00 00"       # export:   "add" -> func 0
    "0a 09 01 07 00 20 00 20 01 6a 0b" # code:     local.get 0, local.get 1, i32.add
)

# Offsets of every non-custom section payload byte in ADD_WASM.
ADD_WASM_PAYLOAD_OFFSETS = [*range(10, 17), *range(19, 21), *range(23, 30), *range(32, 41)]

# Same module exporting "sub" with i32.sub.
SUB_WASM = bytes.fromhex(
    "00 61 73 6d 01 00 00 00"
    "01 07 01 60 02 7f 7f 01 7f"
    "03 02 01 00"
    "07 07 01 03 73 75 62 00 00"
    "0a 09 01 07 00 20 00 20 01 6b 0b"
)

# ADD_WASM with the type section size padded to a 5-byte LEB128.
ADD_WASM_PADDED = bytes.fromhex(
    "00 61 73 6d 01 00 00 00"
    "01 87 80 80 80 00 01 60 02 7f 7f 01 7f"
    "03 02 01 00"
    "07 07 01 03 61 64 64 00 00"
    "0a 09 01 07 00 20 00 20 01 6a 0b"
)

# ADD_WASM with a leading custom section "name" carrying b"hello".
ADD_WASM_WITH_NAME = bytes.fromhex(
    "00 61 73 6d 01 00 00 00"
    "00 0a 04 6e 61 6d 65 68 65 6c 6c 6f"
    "01 07 01 60 02 7f 7f 01 7f"
    "03 02 01 00"
    "07 07 01 03 61 64 64 00 00"
    "0a 09 01 07 00 20 00 20 01 6a 0b"
)


@pytest.fixture
def add_wasm():
    return ADD_WASM


@pytest.fixture
def sub_wasm():
    return SUB_WASM


@pytest.fixture
def account_kp():
    return generate_keypair()


@pytest.fixture
def module_kp():
    return generate_keypair()


@pytest.fixture
def claims(account_kp):
    return Claims(
        issuer=account_kp.encoded_public_key,
        subject="test.wasm",
        caps=["wascc:messaging", "wascc:keyvalue"],
    )
