"""Little-endian field primitives shared by the slab decoder and the instruction encoder.

Integers are plain Python ints. 128-bit values are composed from two u64 words
(low word first); for signed fields the high word is read as two's complement,
so the full i128/u128 range round-trips exactly. Nothing here goes through float.

Addresses are ``solders.pubkey.Pubkey`` on the read side and accept
``Pubkey | str (base58) | bytes`` on the write side.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from solders.pubkey import Pubkey

from ..errors import FieldOutOfRange, InvalidAddressLength

MASK64: int = (1 << 64) - 1
PUBKEY_LEN: int = 32

Buffer = Union[bytes, bytearray, memoryview]
AddressLike = Union[Pubkey, str, bytes, bytearray]


@dataclass(frozen=True)
class FieldKind:
    """Encoding of one fixed-width field."""

    name: str
    width: int
    signed: bool = False
    integer: bool = True

    @property
    def min_value(self) -> int:
        return -(1 << (self.width * 8 - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        bits = self.width * 8
        return (1 << (bits - 1)) - 1 if self.signed else (1 << bits) - 1


U8 = FieldKind("u8", 1)
U16 = FieldKind("u16", 2)
U32 = FieldKind("u32", 4)
U64 = FieldKind("u64", 8)
I64 = FieldKind("i64", 8, signed=True)
U128 = FieldKind("u128", 16)
I128 = FieldKind("i128", 16, signed=True)
PUBKEY = FieldKind("pubkey", PUBKEY_LEN, integer=False)
BYTES32 = FieldKind("bytes32", 32, integer=False)

_STRUCT_FMT: dict[tuple[int, bool], str] = {
    (1, False): "<B",
    (1, True): "<b",
    (2, False): "<H",
    (2, True): "<h",
    (4, False): "<I",
    (4, True): "<i",
    (8, False): "<Q",
    (8, True): "<q",
}


@dataclass(frozen=True)
class Field:
    """A named field at a fixed offset relative to its block base."""

    name: str
    offset: int
    kind: FieldKind

    @property
    def end(self) -> int:
        return self.offset + self.kind.width


# -- Reads -------------------------------------------------------------------

def read_u64(buf: Buffer, offset: int) -> int:
    return struct.unpack_from("<Q", buf, offset)[0]


def read_i64(buf: Buffer, offset: int) -> int:
    return struct.unpack_from("<q", buf, offset)[0]


def read_u128(buf: Buffer, offset: int) -> int:
    lo = read_u64(buf, offset)
    hi = read_u64(buf, offset + 8)
    return (hi << 64) + lo


def read_i128(buf: Buffer, offset: int) -> int:
    lo = read_u64(buf, offset)
    hi = read_i64(buf, offset + 8)
    return (hi << 64) + lo


def read_int(buf: Buffer, offset: int, kind: FieldKind) -> int:
    if kind.width == 16:
        return read_i128(buf, offset) if kind.signed else read_u128(buf, offset)
    return struct.unpack_from(_STRUCT_FMT[(kind.width, kind.signed)], buf, offset)[0]


def read_pubkey(buf: Buffer, offset: int) -> Pubkey:
    return Pubkey.from_bytes(bytes(buf[offset : offset + PUBKEY_LEN]))


def read_field(buf: Buffer, base: int, field: Field) -> Any:
    offset = base + field.offset
    if field.kind is PUBKEY:
        return read_pubkey(buf, offset)
    if not field.kind.integer:
        return bytes(buf[offset : offset + field.kind.width])
    return read_int(buf, offset, field.kind)


def read_struct(buf: Buffer, base: int, fields: Iterable[Field]) -> dict[str, Any]:
    """Decode every field of a block into a name -> value dict."""
    return {f.name: read_field(buf, base, f) for f in fields}


# -- Writes ------------------------------------------------------------------

def coerce_int(value: Any, kind: FieldKind, *, field: str) -> int:
    """Validate *value* against *kind*'s range. Raises ``FieldOutOfRange``."""
    if isinstance(value, bool):
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip(), 10)
        except ValueError:
            raise FieldOutOfRange(field, value, kind.name) from None
    elif not isinstance(value, int):
        raise FieldOutOfRange(field, value, kind.name)
    if value < kind.min_value or value > kind.max_value:
        raise FieldOutOfRange(field, value, kind.name)
    return int(value)


def pack_int(value: Any, kind: FieldKind, *, field: str) -> bytes:
    v = coerce_int(value, kind, field=field)
    if kind.width == 16:
        return struct.pack("<QQ", v & MASK64, (v >> 64) & MASK64)
    return struct.pack(_STRUCT_FMT[(kind.width, kind.signed)], v)


def address_bytes(value: AddressLike, *, field: str) -> bytes:
    """Normalize an address to 32 raw bytes. Raises ``InvalidAddressLength``."""
    if isinstance(value, Pubkey):
        return bytes(value)
    if isinstance(value, str):
        try:
            return bytes(Pubkey.from_string(value))
        except ValueError:
            raise InvalidAddressLength(field, len(value)) from None
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) != PUBKEY_LEN:
            raise InvalidAddressLength(field, len(raw))
        return raw
    raise InvalidAddressLength(field, 0)


def fixed_bytes32(value: Any, *, field: str) -> bytes:
    """32 raw bytes from bytes or a 64-char hex string (optional ``0x``)."""
    if isinstance(value, str):
        text = value[2:] if value.startswith(("0x", "0X")) else value
        if len(text) != 64:
            raise InvalidAddressLength(field, len(text) // 2)
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise InvalidAddressLength(field, len(text) // 2) from None
    if isinstance(value, Pubkey):
        return bytes(value)
    return address_bytes(value, field=field)


def pack_field(value: Any, field: Field) -> bytes:
    if field.kind is PUBKEY:
        return address_bytes(value, field=field.name)
    if not field.kind.integer:
        return fixed_bytes32(value, field=field.name)
    return pack_int(value, field.kind, field=field.name)


def write_struct(
    buf: bytearray,
    base: int,
    fields: Iterable[Field],
    values: Mapping[str, Any],
) -> None:
    """Write the given values into *buf* at their schema offsets (missing names are skipped)."""
    for f in fields:
        if f.name not in values:
            continue
        raw = pack_field(values[f.name], f)
        start = base + f.offset
        buf[start : start + len(raw)] = raw
