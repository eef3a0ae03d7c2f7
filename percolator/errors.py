"""Exception types for the slab codec, instruction encoder and trading math.

Decode and encode failures are local and synchronous:

- a ``DecodeError`` means "market state currently unavailable",
- an ``EncodeError`` means "cannot build this request with these inputs".

Neither is a network failure; nothing in this package retries.
"""

from __future__ import annotations

from typing import Any, Iterable


class PercolatorError(Exception):
    """Base class for every error raised by this package."""


# -- Decoding ------------------------------------------------------------------

class DecodeError(PercolatorError):
    """Raised when a byte buffer cannot be decoded as a slab."""


class BufferTooSmall(DecodeError):
    def __init__(self, needed: int, actual: int) -> None:
        self.needed = needed
        self.actual = actual
        super().__init__(f"buffer too small: need {needed} bytes, got {actual}")


class InvalidMagic(DecodeError):
    def __init__(self, found: int) -> None:
        self.found = found
        super().__init__(f"invalid slab magic: 0x{found:016x}")


class UnsupportedVersion(DecodeError):
    def __init__(self, found: int, supported: Iterable[int]) -> None:
        self.found = found
        self.supported = tuple(sorted(supported))
        super().__init__(f"unsupported slab version {found} (supported: {list(self.supported)})")


class SlotOutOfRange(DecodeError):
    """Raised for a random-access read outside the account table."""

    def __init__(self, index: int, capacity: int) -> None:
        self.index = index
        self.capacity = capacity
        super().__init__(f"account slot {index} out of range (capacity {capacity})")


class InvalidAccountKind(DecodeError):
    def __init__(self, index: int, tag: int) -> None:
        self.index = index
        self.tag = tag
        super().__init__(f"account slot {index} has unknown kind tag {tag}")


# -- Encoding ------------------------------------------------------------------

class EncodeError(PercolatorError):
    """Raised when an instruction cannot be serialized."""


class FieldOutOfRange(EncodeError):
    def __init__(self, field: str, value: Any, kind: str) -> None:
        self.field = field
        self.value = value
        self.kind = kind
        super().__init__(f"field {field!r} value {value!r} does not fit {kind}")


class UnknownOperation(EncodeError):
    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"unknown operation: {name!r}")


class InvalidAddressLength(EncodeError):
    def __init__(self, field: str, length: int) -> None:
        self.field = field
        self.length = length
        super().__init__(f"field {field!r} must be 32 bytes, got {length}")


class AccountCountMismatch(EncodeError):
    def __init__(self, op: str, expected: int, actual: int) -> None:
        self.op = op
        self.expected = expected
        self.actual = actual
        super().__init__(f"{op} expects {expected} accounts, got {actual}")


# -- Math / config -------------------------------------------------------------

class DegenerateInputError(PercolatorError):
    """Raised by the ``*_or_raise`` math variants when the result is undefined."""


class ConfigError(PercolatorError):
    """Raised for missing or malformed client configuration."""
