"""Instruction payload encoder.

A payload is one discriminant byte followed by the operation's fields in a
fixed order, little-endian, using the same widths as the slab layout.

The encoder validates representability only (width, sign, address length).
It does not check business rules such as affordability or authority; the
on-chain program does that.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, unique
from typing import Any, Mapping, Optional, Union

from ..errors import BufferTooSmall, DecodeError, EncodeError, FieldOutOfRange, UnknownOperation
from ..state.codec import (
    BYTES32,
    I64,
    I128,
    PUBKEY,
    U8,
    U16,
    U32,
    U64,
    U128,
    Buffer,
    Field,
    FieldKind,
    pack_field,
    read_field,
)
from ..state.layout import CONFIG_TUNABLE_FIELDS, RISK_PARAMS_FIELDS

# keeper_crank caller index meaning "permissionless, no caller account".
CRANK_NO_CALLER: int = 0xFFFF


@unique
class Op(IntEnum):
    """Operation discriminants (first payload byte)."""
    INIT_MARKET = 0
    INIT_USER = 1
    INIT_LP = 2
    DEPOSIT_COLLATERAL = 3
    WITHDRAW_COLLATERAL = 4
    KEEPER_CRANK = 5
    TRADE_NO_CPI = 6
    LIQUIDATE_AT_ORACLE = 7
    CLOSE_ACCOUNT = 8
    TOP_UP_INSURANCE = 9
    TRADE_CPI = 10
    SET_RISK_THRESHOLD = 11
    UPDATE_ADMIN = 12
    CLOSE_SLAB = 13
    UPDATE_CONFIG = 14
    SET_MAINTENANCE_FEE = 15
    SET_ORACLE_AUTHORITY = 16
    PUSH_ORACLE_PRICE = 17
    SET_ORACLE_PRICE_CAP = 18
    RESOLVE_MARKET = 19
    WITHDRAW_INSURANCE = 20
    ADMIN_FORCE_CLOSE = 21
    UPDATE_RISK_PARAMS = 22

    @property
    def label(self) -> str:
        return self.name.lower()


OpLike = Union[Op, str, int]


@dataclass(frozen=True)
class OpLayout:
    """Field order of one operation. Offsets include the leading tag byte."""

    op: Op
    fields: tuple[Field, ...]
    defaults: Mapping[str, Any] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return 1 + sum(f.kind.width for f in self.fields)


def _seq(*items: tuple[str, FieldKind]) -> tuple[Field, ...]:
    out = []
    offset = 1
    for name, kind in items:
        out.append(Field(name, offset, kind))
        offset += kind.width
    return tuple(out)


def _schema_order(fields_: tuple[Field, ...]) -> tuple[tuple[str, FieldKind], ...]:
    return tuple((f.name, f.kind) for f in sorted(fields_, key=lambda f: f.offset))


OP_LAYOUTS: dict[Op, OpLayout] = {
    lay.op: lay
    for lay in (
        OpLayout(
            Op.INIT_MARKET,
            _seq(
                ("admin", PUBKEY),
                ("collateral_mint", PUBKEY),
                ("index_feed_id", BYTES32),
                ("max_staleness_secs", U64),
                ("conf_filter_bps", U16),
                ("invert", U8),
                ("unit_scale", U32),
                ("initial_mark_price_e6", U64),
                *_schema_order(RISK_PARAMS_FIELDS),
            ),
        ),
        OpLayout(Op.INIT_USER, _seq(("fee_payment", U64))),
        OpLayout(
            Op.INIT_LP,
            _seq(("matcher_program", PUBKEY), ("matcher_context", PUBKEY), ("fee_payment", U64)),
        ),
        OpLayout(Op.DEPOSIT_COLLATERAL, _seq(("user_idx", U16), ("amount", U64))),
        OpLayout(Op.WITHDRAW_COLLATERAL, _seq(("user_idx", U16), ("amount", U64))),
        OpLayout(
            Op.KEEPER_CRANK,
            _seq(("caller_idx", U16), ("allow_panic", U8)),
            {"caller_idx": CRANK_NO_CALLER, "allow_panic": 0},
        ),
        OpLayout(Op.TRADE_NO_CPI, _seq(("lp_idx", U16), ("user_idx", U16), ("size", I128))),
        OpLayout(Op.LIQUIDATE_AT_ORACLE, _seq(("target_idx", U16))),
        OpLayout(Op.CLOSE_ACCOUNT, _seq(("user_idx", U16))),
        OpLayout(Op.TOP_UP_INSURANCE, _seq(("amount", U64))),
        OpLayout(Op.TRADE_CPI, _seq(("lp_idx", U16), ("user_idx", U16), ("size", I128))),
        OpLayout(Op.SET_RISK_THRESHOLD, _seq(("new_threshold", U128))),
        OpLayout(Op.UPDATE_ADMIN, _seq(("new_admin", PUBKEY))),
        OpLayout(Op.CLOSE_SLAB, ()),
        OpLayout(Op.UPDATE_CONFIG, _seq(*_schema_order(CONFIG_TUNABLE_FIELDS))),
        OpLayout(Op.SET_MAINTENANCE_FEE, _seq(("new_fee", U128))),
        OpLayout(Op.SET_ORACLE_AUTHORITY, _seq(("new_authority", PUBKEY))),
        OpLayout(Op.PUSH_ORACLE_PRICE, _seq(("price_e6", U64), ("timestamp", I64))),
        OpLayout(Op.SET_ORACLE_PRICE_CAP, _seq(("max_change_e2bps", U64))),
        OpLayout(Op.RESOLVE_MARKET, ()),
        OpLayout(Op.WITHDRAW_INSURANCE, ()),
        OpLayout(Op.ADMIN_FORCE_CLOSE, _seq(("target_idx", U16))),
        OpLayout(
            Op.UPDATE_RISK_PARAMS,
            _seq(("initial_margin_bps", U64), ("maintenance_margin_bps", U64)),
        ),
    )
}


def resolve_op(op: OpLike) -> Op:
    """Map an ``Op``, an operation name, or a tag to ``Op``. Raises ``UnknownOperation``."""
    if isinstance(op, Op):
        return op
    if isinstance(op, str):
        try:
            return Op[op.strip().upper()]
        except KeyError:
            raise UnknownOperation(op) from None
    if isinstance(op, int) and not isinstance(op, bool):
        try:
            return Op(op)
        except ValueError:
            raise UnknownOperation(op) from None
    raise UnknownOperation(op)


def op_layout(op: OpLike) -> OpLayout:
    return OP_LAYOUTS[resolve_op(op)]


def encode_instruction(op: OpLike, fields: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> bytes:
    """Serialize *op* with its fields (mapping and/or keywords) into a payload.

    Raises ``UnknownOperation``, ``FieldOutOfRange`` (missing or unrepresentable
    value), ``InvalidAddressLength``, or ``EncodeError`` for unexpected names.
    """
    layout = op_layout(op)
    values: dict[str, Any] = dict(layout.defaults)
    if fields:
        values.update(fields)
    values.update(kwargs)

    known = {f.name for f in layout.fields}
    extra = sorted(set(values) - known)
    if extra:
        raise EncodeError(f"{layout.op.label} does not take field(s): {', '.join(extra)}")

    out = bytearray([int(layout.op)])
    for f in layout.fields:
        if f.name not in values:
            raise FieldOutOfRange(f.name, None, f.kind.name)
        out += pack_field(values[f.name], f)
    return bytes(out)


def decode_instruction(data: Buffer) -> tuple[Op, dict[str, Any]]:
    """Inverse of ``encode_instruction``: payload -> (op, field values).

    Addresses come back as ``Pubkey``, the feed id as 32 raw bytes.
    """
    if len(data) < 1:
        raise BufferTooSmall(1, len(data))
    layout = op_layout(data[0])
    if len(data) < layout.size:
        raise BufferTooSmall(layout.size, len(data))
    if len(data) > layout.size:
        raise DecodeError(f"{layout.op.label} payload has {len(data) - layout.size} trailing byte(s)")
    return layout.op, {f.name: read_field(data, 0, f) for f in layout.fields}
