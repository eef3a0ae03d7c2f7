"""Ordered account roles per operation, and assembly into a solders ``Instruction``.

Each operation expects a fixed list of accounts. The caller supplies concrete
addresses either positionally (same order as the roles) or by role name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from ..errors import AccountCountMismatch, EncodeError
from ..state.codec import AddressLike, address_bytes
from .instructions import Op, OpLike, encode_instruction, resolve_op


@dataclass(frozen=True)
class AccountRole:
    name: str
    is_signer: bool = False
    is_writable: bool = False


def _r(name: str, flags: str = "") -> AccountRole:
    return AccountRole(name, is_signer="s" in flags, is_writable="w" in flags)


_USER_INIT = (_r("user", "sw"), _r("slab", "w"), _r("user_ata", "w"), _r("vault", "w"), _r("token_program"))
_USER_WITHDRAW = (
    _r("user", "sw"),
    _r("slab", "w"),
    _r("vault", "w"),
    _r("user_ata", "w"),
    _r("vault_authority"),
    _r("token_program"),
    _r("clock"),
    _r("oracle"),
)
_CRANK_LIKE = (_r("caller", "s"), _r("slab", "w"), _r("clock"), _r("oracle"))
_ADMIN_ONLY = (_r("admin", "s"), _r("slab", "w"))

ACCOUNT_ROLES: dict[Op, tuple[AccountRole, ...]] = {
    Op.INIT_MARKET: (
        _r("admin", "sw"),
        _r("slab", "w"),
        _r("mint"),
        _r("vault"),
        _r("token_program"),
        _r("clock"),
        _r("rent"),
        _r("vault_authority"),
        _r("system_program"),
    ),
    Op.INIT_USER: _USER_INIT,
    Op.INIT_LP: _USER_INIT,
    Op.DEPOSIT_COLLATERAL: (
        _r("user", "sw"),
        _r("slab", "w"),
        _r("user_ata", "w"),
        _r("vault", "w"),
        _r("token_program"),
        _r("clock"),
    ),
    Op.WITHDRAW_COLLATERAL: _USER_WITHDRAW,
    Op.CLOSE_ACCOUNT: _USER_WITHDRAW,
    Op.KEEPER_CRANK: _CRANK_LIKE,
    Op.LIQUIDATE_AT_ORACLE: _CRANK_LIKE,
    Op.ADMIN_FORCE_CLOSE: _CRANK_LIKE,
    Op.TRADE_NO_CPI: (_r("user", "s"), _r("lp", "s"), _r("slab", "w"), _r("clock"), _r("oracle")),
    Op.TRADE_CPI: (
        _r("user", "s"),
        _r("lp_owner"),
        _r("slab", "w"),
        _r("clock"),
        _r("oracle"),
        _r("matcher_program"),
        _r("matcher_context", "w"),
        _r("lp_pda"),
    ),
    Op.TOP_UP_INSURANCE: _USER_INIT,
    Op.WITHDRAW_INSURANCE: (
        _r("admin", "sw"),
        _r("slab", "w"),
        _r("admin_ata", "w"),
        _r("vault", "w"),
        _r("token_program"),
        _r("vault_authority"),
    ),
    Op.CLOSE_SLAB: (_r("admin", "sw"), _r("slab", "w")),
    Op.SET_RISK_THRESHOLD: _ADMIN_ONLY,
    Op.UPDATE_ADMIN: _ADMIN_ONLY,
    Op.UPDATE_CONFIG: _ADMIN_ONLY,
    Op.SET_MAINTENANCE_FEE: _ADMIN_ONLY,
    Op.SET_ORACLE_AUTHORITY: _ADMIN_ONLY,
    Op.SET_ORACLE_PRICE_CAP: _ADMIN_ONLY,
    Op.RESOLVE_MARKET: _ADMIN_ONLY,
    Op.UPDATE_RISK_PARAMS: _ADMIN_ONLY,
    Op.PUSH_ORACLE_PRICE: (_r("authority", "s"), _r("slab", "w")),
}

Addresses = Union[Sequence[AddressLike], Mapping[str, AddressLike]]


def account_roles(op: OpLike) -> tuple[AccountRole, ...]:
    return ACCOUNT_ROLES[resolve_op(op)]


def build_account_metas(op: OpLike, addresses: Addresses) -> list[AccountMeta]:
    """Pair *addresses* with the role list of *op*, in role order.

    *addresses* is either a sequence in role order or a mapping keyed by role name.
    """
    resolved = resolve_op(op)
    roles = ACCOUNT_ROLES[resolved]
    if isinstance(addresses, Mapping):
        missing = [r.name for r in roles if r.name not in addresses]
        if missing:
            raise EncodeError(f"{resolved.label} missing account role(s): {', '.join(missing)}")
        ordered = [addresses[r.name] for r in roles]
    else:
        ordered = list(addresses)
        if len(ordered) != len(roles):
            raise AccountCountMismatch(resolved.label, len(roles), len(ordered))

    return [
        AccountMeta(
            pubkey=Pubkey.from_bytes(address_bytes(addr, field=role.name)),
            is_signer=role.is_signer,
            is_writable=role.is_writable,
        )
        for role, addr in zip(roles, ordered)
    ]


def build_instruction(
    program_id: AddressLike,
    op: OpLike,
    fields: Optional[Mapping[str, Any]],
    addresses: Addresses,
) -> Instruction:
    """Encode the payload and account metas of *op* into a solders ``Instruction``."""
    data = encode_instruction(op, fields)
    metas = build_account_metas(op, addresses)
    return Instruction(Pubkey.from_bytes(address_bytes(program_id, field="program_id")), data, metas)
