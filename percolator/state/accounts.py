"""Account table reader.

Two enumeration paths over the fixed-capacity account array:

- bitmap path: walks the engine's used-slot bitmap, O(used),
- scan path: decodes every slot up to capacity and keeps those whose account id
  or owner is non-zero, O(capacity).

Both yield ``(index, Account)`` in ascending index order and agree on any
well-formed snapshot. ``iter_accounts`` uses the bitmap unless it is empty while
the engine reports used accounts, in which case it falls back to the scan.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from solders.pubkey import Pubkey

from ..errors import InvalidAccountKind, SlotOutOfRange
from .codec import Buffer, AddressLike, address_bytes, read_struct
from .layout import ACCOUNT_FIELDS, ACCOUNT_SIZE, ACCOUNTS_OFF, MAX_ACCOUNTS, account_offset
from .slab import bitmap_words, used_indices, validate_slab
from .types import Account, AccountKind, EngineState, RiskParams, from_values

logger = logging.getLogger(__name__)

AccountPair = tuple[int, Account]

_ZERO_KEY = Pubkey.default()


def table_capacity(buf: Buffer, params: Optional[RiskParams] = None) -> int:
    """Number of addressable slots: compiled max, what fits in *buf*, and ``params.max_accounts``."""
    fits = max(0, (len(buf) - ACCOUNTS_OFF) // ACCOUNT_SIZE)
    capacity = min(MAX_ACCOUNTS, fits)
    if params is not None and params.max_accounts:
        capacity = min(capacity, params.max_accounts)
    return capacity


def _read_record(buf: Buffer, index: int) -> dict:
    return read_struct(buf, account_offset(index), ACCOUNT_FIELDS)


def _to_account(index: int, raw: dict) -> Account:
    try:
        kind = AccountKind(raw["kind"])
    except ValueError:
        raise InvalidAccountKind(index, raw["kind"]) from None
    return from_values(Account, {**raw, "kind": kind})


def _is_used(raw: dict) -> bool:
    return raw["account_id"] != 0 or raw["owner"] != _ZERO_KEY


def decode_account(buf: Buffer, index: int, params: Optional[RiskParams] = None) -> Account:
    """Random access to slot *index* (used or not). Raises ``SlotOutOfRange``."""
    validate_slab(buf)
    capacity = table_capacity(buf, params)
    if index < 0 or index >= capacity:
        raise SlotOutOfRange(index, capacity)
    return _to_account(index, _read_record(buf, index))


def scan_accounts(buf: Buffer, params: Optional[RiskParams] = None) -> Iterator[AccountPair]:
    """Full linear scan of the table, yielding used slots only."""
    validate_slab(buf)
    for index in range(table_capacity(buf, params)):
        raw = _read_record(buf, index)
        if _is_used(raw):
            yield index, _to_account(index, raw)


def iter_accounts(
    buf: Buffer,
    engine: EngineState,
    params: Optional[RiskParams] = None,
    *,
    use_bitmap: bool = True,
) -> Iterator[AccountPair]:
    """Lazily yield ``(index, Account)`` for every used slot, ascending."""
    if not use_bitmap:
        yield from scan_accounts(buf, params)
        return

    if engine.num_used_accounts and not any(bitmap_words(buf)):
        logger.debug(
            "bitmap empty but num_used_accounts=%d; falling back to linear scan",
            engine.num_used_accounts,
        )
        yield from scan_accounts(buf, params)
        return

    capacity = table_capacity(buf, params)
    seen = 0
    for index in used_indices(buf, capacity):
        seen += 1
        yield index, _to_account(index, _read_record(buf, index))
    if seen != engine.num_used_accounts:
        logger.debug("bitmap yielded %d accounts, engine reports %d", seen, engine.num_used_accounts)


# -- Lookups -----------------------------------------------------------------

def find_accounts_by_owner(
    pairs: Iterable[AccountPair],
    owner: AddressLike,
    kind: Optional[AccountKind] = None,
) -> list[AccountPair]:
    """Accounts owned by *owner*, optionally restricted to one kind."""
    key = Pubkey.from_bytes(address_bytes(owner, field="owner"))
    return [
        (idx, acct)
        for idx, acct in pairs
        if acct.owner == key and (kind is None or acct.kind is kind)
    ]


def find_lp(pairs: Iterable[AccountPair]) -> Optional[AccountPair]:
    """First LP account in index order, or None."""
    for idx, acct in pairs:
        if acct.is_lp:
            return idx, acct
    return None
