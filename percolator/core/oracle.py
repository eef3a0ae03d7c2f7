"""Price-source resolution for a market.

A market's oracle is one of three closed variants, resolved once per snapshot
from the decoded config (plus, for non-zero feed ids, the owner program of the
feed-id address, which the caller fetches) and then passed along explicitly:

- ``AdminPushed``: all-zero feed id; prices come from ``push_oracle_price``.
- ``PoolDerived``: the feed id is a DEX pool owned by a known AMM program.
- ``ExternalFeed``: anything else; the feed id names a Pyth price feed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional, Union

from solders.pubkey import Pubkey

from ..abi.pda import derive_pyth_price_feed
from ..state.codec import AddressLike, address_bytes
from ..state.types import MarketConfig


@unique
class PoolKind(Enum):
    """Supported AMM pool programs, keyed by owner program id."""
    PUMPSWAP = "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA"
    RAYDIUM_CLMM = "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK"
    METEORA_DLMM = "LBUZKhRxPF3XUpBCjp4YzTKgLccjZhTSDM9YuVaPwxo"

    @property
    def program_id(self) -> Pubkey:
        return Pubkey.from_string(self.value)

    @classmethod
    def from_owner(cls, owner: Pubkey) -> Optional["PoolKind"]:
        text = str(owner)
        for kind in cls:
            if kind.value == text:
                return kind
        return None


@dataclass(frozen=True)
class AdminPushed:
    pass


@dataclass(frozen=True)
class ExternalFeed:
    feed_id: bytes

    @property
    def feed_id_hex(self) -> str:
        return self.feed_id.hex()


@dataclass(frozen=True)
class PoolDerived:
    pool: Pubkey
    kind: PoolKind


PriceSource = Union[AdminPushed, ExternalFeed, PoolDerived]


def resolve_price_source(config: MarketConfig, feed_owner: Optional[AddressLike] = None) -> PriceSource:
    """Classify the market's oracle.

    *feed_owner* is the owner program of the account at the feed-id address, if
    the caller looked it up. Without it a non-zero feed id resolves to
    ``ExternalFeed``.
    """
    if config.uses_admin_oracle:
        return AdminPushed()
    if feed_owner is not None:
        kind = PoolKind.from_owner(Pubkey.from_bytes(address_bytes(feed_owner, field="feed_owner")))
        if kind is not None:
            return PoolDerived(Pubkey.from_bytes(config.index_feed_id), kind)
    return ExternalFeed(config.index_feed_id)


def oracle_account_for(source: PriceSource, slab: AddressLike) -> Pubkey:
    """Address to pass in the ``oracle`` account role of crank/trade/withdraw."""
    if isinstance(source, AdminPushed):
        return Pubkey.from_bytes(address_bytes(slab, field="slab"))
    if isinstance(source, PoolDerived):
        return source.pool
    if isinstance(source, ExternalFeed):
        account, _bump = derive_pyth_price_feed(source.feed_id)
        return account
    raise TypeError(f"unknown price source: {source!r}")


def display_price_e6(config: MarketConfig) -> int:
    """Best on-slab price: last effective (post-cap) price, else the authority price."""
    if config.last_effective_price_e6:
        return config.last_effective_price_e6
    return config.authority_price_e6
