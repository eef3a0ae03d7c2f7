"""
Token display metadata and a bounded cache for it.

The cache is an explicit object owned by the caller: it has a maximum entry
count (least-recently-used eviction) and a time-to-live. Nothing here performs
I/O; ``get_or_load`` takes the loader as an argument.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from solders.pubkey import Pubkey

from ..errors import BufferTooSmall
from ..state.codec import AddressLike, address_bytes

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 6
UNKNOWN_TOKEN_NAME = "Unknown Token"

# SPL Token mint account: decimals is the u8 after mint_authority (36B) and supply (8B).
MINT_DECIMALS_OFF = 44
MINT_ACCOUNT_LEN = 82


@dataclass(frozen=True)
class TokenMeta:
    decimals: int
    symbol: str
    name: str

    @classmethod
    def placeholder(cls, mint: AddressLike) -> "TokenMeta":
        """Defaults shown before (or instead of) a metadata lookup."""
        key = str(Pubkey.from_bytes(address_bytes(mint, field="mint")))
        return cls(decimals=DEFAULT_DECIMALS, symbol=key[:4] + "...", name=UNKNOWN_TOKEN_NAME)

    @classmethod
    def from_mint_account(
        cls,
        mint: AddressLike,
        data: bytes,
        symbol: Optional[str] = None,
        name: Optional[str] = None,
    ) -> "TokenMeta":
        """Decimals from raw SPL mint account bytes; symbol/name from the caller or placeholders."""
        if len(data) < MINT_ACCOUNT_LEN:
            raise BufferTooSmall(MINT_ACCOUNT_LEN, len(data))
        base = cls.placeholder(mint)
        return cls(
            decimals=data[MINT_DECIMALS_OFF],
            symbol=symbol or base.symbol,
            name=name or base.name,
        )


class TokenMetaCache:
    def __init__(
        self,
        max_entries: int = 256,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, TokenMeta]] = OrderedDict()

    @staticmethod
    def _key(mint: AddressLike) -> str:
        return str(Pubkey.from_bytes(address_bytes(mint, field="mint")))

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, mint: AddressLike) -> Optional[TokenMeta]:
        key = self._key(mint)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, meta = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return meta

    def put(self, mint: AddressLike, meta: TokenMeta) -> None:
        key = self._key(mint)
        self._entries[key] = (self._clock(), meta)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("evicted token metadata for %s", evicted)

    def get_or_load(self, mint: AddressLike, loader: Callable[[Pubkey], TokenMeta]) -> TokenMeta:
        """Cached metadata for *mint*, calling ``loader(mint)`` on a miss or expiry.

        Loader exceptions propagate and nothing is cached.
        """
        meta = self.get(mint)
        if meta is not None:
            return meta
        meta = loader(Pubkey.from_bytes(address_bytes(mint, field="mint")))
        self.put(mint, meta)
        return meta

    def invalidate(self, mint: AddressLike) -> None:
        self._entries.pop(self._key(mint), None)

    def clear(self) -> None:
        self._entries.clear()
