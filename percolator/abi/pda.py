"""Program-derived addresses for a slab.

Seeds must match the on-chain program byte for byte:

- vault authority: ``[b"vault", slab]``
- LP signer:       ``[b"lp", slab, lp_idx (u16, big-endian)]``
- associated token account: ``[owner, token_program, mint]`` under the ATA program
- Pyth price account: ``[shard_id (u16, little-endian), feed_id]`` under the push-oracle program

A mismatch does not fail here. It fails later, on-chain, when the derived
address is rejected.
"""

from __future__ import annotations

from typing import Tuple

from solders.pubkey import Pubkey

from ..errors import FieldOutOfRange
from ..state.codec import U16, AddressLike, address_bytes, fixed_bytes32
from .addresses import ASSOCIATED_TOKEN_PROGRAM_ID, PYTH_PUSH_ORACLE_PROGRAM_ID, TOKEN_PROGRAM_ID

VAULT_SEED = b"vault"
LP_SEED = b"lp"


def _key(value: AddressLike, field: str) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    return Pubkey.from_bytes(address_bytes(value, field=field))


def lp_index_seed(lp_idx: int) -> bytes:
    if isinstance(lp_idx, bool) or not isinstance(lp_idx, int) or not 0 <= lp_idx <= U16.max_value:
        raise FieldOutOfRange("lp_idx", lp_idx, U16.name)
    return lp_idx.to_bytes(2, "big")


def derive_vault_authority(program_id: AddressLike, slab: AddressLike) -> Tuple[Pubkey, int]:
    """Vault authority PDA and bump for *slab*."""
    slab_key = _key(slab, "slab")
    return Pubkey.find_program_address([VAULT_SEED, bytes(slab_key)], _key(program_id, "program_id"))


def derive_lp_pda(program_id: AddressLike, slab: AddressLike, lp_idx: int) -> Tuple[Pubkey, int]:
    """LP signer PDA and bump for account slot *lp_idx*."""
    slab_key = _key(slab, "slab")
    return Pubkey.find_program_address(
        [LP_SEED, bytes(slab_key), lp_index_seed(lp_idx)],
        _key(program_id, "program_id"),
    )


def derive_ata(
    owner: AddressLike,
    mint: AddressLike,
    token_program: AddressLike = TOKEN_PROGRAM_ID,
) -> Pubkey:
    """Associated token account of *owner* for *mint*."""
    ata, _bump = Pubkey.find_program_address(
        [bytes(_key(owner, "owner")), bytes(_key(token_program, "token_program")), bytes(_key(mint, "mint"))],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return ata


def derive_pyth_price_feed(feed_id, shard_id: int = 0) -> Tuple[Pubkey, int]:
    """Pyth push-oracle price account for a 32-byte feed id (bytes or 64 hex chars).

    Seeds are ``[shard_id (u16, little-endian), feed_id]``.
    """
    raw = fixed_bytes32(feed_id, field="feed_id")
    if isinstance(shard_id, bool) or not isinstance(shard_id, int) or not 0 <= shard_id <= U16.max_value:
        raise FieldOutOfRange("shard_id", shard_id, U16.name)
    return Pubkey.find_program_address([shard_id.to_bytes(2, "little"), raw], PYTH_PUSH_ORACLE_PROGRAM_ID)
