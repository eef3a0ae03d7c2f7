"""Byte layout of the slab account.

Every offset here is a fixed constant matching the on-chain program's compiled
layout. Nothing is inferred from blob content. A layout change on-chain comes
with a version bump, and the decoder rejects versions it does not list in
``SUPPORTED_VERSIONS``.

Offset families:
- header and config offsets are absolute (relative to byte 0),
- engine fields are relative to ``ENGINE_OFF``,
- risk params are relative to ``ENGINE_OFF + ENGINE_PARAMS_OFF``,
- account fields are relative to the start of their record.
"""

from __future__ import annotations

from .codec import BYTES32, I64, I128, PUBKEY, U8, U16, U32, U64, U128, Field

# ASCII "PERCOLAT" read as a little-endian u64.
SLAB_MAGIC: int = 0x504552434F4C4154
SLAB_VERSION: int = 1
SUPPORTED_VERSIONS: frozenset[int] = frozenset({SLAB_VERSION})

# -- Header (absolute) -------------------------------------------------------

HEADER_OFF: int = 0
HEADER_LEN: int = 72

HEADER_FIELDS: tuple[Field, ...] = (
    Field("magic", 0, U64),
    Field("version", 8, U32),
    Field("bump", 12, U8),
    Field("admin", 16, PUBKEY),
)

# -- Market config (absolute) ------------------------------------------------

CONFIG_OFF: int = HEADER_OFF + HEADER_LEN
CONFIG_LEN: int = 320

CONFIG_FIELDS: tuple[Field, ...] = (
    Field("collateral_mint", 72, PUBKEY),
    Field("vault", 104, PUBKEY),
    Field("index_feed_id", 136, BYTES32),
    Field("max_staleness_secs", 168, U64),
    Field("conf_filter_bps", 176, U16),
    Field("vault_authority_bump", 178, U8),
    Field("invert", 179, U8),
    Field("unit_scale", 180, U32),
    # Funding curve
    Field("funding_horizon_slots", 184, U64),
    Field("funding_k_bps", 192, U64),
    Field("funding_inv_scale_notional_e6", 200, I128),
    Field("funding_max_premium_bps", 216, U64),
    Field("funding_max_bps_per_slot", 224, U64),
    # Threshold curve
    Field("thresh_floor", 232, U128),
    Field("thresh_risk_bps", 248, U64),
    Field("thresh_update_interval_slots", 256, U64),
    Field("thresh_step_bps", 264, U64),
    Field("thresh_alpha_bps", 272, U64),
    Field("thresh_min", 280, U128),
    Field("thresh_max", 296, U128),
    Field("thresh_min_step", 312, U128),
    # Admin oracle
    Field("oracle_authority", 328, PUBKEY),
    Field("authority_price_e6", 360, U64),
    Field("authority_timestamp", 368, I64),
    Field("oracle_price_cap_e2bps", 376, U64),
    Field("last_effective_price_e6", 384, U64),
)

# The funding + threshold block, in order. Shared with the update_config payload.
CONFIG_TUNABLE_FIELDS: tuple[Field, ...] = tuple(
    f for f in CONFIG_FIELDS if f.name.startswith(("funding_", "thresh_"))
)

# -- Engine (relative to ENGINE_OFF) -----------------------------------------

ENGINE_OFF: int = CONFIG_OFF + CONFIG_LEN
ENGINE_PARAMS_OFF: int = 48
RISK_PARAMS_LEN: int = 144
ENGINE_BITMAP_OFF: int = 408
BITMAP_WORDS: int = 64
ENGINE_ACCOUNTS_OFF: int = 9136

RISK_PARAMS_FIELDS: tuple[Field, ...] = (
    Field("warmup_period_slots", 0, U64),
    Field("maintenance_margin_bps", 8, U64),
    Field("initial_margin_bps", 16, U64),
    Field("trading_fee_bps", 24, U64),
    Field("max_accounts", 32, U64),
    Field("new_account_fee", 40, U128),
    Field("risk_reduction_threshold", 56, U128),
    Field("maintenance_fee_per_slot", 72, U128),
    Field("max_crank_staleness_slots", 88, U64),
    Field("liquidation_fee_bps", 96, U64),
    Field("liquidation_fee_cap", 104, U128),
    Field("liquidation_buffer_bps", 120, U64),
    Field("min_liquidation_abs", 128, U128),
)

ENGINE_FIELDS: tuple[Field, ...] = (
    Field("vault", 0, U128),
    Field("insurance_balance", 16, U128),
    Field("insurance_fee_revenue", 32, U128),
    # RiskParams occupies [48, 192)
    Field("current_slot", 192, U64),
    Field("funding_index_qpb_e6", 200, I128),
    Field("last_funding_slot", 216, U64),
    Field("funding_rate_bps_per_slot_last", 224, I64),
    Field("last_crank_slot", 232, U64),
    Field("max_crank_staleness_slots", 240, U64),
    Field("total_open_interest", 248, U128),
    Field("c_tot", 264, U128),
    Field("pnl_pos_tot", 280, U128),
    Field("liq_cursor", 296, U16),
    Field("gc_cursor", 298, U16),
    Field("last_sweep_start_slot", 304, U64),
    Field("last_sweep_complete_slot", 312, U64),
    Field("crank_cursor", 320, U16),
    Field("sweep_start_idx", 322, U16),
    Field("lifetime_liquidations", 328, U64),
    Field("lifetime_force_closes", 336, U64),
    Field("net_lp_pos", 344, I128),
    Field("lp_sum_abs", 360, U128),
    Field("lp_max_abs", 376, U128),
    Field("lp_max_abs_sweep", 392, U128),
    # Used-slot bitmap occupies [408, 920)
    Field("num_used_accounts", 920, U16),
    Field("next_account_id", 928, U64),
    Field("free_head", 936, U16),
)

# -- Account table -----------------------------------------------------------

MAX_ACCOUNTS: int = BITMAP_WORDS * 64
ACCOUNT_SIZE: int = 240
ACCOUNTS_OFF: int = ENGINE_OFF + ENGINE_ACCOUNTS_OFF

ACCOUNT_KIND_USER: int = 0
ACCOUNT_KIND_LP: int = 1

ACCOUNT_FIELDS: tuple[Field, ...] = (
    Field("account_id", 0, U64),
    Field("capital", 8, U128),
    Field("kind", 24, U8),
    Field("pnl", 32, I128),
    Field("reserved_entry_price", 48, U64),
    Field("warmup_started_at_slot", 56, U64),
    Field("warmup_slope_per_step", 64, U128),
    Field("position_size", 80, I128),
    Field("entry_price", 96, U64),
    Field("funding_index", 104, I128),
    Field("matcher_program", 120, PUBKEY),
    Field("matcher_context", 152, PUBKEY),
    Field("owner", 184, PUBKEY),
    Field("fee_credits", 216, I128),
    Field("last_fee_slot", 232, U64),
)

# Header + config + engine up to the first account record.
MIN_SLAB_LEN: int = ACCOUNTS_OFF
# Size the deploy scripts allocate. It is 8 bytes short of a full final record,
# so capacity is always computed from the buffer (see accounts.table_capacity).
SLAB_LEN: int = 992_560


def account_offset(index: int) -> int:
    """Absolute byte offset of account record *index*."""
    return ACCOUNTS_OFF + index * ACCOUNT_SIZE


def field_named(fields: tuple[Field, ...], name: str) -> Field:
    for f in fields:
        if f.name == name:
            return f
    raise KeyError(name)
