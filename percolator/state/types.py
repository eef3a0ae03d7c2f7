"""Decoded slab values.

All types are frozen dataclasses built fresh from one byte buffer. They hold no
reference to the buffer and carry no identity beyond account index / id.

Units/conventions:
- `*_e6` prices are scaled by 1e6.
- `*_bps` rates are basis points (1/10_000); `*_e2bps` are hundredths of a bp.
- `position_size` is signed (long > 0, short < 0).
- capital, PnL and fee figures are in collateral base units.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum, IntEnum, unique
from typing import Any, Mapping, Optional

from solders.pubkey import Pubkey


@unique
class AccountKind(IntEnum):
    """Kind tag stored in each account record."""
    USER = 0
    LP = 1


@unique
class Direction(Enum):
    LONG = "long"
    SHORT = "short"

    @classmethod
    def parse(cls, value: "Direction | str") -> "Direction":
        if isinstance(value, Direction):
            return value
        return cls(str(value).strip().lower())

    @property
    def sign(self) -> int:
        return 1 if self is Direction.LONG else -1


def from_values(cls, values: Mapping[str, Any]):
    """Build dataclass *cls* from a decoded field dict, ignoring extra keys."""
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in values.items() if k in names})


@dataclass(frozen=True)
class Header:
    magic: int
    version: int
    bump: int
    admin: Pubkey


@dataclass(frozen=True)
class MarketConfig:
    """Market configuration block (collateral, oracle, funding and threshold curves)."""

    collateral_mint: Pubkey
    vault: Pubkey
    index_feed_id: bytes
    max_staleness_secs: int
    conf_filter_bps: int
    vault_authority_bump: int
    invert: int
    unit_scale: int

    # Funding curve
    funding_horizon_slots: int
    funding_k_bps: int
    funding_inv_scale_notional_e6: int
    funding_max_premium_bps: int
    funding_max_bps_per_slot: int

    # Threshold curve
    thresh_floor: int
    thresh_risk_bps: int
    thresh_update_interval_slots: int
    thresh_step_bps: int
    thresh_alpha_bps: int
    thresh_min: int
    thresh_max: int
    thresh_min_step: int

    # Admin oracle
    oracle_authority: Pubkey
    authority_price_e6: int
    authority_timestamp: int
    oracle_price_cap_e2bps: int
    last_effective_price_e6: int

    @property
    def feed_id_hex(self) -> str:
        return self.index_feed_id.hex()

    @property
    def is_inverted(self) -> bool:
        return self.invert != 0

    @property
    def uses_admin_oracle(self) -> bool:
        """True when no external feed is configured (all-zero feed id)."""
        return not any(self.index_feed_id)


@dataclass(frozen=True)
class RiskParams:
    warmup_period_slots: int
    maintenance_margin_bps: int
    initial_margin_bps: int
    trading_fee_bps: int
    max_accounts: int
    new_account_fee: int
    risk_reduction_threshold: int
    maintenance_fee_per_slot: int
    max_crank_staleness_slots: int
    liquidation_fee_bps: int
    liquidation_fee_cap: int
    liquidation_buffer_bps: int
    min_liquidation_abs: int


@dataclass(frozen=True)
class EngineState:
    """Solvency, funding and bookkeeping counters of the risk engine."""

    vault: int
    insurance_balance: int
    insurance_fee_revenue: int

    # Slots + funding
    current_slot: int
    funding_index_qpb_e6: int
    last_funding_slot: int
    funding_rate_bps_per_slot_last: int
    last_crank_slot: int
    max_crank_staleness_slots: int

    # Aggregates
    total_open_interest: int
    c_tot: int
    pnl_pos_tot: int

    # Cursors + sweep bookkeeping
    liq_cursor: int
    gc_cursor: int
    last_sweep_start_slot: int
    last_sweep_complete_slot: int
    crank_cursor: int
    sweep_start_idx: int

    # Lifetime counters
    lifetime_liquidations: int
    lifetime_force_closes: int

    # LP exposure
    net_lp_pos: int
    lp_sum_abs: int
    lp_max_abs: int
    lp_max_abs_sweep: int

    # Account table
    num_used_accounts: int
    next_account_id: int
    free_head: int


@dataclass(frozen=True)
class Account:
    """One account record. Matcher fields are meaningful only for LP accounts."""

    account_id: int
    capital: int
    kind: AccountKind
    pnl: int
    reserved_entry_price: int
    warmup_started_at_slot: int
    warmup_slope_per_step: int
    position_size: int
    entry_price: int
    funding_index: int
    matcher_program: Pubkey
    matcher_context: Pubkey
    owner: Pubkey
    fee_credits: int
    last_fee_slot: int

    @property
    def is_lp(self) -> bool:
        return self.kind is AccountKind.LP

    @property
    def equity(self) -> int:
        """Capital plus positive PnL (negative PnL is not netted here)."""
        return self.capital + max(self.pnl, 0)

    @property
    def direction(self) -> Optional[Direction]:
        if self.position_size > 0:
            return Direction.LONG
        if self.position_size < 0:
            return Direction.SHORT
        return None


@dataclass(frozen=True)
class SlabSnapshot:
    header: Header
    config: MarketConfig
    params: RiskParams
    engine: EngineState
