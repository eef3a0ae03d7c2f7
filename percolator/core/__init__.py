"""
Trading math and price-source resolution
"""

from .oracle import (
    AdminPushed,
    ExternalFeed,
    PoolDerived,
    PoolKind,
    PriceSource,
    display_price_e6,
    oracle_account_for,
    resolve_price_source,
)
from .trading_math import (
    annualized_funding_rate,
    div_trunc,
    estimated_entry_price,
    estimated_entry_price_or_raise,
    hourly_funding_bps,
    liquidation_price,
    liquidation_price_or_raise,
    mark_pnl,
    mark_pnl_or_raise,
    pnl_bps,
    pre_trade_liquidation_price,
    pre_trade_liquidation_price_or_raise,
    trading_fee,
)

__all__ = [
    "AdminPushed",
    "ExternalFeed",
    "PoolDerived",
    "PoolKind",
    "PriceSource",
    "display_price_e6",
    "oracle_account_for",
    "resolve_price_source",
    "annualized_funding_rate",
    "div_trunc",
    "estimated_entry_price",
    "estimated_entry_price_or_raise",
    "hourly_funding_bps",
    "liquidation_price",
    "liquidation_price_or_raise",
    "mark_pnl",
    "mark_pnl_or_raise",
    "pnl_bps",
    "pre_trade_liquidation_price",
    "pre_trade_liquidation_price_or_raise",
    "trading_fee",
]
