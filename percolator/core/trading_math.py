"""Client-side estimates of the engine's coin-margined perp formulas.

Every function is stateless and operates on plain Python ints.

This module is explicit about rounding: the on-chain engine divides with
truncation toward zero, so every division goes through ``div_trunc`` rather
than Python's ``//`` (which floors toward -inf and differs for negative
numerators).

Degenerate inputs (zero oracle price, zero position, zero entry price) return
0 by policy, which the UI shows as "no value". Callers that must tell a real
zero from an undefined result use the ``*_or_raise`` variants, which raise
``DegenerateInputError`` instead.
"""

from __future__ import annotations

from ..errors import DegenerateInputError
from ..state.types import Direction

PRICE_SCALE: int = 1_000_000  # 1e6
BPS_SCALE: int = 10_000

# ~2.5 slots per second on mainnet.
SLOTS_PER_YEAR: int = 78_840_000
SLOTS_PER_HOUR: int = 9_000


# -- Basic helpers -----------------------------------------------------------

def abs_val(x: int) -> int:
    """Absolute value of *x*."""
    return x if x >= 0 else -x


def div_trunc(a: int, b: int) -> int:
    """Integer division rounding toward zero for any operand signs.

    Raises ``ZeroDivisionError`` when *b* is 0.
    """
    q = abs_val(a) // abs_val(b)
    return q if (a >= 0) == (b >= 0) else -q


# -- Position valuation ------------------------------------------------------

def mark_pnl(position_size: int, entry_price: int, oracle_price: int) -> int:
    """Coin-margined mark PnL in collateral units.

    ``(oracle - entry) * |pos| / oracle`` for longs and
    ``(entry - oracle) * |pos| / oracle`` for shorts. The denominator is the
    current oracle price, not a fixed scale.
    """
    if position_size == 0 or oracle_price == 0:
        return 0
    diff = oracle_price - entry_price if position_size > 0 else entry_price - oracle_price
    return div_trunc(diff * abs_val(position_size), oracle_price)


def liquidation_price(
    entry_price: int,
    capital: int,
    position_size: int,
    maintenance_margin_bps: int,
) -> int:
    """Estimated liquidation price (e6) for an open position.

    Capital per unit, scaled by ``10000 / (10000 + mm_bps)``, is subtracted
    from the entry price for longs (floored at 0) and added for shorts.
    """
    if position_size == 0 or entry_price == 0:
        return 0
    abs_pos = abs_val(position_size)
    capital_per_unit = div_trunc(capital * PRICE_SCALE, abs_pos)
    adjusted = div_trunc(capital_per_unit * BPS_SCALE, BPS_SCALE + maintenance_margin_bps)
    if position_size > 0:
        return max(entry_price - adjusted, 0)
    return entry_price + adjusted


def pre_trade_liquidation_price(
    oracle_price: int,
    margin: int,
    size: int,
    maintenance_margin_bps: int,
    fee_bps: int,
    direction: Direction | str,
) -> int:
    """Liquidation price of a position that has not been opened yet.

    The trading fee on ``|size|`` is deducted from *margin* first.
    """
    if oracle_price == 0 or margin == 0 or size == 0:
        return 0
    abs_size = abs_val(size)
    fee = div_trunc(abs_size * fee_bps, BPS_SCALE)
    effective_capital = margin - fee if margin > fee else 0
    signed = abs_size * Direction.parse(direction).sign
    return liquidation_price(oracle_price, effective_capital, signed, maintenance_margin_bps)


# -- Fees / entry ------------------------------------------------------------

def trading_fee(notional: int, fee_bps: int) -> int:
    return div_trunc(notional * fee_bps, BPS_SCALE)


def estimated_entry_price(oracle_price: int, fee_bps: int, direction: Direction | str) -> int:
    """Oracle price shifted by the fee-implied spread: above for longs, below for shorts."""
    if oracle_price == 0:
        return 0
    impact = div_trunc(oracle_price * fee_bps, BPS_SCALE)
    return oracle_price + impact * Direction.parse(direction).sign


def pnl_bps(pnl: int, capital: int) -> int:
    """PnL as a share of capital, in bps (truncated). 0 when capital is 0."""
    if capital == 0:
        return 0
    return div_trunc(pnl * BPS_SCALE, capital)


# -- Funding -----------------------------------------------------------------

def annualized_funding_rate(bps_per_slot: int) -> int:
    """Per-slot funding in bps -> annualized percent.

    Exact: ``SLOTS_PER_YEAR`` is a multiple of 100.
    """
    return bps_per_slot * SLOTS_PER_YEAR // 100


def hourly_funding_bps(bps_per_slot: int) -> int:
    return bps_per_slot * SLOTS_PER_HOUR


# -- Raising variants --------------------------------------------------------

def mark_pnl_or_raise(position_size: int, entry_price: int, oracle_price: int) -> int:
    """Like ``mark_pnl()`` but raises on zero position or zero oracle price.

    Raises:
        DegenerateInputError: position or oracle price is zero.
    """
    if position_size == 0:
        raise DegenerateInputError("mark_pnl: position size is zero")
    if oracle_price == 0:
        raise DegenerateInputError("mark_pnl: oracle price is zero")
    return mark_pnl(position_size, entry_price, oracle_price)


def liquidation_price_or_raise(
    entry_price: int,
    capital: int,
    position_size: int,
    maintenance_margin_bps: int,
) -> int:
    if position_size == 0:
        raise DegenerateInputError("liquidation_price: position size is zero")
    if entry_price == 0:
        raise DegenerateInputError("liquidation_price: entry price is zero")
    return liquidation_price(entry_price, capital, position_size, maintenance_margin_bps)


def pre_trade_liquidation_price_or_raise(
    oracle_price: int,
    margin: int,
    size: int,
    maintenance_margin_bps: int,
    fee_bps: int,
    direction: Direction | str,
) -> int:
    for name, value in (("oracle price", oracle_price), ("margin", margin), ("size", size)):
        if value == 0:
            raise DegenerateInputError(f"pre_trade_liquidation_price: {name} is zero")
    return pre_trade_liquidation_price(
        oracle_price, margin, size, maintenance_margin_bps, fee_bps, direction
    )


def estimated_entry_price_or_raise(oracle_price: int, fee_bps: int, direction: Direction | str) -> int:
    if oracle_price == 0:
        raise DegenerateInputError("estimated_entry_price: oracle price is zero")
    return estimated_entry_price(oracle_price, fee_bps, direction)
