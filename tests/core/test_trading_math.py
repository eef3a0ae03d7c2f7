"""Tests for percolator/core/trading_math.py: coin-margined estimate formulas."""

import pytest

from percolator.core.trading_math import (
    SLOTS_PER_YEAR,
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
from percolator.errors import DegenerateInputError
from percolator.state.types import Direction


# ---------------------------------------------------------------------------
# div_trunc
# ---------------------------------------------------------------------------

class TestDivTrunc:
    @pytest.mark.parametrize(
        "a,b,expected",
        [(7, 2, 3), (-7, 2, -3), (7, -2, -3), (-7, -2, 3), (0, 5, 0), (6, 3, 2), (-6, 3, -2)],
    )
    def test_truncates_toward_zero(self, a, b, expected):
        assert div_trunc(a, b) == expected

    def test_differs_from_floor_for_negatives(self):
        assert div_trunc(-1, 3) == 0
        assert -1 // 3 == -1

    def test_zero_divisor(self):
        with pytest.raises(ZeroDivisionError):
            div_trunc(1, 0)


# ---------------------------------------------------------------------------
# mark_pnl
# ---------------------------------------------------------------------------

class TestMarkPnl:
    def test_long_profit(self):
        assert mark_pnl(1000, 100_000000, 120_000000) == 166

    def test_short_loss_truncates(self):
        assert mark_pnl(-1000, 100_000000, 120_000000) == -166

    def test_short_profit(self):
        # (120 - 100) * 1000 / 100
        assert mark_pnl(-1000, 120_000000, 100_000000) == 200

    def test_divides_by_oracle_not_entry(self):
        assert mark_pnl(1000, 100_000000, 200_000000) == 500
        assert mark_pnl(-1000, 200_000000, 100_000000) == 1000

    def test_unchanged_price(self):
        assert mark_pnl(1000, 100_000000, 100_000000) == 0

    def test_zero_sentinels(self):
        assert mark_pnl(0, 100_000000, 120_000000) == 0
        assert mark_pnl(1000, 100_000000, 0) == 0

    def test_wide_position(self):
        pos = (1 << 127) - 1
        assert mark_pnl(pos, 1, 2) == pos // 2

    def test_or_raise(self):
        assert mark_pnl_or_raise(1000, 100_000000, 120_000000) == 166
        with pytest.raises(DegenerateInputError):
            mark_pnl_or_raise(0, 100_000000, 120_000000)
        with pytest.raises(DegenerateInputError):
            mark_pnl_or_raise(1000, 100_000000, 0)


# ---------------------------------------------------------------------------
# liquidation_price
# ---------------------------------------------------------------------------

class TestLiquidationPrice:
    def test_reference_long_floors_at_zero(self):
        liq = liquidation_price(100_000000, 10_000000, 100, 500)
        assert liq == 0
        assert liq < 100_000000

    def test_reference_short(self):
        liq = liquidation_price(100_000000, 10_000000, -100, 500)
        # capital_per_unit = 10e6 * 1e6 / 100; * 10000 / 10500
        assert liq == 100_000000 + 95_238_095_238
        assert liq > 100_000000

    def test_long_above_zero(self):
        assert liquidation_price(100_000000, 1_000000, 100_000000, 500) == 99_990_477

    def test_short_mirror(self):
        assert liquidation_price(100_000000, 1_000000, -100_000000, 500) == 100_009_523

    def test_zero_margin_bps(self):
        assert liquidation_price(100_000000, 1_000000, 100_000000, 0) == 99_990_000

    def test_zero_sentinels(self):
        assert liquidation_price(100_000000, 1_000000, 0, 500) == 0
        assert liquidation_price(0, 1_000000, 100, 500) == 0

    def test_or_raise(self):
        with pytest.raises(DegenerateInputError):
            liquidation_price_or_raise(100_000000, 1_000000, 0, 500)
        with pytest.raises(DegenerateInputError):
            liquidation_price_or_raise(0, 1_000000, 100, 500)
        assert liquidation_price_or_raise(100_000000, 1_000000, 100_000000, 500) == 99_990_477


# ---------------------------------------------------------------------------
# pre_trade_liquidation_price
# ---------------------------------------------------------------------------

class TestPreTrade:
    def test_fee_reduces_capital(self):
        # fee = 1e8 * 30 / 1e4 = 300_000 -> effective capital 700_000
        assert pre_trade_liquidation_price(100_000000, 1_000000, 100_000000, 500, 30, Direction.LONG) == 99_993_334
        assert pre_trade_liquidation_price(100_000000, 1_000000, 100_000000, 500, 30, "short") == 100_006_666

    def test_direction_overrides_size_sign(self):
        a = pre_trade_liquidation_price(100_000000, 1_000000, -100_000000, 500, 30, "long")
        b = pre_trade_liquidation_price(100_000000, 1_000000, 100_000000, 500, 30, "long")
        assert a == b

    def test_fee_exceeds_margin(self):
        assert pre_trade_liquidation_price(100_000000, 100, 1_000_000, 500, 30, "long") == 100_000000
        assert pre_trade_liquidation_price(100_000000, 100, 1_000_000, 500, 30, "short") == 100_000000

    def test_zero_sentinels(self):
        assert pre_trade_liquidation_price(0, 1, 1, 500, 30, "long") == 0
        assert pre_trade_liquidation_price(1, 0, 1, 500, 30, "long") == 0
        assert pre_trade_liquidation_price(1, 1, 0, 500, 30, "long") == 0

    def test_or_raise(self):
        with pytest.raises(DegenerateInputError, match="margin"):
            pre_trade_liquidation_price_or_raise(100_000000, 0, 100, 500, 30, "long")

    def test_bad_direction(self):
        with pytest.raises(ValueError):
            pre_trade_liquidation_price(100_000000, 1_000000, 100, 500, 30, "sideways")


# ---------------------------------------------------------------------------
# Fees / entry
# ---------------------------------------------------------------------------

class TestFees:
    def test_trading_fee(self):
        assert trading_fee(1_000_000, 30) == 3_000

    def test_trading_fee_truncates(self):
        assert trading_fee(999, 30) == 2
        assert trading_fee(-1_000_001, 30) == -3_000

    def test_estimated_entry(self):
        assert estimated_entry_price(100_000000, 30, "long") == 100_300_000
        assert estimated_entry_price(100_000000, 30, Direction.SHORT) == 99_700_000
        assert estimated_entry_price(0, 30, "long") == 0

    def test_estimated_entry_or_raise(self):
        with pytest.raises(DegenerateInputError):
            estimated_entry_price_or_raise(0, 30, "long")
        assert estimated_entry_price_or_raise(100_000000, 0, "short") == 100_000000

    def test_pnl_bps(self):
        assert pnl_bps(50, 1000) == 500
        assert pnl_bps(-1, 3) == -3333
        assert pnl_bps(10, 0) == 0


# ---------------------------------------------------------------------------
# Funding
# ---------------------------------------------------------------------------

class TestFunding:
    def test_slots_per_year(self):
        assert SLOTS_PER_YEAR == 78_840_000

    def test_annualized(self):
        assert annualized_funding_rate(1) == 788_400
        assert annualized_funding_rate(0) == 0
        assert annualized_funding_rate(-2) == -1_576_800

    def test_hourly(self):
        assert hourly_funding_bps(2) == 18_000
        assert hourly_funding_bps(-1) == -9_000


class TestDirection:
    def test_parse(self):
        assert Direction.parse("LONG") is Direction.LONG
        assert Direction.parse(" short ") is Direction.SHORT
        assert Direction.parse(Direction.LONG) is Direction.LONG

    def test_sign(self):
        assert Direction.LONG.sign == 1
        assert Direction.SHORT.sign == -1
