"""Tests for percolator/abi/accounts.py: role order, flags, solders assembly."""

import pytest
from solders.instruction import AccountMeta, Instruction

from percolator.abi.accounts import ACCOUNT_ROLES, account_roles, build_account_metas, build_instruction
from percolator.abi.addresses import SYSVAR_CLOCK_ID, TOKEN_PROGRAM_ID
from percolator.abi.instructions import Op, encode_instruction
from percolator.errors import AccountCountMismatch, EncodeError, InvalidAddressLength, UnknownOperation
from tests.slab_fixtures import key

PROGRAM = key(240)


def _names(op):
    return [r.name for r in account_roles(op)]


class TestRoleTables:
    def test_every_op_has_roles(self):
        assert set(ACCOUNT_ROLES) == set(Op)

    def test_deposit(self):
        assert _names("deposit_collateral") == ["user", "slab", "user_ata", "vault", "token_program", "clock"]
        user, slab, ata, vault, token, clock = account_roles("deposit_collateral")
        assert user.is_signer and user.is_writable
        assert not slab.is_signer and slab.is_writable
        assert ata.is_writable and vault.is_writable
        assert not token.is_writable and not clock.is_writable

    def test_trade_cpi(self):
        assert _names("trade_cpi") == [
            "user", "lp_owner", "slab", "clock", "oracle", "matcher_program", "matcher_context", "lp_pda",
        ]
        roles = {r.name: r for r in account_roles("trade_cpi")}
        assert roles["user"].is_signer
        assert not roles["lp_owner"].is_signer
        assert roles["matcher_context"].is_writable
        assert not roles["lp_pda"].is_signer

    def test_trade_no_cpi_both_sign(self):
        roles = account_roles(Op.TRADE_NO_CPI)
        assert [r.is_signer for r in roles] == [True, True, False, False, False]

    def test_withdraw_order(self):
        assert _names("withdraw_collateral") == [
            "user", "slab", "vault", "user_ata", "vault_authority", "token_program", "clock", "oracle",
        ]
        assert _names("close_account") == _names("withdraw_collateral")

    def test_crank_like(self):
        for op in ("keeper_crank", "liquidate_at_oracle", "admin_force_close"):
            assert _names(op) == ["caller", "slab", "clock", "oracle"]

    def test_admin_ops(self):
        for op in ("update_admin", "update_config", "set_oracle_price_cap", "resolve_market", "update_risk_params"):
            admin, slab = account_roles(op)
            assert admin.is_signer and not admin.is_writable
            assert slab.is_writable

    def test_close_slab_admin_writable(self):
        admin, _ = account_roles("close_slab")
        assert admin.is_signer and admin.is_writable

    def test_init_market_length(self):
        assert len(account_roles("init_market")) == 9
        assert _names("init_market")[-1] == "system_program"

    def test_unknown(self):
        with pytest.raises(UnknownOperation):
            account_roles("warp")


class TestBuild:
    def test_positional(self):
        addrs = [key(10), key(11), key(12), key(13), TOKEN_PROGRAM_ID, SYSVAR_CLOCK_ID]
        metas = build_account_metas("deposit_collateral", addrs)
        assert metas[0] == AccountMeta(key(10), True, True)
        assert metas[1] == AccountMeta(key(11), False, True)
        assert metas[5] == AccountMeta(SYSVAR_CLOCK_ID, False, False)

    def test_by_name(self):
        named = {"authority": str(key(20)), "slab": bytes(key(21))}
        metas = build_account_metas("push_oracle_price", named)
        assert [m.pubkey for m in metas] == [key(20), key(21)]
        assert metas[0].is_signer and not metas[0].is_writable

    def test_count_mismatch(self):
        with pytest.raises(AccountCountMismatch) as exc:
            build_account_metas("keeper_crank", [key(1), key(2)])
        assert exc.value.expected == 4
        assert exc.value.actual == 2

    def test_missing_role(self):
        with pytest.raises(EncodeError, match="oracle"):
            build_account_metas("keeper_crank", {"caller": key(1), "slab": key(2), "clock": SYSVAR_CLOCK_ID})

    def test_bad_address(self):
        with pytest.raises(InvalidAddressLength):
            build_account_metas("close_slab", [key(1), b"\x00" * 3])

    def test_instruction(self):
        fields = {"user_idx": 2, "amount": 10}
        addrs = [key(10), key(11), key(12), key(13), TOKEN_PROGRAM_ID, SYSVAR_CLOCK_ID]
        ix = build_instruction(PROGRAM, "deposit_collateral", fields, addrs)
        assert isinstance(ix, Instruction)
        assert ix.program_id == PROGRAM
        assert bytes(ix.data) == encode_instruction("deposit_collateral", fields)
        assert list(ix.accounts) == build_account_metas("deposit_collateral", addrs)

    def test_instruction_no_fields(self):
        ix = build_instruction(str(PROGRAM), "close_slab", None, [key(1), key(2)])
        assert bytes(ix.data) == bytes([13])
