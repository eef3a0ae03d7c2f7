"""Tests for percolator/abi/pda.py: seed schemes are deterministic and distinct."""

import pytest
from solders.pubkey import Pubkey

from percolator.abi.addresses import ASSOCIATED_TOKEN_PROGRAM_ID, PYTH_PUSH_ORACLE_PROGRAM_ID, TOKEN_PROGRAM_ID
from percolator.abi.pda import (
    derive_ata,
    derive_lp_pda,
    derive_pyth_price_feed,
    derive_vault_authority,
    lp_index_seed,
)
from percolator.errors import FieldOutOfRange, InvalidAddressLength
from tests.slab_fixtures import key

PROGRAM = key(240)
SLAB = key(200)


class TestVaultAuthority:
    def test_deterministic(self):
        assert derive_vault_authority(PROGRAM, SLAB) == derive_vault_authority(PROGRAM, SLAB)

    def test_matches_seed_scheme(self):
        expected = Pubkey.find_program_address([b"vault", bytes(SLAB)], PROGRAM)
        assert derive_vault_authority(PROGRAM, SLAB) == expected

    def test_accepts_strings(self):
        assert derive_vault_authority(str(PROGRAM), str(SLAB)) == derive_vault_authority(PROGRAM, SLAB)

    def test_off_curve_and_bump(self):
        pda, bump = derive_vault_authority(PROGRAM, SLAB)
        assert 0 <= bump <= 255
        assert not pda.is_on_curve()

    def test_depends_on_slab(self):
        assert derive_vault_authority(PROGRAM, SLAB)[0] != derive_vault_authority(PROGRAM, key(201))[0]


class TestLpPda:
    def test_index_is_big_endian(self):
        assert lp_index_seed(1) == b"\x00\x01"
        assert lp_index_seed(0x0102) == b"\x01\x02"

    def test_matches_seed_scheme(self):
        expected = Pubkey.find_program_address([b"lp", bytes(SLAB), b"\x01\x02"], PROGRAM)
        assert derive_lp_pda(PROGRAM, SLAB, 0x0102) == expected

    def test_deterministic_and_distinct(self):
        a = derive_lp_pda(PROGRAM, SLAB, 0)
        assert a == derive_lp_pda(PROGRAM, SLAB, 0)
        assert a[0] != derive_lp_pda(PROGRAM, SLAB, 1)[0]
        assert a[0] != derive_vault_authority(PROGRAM, SLAB)[0]

    @pytest.mark.parametrize("idx", [-1, 0x10000, True, "1"])
    def test_bad_index(self, idx):
        with pytest.raises(FieldOutOfRange):
            derive_lp_pda(PROGRAM, SLAB, idx)

    def test_bad_slab(self):
        with pytest.raises(InvalidAddressLength):
            derive_lp_pda(PROGRAM, b"\x00" * 5, 0)


class TestAta:
    def test_matches_seed_scheme(self):
        owner, mint = key(30), key(31)
        expected, _ = Pubkey.find_program_address(
            [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)], ASSOCIATED_TOKEN_PROGRAM_ID
        )
        assert derive_ata(owner, mint) == expected

    def test_accepts_strings(self):
        owner = Pubkey.default()
        mint = Pubkey.from_string("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")
        assert derive_ata(owner, mint) == derive_ata(str(owner), str(mint))


class TestPythFeed:
    def test_sol_usd(self):
        feed = "ef0d8b6fda2ceba41da15d4095d1da392a0d2f8ed0c6c7bc0f4cfac8c280b56d"
        pda, _ = derive_pyth_price_feed(feed)
        assert str(pda) == "7UVimffxr9ow1uXYxsr4LHAcV58mLzhmwaeKvJ1pjLiE"

    def test_seed_scheme(self):
        feed = bytes(range(32))
        expected = Pubkey.find_program_address([b"\x00\x00", feed], PYTH_PUSH_ORACLE_PROGRAM_ID)
        assert derive_pyth_price_feed(feed) == expected
        assert derive_pyth_price_feed("0x" + feed.hex()) == expected

    def test_shard_changes_address(self):
        feed = bytes(range(32))
        assert derive_pyth_price_feed(feed, 1)[0] != derive_pyth_price_feed(feed, 0)[0]

    def test_bad_feed(self):
        with pytest.raises(InvalidAddressLength):
            derive_pyth_price_feed("abc")
