"""Tests for percolator/integration/token_meta.py: placeholders, LRU and TTL."""

import pytest

from percolator.errors import BufferTooSmall
from percolator.integration.token_meta import TokenMeta, TokenMetaCache
from tests.slab_fixtures import key


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _meta(symbol):
    return TokenMeta(decimals=9, symbol=symbol, name=symbol.title())


class TestTokenMeta:
    def test_placeholder(self):
        meta = TokenMeta.placeholder("A16Gd8AfaPnG6rohE6iPFDf6mr9gk519d6aMUJAperc")
        assert meta == TokenMeta(decimals=6, symbol="A16G...", name="Unknown Token")

    def test_from_mint_account(self):
        data = bytearray(82)
        data[44] = 9
        meta = TokenMeta.from_mint_account(key(3), bytes(data), symbol="SOL")
        assert meta.decimals == 9
        assert meta.symbol == "SOL"
        assert meta.name == "Unknown Token"

    def test_from_short_mint_account(self):
        with pytest.raises(BufferTooSmall):
            TokenMeta.from_mint_account(key(3), b"\x00" * 10)


class TestCache:
    def test_put_get(self):
        cache = TokenMetaCache()
        cache.put(key(1), _meta("aaa"))
        assert cache.get(str(key(1))) == _meta("aaa")
        assert cache.get(key(2)) is None
        assert len(cache) == 1

    def test_lru_eviction(self):
        cache = TokenMetaCache(max_entries=2)
        cache.put(key(1), _meta("a"))
        cache.put(key(2), _meta("b"))
        cache.get(key(1))
        cache.put(key(3), _meta("c"))
        assert cache.get(key(2)) is None
        assert cache.get(key(1)) == _meta("a")
        assert len(cache) == 2

    def test_ttl(self):
        clock = FakeClock()
        cache = TokenMetaCache(ttl_seconds=10, clock=clock)
        cache.put(key(1), _meta("a"))
        clock.now = 9.9
        assert cache.get(key(1)) is not None
        clock.now = 10.0
        assert cache.get(key(1)) is None
        assert len(cache) == 0

    def test_get_or_load(self):
        calls = []

        def loader(mint):
            calls.append(mint)
            return _meta("x")

        cache = TokenMetaCache()
        assert cache.get_or_load(key(4), loader) == _meta("x")
        assert cache.get_or_load(bytes(key(4)), loader) == _meta("x")
        assert calls == [key(4)]

    def test_loader_error_not_cached(self):
        def loader(mint):
            raise RuntimeError("rpc down")

        cache = TokenMetaCache()
        with pytest.raises(RuntimeError):
            cache.get_or_load(key(4), loader)
        assert len(cache) == 0

    def test_invalidate_and_clear(self):
        cache = TokenMetaCache()
        cache.put(key(1), _meta("a"))
        cache.put(key(2), _meta("b"))
        cache.invalidate(key(1))
        cache.invalidate(key(9))
        assert cache.get(key(1)) is None
        cache.clear()
        assert len(cache) == 0

    def test_instances_are_independent(self):
        a, b = TokenMetaCache(), TokenMetaCache()
        a.put(key(1), _meta("a"))
        assert b.get(key(1)) is None

    @pytest.mark.parametrize("kwargs", [{"max_entries": 0}, {"ttl_seconds": 0}])
    def test_bad_bounds(self, kwargs):
        with pytest.raises(ValueError):
            TokenMetaCache(**kwargs)
