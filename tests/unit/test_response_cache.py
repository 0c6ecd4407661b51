"""Unit tests for the public market data response cache."""

from mexc_dashboard.api.cache import DEFAULT_TTL_MS, InMemoryResponseCache


TICKER = {'symbol': 'SOLUSDT', 'lastPrice': '150.25'}


class TestInMemoryResponseCache:

    def test_miss_on_empty_cache(self, fake_clock):
        cache = InMemoryResponseCache(clock=fake_clock)
        assert cache.get('SOLUSDT') is None

    def test_hit_within_ttl(self, fake_clock):
        cache = InMemoryResponseCache(clock=fake_clock)
        cache.put('SOLUSDT', TICKER)

        fake_clock.advance(DEFAULT_TTL_MS - 1)

        assert cache.get('SOLUSDT') == TICKER

    def test_key_is_case_insensitive(self, fake_clock):
        cache = InMemoryResponseCache(clock=fake_clock)
        cache.put('solusdt', TICKER)
        assert cache.get('SolUsdt') == TICKER

    def test_entry_expires_at_ttl(self, fake_clock):
        cache = InMemoryResponseCache(clock=fake_clock)
        cache.put('SOLUSDT', TICKER)

        fake_clock.advance(DEFAULT_TTL_MS)

        assert cache.get('SOLUSDT') is None
        assert len(cache) == 0

    def test_put_refreshes_entry(self, fake_clock):
        cache = InMemoryResponseCache(ttl_ms=100, clock=fake_clock)
        cache.put('SOLUSDT', {'lastPrice': '1'})
        fake_clock.advance(80)
        cache.put('SOLUSDT', {'lastPrice': '2'})
        fake_clock.advance(80)

        assert cache.get('SOLUSDT') == {'lastPrice': '2'}

    def test_symbols_cached_separately(self, fake_clock):
        cache = InMemoryResponseCache(clock=fake_clock)
        cache.put('SOLUSDT', TICKER)
        assert cache.get('AGDUSDT') is None

    def test_fresh_instances_are_isolated(self, fake_clock):
        first = InMemoryResponseCache(clock=fake_clock)
        first.put('SOLUSDT', TICKER)

        second = InMemoryResponseCache(clock=fake_clock)

        assert second.get('SOLUSDT') is None
        assert first.get('SOLUSDT') == TICKER

    def test_clear(self, fake_clock):
        cache = InMemoryResponseCache(clock=fake_clock)
        cache.put('SOLUSDT', TICKER)
        cache.clear()
        assert len(cache) == 0
