"""Unit tests for the per-account rate gate."""

import threading

from mexc_dashboard.risk.rate_gate import AccountRateGate, InMemoryRateWindowStore, rate_key


HOUR_MS = 60 * 60 * 1000


class TestAccountRateGate:

    def test_allows_up_to_limit(self, fake_clock):
        gate = AccountRateGate(clock=fake_clock)

        results = [gate.check_and_increment("acc-1:orders", 3, HOUR_MS) for _ in range(4)]

        assert results == [True, True, True, False]

    def test_window_resets_after_expiry(self, fake_clock):
        gate = AccountRateGate(clock=fake_clock)
        for _ in range(2):
            gate.check_and_increment("k", 2, 1000)
        assert not gate.check_and_increment("k", 2, 1000)

        fake_clock.advance(1001)

        assert gate.check_and_increment("k", 2, 1000)
        assert gate.remaining("k", 2, 1000) == 1

    def test_window_boundary_is_inclusive(self, fake_clock):
        gate = AccountRateGate(clock=fake_clock)
        gate.check_and_increment("k", 1, 1000)

        fake_clock.advance(1000)

        assert not gate.check_and_increment("k", 1, 1000)

    def test_keys_are_independent(self, fake_clock):
        gate = AccountRateGate(clock=fake_clock)
        assert gate.check_and_increment(rate_key("a"), 1, HOUR_MS)
        assert gate.check_and_increment(rate_key("b"), 1, HOUR_MS)
        assert not gate.check_and_increment(rate_key("a"), 1, HOUR_MS)

    def test_remaining(self, fake_clock):
        gate = AccountRateGate(clock=fake_clock)
        assert gate.remaining("k", 5, HOUR_MS) == 5
        gate.check_and_increment("k", 5, HOUR_MS)
        gate.check_and_increment("k", 5, HOUR_MS)
        assert gate.remaining("k", 5, HOUR_MS) == 3

    def test_reset(self, fake_clock):
        gate = AccountRateGate(clock=fake_clock)
        gate.check_and_increment("k", 1, HOUR_MS)
        gate.reset("k")
        assert gate.check_and_increment("k", 1, HOUR_MS)

    def test_gates_share_store(self, fake_clock):
        store = InMemoryRateWindowStore()
        first = AccountRateGate(store, clock=fake_clock)
        second = AccountRateGate(store, clock=fake_clock)

        assert first.check_and_increment("k", 1, HOUR_MS)
        assert not second.check_and_increment("k", 1, HOUR_MS)
        assert len(store) == 1

    def test_concurrent_increments_never_exceed_limit(self, fake_clock):
        gate = AccountRateGate(clock=fake_clock)
        allowed = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                if gate.check_and_increment("shared", 50, HOUR_MS):
                    with lock:
                        allowed.append(1)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(allowed) == 50


def test_rate_key_format():
    assert rate_key("acc-1") == "acc-1:orders"
    assert rate_key("acc-1", "cancels") == "acc-1:cancels"


def test_store_clear():
    store = InMemoryRateWindowStore()
    gate = AccountRateGate(store, clock=lambda: 0)
    gate.check_and_increment("k", 1, 1000)
    store.clear()
    assert len(store) == 0
