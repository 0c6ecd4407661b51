"""Order submission throttling."""

from .rate_gate import AccountRateGate, InMemoryRateWindowStore, RateWindow, rate_key

__all__ = ['AccountRateGate', 'InMemoryRateWindowStore', 'RateWindow', 'rate_key']
