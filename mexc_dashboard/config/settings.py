"""Typed views over the loaded configuration mapping."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ApiSettings:
    base_url: str = "https://api.mexc.com"
    timeout: float = 15.0
    user_agent: str = "MEXC-Dashboard/0.1"
    ticker_cache_ttl_ms: int = 500

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApiSettings':
        return cls(
            base_url=data.get('base_url', cls.base_url),
            timeout=float(data.get('timeout', cls.timeout)),
            user_agent=data.get('user_agent', cls.user_agent),
            ticker_cache_ttl_ms=int(data.get('ticker_cache_ttl_ms', cls.ticker_cache_ttl_ms)),
        )


@dataclass
class ValidationSettings:
    """Parameters of the credential validation protocol."""

    probe_symbols: List[str] = field(default_factory=lambda: ["SOLUSDT", "USDTBRL", "AGDUSDT"])
    required_permissions: List[str] = field(default_factory=lambda: ["SPOT"])
    reference_asset: str = "USDT"
    min_notional: float = 5.0
    max_workers: int = 4

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ValidationSettings':
        defaults = cls()
        return cls(
            probe_symbols=[s.upper() for s in data.get('probe_symbols', defaults.probe_symbols)],
            required_permissions=list(data.get('required_permissions', defaults.required_permissions)),
            reference_asset=data.get('reference_asset', defaults.reference_asset).upper(),
            min_notional=float(data.get('min_notional', defaults.min_notional)),
            max_workers=int(data.get('max_workers', defaults.max_workers)),
        )


@dataclass
class TradingPair:
    symbol: str
    min_quantity: float
    min_notional: float
    tick_size: float
    step_size: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TradingPair':
        return cls(
            symbol=data['symbol'].upper(),
            min_quantity=float(data['min_quantity']),
            min_notional=float(data['min_notional']),
            tick_size=float(data.get('tick_size', 0)),
            step_size=float(data.get('step_size', 0)),
        )


def _default_pairs() -> Dict[str, TradingPair]:
    return {
        'AGDUSDT': TradingPair('AGDUSDT', min_quantity=1, min_notional=5, tick_size=0.00001, step_size=1),
        'USDTBRL': TradingPair('USDTBRL', min_quantity=0.1, min_notional=10, tick_size=0.001, step_size=0.1),
        'SOLUSDT': TradingPair('SOLUSDT', min_quantity=0.01, min_notional=5, tick_size=0.01, step_size=0.01),
    }


@dataclass
class TradingSettings:
    max_orders_per_hour: int = 100
    order_window_ms: int = 60 * 60 * 1000
    default_symbol: str = "SOLUSDT"
    trading_pairs: Dict[str, TradingPair] = field(default_factory=_default_pairs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TradingSettings':
        defaults = cls()
        pairs = data.get('trading_pairs')
        return cls(
            max_orders_per_hour=int(data.get('max_orders_per_hour', defaults.max_orders_per_hour)),
            order_window_ms=int(data.get('order_window_ms', defaults.order_window_ms)),
            default_symbol=data.get('default_symbol', defaults.default_symbol).upper(),
            trading_pairs=(
                {p.symbol: p for p in (TradingPair.from_dict(v) for v in pairs.values())}
                if pairs else defaults.trading_pairs
            ),
        )


@dataclass
class SecuritySettings:
    secret_env: str = "ENCRYPTION_SECRET"
    kdf_salt: str = "salt"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SecuritySettings':
        return cls(
            secret_env=data.get('secret_env', cls.secret_env),
            kdf_salt=data.get('kdf_salt', cls.kdf_salt),
        )


@dataclass
class AppSettings:
    api: ApiSettings = field(default_factory=ApiSettings)
    validation: ValidationSettings = field(default_factory=ValidationSettings)
    trading: TradingSettings = field(default_factory=TradingSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'AppSettings':
        return cls(
            api=ApiSettings.from_dict(config.get('api', {})),
            validation=ValidationSettings.from_dict(config.get('validation', {})),
            trading=TradingSettings.from_dict(config.get('trading', {})),
            security=SecuritySettings.from_dict(config.get('security', {})),
        )
