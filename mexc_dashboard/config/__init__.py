"""Configuration loading, validation and hot reload."""

from .manager import ConfigManager, ConfigValidationError
from .settings import (
    ApiSettings,
    AppSettings,
    SecuritySettings,
    TradingPair,
    TradingSettings,
    ValidationSettings,
)

__all__ = [
    'ConfigManager',
    'ConfigValidationError',
    'ApiSettings',
    'AppSettings',
    'SecuritySettings',
    'TradingPair',
    'TradingSettings',
    'ValidationSettings',
]
