"""Data models for exchange accounts, orders and balances."""

from .models import (
    AccountStatus,
    Balance,
    ExchangeAccount,
    OrderRequest,
    OrderSide,
    OrderType,
    mask_key_for_display,
)

__all__ = [
    'AccountStatus',
    'Balance',
    'ExchangeAccount',
    'OrderRequest',
    'OrderSide',
    'OrderType',
    'mask_key_for_display',
]
