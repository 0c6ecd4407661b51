"""Order placement and cancellation for stored accounts."""

from .manager import OrderManager, OrderValidationResult

__all__ = ['OrderManager', 'OrderValidationResult']
