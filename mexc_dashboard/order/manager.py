"""
Order placement and cancellation for stored exchange accounts.

Each call decrypts the account secret, builds a short-lived client and
returns the exchange outcome as an ``ExchangeResult``.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from ..api.client import MexcAPIClient
from ..api.results import ErrorKind, ExchangeResult
from ..config.settings import TradingSettings
from ..data.models import ExchangeAccount, OrderRequest, OrderSide, OrderType
from ..risk.rate_gate import AccountRateGate, rate_key
from ..security.encryption import EncryptionCodec


logger = logging.getLogger(__name__)


ClientFactory = Callable[[str, str], MexcAPIClient]


@dataclass
class OrderValidationResult:
    """Result of checking an order against request rules and pair limits."""

    is_valid: bool
    error_message: Optional[str] = None
    min_quantity: Optional[float] = None
    min_notional: Optional[float] = None


class OrderManager:
    """
    Places and cancels orders on behalf of stored accounts.

    Order submission is throttled per account by an ``AccountRateGate``.
    Secret decryption failures are reported with ``ErrorKind.ENCRYPTION`` so
    they are never confused with network errors.
    """

    def __init__(self, codec: EncryptionCodec, rate_gate: AccountRateGate,
                 settings: Optional[TradingSettings] = None,
                 client_factory: Optional[ClientFactory] = None):
        """
        Args:
            codec: Codec used to decrypt stored secrets
            rate_gate: Gate shared by all order submissions of the process
            settings: Order limits and trading pair rules
            client_factory: Builds a client from ``(api_key, api_secret)``
        """
        self.codec = codec
        self.rate_gate = rate_gate
        self.settings = settings or TradingSettings()
        self.client_factory = client_factory or (lambda key, secret: MexcAPIClient(key, secret))

    def validate_order(self, order: OrderRequest) -> OrderValidationResult:
        problem = order.validation_error()
        if problem:
            return OrderValidationResult(is_valid=False, error_message=problem)

        pair = self.settings.trading_pairs.get(order.symbol)
        if pair is None:
            return OrderValidationResult(is_valid=True)

        if order.quantity < pair.min_quantity:
            return OrderValidationResult(
                is_valid=False,
                error_message="Quantity below minimum",
                min_quantity=pair.min_quantity,
                min_notional=pair.min_notional
            )

        if order.notional is not None and order.notional < pair.min_notional:
            return OrderValidationResult(
                is_valid=False,
                error_message="Order value below minimum notional",
                min_quantity=pair.min_quantity,
                min_notional=pair.min_notional
            )

        return OrderValidationResult(is_valid=True)

    def check_order_parameters(self, symbol: str, price: Optional[float] = None) -> OrderValidationResult:
        """
        Dry-run the smallest order allowed for ``symbol`` without sending it.

        Unknown symbols fall back to the default symbol's pair. Without a
        price the smallest order is checked as a market order, so only the
        quantity rule applies.
        """
        pair = (self.settings.trading_pairs.get(symbol.upper())
                or self.settings.trading_pairs.get(self.settings.default_symbol))
        if pair is None:
            return OrderValidationResult(is_valid=False, error_message=f"No trading pair configured for {symbol}")

        order = OrderRequest(
            symbol=pair.symbol,
            side=OrderSide.BUY,
            type=OrderType.MARKET if price is None else OrderType.LIMIT,
            quantity=pair.min_quantity,
            price=price
        )
        return self.validate_order(order)

    def _client_for(self, account: ExchangeAccount) -> Tuple[Optional[MexcAPIClient], Optional[ExchangeResult]]:
        """Return ``(client, None)``, or ``(None, failure)`` when the stored secret cannot be decrypted."""
        secret = self.codec.decrypt(account.encrypted_secret)
        if not secret.success:
            logger.error(f"Failed to decrypt secret for account {account.account_id}: {secret.error}")
            return None, ExchangeResult.fail(
                f"Failed to decrypt account secret: {secret.error}",
                code=secret.code,
                kind=ErrorKind.ENCRYPTION
            )
        return self.client_factory(account.api_key, secret.data), None

    def place_order(self, account: ExchangeAccount, order: OrderRequest) -> ExchangeResult:
        if not account.is_active:
            return ExchangeResult.fail("Account not found or inactive", kind=ErrorKind.INVALID_REQUEST)

        validation = self.validate_order(order)
        if not validation.is_valid:
            logger.warning(f"Rejected order for {account.account_id}: {validation.error_message}")
            return ExchangeResult.fail(validation.error_message, kind=ErrorKind.INVALID_REQUEST)

        key = rate_key(account.account_id, "orders")
        if not self.rate_gate.check_and_increment(key, self.settings.max_orders_per_hour,
                                                  self.settings.order_window_ms):
            return ExchangeResult.fail(
                f"Rate limit exceeded. Maximum {self.settings.max_orders_per_hour} orders per hour.",
                kind=ErrorKind.RATE_LIMITED
            )

        client, failure = self._client_for(account)
        if failure:
            return failure

        try:
            result = client.place_order(order)
        finally:
            client.close()

        if result.success:
            account.touch()
            logger.info(f"Order placed for {account.account_id}: {order.side.value} {order.quantity} "
                        f"{order.symbol} at {order.price or 'market price'}")
        else:
            logger.error(f"Order placement failed for {account.account_id}: {result.error}")
        return result

    def cancel_all_orders(self, account: ExchangeAccount, symbol: str,
                          side: Optional[Union[str, OrderSide]] = None) -> ExchangeResult:
        """
        Cancel open orders on ``symbol``.

        Without ``side`` every open order is cancelled in one call; with a side,
        open orders of that side are cancelled one by one and the cancelled
        order payloads are returned.
        """
        client, failure = self._client_for(account)
        if failure:
            return failure

        try:
            if side is None:
                result = client.cancel_all_orders(symbol)
            else:
                result = self._cancel_side(client, symbol, OrderSide(str(getattr(side, 'value', side)).upper()))
        finally:
            client.close()

        if result.success:
            account.touch()
            logger.info(f"Canceled {side.value if isinstance(side, OrderSide) else side or 'all'} "
                        f"orders on {symbol.upper()} for {account.account_id}")
        return result

    def _cancel_side(self, client: MexcAPIClient, symbol: str, side: OrderSide) -> ExchangeResult:
        open_orders = client.get_open_orders(symbol)
        if not open_orders.success:
            return open_orders

        matching = [
            o for o in (open_orders.data or [])
            if isinstance(o, dict) and str(o.get('side', '')).upper() == side.value
        ]

        canceled: List[dict] = []
        for order in matching:
            result = client.cancel_order(symbol, str(order['orderId']))
            if not result.success:
                return dataclasses.replace(result, data=canceled)
            canceled.append(result.data)

        return ExchangeResult.ok(canceled)
