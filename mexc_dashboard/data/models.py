"""
Data models shared between the exchange client, the validator and the
order service.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional


MASKED_KEY_PREFIX = 10


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    LIMIT = "LIMIT"
    MARKET = "MARKET"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


def _to_decimal(value: Any) -> Optional[Decimal]:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None


@dataclass
class Balance:
    """Single asset balance as reported by the exchange."""

    asset: str
    free: str
    locked: str

    @property
    def free_amount(self) -> Decimal:
        return _to_decimal(self.free) or Decimal("0")

    @property
    def locked_amount(self) -> Decimal:
        return _to_decimal(self.locked) or Decimal("0")

    def is_nonzero(self) -> bool:
        return self.free_amount > 0 or self.locked_amount > 0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Optional['Balance']:
        """
        Build a balance from an exchange payload entry.

        Returns None when the entry has no asset or its amounts cannot be parsed.
        """
        if not isinstance(payload, dict) or not payload.get('asset'):
            return None

        free = payload.get('free', '0')
        locked = payload.get('locked', '0')
        if _to_decimal(free) is None or _to_decimal(locked) is None:
            return None

        return cls(asset=str(payload['asset']), free=str(free), locked=str(locked))

    def to_dict(self) -> Dict[str, str]:
        return {'asset': self.asset, 'free': self.free, 'locked': self.locked}


@dataclass
class OrderRequest:
    """Order submitted by the dashboard for a single account."""

    symbol: str
    side: OrderSide
    type: OrderType
    quantity: float
    price: Optional[float] = None

    def __post_init__(self):
        self.symbol = self.symbol.upper() if self.symbol else self.symbol
        if isinstance(self.side, str) and not isinstance(self.side, OrderSide):
            self.side = OrderSide(self.side.upper())
        if isinstance(self.type, str) and not isinstance(self.type, OrderType):
            self.type = OrderType(self.type.upper())

    def validation_error(self) -> Optional[str]:
        """Return a human readable reason the request is invalid, or None."""
        if not self.symbol:
            return "Symbol is required"
        if self.quantity is None or self.quantity <= 0:
            return "Quantity must be greater than 0"
        if self.type == OrderType.LIMIT and not self.price:
            return "Price is required for limit orders"
        if self.price is not None and self.price <= 0:
            return "Price must be greater than 0"
        return None

    def validate(self) -> bool:
        return self.validation_error() is None

    @property
    def notional(self) -> Optional[float]:
        if self.price is None:
            return None
        return self.price * self.quantity


@dataclass
class ExchangeAccount:
    """
    Stored exchange account record.

    The secret is kept only as an encryption envelope; it is decrypted
    transiently whenever an authenticated client is needed.
    """

    account_id: str
    account_name: str
    api_key: str
    encrypted_secret: str
    token_pair: str
    status: AccountStatus = AccountStatus.ACTIVE
    vpn_location: Optional[str] = None
    last_activity: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if isinstance(self.status, str) and not isinstance(self.status, AccountStatus):
            self.status = AccountStatus(self.status.lower())

    @property
    def masked_key(self) -> str:
        return mask_key_for_display(self.api_key)

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    def touch(self, when: Optional[datetime] = None) -> None:
        self.last_activity = when or datetime.now()

    def to_display_dict(self) -> Dict[str, Any]:
        """Account fields safe to hand to the UI."""
        return {
            'account_id': self.account_id,
            'account_name': self.account_name,
            'api_key': self.masked_key,
            'token_pair': self.token_pair,
            'status': self.status.value,
            'vpn_location': self.vpn_location,
            'last_activity': self.last_activity.isoformat() if self.last_activity else None,
            'created_at': self.created_at.isoformat(),
        }


def mask_key_for_display(api_key: str) -> str:
    return (api_key or '')[:MASKED_KEY_PREFIX] + "***"
