"""Core dashboard domain models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

Symbol = str

CASH_KEY = "Cash"


class OrderSide(StrEnum):
    """Supported order directions."""

    BUY = "BUY"
    SELL = "SELL"


class OrderType(StrEnum):
    """Market orders fill at the current price, limit orders at the user's price."""

    MARKET = "MARKET"
    LIMIT = "LIMIT"


class OrderStatus(StrEnum):
    """Backend order lifecycle states."""

    PENDING = "PENDING"
    OPEN = "OPEN"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


class PriceDirection(StrEnum):
    """Direction of a price move between two snapshots."""

    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class CashAction(StrEnum):
    """Cash movements a user can request."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class RiskLevel(StrEnum):
    """Coarse risk tiers."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class PriceQuote:
    """Latest backend price for one symbol."""

    symbol: Symbol
    price: float
    volume: float = 0.0
    low: float | None = None
    high: float | None = None
    net_price: float | None = None
    timestamp: str | None = None


MarketSnapshot = Mapping[Symbol, PriceQuote]


@dataclass(frozen=True)
class PriceDelta:
    """Price change for one symbol across two consecutive snapshots."""

    symbol: Symbol
    old_price: float
    new_price: float
    direction: PriceDirection


@dataclass(frozen=True)
class PricePoint:
    """Single historical price sample."""

    timestamp: datetime
    price: float


@dataclass(frozen=True)
class Asset:
    """Tradable asset listing."""

    symbol: Symbol
    name: str
    asset_type: str
    currency: str = "USD"


@dataclass(frozen=True)
class Portfolio:
    """Read-only copy of a user's cash and holdings."""

    cash_balance: float
    holdings: dict[Symbol, float] = field(default_factory=dict)
    user_id: str = ""


@dataclass(frozen=True)
class Valuation:
    """Monetary breakdown of a portfolio at current prices."""

    position_values: dict[Symbol, float]
    total_value: float
    allocations: dict[str, float]

    @property
    def invested_value(self) -> float:
        return sum(self.position_values.values())


@dataclass(frozen=True)
class RiskProfile:
    """Simplified portfolio risk figures."""

    weighted_volatility: float
    value_at_risk_95: float
    total_value: float = 0.0

    @property
    def value_at_risk_pct(self) -> float:
        if self.total_value <= 0:
            return 0.0
        return self.value_at_risk_95 / self.total_value * 100.0


@dataclass(frozen=True)
class OrderIntent:
    """Unvalidated trade form input.

    ``quantity`` and ``limit_price`` hold whatever the form produced: numbers,
    strings, or ``None`` for an empty field.
    """

    symbol: Symbol
    side: OrderSide | str = OrderSide.BUY
    order_type: OrderType | str = OrderType.MARKET
    quantity: Any = None
    limit_price: Any = None


@dataclass(frozen=True)
class OrderRequest:
    """Validated, backend-ready trade instruction."""

    user_id: str
    symbol: Symbol
    side: OrderSide
    quantity: float
    price: float
    order_type: OrderType

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body expected by the order endpoint."""
        return {
            "userId": self.user_id,
            "symbol": self.symbol,
            "side": self.side.value,
            "quantity": self.quantity,
            "price": self.price,
            "type": self.order_type.value,
        }


@dataclass(frozen=True)
class Order:
    """Backend-owned order record."""

    order_id: str
    symbol: Symbol
    side: OrderSide
    order_type: OrderType
    quantity: float
    price: float
    status: OrderStatus
    created_at: datetime | None = None
    status_reason: str | None = None

    @property
    def is_cancellable(self) -> bool:
        return self.status is OrderStatus.OPEN


@dataclass(frozen=True)
class OperationResult:
    """Backend reply for order submission and cancellation."""

    success: bool
    message: str = ""
    order_id: str | None = None
