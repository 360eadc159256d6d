"""Domain models and event types."""

from .events import DashboardEvent
from .models import (
    CASH_KEY,
    Asset,
    CashAction,
    MarketSnapshot,
    OperationResult,
    Order,
    OrderIntent,
    OrderRequest,
    OrderSide,
    OrderStatus,
    OrderType,
    Portfolio,
    PriceDelta,
    PriceDirection,
    PricePoint,
    PriceQuote,
    RiskLevel,
    RiskProfile,
    Symbol,
    Valuation,
)

__all__ = [
    "CASH_KEY",
    "Asset",
    "CashAction",
    "DashboardEvent",
    "MarketSnapshot",
    "OperationResult",
    "Order",
    "OrderIntent",
    "OrderRequest",
    "OrderSide",
    "OrderStatus",
    "OrderType",
    "Portfolio",
    "PriceDelta",
    "PriceDirection",
    "PricePoint",
    "PriceQuote",
    "RiskLevel",
    "RiskProfile",
    "Symbol",
    "Valuation",
]
