"""Backend contract definitions."""

from __future__ import annotations

from typing import Protocol

from tradedash.domain.models import (
    Asset,
    MarketSnapshot,
    OperationResult,
    Order,
    OrderRequest,
    Portfolio,
    PricePoint,
)


class MarketBackend(Protocol):
    """Interface for the trading backend the dashboard talks to."""

    def fetch_prices(self) -> MarketSnapshot:
        """Return the current price of every listed symbol."""

    def fetch_price_history(self, symbol: str) -> list[PricePoint]:
        """Return historical prices for ``symbol`` in time order."""

    def fetch_assets(self) -> list[Asset]:
        """Return tradable asset listings."""

    def fetch_portfolio(self, user_id: str) -> Portfolio:
        """Return the user's cash balance and holdings."""

    def fetch_portfolio_value(self, user_id: str) -> float:
        """Return the backend-computed total portfolio value."""

    def fetch_orders(self, user_id: str) -> list[Order]:
        """Return the user's orders, most recent first."""

    def submit_order(self, request: OrderRequest) -> OperationResult:
        """Submit a validated order."""

    def cancel_order(self, user_id: str, order_id: str) -> OperationResult:
        """Request cancellation of an open order."""

    def deposit_cash(self, user_id: str, amount: float) -> None:
        """Add cash to the user's balance."""

    def withdraw_cash(self, user_id: str, amount: float) -> None:
        """Remove cash from the user's balance."""
