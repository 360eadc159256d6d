"""Deterministic in-memory backend with placeholder market data.

Everything fake the dashboard shows lives here: random-walk prices, random
percent-change figures for the market table, and sample transaction risk rows.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from tradedash.domain.models import (
    Asset,
    MarketSnapshot,
    OperationResult,
    Order,
    OrderRequest,
    OrderSide,
    OrderStatus,
    OrderType,
    Portfolio,
    PricePoint,
    PriceQuote,
)
from tradedash.errors import RemoteError

DEMO_ASSETS: tuple[Asset, ...] = (
    Asset(symbol="BTC-USD", name="Bitcoin", asset_type="CRYPTO"),
    Asset(symbol="ETH-USD", name="Ethereum", asset_type="CRYPTO"),
    Asset(symbol="AAPL", name="Apple Inc.", asset_type="STOCK"),
    Asset(symbol="MSFT", name="Microsoft Corporation", asset_type="STOCK"),
    Asset(symbol="AMZN", name="Amazon.com Inc.", asset_type="STOCK"),
    Asset(symbol="GOOGL", name="Alphabet Inc.", asset_type="STOCK"),
    Asset(symbol="GOLD", name="Gold", asset_type="COMMODITY"),
)

DEMO_VOLATILITY = {
    "BTC-USD": 0.03,
    "ETH-USD": 0.04,
    "AAPL": 0.015,
    "MSFT": 0.014,
    "AMZN": 0.018,
    "GOOGL": 0.016,
    "GOLD": 0.01,
}


@dataclass
class _Account:
    cash: float
    holdings: dict[str, float] = field(default_factory=dict)
    orders: list[Order] = field(default_factory=list)


class DemoMarketBackend:
    """Backend stand-in that fills market orders immediately at the current price."""

    def __init__(
        self,
        seed: int | None = None,
        starting_cash: float = 10_000.0,
        advance_on_fetch: bool = True,
    ) -> None:
        self._random = random.Random(seed)
        self.starting_cash = float(starting_cash)
        self.advance_on_fetch = advance_on_fetch
        self._accounts: dict[str, _Account] = {}
        self._prices: dict[str, PriceQuote] = {}
        self._history: dict[str, list[PricePoint]] = {}
        now = datetime.now(tz=UTC)
        for asset in DEMO_ASSETS:
            initial = self._initial_price(asset)
            self._prices[asset.symbol] = self._quote(
                asset.symbol,
                initial,
                volume=self._random.random() * 1_000_000,
                low=initial * 0.98,
                high=initial * 1.02,
                timestamp=now,
            )
            self._history[asset.symbol] = [PricePoint(timestamp=now, price=initial)]

    def fetch_prices(self) -> MarketSnapshot:
        if self.advance_on_fetch:
            self.advance()
        return dict(self._prices)

    def fetch_price_history(self, symbol: str) -> list[PricePoint]:
        self._require_symbol(symbol)
        return list(self._history[symbol])

    def fetch_assets(self) -> list[Asset]:
        return list(DEMO_ASSETS)

    def fetch_portfolio(self, user_id: str) -> Portfolio:
        account = self._account(user_id)
        return Portfolio(
            cash_balance=account.cash,
            holdings=dict(account.holdings),
            user_id=user_id,
        )

    def fetch_portfolio_value(self, user_id: str) -> float:
        account = self._account(user_id)
        invested = sum(
            quantity * self._prices[symbol].price
            for symbol, quantity in account.holdings.items()
            if symbol in self._prices
        )
        return account.cash + invested

    def fetch_orders(self, user_id: str) -> list[Order]:
        return list(reversed(self._account(user_id).orders))

    def submit_order(self, request: OrderRequest) -> OperationResult:
        if request.symbol not in self._prices:
            return OperationResult(success=False, message=f"Unknown symbol: {request.symbol}")
        account = self._account(request.user_id)
        if request.order_type is OrderType.LIMIT:
            order = self._record(account, request, OrderStatus.OPEN, request.price)
            return OperationResult(
                success=True, message="Limit order placed", order_id=order.order_id
            )

        fill_price = self._prices[request.symbol].price
        notional = fill_price * request.quantity
        held = account.holdings.get(request.symbol, 0.0)
        if request.side is OrderSide.BUY and notional > account.cash:
            order = self._record(
                account, request, OrderStatus.REJECTED, fill_price, reason="Insufficient funds"
            )
            return OperationResult(
                success=False, message="Insufficient funds", order_id=order.order_id
            )
        if request.side is OrderSide.SELL and request.quantity > held:
            order = self._record(
                account, request, OrderStatus.REJECTED, fill_price, reason="Insufficient holdings"
            )
            return OperationResult(
                success=False, message="Insufficient holdings", order_id=order.order_id
            )

        if request.side is OrderSide.BUY:
            account.cash -= notional
            account.holdings[request.symbol] = held + request.quantity
        else:
            account.cash += notional
            remaining = held - request.quantity
            if remaining <= 0:
                account.holdings.pop(request.symbol, None)
            else:
                account.holdings[request.symbol] = remaining
        order = self._record(account, request, OrderStatus.FILLED, fill_price)
        return OperationResult(
            success=True,
            message=f"Order filled at ${fill_price:,.2f}",
            order_id=order.order_id,
        )

    def cancel_order(self, user_id: str, order_id: str) -> OperationResult:
        account = self._account(user_id)
        for index, order in enumerate(account.orders):
            if order.order_id != order_id:
                continue
            if order.status is not OrderStatus.OPEN:
                return OperationResult(success=False, message="Order is not open")
            account.orders[index] = Order(
                order_id=order.order_id,
                symbol=order.symbol,
                side=order.side,
                order_type=order.order_type,
                quantity=order.quantity,
                price=order.price,
                status=OrderStatus.CANCELLED,
                created_at=order.created_at,
            )
            return OperationResult(success=True, message="Order cancelled", order_id=order_id)
        return OperationResult(success=False, message="Order not found")

    def deposit_cash(self, user_id: str, amount: float) -> None:
        if amount <= 0:
            raise RemoteError("Deposit amount must be positive", status_code=400)
        self._account(user_id).cash += amount

    def withdraw_cash(self, user_id: str, amount: float) -> None:
        if amount <= 0:
            raise RemoteError("Withdrawal amount must be positive", status_code=400)
        account = self._account(user_id)
        if account.cash < amount:
            raise RemoteError("Insufficient funds", status_code=400)
        account.cash -= amount

    def advance(self) -> None:
        """Move every price one random-walk step."""
        now = datetime.now(tz=UTC)
        for symbol, current in list(self._prices.items()):
            volatility = DEMO_VOLATILITY.get(symbol, 0.015)
            movement = current.price * volatility * self._random.gauss(0.0, 1.0)
            new_price = max(0.01, current.price + movement)
            self._prices[symbol] = self._quote(
                symbol,
                new_price,
                volume=current.volume * (0.8 + self._random.random() * 0.4),
                low=min(current.low or new_price, new_price),
                high=max(current.high or new_price, new_price),
                timestamp=now,
            )
            self._history[symbol].append(PricePoint(timestamp=now, price=new_price))

    def set_price(self, symbol: str, price: float) -> None:
        current = self._prices.get(symbol)
        volume = current.volume if current else 0.0
        self._prices[symbol] = self._quote(symbol, price, volume=volume)

    def percent_changes(self) -> dict[str, float]:
        """Random placeholder percent change per symbol, in [-5, 5)."""
        return {symbol: round(self._random.random() * 10 - 5, 2) for symbol in sorted(self._prices)}

    def sample_transaction_risk(self, now: datetime | None = None) -> list[dict[str, Any]]:
        """Sample transaction risk rows for the risk view."""
        reference = now or datetime.now(tz=UTC)
        return [
            {
                "timestamp": (reference - timedelta(minutes=30)).isoformat(),
                "type": "TRADE_BUY",
                "symbol": "BTC-USD",
                "amount": 3500.00,
                "risk_score": 0.25,
                "risk_level": "LOW",
                "anomalies": [],
            },
            {
                "timestamp": (reference - timedelta(hours=2)).isoformat(),
                "type": "TRADE_SELL",
                "symbol": "ETH-USD",
                "amount": 1200.00,
                "risk_score": 0.55,
                "risk_level": "MEDIUM",
                "anomalies": ["TIME"],
            },
            {
                "timestamp": (reference - timedelta(hours=5)).isoformat(),
                "type": "TRADE_BUY",
                "symbol": "AAPL",
                "amount": 5800.00,
                "risk_score": 0.75,
                "risk_level": "HIGH",
                "anomalies": ["AMOUNT", "FREQUENCY"],
            },
        ]

    def _account(self, user_id: str) -> _Account:
        account = self._accounts.get(user_id)
        if account is None:
            account = _Account(cash=self.starting_cash)
            self._accounts[user_id] = account
        return account

    def _record(
        self,
        account: _Account,
        request: OrderRequest,
        status: OrderStatus,
        price: float,
        reason: str | None = None,
    ) -> Order:
        order = Order(
            order_id=str(uuid4()),
            symbol=request.symbol,
            side=request.side,
            order_type=request.order_type,
            quantity=request.quantity,
            price=price,
            status=status,
            created_at=datetime.now(tz=UTC),
            status_reason=reason,
        )
        account.orders.append(order)
        return order

    def _require_symbol(self, symbol: str) -> None:
        if symbol not in self._prices:
            raise RemoteError(f"Unknown symbol: {symbol}", status_code=404)

    def _initial_price(self, asset: Asset) -> float:
        if asset.asset_type == "CRYPTO":
            if asset.symbol.startswith("BTC"):
                return 20_000 + self._random.random() * 20_000
            return 100 + self._random.random() * 4_900
        if asset.asset_type == "COMMODITY":
            return 50 + self._random.random() * 950
        return 10 + self._random.random() * 990

    @staticmethod
    def _quote(
        symbol: str,
        price: float,
        volume: float = 0.0,
        low: float | None = None,
        high: float | None = None,
        timestamp: datetime | None = None,
    ) -> PriceQuote:
        return PriceQuote(
            symbol=symbol,
            price=price,
            volume=volume,
            low=low,
            high=high,
            net_price=price * 0.99,
            timestamp=timestamp.isoformat() if timestamp else None,
        )
