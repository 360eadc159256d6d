"""Dashboard view session: view loading and typed UI intents."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any
from uuid import uuid4

import pandas as pd
import plotly.graph_objects as go

from tradedash.analytics.risk import (
    ReferenceMetricTable,
    RiskMetric,
    estimate,
    reference_metrics,
    reference_risk_tiers,
)
from tradedash.analytics.valuation import performance_pct, value
from tradedash.backends.base import MarketBackend
from tradedash.config import Settings
from tradedash.domain.events import DashboardEvent
from tradedash.domain.models import (
    CashAction,
    MarketSnapshot,
    OperationResult,
    Order,
    OrderIntent,
    OrderType,
    Portfolio,
    PriceDelta,
    RiskLevel,
    RiskProfile,
    Valuation,
)
from tradedash.logging.event_sink import JsonlEventSink, NullEventSink
from tradedash.logging.logger import DashboardLogger
from tradedash.market.history import filter_timeframe, history_to_frame, normalize_timeframe
from tradedash.market.snapshot_store import MarketSnapshotStore
from tradedash.market.summary import total_volume
from tradedash.orders.intent import check_intent, validate_and_build, validate_cash_amount
from tradedash.presentation.charts import ViewCharts, allocation_chart, price_chart, risk_chart
from tradedash.refresh.scheduler import RefreshScheduler, RefreshState, backend_fetcher
from tradedash.tables.sort_filter import (
    ColumnKind,
    SortResult,
    TableSorter,
    market_rows,
    order_rows,
)

logger = logging.getLogger(__name__)


class View(StrEnum):
    MARKET = "market"
    PORTFOLIO = "portfolio"
    ORDERS = "orders"
    RISK = "risk"


@dataclass(frozen=True)
class SubmitOrder:
    intent: OrderIntent
    market_price: float | None = None


@dataclass(frozen=True)
class CancelOrder:
    order_id: str


@dataclass(frozen=True)
class DepositCash:
    amount: Any


@dataclass(frozen=True)
class WithdrawCash:
    amount: Any


@dataclass(frozen=True)
class SortTable:
    table: str
    column: str
    kind: ColumnKind | str


Intent = SubmitOrder | CancelOrder | DepositCash | WithdrawCash | SortTable


@dataclass(frozen=True)
class MarketView:
    snapshot: MarketSnapshot
    rows: list[dict[str, Any]]
    total_volume: float
    asset_count: int
    price_chart: go.Figure | None = None


@dataclass(frozen=True)
class PortfolioView:
    portfolio: Portfolio
    valuation: Valuation
    reported_value: float
    performance_pct: float
    recent_orders: list[Order]
    allocation_chart: go.Figure | None = None


@dataclass(frozen=True)
class RiskView:
    portfolio: Portfolio
    valuation: Valuation
    risk: RiskProfile
    reference: ReferenceMetricTable
    risk_tiers: dict[str, RiskLevel]
    transactions: list[dict[str, Any]] = field(default_factory=list)
    risk_chart: go.Figure | None = None


class DashboardSession:
    """State owned by one open dashboard.

    Holds the live snapshot store, per-table sort state, the rows each table
    currently displays, and the chart figures of the active view.
    """

    def __init__(
        self,
        backend: MarketBackend,
        settings: Settings,
        human_logger: DashboardLogger | None = None,
        event_sink: JsonlEventSink | NullEventSink | None = None,
        session_id: str | None = None,
    ) -> None:
        self.backend = backend
        self.settings = settings
        self.human_logger = human_logger or DashboardLogger(level=settings.log_level)
        self.event_sink = event_sink or NullEventSink()
        self.session_id = session_id or uuid4().hex
        self.store = MarketSnapshotStore()
        self.active_view = View.MARKET
        self.charts = ViewCharts()
        self._sorters: dict[str, TableSorter] = {}
        self._rows: dict[str, list[dict[str, Any]]] = {}
        self._scheduler: RefreshScheduler | None = None

    @property
    def user_id(self) -> str:
        return self.settings.user_id

    def switch_view(self, view: View | str) -> View:
        """Activate ``view`` and drop the previous view's charts."""
        target = View(view)
        if target is not self.active_view:
            self.charts.reset()
        self.active_view = target
        return target

    def displayed_rows(self, table: str) -> list[dict[str, Any]]:
        return list(self._rows.get(table, []))

    def load_market_view(self, with_chart: bool = True) -> MarketView:
        self.switch_view(View.MARKET)
        current = self._refresh_snapshot()
        changes_provider: Callable[[], dict[str, float]] | None = getattr(
            self.backend, "percent_changes", None
        )
        changes = changes_provider() if changes_provider is not None else None
        rows = market_rows(current, changes)
        self._rows["market"] = rows
        figure = None
        if with_chart and rows:
            figure = self.load_price_chart(rows[0]["symbol"])
        return MarketView(
            snapshot=current,
            rows=list(rows),
            total_volume=total_volume(current),
            asset_count=len(current),
            price_chart=figure,
        )

    def price_history(self, symbol: str, timeframe: str | None = None) -> pd.DataFrame:
        selected = normalize_timeframe(timeframe, default=self.settings.price_timeframe)
        frame = history_to_frame(self.backend.fetch_price_history(symbol))
        return filter_timeframe(frame, selected)

    def load_price_chart(self, symbol: str, timeframe: str | None = None) -> go.Figure:
        selected = normalize_timeframe(timeframe, default=self.settings.price_timeframe)
        frame = self.price_history(symbol, selected)
        return self.charts.set("price", price_chart(frame, symbol, selected))

    def load_portfolio_view(self, with_chart: bool = True) -> PortfolioView:
        self.switch_view(View.PORTFOLIO)
        portfolio = self.backend.fetch_portfolio(self.user_id)
        reported_value = self.backend.fetch_portfolio_value(self.user_id)
        valuation = value(portfolio, self._refresh_snapshot())
        orders = self.backend.fetch_orders(self.user_id)
        figure = None
        if with_chart:
            figure = self.charts.set("allocation", allocation_chart(valuation))
        return PortfolioView(
            portfolio=portfolio,
            valuation=valuation,
            reported_value=reported_value,
            performance_pct=performance_pct(reported_value, self.settings.initial_investment),
            recent_orders=orders[: self.settings.recent_orders_limit],
            allocation_chart=figure,
        )

    def load_risk_view(
        self,
        metric: RiskMetric | str = RiskMetric.VOLATILITY,
        with_chart: bool = True,
    ) -> RiskView:
        self.switch_view(View.RISK)
        portfolio = self.backend.fetch_portfolio(self.user_id)
        valuation = value(portfolio, self._refresh_snapshot())
        reference = reference_metrics(metric)
        transactions_provider: Callable[[], list[dict[str, Any]]] | None = getattr(
            self.backend, "sample_transaction_risk", None
        )
        figure = None
        if with_chart:
            figure = self.charts.set("risk", risk_chart(reference))
        return RiskView(
            portfolio=portfolio,
            valuation=valuation,
            risk=estimate(portfolio, valuation),
            reference=reference,
            risk_tiers=reference_risk_tiers(),
            transactions=transactions_provider() if transactions_provider is not None else [],
            risk_chart=figure,
        )

    def select_risk_metric(self, metric: RiskMetric | str) -> go.Figure:
        """Swap the risk chart to another reference metric."""
        return self.charts.set("risk", risk_chart(reference_metrics(metric)))

    def load_order_history(self) -> list[Order]:
        self.switch_view(View.ORDERS)
        orders = self.backend.fetch_orders(self.user_id)
        rows = order_rows(orders)
        self._rows["orders"] = rows
        return orders

    def dispatch(self, intent: Intent) -> OperationResult | SortResult:
        """Route a typed UI intent; validation failures raise before any network call."""
        if isinstance(intent, SubmitOrder):
            return self.submit_order(intent.intent, intent.market_price)
        if isinstance(intent, CancelOrder):
            return self.cancel_order(intent.order_id)
        if isinstance(intent, DepositCash):
            return self.deposit(intent.amount)
        if isinstance(intent, WithdrawCash):
            return self.withdraw(intent.amount)
        if isinstance(intent, SortTable):
            return self.sort_table(intent.table, intent.column, intent.kind)
        raise TypeError(f"Unsupported intent: {type(intent).__name__}")

    def submit_order(self, intent: OrderIntent, market_price: float | None = None) -> OperationResult:
        checked = check_intent(intent)
        price = market_price
        if checked.order_type is OrderType.MARKET and price is None:
            price = self.store.price_of(intent.symbol)
            if price is None:
                quote = self._refresh_snapshot().get(intent.symbol)
                price = float(quote.price) if quote is not None else None
        request = validate_and_build(intent, self.user_id, price if price is not None else 0.0)
        self.human_logger.order_submit(request)
        self._emit("order_submit", request.to_payload())
        result = self.backend.submit_order(request)
        self.human_logger.order_update("order", result)
        self._emit(
            "order_update",
            {
                "symbol": request.symbol,
                "success": result.success,
                "message": result.message,
                "order_id": result.order_id,
            },
        )
        return result

    def cancel_order(self, order_id: str) -> OperationResult:
        """Ask the backend to cancel; local order state only changes on reload."""
        result = self.backend.cancel_order(self.user_id, order_id)
        self.human_logger.order_update("cancel", result)
        self._emit(
            "order_cancel",
            {"order_id": order_id, "success": result.success, "message": result.message},
        )
        return result

    def deposit(self, amount: Any) -> OperationResult:
        parsed = validate_cash_amount(amount)
        self.backend.deposit_cash(self.user_id, parsed)
        self._record_cash(CashAction.DEPOSIT, parsed)
        return OperationResult(success=True, message=f"Successfully deposited ${parsed:,.2f}")

    def withdraw(self, amount: Any) -> OperationResult:
        parsed = validate_cash_amount(amount)
        self.backend.withdraw_cash(self.user_id, parsed)
        self._record_cash(CashAction.WITHDRAW, parsed)
        return OperationResult(success=True, message=f"Successfully withdrew ${parsed:,.2f}")

    def sort_table(self, table: str, column: str, kind: ColumnKind | str) -> SortResult:
        sorter = self._sorters.setdefault(table, TableSorter())
        result = sorter.sort(self._rows.get(table, []), column, kind)
        self._rows[table] = [dict(row) for row in result.rows]
        return result

    def refresh_scheduler(self) -> RefreshScheduler:
        """Poller bound to this session's store, active only on the market view."""
        scheduler = RefreshScheduler(
            store=self.store,
            fetch=backend_fetcher(self.backend),
            interval_seconds=self.settings.refresh_interval_seconds,
            human_logger=self.human_logger,
            event_sink=self.event_sink,
            session_id=self.session_id,
            user_id=self.user_id,
            is_active=lambda: self.active_view is View.MARKET,
        )
        scheduler.subscribe(self.apply_price_deltas)
        self._scheduler = scheduler
        return scheduler

    def apply_price_deltas(self, deltas: list[PriceDelta]) -> None:
        """Update prices in the displayed market rows without reordering them."""
        if not deltas or "market" not in self._rows:
            return
        moved = {delta.symbol: delta for delta in deltas}
        updated: list[dict[str, Any]] = []
        for row in self._rows["market"]:
            delta = moved.get(row.get("symbol", ""))
            if delta is None:
                updated.append(row)
                continue
            updated.append(
                {**row, "price": delta.new_price, "price_direction": delta.direction.value}
            )
        self._rows["market"] = updated

    def _refresh_snapshot(self) -> MarketSnapshot:
        """Fetch prices for a view; the store is left alone while a poll is in flight."""
        snapshot = self.backend.fetch_prices()
        if self._scheduler is not None and self._scheduler.state is RefreshState.FETCHING:
            logger.debug("snapshot swap skipped: refresh fetch outstanding")
            return MappingProxyType(dict(snapshot))
        self.store.replace(snapshot)
        return self.store.current

    def _record_cash(self, action: CashAction, amount: float) -> None:
        self.human_logger.cash(action.value, amount)
        self._emit("cash", {"action": action.value, "amount": amount})

    def _emit(self, event_type: str, payload: dict[str, Any]) -> None:
        self.event_sink.emit(
            DashboardEvent(
                session_id=self.session_id,
                user_id=self.user_id,
                event_type=event_type,
                payload=payload,
            )
        )


__all__ = [
    "CancelOrder",
    "DashboardSession",
    "DepositCash",
    "Intent",
    "MarketView",
    "PortfolioView",
    "RiskView",
    "SortTable",
    "SubmitOrder",
    "View",
    "WithdrawCash",
]
