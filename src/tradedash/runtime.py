"""Runtime wiring for the watch loop and one-shot dashboard actions."""

from __future__ import annotations

import asyncio
from pathlib import Path
from uuid import uuid4

from tradedash.analytics.risk import RiskMetric
from tradedash.backends.base import MarketBackend
from tradedash.backends.demo import DemoMarketBackend
from tradedash.backends.rest_client import RestMarketBackend
from tradedash.config import Settings
from tradedash.domain.events import DashboardEvent
from tradedash.domain.models import CASH_KEY, OperationResult, OrderIntent
from tradedash.errors import ConfigError, DashboardError, ValidationError
from tradedash.logging.event_sink import JsonlEventSink, generate_plotly_report
from tradedash.logging.logger import DashboardLogger
from tradedash.session import (
    CancelOrder,
    DashboardSession,
    DepositCash,
    Intent,
    SubmitOrder,
    WithdrawCash,
)
from tradedash.tables.sort_filter import ALL_STATUSES, filter_any_cell, filter_by_status


def watch(settings: Settings) -> int:
    """Poll prices on the market view until interrupted or the tick limit is hit."""
    backend = build_backend(settings)

    session_id = uuid4().hex
    session_directory = Path(settings.events_dir) / session_id
    session_directory.mkdir(parents=True, exist_ok=True)
    events_path = session_directory / "events.jsonl"
    report_path = session_directory / "report.html"

    event_sink = JsonlEventSink(str(events_path))
    human_logger = DashboardLogger(level=settings.log_level)
    session = DashboardSession(
        backend=backend,
        settings=settings,
        human_logger=human_logger,
        event_sink=event_sink,
        session_id=session_id,
    )

    human_logger.session_started(session_id, settings.user_id, settings.backend)
    event_sink.emit(
        DashboardEvent(
            session_id=session_id,
            user_id=settings.user_id,
            event_type="session_started",
            payload={"backend": settings.backend, "api_base_url": settings.api_base_url},
        )
    )

    exit_code = 0
    try:
        view = session.load_market_view(with_chart=False)
        human_logger.prices_refreshed(view.asset_count, [])
        scheduler = session.refresh_scheduler()
        asyncio.run(scheduler.run(max_ticks=settings.tick_limit()))
    except KeyboardInterrupt:
        exit_code = 0
    except DashboardError as exc:
        human_logger.error(str(exc))
        event_sink.emit(
            DashboardEvent(
                session_id=session_id,
                user_id=settings.user_id,
                event_type="error",
                payload={"message": str(exc)},
            )
        )
        exit_code = 1
    finally:
        generate_plotly_report(str(events_path), str(report_path))

    return exit_code


def show_portfolio(settings: Settings) -> int:
    """Print cash, positions, performance and recent orders, then exit."""
    session, human_logger = build_session(settings)
    try:
        view = session.load_portfolio_view(with_chart=False)
    except DashboardError as exc:
        human_logger.error(str(exc))
        return 1

    human_logger.portfolio(view.valuation, view.performance_pct)
    human_logger.position(
        CASH_KEY,
        view.portfolio.cash_balance,
        view.portfolio.cash_balance,
        view.valuation.allocations.get(CASH_KEY, 0.0),
    )
    for symbol, quantity in sorted(view.portfolio.holdings.items()):
        human_logger.position(
            symbol,
            quantity,
            view.valuation.position_values.get(symbol, 0.0),
            view.valuation.allocations.get(symbol, 0.0),
        )
    for order in view.recent_orders:
        human_logger.order(order)
    return 0


def show_risk(settings: Settings, metric: RiskMetric | str = RiskMetric.VOLATILITY) -> int:
    """Print the portfolio risk figures and one reference metric table."""
    session, human_logger = build_session(settings)
    try:
        view = session.load_risk_view(metric=metric, with_chart=False)
    except DashboardError as exc:
        human_logger.error(str(exc))
        return 1

    human_logger.risk(view.risk)
    for symbol, figure in view.reference.values.items():
        tier = view.risk_tiers.get(symbol) if view.reference.kind is RiskMetric.VOLATILITY else None
        human_logger.reference_metric(view.reference.title, symbol, figure, tier)
    return 0


def show_orders(
    settings: Settings,
    status: str = ALL_STATUSES,
    search: str | None = None,
) -> int:
    """Print the order history narrowed by status and free-text search."""
    session, human_logger = build_session(settings)
    try:
        orders = session.load_order_history()
    except DashboardError as exc:
        human_logger.error(str(exc))
        return 1

    rows = filter_by_status(session.displayed_rows("orders"), status)
    rows = filter_any_cell(rows, search, exclude=("action", "order_id"))
    visible = {row["order_id"] for row in rows}
    for order in orders:
        if order.order_id in visible:
            human_logger.order(order)
    return 0


def place_order(settings: Settings, intent: OrderIntent) -> int:
    return run_intent(settings, SubmitOrder(intent=intent))


def cancel_order(settings: Settings, order_id: str) -> int:
    return run_intent(settings, CancelOrder(order_id=order_id))


def deposit(settings: Settings, amount: str) -> int:
    return run_intent(settings, DepositCash(amount=amount))


def withdraw(settings: Settings, amount: str) -> int:
    return run_intent(settings, WithdrawCash(amount=amount))


def run_intent(settings: Settings, intent: Intent) -> int:
    """Dispatch one UI intent and map the outcome to an exit code.

    Validation problems exit 2 before anything is sent; backend failures and
    rejected orders exit 1.
    """
    session, human_logger = build_session(settings)
    try:
        result = session.dispatch(intent)
    except ValidationError as exc:
        human_logger.error(f"{exc.code.value}: {exc.message}")
        return 2
    except DashboardError as exc:
        human_logger.error(str(exc))
        return 1
    if isinstance(result, OperationResult) and not result.success:
        return 1
    return 0


def build_session(settings: Settings) -> tuple[DashboardSession, DashboardLogger]:
    """Session without an event file, for one-shot actions."""
    backend = build_backend(settings)
    human_logger = DashboardLogger(level=settings.log_level)
    session = DashboardSession(backend=backend, settings=settings, human_logger=human_logger)
    return session, human_logger


def build_backend(settings: Settings) -> MarketBackend:
    """Select backend implementation from settings."""
    if settings.backend == "demo":
        return DemoMarketBackend(
            seed=settings.demo_seed,
            starting_cash=settings.initial_investment,
        )
    if settings.backend == "rest":
        return RestMarketBackend(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
            max_retries=settings.http_max_retries,
        )
    raise ConfigError(f"Unknown backend '{settings.backend}'")
