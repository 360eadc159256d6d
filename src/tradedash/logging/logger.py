"""Concise human-readable dashboard logger."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tradedash.domain.models import (
    OperationResult,
    Order,
    OrderRequest,
    PriceDelta,
    RiskProfile,
    Valuation,
)


class DashboardLogger:
    """Console logger with fixed line types."""

    def __init__(self, level: str = "INFO") -> None:
        self._logger = logging.getLogger("tradedash")
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._logger.propagate = False
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s | %(message)s", "%Y-%m-%d %H:%M:%S")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def session_started(self, session_id: str, user_id: str, backend: str) -> None:
        self._logger.debug("session | %s | user %s | backend %s", session_id, user_id, backend)

    def prices_refreshed(self, symbol_count: int, deltas: Sequence[PriceDelta]) -> None:
        self._logger.info("prices | %s symbols | %s moved", symbol_count, len(deltas))
        for delta in deltas:
            self.price_tick(delta)

    def price_tick(self, delta: PriceDelta) -> None:
        self._logger.info(
            "tick | %s | %s | $%s -> $%s",
            delta.symbol,
            delta.direction.value,
            f"{delta.old_price:,.2f}",
            f"{delta.new_price:,.2f}",
        )

    def refresh_failed(self, message: str) -> None:
        self._logger.warning("refresh failed | %s", message)

    def order_submit(self, request: OrderRequest) -> None:
        self._logger.info(
            "submit | %s | %s %s | %s @ $%s | est $%s",
            request.symbol,
            request.side.value.lower(),
            request.order_type.value.lower(),
            self._format_qty(request.quantity),
            f"{request.price:,.3f}",
            f"{request.quantity * request.price:,.2f}",
        )

    def order_update(self, action: str, result: OperationResult) -> None:
        parts = [f"update | {action} | {'ok' if result.success else 'rejected'}"]
        if result.order_id:
            parts.append(self._short_id(result.order_id))
        if result.message:
            parts.append(result.message)
        self._logger.info(" | ".join(parts))

    def cash(self, action: str, amount: float) -> None:
        self._logger.info("cash | %s | $%s", action, f"{amount:,.2f}")

    def portfolio(self, valuation: Valuation, performance_pct: float) -> None:
        self._logger.info(
            "portfolio | total $%s | invested $%s | performance %s",
            f"{valuation.total_value:,.2f}",
            f"{valuation.invested_value:,.2f}",
            f"{performance_pct:+.2f}%",
        )

    def position(self, symbol: str, qty: float, value: float, allocation_pct: float) -> None:
        self._logger.info(
            "position | %s | qty %s | value $%s | %s",
            symbol,
            self._format_qty(qty),
            f"{value:,.2f}",
            f"{allocation_pct:.1f}%",
        )

    def order(self, order: Order) -> None:
        line = "order | %s | %s | %s %s | %s @ $%s | %s"
        args: list[object] = [
            self._short_id(order.order_id),
            order.symbol,
            order.side.value.lower(),
            order.order_type.value.lower(),
            self._format_qty(order.quantity),
            f"{order.price:,.2f}",
            order.status.value,
        ]
        if order.status_reason:
            line += " | %s"
            args.append(order.status_reason)
        self._logger.info(line, *args)

    def reference_metric(self, title: str, symbol: str, value: float, tier: str | None) -> None:
        self._logger.info(
            "reference | %s | %s | %s%s",
            title,
            symbol,
            f"{value * 100:.1f}%",
            f" | {tier.lower()}" if tier else "",
        )

    def risk(self, profile: RiskProfile) -> None:
        self._logger.info(
            "risk | volatility %s daily | VaR95 $%s (%s)",
            f"{profile.weighted_volatility * 100:.2f}%",
            f"{profile.value_at_risk_95:,.2f}",
            f"{profile.value_at_risk_pct:.2f}%",
        )

    def error(self, message: str) -> None:
        self._logger.error("error | %s", message)

    @staticmethod
    def _short_id(value: str | None, head: int = 8) -> str:
        if not value:
            return ""
        text = str(value)
        if len(text) <= head:
            return text
        return f"{text[:head]}..."

    @staticmethod
    def _format_qty(value: float, precision: int = 8) -> str:
        normalized = 0.0 if abs(float(value)) < 1e-9 else float(value)
        text = f"{normalized:.{max(0, precision)}f}".rstrip("0").rstrip(".")
        if text in {"", "-0"}:
            return "0"
        return text
