"""REST adapter for the market backend."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from time import sleep
from typing import Any
from urllib.parse import quote

import requests

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

logger = logging.getLogger(__name__)


class RestMarketBackend:
    """``requests`` wrapper over the ``/api/market`` routes.

    Failures surface as ``RemoteError``. Only HTTP 429 is retried, and only
    when ``max_retries`` allows more than one attempt.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 1,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, int(max_retries))
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def fetch_prices(self) -> MarketSnapshot:
        payload = self._request("GET", "/prices")
        snapshot: dict[str, PriceQuote] = {}
        for symbol, item in payload.items() if isinstance(payload, dict) else []:
            if not isinstance(item, dict):
                continue
            snapshot[str(symbol)] = self._to_quote(str(symbol), item)
        return snapshot

    def fetch_price_history(self, symbol: str) -> list[PricePoint]:
        payload = self._request("GET", f"/history/{quote(symbol, safe='')}")
        points: list[PricePoint] = []
        for item in payload if isinstance(payload, list) else []:
            if not isinstance(item, dict):
                continue
            timestamp = self._parse_timestamp(item.get("timestamp"))
            price = self._parse_optional_float(item.get("price"))
            if timestamp is None or price is None:
                continue
            points.append(PricePoint(timestamp=timestamp, price=price))
        return points

    def fetch_assets(self) -> list[Asset]:
        payload = self._request("GET", "/assets")
        assets: list[Asset] = []
        for item in payload if isinstance(payload, list) else []:
            if not isinstance(item, dict):
                continue
            assets.append(
                Asset(
                    symbol=str(item.get("symbol", "")),
                    name=str(item.get("name", "")),
                    asset_type=str(item.get("type", "")),
                    currency=str(item.get("currency", "USD")),
                )
            )
        return assets

    def fetch_portfolio(self, user_id: str) -> Portfolio:
        payload = self._request("GET", f"/portfolio/{quote(user_id, safe='')}")
        if not isinstance(payload, dict):
            raise RemoteError("Portfolio response was not an object")
        holdings: dict[str, float] = {}
        raw_holdings = payload.get("holdings") or {}
        for symbol, quantity in raw_holdings.items() if isinstance(raw_holdings, dict) else []:
            holdings[str(symbol)] = self._parse_optional_float(quantity) or 0.0
        return Portfolio(
            cash_balance=self._parse_optional_float(payload.get("cashBalance")) or 0.0,
            holdings=holdings,
            user_id=str(payload.get("userId", user_id)),
        )

    def fetch_portfolio_value(self, user_id: str) -> float:
        payload = self._request("GET", f"/portfolio/{quote(user_id, safe='')}/value")
        parsed = self._parse_optional_float(payload)
        if parsed is None:
            raise RemoteError("Portfolio value response was not a number")
        return parsed

    def fetch_orders(self, user_id: str) -> list[Order]:
        payload = self._request("GET", f"/orders/{quote(user_id, safe='')}")
        orders: list[Order] = []
        for item in payload if isinstance(payload, list) else []:
            if isinstance(item, dict):
                orders.append(self._to_order(item))
        return orders

    def submit_order(self, request: OrderRequest) -> OperationResult:
        payload = self._request("POST", "/order", json=request.to_payload())
        return self._to_result(payload)

    def cancel_order(self, user_id: str, order_id: str) -> OperationResult:
        path = f"/order/{quote(user_id, safe='')}/{quote(order_id, safe='')}"
        payload = self._request("DELETE", path)
        return self._to_result(payload)

    def deposit_cash(self, user_id: str, amount: float) -> None:
        path = f"/portfolio/{quote(user_id, safe='')}/deposit"
        self._request("POST", path, json={"amount": amount}, expect_json=False)

    def withdraw_cash(self, user_id: str, amount: float) -> None:
        path = f"/portfolio/{quote(user_id, safe='')}/withdraw"
        self._request("POST", path, json={"amount": amount}, expect_json=False)

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        expect_json: bool = True,
    ) -> Any:
        url = f"{self.base_url}{path}"
        for attempt in range(1, self.max_retries + 1):
            logger.debug("%s %s (attempt %s)", method, url, attempt)
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise RemoteError(f"Request failed for {path}: {exc}") from exc

            if response.status_code == 429 and attempt < self.max_retries:
                sleep(self._retry_after_seconds(response.headers, attempt))
                continue

            if response.status_code >= 400:
                detail = response.text.strip() or "Request rejected"
                raise RemoteError(
                    f"Backend error {response.status_code} for {path}: {detail}",
                    status_code=response.status_code,
                )

            if not expect_json or not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise RemoteError(f"Response for {path} was not valid JSON") from exc

        raise RemoteError(f"Backend rate limit exceeded for {path}", status_code=429)

    @classmethod
    def _to_quote(cls, symbol: str, item: dict[str, Any]) -> PriceQuote:
        return PriceQuote(
            symbol=str(item.get("symbol", symbol)),
            price=cls._parse_optional_float(item.get("price")) or 0.0,
            volume=cls._parse_optional_float(item.get("volume")) or 0.0,
            low=cls._parse_optional_float(item.get("low")),
            high=cls._parse_optional_float(item.get("high")),
            net_price=cls._parse_optional_float(item.get("netPrice")),
            timestamp=str(item["timestamp"]) if item.get("timestamp") else None,
        )

    @classmethod
    def _to_order(cls, item: dict[str, Any]) -> Order:
        return Order(
            order_id=str(item.get("id", "")),
            symbol=str(item.get("symbol", "")),
            side=cls._to_enum(OrderSide, item.get("side"), OrderSide.BUY),
            order_type=cls._to_enum(OrderType, item.get("type"), OrderType.MARKET),
            quantity=cls._parse_optional_float(item.get("quantity")) or 0.0,
            price=cls._parse_optional_float(item.get("price")) or 0.0,
            status=cls._to_enum(OrderStatus, item.get("status"), OrderStatus.PENDING),
            created_at=cls._parse_timestamp(item.get("createdAt")),
            status_reason=item.get("statusReason"),
        )

    @staticmethod
    def _to_result(payload: Any) -> OperationResult:
        if not isinstance(payload, dict):
            raise RemoteError("Order response was not an object")
        order = payload.get("order")
        order_id = str(order.get("id")) if isinstance(order, dict) and order.get("id") else None
        return OperationResult(
            success=bool(payload.get("success", False)),
            message=str(payload.get("message", "")),
            order_id=order_id,
        )

    @staticmethod
    def _to_enum(enum_type: Any, value: Any, default: Any) -> Any:
        try:
            return enum_type(str(value).strip().upper())
        except ValueError:
            return default

    @staticmethod
    def _parse_timestamp(value: Any) -> datetime | None:
        if value is None:
            return None
        if isinstance(value, list) and len(value) >= 3:
            # Jackson without JavaTimeModule serializes LocalDateTime as an array.
            parts = [int(part) for part in value[:6]]
            return datetime(*parts, tzinfo=UTC)
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed

    @staticmethod
    def _retry_after_seconds(
        headers: requests.structures.CaseInsensitiveDict,
        attempt: int,
    ) -> float:
        retry_after = headers.get("Retry-After")
        if retry_after:
            try:
                return max(float(retry_after), 1.0)
            except ValueError:
                try:
                    dt = parsedate_to_datetime(retry_after)
                except (TypeError, ValueError):
                    return max(float(attempt), 1.0)
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=UTC)
                delta = (dt - datetime.now(tz=UTC)).total_seconds()
                return max(delta, 1.0)
        return max(float(attempt), 1.0)

    @staticmethod
    def _parse_optional_float(value: Any) -> float | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        text = str(value).strip()
        if not text or text.lower() in {"none", "null"}:
            return None
        try:
            return float(text)
        except ValueError:
            return None
