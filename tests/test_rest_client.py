from __future__ import annotations

import json as jsonlib
from typing import Any

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from tradedash.backends.rest_client import RestMarketBackend
from tradedash.domain.models import OrderRequest, OrderSide, OrderStatus, OrderType
from tradedash.errors import RemoteError


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else jsonlib.dumps(payload))
        self.content = self.text.encode("utf-8")
        self.headers = CaseInsensitiveDict(headers or {})

    def json(self) -> Any:
        return jsonlib.loads(self.text)


class StubSession(requests.Session):
    def __init__(self, responses: list[FakeResponse]) -> None:
        super().__init__()
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:  # type: ignore[override]
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.responses.pop(0)


def _backend(*responses: FakeResponse, max_retries: int = 1) -> tuple[RestMarketBackend, StubSession]:
    session = StubSession(list(responses))
    backend = RestMarketBackend(
        "http://localhost:8080/api/market/", max_retries=max_retries, session=session
    )
    return backend, session


def test_fetch_prices_maps_quotes() -> None:
    backend, session = _backend(
        FakeResponse(
            payload={
                "BTC-USD": {
                    "symbol": "BTC-USD",
                    "price": 42000.5,
                    "volume": 1200,
                    "low": 41000,
                    "high": 43000,
                    "netPrice": 41580.0,
                    "timestamp": "2024-05-01T12:00:00",
                },
                "AAPL": {"price": "190.1"},
            }
        )
    )

    snapshot = backend.fetch_prices()

    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["url"] == "http://localhost:8080/api/market/prices"
    assert snapshot["BTC-USD"].price == 42000.5
    assert snapshot["BTC-USD"].net_price == 41580.0
    assert snapshot["AAPL"].price == 190.1
    assert snapshot["AAPL"].volume == 0.0


def test_fetch_portfolio_and_value() -> None:
    backend, session = _backend(
        FakeResponse(
            payload={"userId": "user 1", "cashBalance": 2500, "holdings": {"AAPL": 3}}
        ),
        FakeResponse(payload=3070.0),
    )

    portfolio = backend.fetch_portfolio("user 1")
    total = backend.fetch_portfolio_value("user 1")

    assert portfolio.cash_balance == 2500.0
    assert portfolio.holdings == {"AAPL": 3.0}
    assert total == 3070.0
    assert session.calls[0]["url"].endswith("/portfolio/user%201")
    assert session.calls[1]["url"].endswith("/portfolio/user%201/value")


def test_fetch_orders_parses_enums_and_timestamps() -> None:
    backend, _session = _backend(
        FakeResponse(
            payload=[
                {
                    "id": "abc-123",
                    "symbol": "AAPL",
                    "side": "BUY",
                    "type": "LIMIT",
                    "quantity": 2,
                    "price": 150,
                    "status": "OPEN",
                    "createdAt": [2024, 5, 1, 9, 30, 15, 123],
                },
                {
                    "id": "def-456",
                    "symbol": "MSFT",
                    "side": "SELL",
                    "type": "MARKET",
                    "quantity": 1,
                    "price": 300,
                    "status": "SOMETHING_NEW",
                    "createdAt": "2024-05-02T10:00:00Z",
                },
            ]
        )
    )

    orders = backend.fetch_orders("user123")

    assert orders[0].order_type is OrderType.LIMIT
    assert orders[0].is_cancellable is True
    assert orders[0].created_at is not None and orders[0].created_at.minute == 30
    assert orders[1].status is OrderStatus.PENDING
    assert orders[1].created_at is not None and orders[1].created_at.day == 2


def test_submit_order_posts_payload_and_reads_result() -> None:
    backend, session = _backend(
        FakeResponse(
            payload={"success": True, "message": "Order placed", "order": {"id": "ord-9"}}
        )
    )
    request = OrderRequest(
        user_id="user123",
        symbol="AAPL",
        side=OrderSide.BUY,
        quantity=1.0,
        price=190.0,
        order_type=OrderType.MARKET,
    )

    result = backend.submit_order(request)

    assert result.success is True
    assert result.order_id == "ord-9"
    assert session.calls[0]["method"] == "POST"
    assert session.calls[0]["json"]["type"] == "MARKET"


def test_unsuccessful_order_result_is_returned_not_raised() -> None:
    backend, _session = _backend(
        FakeResponse(payload={"success": False, "message": "Insufficient funds", "order": None})
    )

    result = backend.cancel_order("user123", "ord-1")

    assert result.success is False
    assert result.message == "Insufficient funds"
    assert result.order_id is None


def test_cash_rejection_raises_remote_error_with_body() -> None:
    backend, session = _backend(FakeResponse(status_code=400, text="Insufficient funds"))

    with pytest.raises(RemoteError, match="Insufficient funds") as excinfo:
        backend.withdraw_cash("user123", 50.0)

    assert excinfo.value.status_code == 400
    assert session.calls[0]["json"] == {"amount": 50.0}


def test_deposit_accepts_plain_text_reply() -> None:
    backend, _session = _backend(FakeResponse(status_code=200, text="Deposit successful"))

    backend.deposit_cash("user123", 100.0)


def test_transport_failure_raises_remote_error() -> None:
    class BrokenSession(StubSession):
        def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:  # type: ignore[override]
            raise requests.ConnectionError("connection refused")

    backend = RestMarketBackend("http://localhost:8080/api/market", session=BrokenSession([]))

    with pytest.raises(RemoteError, match="Request failed"):
        backend.fetch_prices()


def test_invalid_json_raises_remote_error() -> None:
    backend, _session = _backend(FakeResponse(status_code=200, text="<html>oops</html>"))

    with pytest.raises(RemoteError, match="not valid JSON"):
        backend.fetch_assets()


def test_rate_limit_is_not_retried_by_default() -> None:
    backend, session = _backend(FakeResponse(status_code=429, text="slow down"))

    with pytest.raises(RemoteError) as excinfo:
        backend.fetch_prices()

    assert excinfo.value.status_code == 429
    assert len(session.calls) == 1


def test_rate_limit_retry_honours_retry_after(monkeypatch: pytest.MonkeyPatch) -> None:
    waits: list[float] = []
    monkeypatch.setattr("tradedash.backends.rest_client.sleep", waits.append)
    backend, session = _backend(
        FakeResponse(status_code=429, text="slow down", headers={"Retry-After": "2"}),
        FakeResponse(payload={"AAPL": {"price": 1}}),
        max_retries=2,
    )

    snapshot = backend.fetch_prices()

    assert waits == [2.0]
    assert len(session.calls) == 2
    assert snapshot["AAPL"].price == 1.0
