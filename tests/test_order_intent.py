from __future__ import annotations

import pytest

from tradedash.domain.models import OrderIntent, OrderSide, OrderType
from tradedash.errors import ValidationCode, ValidationError
from tradedash.orders.intent import (
    check_intent,
    estimate,
    validate_and_build,
    validate_cash_amount,
)


def test_market_buy_uses_current_price() -> None:
    intent = OrderIntent(symbol="AAPL", side="BUY", order_type="MARKET", quantity=1.5)

    request = validate_and_build(intent, "user123", 100.0)

    assert request.price == 100.0
    assert request.quantity == 1.5
    assert request.side is OrderSide.BUY
    assert request.order_type is OrderType.MARKET
    assert request.to_payload() == {
        "userId": "user123",
        "symbol": "AAPL",
        "side": "BUY",
        "quantity": 1.5,
        "price": 100.0,
        "type": "MARKET",
    }


def test_limit_order_uses_limit_price() -> None:
    intent = OrderIntent(
        symbol="BTC-USD", side="sell", order_type="limit", quantity="0.25", limit_price="31,000"
    )

    request = validate_and_build(intent, "user123", 30_000.0)

    assert request.price == 31_000.0
    assert request.side is OrderSide.SELL
    assert request.order_type is OrderType.LIMIT


@pytest.mark.parametrize("quantity", [0, -5, float("nan"), "", None, "abc"])
def test_invalid_quantity_is_rejected(quantity: object) -> None:
    intent = OrderIntent(symbol="AAPL", quantity=quantity)

    with pytest.raises(ValidationError) as excinfo:
        validate_and_build(intent, "user123", 100.0)

    assert excinfo.value.code is ValidationCode.INVALID_QUANTITY


@pytest.mark.parametrize("limit_price", [0, -1, "", None])
def test_invalid_limit_price_is_rejected(limit_price: object) -> None:
    intent = OrderIntent(symbol="AAPL", order_type="LIMIT", quantity=1, limit_price=limit_price)

    with pytest.raises(ValidationError) as excinfo:
        validate_and_build(intent, "user123", 100.0)

    assert excinfo.value.code is ValidationCode.INVALID_LIMIT_PRICE


def test_quantity_is_checked_before_limit_price() -> None:
    intent = OrderIntent(symbol="AAPL", order_type="LIMIT", quantity=0, limit_price=0)

    with pytest.raises(ValidationError) as excinfo:
        validate_and_build(intent, "user123", 100.0)

    assert excinfo.value.code is ValidationCode.INVALID_QUANTITY


def test_unknown_side_is_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_and_build(OrderIntent(symbol="AAPL", side="HOLD", quantity=1), "u", 1.0)

    assert excinfo.value.code is ValidationCode.INVALID_SIDE


def test_estimate_market_and_limit() -> None:
    assert estimate(OrderIntent(symbol="AAPL", quantity=2), 50.0) == 100.0
    limit = OrderIntent(symbol="AAPL", order_type="LIMIT", quantity=2, limit_price=40)
    assert estimate(limit, 50.0) == 80.0


def test_estimate_is_zero_for_non_positive_quantity() -> None:
    assert estimate(OrderIntent(symbol="AAPL", quantity=0), 50.0) == 0.0
    assert estimate(OrderIntent(symbol="AAPL", quantity=-3), 50.0) == 0.0
    assert estimate(OrderIntent(symbol="AAPL", quantity=""), 50.0) == 0.0


def test_estimate_limit_without_price_falls_back_to_market() -> None:
    intent = OrderIntent(symbol="AAPL", order_type="LIMIT", quantity=2, limit_price="")

    assert estimate(intent, 50.0) == 100.0


def test_estimate_unknown_order_type_uses_market_price() -> None:
    intent = OrderIntent(symbol="AAPL", order_type="STOP", quantity=2, limit_price=10)

    assert estimate(intent, 50.0) == 100.0


def test_check_intent_needs_no_market_price() -> None:
    checked = check_intent(
        OrderIntent(symbol="AAPL", side="sell", order_type="limit", quantity="3", limit_price="9.5")
    )

    assert checked.side is OrderSide.SELL
    assert checked.order_type is OrderType.LIMIT
    assert checked.quantity == 3.0
    assert checked.limit_price == 9.5
    with pytest.raises(ValidationError) as excinfo:
        check_intent(OrderIntent(symbol="AAPL", quantity=float("nan")))
    assert excinfo.value.code is ValidationCode.INVALID_QUANTITY


def test_cash_amount_validation() -> None:
    assert validate_cash_amount("1,250.50") == 1250.5
    for amount in (0, -10, "", None, float("inf")):
        with pytest.raises(ValidationError) as excinfo:
            validate_cash_amount(amount)
        assert excinfo.value.code is ValidationCode.INVALID_AMOUNT
