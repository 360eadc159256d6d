"""Trade form validation, cost estimates, and order request packaging."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from tradedash.domain.models import OrderIntent, OrderRequest, OrderSide, OrderType
from tradedash.errors import ValidationCode, ValidationError


def parse_number(value: Any) -> float | None:
    """Parse form input to a float; blank or non-numeric input returns None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_side(value: OrderSide | str) -> OrderSide:
    try:
        return OrderSide(str(value).strip().upper())
    except ValueError as exc:
        raise ValidationError(
            ValidationCode.INVALID_SIDE, f"Unknown order side '{value}'"
        ) from exc


def parse_order_type(value: OrderType | str) -> OrderType:
    try:
        return OrderType(str(value).strip().upper())
    except ValueError as exc:
        raise ValidationError(
            ValidationCode.INVALID_ORDER_TYPE, f"Unknown order type '{value}'"
        ) from exc


def _is_positive(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def estimate(intent: OrderIntent, current_market_price: float) -> float:
    """Live cost estimate for the trade form.

    Returns 0 instead of failing while the quantity is blank or non-positive.
    An empty limit price or an unknown order type falls back to the market
    price.
    """
    quantity = parse_number(intent.quantity)
    if not _is_positive(quantity):
        return 0.0
    effective_price = float(current_market_price)
    try:
        order_type = parse_order_type(intent.order_type)
    except ValidationError:
        order_type = OrderType.MARKET
    if order_type is OrderType.LIMIT:
        limit_price = parse_number(intent.limit_price)
        if limit_price is not None and math.isfinite(limit_price) and limit_price != 0:
            effective_price = limit_price
    return quantity * effective_price


@dataclass(frozen=True)
class CheckedIntent:
    side: OrderSide
    order_type: OrderType
    quantity: float
    limit_price: float | None = None


def check_intent(intent: OrderIntent) -> CheckedIntent:
    """Run every form rule that does not need a market price.

    Raises ``ValidationError`` with the first failing rule: quantity, then
    limit price.
    """
    side = parse_side(intent.side)
    order_type = parse_order_type(intent.order_type)

    quantity = parse_number(intent.quantity)
    if not _is_positive(quantity):
        raise ValidationError(
            ValidationCode.INVALID_QUANTITY, "Please enter a valid quantity"
        )

    limit_price = None
    if order_type is OrderType.LIMIT:
        limit_price = parse_number(intent.limit_price)
        if not _is_positive(limit_price):
            raise ValidationError(
                ValidationCode.INVALID_LIMIT_PRICE, "Please enter a valid limit price"
            )
    return CheckedIntent(
        side=side,
        order_type=order_type,
        quantity=float(quantity),
        limit_price=limit_price,
    )


def validate_and_build(
    intent: OrderIntent,
    user_id: str,
    current_market_price: float,
) -> OrderRequest:
    """Validate ``intent`` and resolve its effective price.

    Limit orders carry their limit price; market orders take
    ``current_market_price``.
    """
    checked = check_intent(intent)
    if checked.limit_price is not None:
        effective_price = float(checked.limit_price)
    else:
        effective_price = float(current_market_price)

    return OrderRequest(
        user_id=user_id,
        symbol=intent.symbol,
        side=checked.side,
        quantity=checked.quantity,
        price=effective_price,
        order_type=checked.order_type,
    )


def validate_cash_amount(amount: Any) -> float:
    """Deposit and withdraw amounts must be finite and positive."""
    parsed = parse_number(amount)
    if not _is_positive(parsed):
        raise ValidationError(ValidationCode.INVALID_AMOUNT, "Please enter a valid amount")
    return float(parsed)
