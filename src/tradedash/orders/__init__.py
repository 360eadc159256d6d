"""Order intent validation and estimates."""

from .intent import (
    estimate,
    parse_number,
    parse_order_type,
    parse_side,
    validate_and_build,
    validate_cash_amount,
)

__all__ = [
    "estimate",
    "parse_number",
    "parse_order_type",
    "parse_side",
    "validate_and_build",
    "validate_cash_amount",
]
