"""Command-line interface for the trading dashboard."""

from __future__ import annotations

import argparse
import sys

from tradedash.analytics.risk import RiskMetric
from tradedash.config import BACKENDS, Settings
from tradedash.domain.models import OrderIntent, OrderSide, OrderStatus, OrderType
from tradedash.errors import ConfigError
from tradedash.runtime import (
    cancel_order,
    deposit,
    place_order,
    show_orders,
    show_portfolio,
    show_risk,
    watch,
    withdraw,
)
from tradedash.tables.sort_filter import ALL_STATUSES

ACTION_FLAGS = ("portfolio", "risk", "orders", "order", "cancel", "deposit", "withdraw")


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Trading dashboard client: live prices, portfolio, risk and orders"
    )
    parser.add_argument("--backend", choices=sorted(BACKENDS), help="Backend implementation")
    parser.add_argument("--api-base-url", type=str, help="Market API base URL")
    parser.add_argument("--user-id", type=str, help="Account user id")
    parser.add_argument(
        "--interval-seconds", type=float, help="Seconds between market price refreshes"
    )
    parser.add_argument("--max-ticks", type=int, help="Stop watching after this many refreshes")
    parser.add_argument("--events-dir", type=str, help="Session outputs directory")

    parser.add_argument(
        "--portfolio",
        action="store_true",
        help="Show cash, positions, performance and recent orders, then exit",
    )
    parser.add_argument(
        "--risk",
        action="store_true",
        help="Show portfolio volatility, VaR and reference risk metrics, then exit",
    )
    parser.add_argument(
        "--metric",
        choices=[metric.value for metric in RiskMetric],
        default=RiskMetric.VOLATILITY.value,
        help="Reference metric shown with --risk",
    )
    parser.add_argument(
        "--orders",
        action="store_true",
        help="List order history, then exit",
    )
    parser.add_argument(
        "--status",
        choices=[ALL_STATUSES, *(status.value for status in OrderStatus)],
        default=ALL_STATUSES,
        help="Order status filter used with --orders",
    )
    parser.add_argument("--search", type=str, help="Free-text filter used with --orders")
    parser.add_argument("--order", type=str, metavar="SYMBOL", help="Submit an order for SYMBOL")
    parser.add_argument(
        "--side",
        choices=[side.value for side in OrderSide],
        default=OrderSide.BUY.value,
        help="Order side used with --order",
    )
    parser.add_argument("--qty", type=str, help="Order quantity used with --order")
    parser.add_argument(
        "--order-type",
        choices=[order_type.value for order_type in OrderType],
        default=OrderType.MARKET.value,
        help="Order type used with --order",
    )
    parser.add_argument("--limit-price", type=str, help="Limit price used with --order-type LIMIT")
    parser.add_argument("--cancel", type=str, metavar="ORDER_ID", help="Cancel an open order")
    parser.add_argument("--deposit", type=str, metavar="AMOUNT", help="Deposit cash")
    parser.add_argument("--withdraw", type=str, metavar="AMOUNT", help="Withdraw cash")
    return parser


def selected_actions(args: argparse.Namespace) -> list[str]:
    selected: list[str] = []
    for name in ACTION_FLAGS:
        value = getattr(args, name)
        if value is True or (isinstance(value, str) and value):
            selected.append(name)
    return selected


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply CLI values onto environment-derived settings."""
    if args.max_ticks is not None and args.max_ticks <= 0:
        raise ValueError("--max-ticks must be positive")
    if args.interval_seconds is not None and args.interval_seconds <= 0:
        raise ValueError("--interval-seconds must be positive")

    overrides: dict[str, object] = {}
    if args.backend:
        overrides["backend"] = args.backend
    if args.api_base_url:
        overrides["api_base_url"] = args.api_base_url.strip()
    if args.user_id:
        overrides["user_id"] = args.user_id.strip()
    if args.interval_seconds is not None:
        overrides["refresh_interval_seconds"] = args.interval_seconds
    if args.max_ticks is not None:
        overrides["max_ticks"] = args.max_ticks
    if args.events_dir:
        overrides["events_dir"] = args.events_dir

    merged = settings.with_overrides(**overrides)

    actions = selected_actions(args)
    if len(actions) > 1:
        flags = ", ".join(f"--{name}" for name in actions)
        raise ValueError(f"Use only one action flag: {flags}")
    if actions and args.max_ticks is not None:
        raise ValueError("--max-ticks only applies to the watch loop")
    if args.order and args.qty is None:
        raise ValueError("--order requires --qty")
    if args.limit_price is not None and args.order_type != OrderType.LIMIT.value:
        raise ValueError("--limit-price requires --order-type LIMIT")
    return merged


def main() -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args()
    try:
        settings = apply_cli_overrides(Settings.from_env(), args)
    except (ValueError, ConfigError) as exc:
        print(f"Configuration error: {exc}")
        return 2
    if args.portfolio:
        return show_portfolio(settings)
    if args.risk:
        return show_risk(settings, metric=args.metric)
    if args.orders:
        return show_orders(settings, status=args.status, search=args.search)
    if args.order:
        intent = OrderIntent(
            symbol=args.order.strip(),
            side=args.side,
            order_type=args.order_type,
            quantity=args.qty,
            limit_price=args.limit_price,
        )
        return place_order(settings, intent)
    if args.cancel:
        return cancel_order(settings, args.cancel.strip())
    if args.deposit:
        return deposit(settings, args.deposit)
    if args.withdraw:
        return withdraw(settings, args.withdraw)
    return watch(settings)


if __name__ == "__main__":
    sys.exit(main())
