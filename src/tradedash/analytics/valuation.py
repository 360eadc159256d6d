"""Portfolio valuation at current snapshot prices."""

from __future__ import annotations

from tradedash.domain.models import CASH_KEY, MarketSnapshot, Portfolio, Valuation


def value(portfolio: Portfolio, snapshot: MarketSnapshot) -> Valuation:
    """Price every holding and derive total value and allocation percentages.

    A holding whose symbol is missing from the snapshot is valued at zero so
    the portfolio view stays renderable while prices are stale.
    """
    position_values: dict[str, float] = {}
    for symbol, quantity in portfolio.holdings.items():
        position_values[symbol] = float(quantity) * price_or_zero(snapshot, symbol)

    cash = float(portfolio.cash_balance)
    total_value = cash + sum(position_values.values())

    allocations: dict[str, float] = {CASH_KEY: _share(cash, total_value)}
    for symbol, position_value in position_values.items():
        allocations[symbol] = _share(position_value, total_value)

    return Valuation(
        position_values=position_values,
        total_value=total_value,
        allocations=allocations,
    )


def price_or_zero(snapshot: MarketSnapshot, symbol: str) -> float:
    quote = snapshot.get(symbol)
    if quote is None:
        return 0.0
    return float(quote.price)


def performance_pct(total_value: float, initial_investment: float) -> float:
    """Percentage gain of ``total_value`` over the initial investment."""
    if initial_investment <= 0:
        return 0.0
    return (float(total_value) - initial_investment) / initial_investment * 100.0


def _share(amount: float, total: float) -> float:
    if total == 0:
        return 0.0
    return amount / total * 100.0
