"""Simplified portfolio risk figures and static reference metrics.

The volatility lookup and the 1.65 multiplier are illustrative constants, not a
statistical risk model.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from tradedash.domain.models import Portfolio, RiskLevel, RiskProfile, Valuation

CRYPTO_VOLATILITY = 0.035
GOLD_VOLATILITY = 0.008
DEFAULT_VOLATILITY = 0.015
VAR_95_MULTIPLIER = 1.65

LOW_RISK_CEILING = 0.01
MEDIUM_RISK_CEILING = 0.03

REFERENCE_SYMBOLS = ("BTC-USD", "ETH-USD", "AAPL", "MSFT", "AMZN", "GOLD")


class RiskMetric(StrEnum):
    """Reference chart metric kinds."""

    VOLATILITY = "volatility"
    DRAWDOWN = "drawdown"
    VAR = "var"


@dataclass(frozen=True)
class ReferenceMetricTable:
    """Fixed per-symbol figures shown in the risk chart."""

    kind: RiskMetric
    title: str
    values: dict[str, float]


_REFERENCE_DATA: dict[RiskMetric, tuple[str, tuple[float, ...]]] = {
    RiskMetric.VOLATILITY: (
        "Asset Volatility (Daily)",
        (0.035, 0.042, 0.015, 0.012, 0.018, 0.008),
    ),
    RiskMetric.DRAWDOWN: (
        "Maximum Drawdown",
        (0.25, 0.32, 0.08, 0.07, 0.12, 0.05),
    ),
    RiskMetric.VAR: (
        "Value at Risk (95%)",
        (0.08, 0.11, 0.03, 0.025, 0.04, 0.015),
    ),
}


def asset_volatility(symbol: str) -> float:
    """Daily volatility assigned to a holding by symbol pattern."""
    if "BTC" in symbol or "ETH" in symbol:
        return CRYPTO_VOLATILITY
    if symbol == "GOLD":
        return GOLD_VOLATILITY
    return DEFAULT_VOLATILITY


def estimate(portfolio: Portfolio, valuation: Valuation) -> RiskProfile:
    """Value-weighted volatility and a linear 95% VaR; cash carries no risk."""
    total_value = float(valuation.total_value)
    if total_value == 0:
        return RiskProfile(weighted_volatility=0.0, value_at_risk_95=0.0, total_value=0.0)

    weighted_volatility = 0.0
    for symbol in portfolio.holdings:
        position_value = valuation.position_values.get(symbol, 0.0)
        weighted_volatility += (position_value / total_value) * asset_volatility(symbol)

    return RiskProfile(
        weighted_volatility=weighted_volatility,
        value_at_risk_95=total_value * weighted_volatility * VAR_95_MULTIPLIER,
        total_value=total_value,
    )


def reference_metrics(kind: RiskMetric | str) -> ReferenceMetricTable:
    """Return the static reference table for ``kind``."""
    try:
        metric = RiskMetric(str(kind).strip().lower())
    except ValueError as exc:
        supported = ", ".join(item.value for item in RiskMetric)
        raise ValueError(f"Unknown risk metric '{kind}'. Supported: {supported}") from exc
    title, figures = _REFERENCE_DATA[metric]
    return ReferenceMetricTable(
        kind=metric,
        title=title,
        values=dict(zip(REFERENCE_SYMBOLS, figures, strict=True)),
    )


def classify_risk_tier(volatility: float) -> RiskLevel:
    if volatility < LOW_RISK_CEILING:
        return RiskLevel.LOW
    if volatility < MEDIUM_RISK_CEILING:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def reference_risk_tiers() -> dict[str, RiskLevel]:
    """Risk tier of each reference symbol from the volatility table."""
    table = reference_metrics(RiskMetric.VOLATILITY)
    return {symbol: classify_risk_tier(figure) for symbol, figure in table.values.items()}
