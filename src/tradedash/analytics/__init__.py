"""Valuation and risk derivations."""

from .risk import (
    ReferenceMetricTable,
    RiskMetric,
    asset_volatility,
    classify_risk_tier,
    estimate,
    reference_metrics,
    reference_risk_tiers,
)
from .valuation import performance_pct, price_or_zero, value

__all__ = [
    "ReferenceMetricTable",
    "RiskMetric",
    "asset_volatility",
    "classify_risk_tier",
    "estimate",
    "performance_pct",
    "price_or_zero",
    "reference_metrics",
    "reference_risk_tiers",
    "value",
]
