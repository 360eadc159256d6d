"""Market table summary figures and display formatting."""

from __future__ import annotations

from tradedash.domain.models import MarketSnapshot


def total_volume(snapshot: MarketSnapshot) -> float:
    """Sum traded volume across every quote in the snapshot."""
    return sum(float(quote.volume) for quote in snapshot.values())


def format_large_number(value: float) -> str:
    """Format with K/M/B suffixes and one decimal."""
    number = float(value)
    if number >= 1_000_000_000:
        return f"{number / 1_000_000_000:.1f}B"
    if number >= 1_000_000:
        return f"{number / 1_000_000:.1f}M"
    if number >= 1_000:
        return f"{number / 1_000:.1f}K"
    return f"{number:.0f}"


def format_price(value: float) -> str:
    return f"${float(value):,.2f}"


def format_percent(value: float, signed: bool = False) -> str:
    template = "{:+.2f}%" if signed else "{:.2f}%"
    return template.format(float(value))
