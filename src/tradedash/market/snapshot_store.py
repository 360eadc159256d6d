"""Current market snapshot and diffing against the next one."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from tradedash.domain.models import (
    MarketSnapshot,
    PriceDelta,
    PriceDirection,
    PriceQuote,
    Symbol,
)


class MarketSnapshotStore:
    """Holds exactly one live snapshot and reports price moves on replacement."""

    def __init__(self, initial: Mapping[Symbol, PriceQuote] | None = None) -> None:
        self._current: MarketSnapshot = MappingProxyType(dict(initial or {}))

    @property
    def current(self) -> MarketSnapshot:
        return self._current

    def replace(self, new_snapshot: Mapping[Symbol, PriceQuote]) -> list[PriceDelta]:
        """Swap in ``new_snapshot`` and return deltas for symbols whose price moved.

        Symbols that appear or disappear between snapshots produce no delta.
        """
        incoming: MarketSnapshot = MappingProxyType(dict(new_snapshot))
        deltas = diff_snapshots(self._current, incoming)
        self._current = incoming
        return deltas

    def quote(self, symbol: Symbol) -> PriceQuote | None:
        return self._current.get(symbol)

    def price_of(self, symbol: Symbol) -> float | None:
        quote = self._current.get(symbol)
        if quote is None:
            return None
        return float(quote.price)

    def symbols(self) -> list[Symbol]:
        return sorted(self._current)


def diff_snapshots(old: MarketSnapshot, new: MarketSnapshot) -> list[PriceDelta]:
    """Return direction-tagged deltas for symbols present in both snapshots."""
    deltas: list[PriceDelta] = []
    for symbol in sorted(set(old) & set(new)):
        old_price = float(old[symbol].price)
        new_price = float(new[symbol].price)
        if new_price == old_price:
            continue
        direction = PriceDirection.UP if new_price > old_price else PriceDirection.DOWN
        deltas.append(
            PriceDelta(
                symbol=symbol,
                old_price=old_price,
                new_price=new_price,
                direction=direction,
            )
        )
    return deltas
