from __future__ import annotations

from tradedash.domain.models import PriceDirection, PriceQuote
from tradedash.market.snapshot_store import MarketSnapshotStore, diff_snapshots


def _snapshot(**prices: float) -> dict[str, PriceQuote]:
    return {
        symbol.replace("_", "-"): PriceQuote(symbol=symbol.replace("_", "-"), price=price)
        for symbol, price in prices.items()
    }


def test_replace_reports_only_moved_symbols() -> None:
    store = MarketSnapshotStore(_snapshot(BTC_USD=100.0, AAPL=10.0, MSFT=20.0))

    deltas = store.replace(_snapshot(BTC_USD=105.0, AAPL=9.5, MSFT=20.0))

    assert [delta.symbol for delta in deltas] == ["AAPL", "BTC-USD"]
    by_symbol = {delta.symbol: delta for delta in deltas}
    assert by_symbol["BTC-USD"].direction is PriceDirection.UP
    assert by_symbol["BTC-USD"].old_price == 100.0
    assert by_symbol["BTC-USD"].new_price == 105.0
    assert by_symbol["AAPL"].direction is PriceDirection.DOWN


def test_appearing_and_disappearing_symbols_produce_no_delta() -> None:
    store = MarketSnapshotStore(_snapshot(BTC_USD=100.0, GOLD=1800.0))

    deltas = store.replace(_snapshot(BTC_USD=100.0, ETH_USD=2000.0))

    assert deltas == []
    assert store.symbols() == ["BTC-USD", "ETH-USD"]
    assert store.quote("GOLD") is None


def test_first_snapshot_has_no_deltas() -> None:
    store = MarketSnapshotStore()

    assert store.replace(_snapshot(AAPL=10.0)) == []
    assert store.price_of("AAPL") == 10.0
    assert store.price_of("MSFT") is None


def test_current_snapshot_is_read_only_copy() -> None:
    source = _snapshot(AAPL=10.0)
    store = MarketSnapshotStore(source)
    source["MSFT"] = PriceQuote(symbol="MSFT", price=1.0)

    assert "MSFT" not in store.current
    try:
        store.current["AAPL"] = PriceQuote(symbol="AAPL", price=1.0)  # type: ignore[index]
    except TypeError:
        pass
    else:
        raise AssertionError("snapshot should not be mutable")


def test_diff_snapshots_is_symmetric_in_membership() -> None:
    old = _snapshot(AAPL=10.0, MSFT=20.0)
    new = _snapshot(AAPL=11.0)

    deltas = diff_snapshots(old, new)

    assert len(deltas) == 1
    assert deltas[0].symbol == "AAPL"
