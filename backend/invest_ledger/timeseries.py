"""Approximate equity curve reconstruction.

Only the latest manual price of each asset is known, so every day of the
window is valued at today's prices. The curve shows how the current valuation
would have looked given the historical cash and quantity state; it is not a
historical mark-to-market.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping

from .cash import tx_total
from .ledger import coerce_number, normalize_asset, replay_order
from .models import EquityPoint, TransactionRecord, TransactionType
from .valuation import normalize_prices


def _window(window_days: int, today: date) -> List[date]:
    return [today - timedelta(days=offset) for offset in range(window_days - 1, -1, -1)]


def reconstruct_equity_series(
    transactions: Iterable[TransactionRecord],
    prices: Mapping[str, object] | None,
    window_days: int,
    *,
    today: date | None = None,
) -> List[EquityPoint]:
    """Return one equity point per calendar day ending at ``today`` inclusive."""

    if window_days <= 0:
        return []
    as_of = today or date.today()
    price_map = normalize_prices(prices)
    ordered = replay_order(transactions)

    cash = 0.0
    holdings: Dict[str, float] = {}
    cursor = 0
    series: List[EquityPoint] = []

    for day in _window(window_days, as_of):
        # Apply every transaction dated on or before this day exactly once
        while cursor < len(ordered) and ordered[cursor].date <= day:
            tx = ordered[cursor]
            cursor += 1
            cash += tx_total(tx)
            asset = normalize_asset(tx.asset)
            if not asset:
                continue
            holdings.setdefault(asset, 0.0)
            t_type = tx.normalized_type()
            if t_type == TransactionType.BUY:
                holdings[asset] += coerce_number(tx.quantity)
            elif t_type == TransactionType.SELL:
                holdings[asset] -= coerce_number(tx.quantity)

        invested = sum(qty * price_map.get(asset, 0.0) for asset, qty in holdings.items())
        series.append(EquityPoint(date=day, equity=cash + invested))
    return series


__all__ = ["reconstruct_equity_series"]
