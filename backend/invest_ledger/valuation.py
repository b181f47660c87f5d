"""Mark-to-market valuation against the manual price snapshot."""
from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping

from .cash import compute_cash
from .ledger import coerce_number, normalize_asset
from .models import KPIs, PositionLot, TransactionRecord
from .positions import compute_positions


def normalize_prices(prices: Mapping[str, object] | None) -> Dict[str, float]:
    """Return ``prices`` keyed by normalized ticker with numeric values."""

    normalized: Dict[str, float] = {}
    for asset, price in (prices or {}).items():
        key = normalize_asset(asset)
        if key:
            normalized[key] = coerce_number(price)
    return normalized


def market_values(
    positions: Mapping[str, PositionLot],
    prices: Mapping[str, object] | None,
) -> Dict[str, float]:
    """Value every position at its snapshot price; unpriced assets are worth zero."""

    price_map = normalize_prices(prices)
    return {asset: lot.quantity * price_map.get(asset, 0.0) for asset, lot in positions.items()}


def compute_kpis(
    transactions: Iterable[TransactionRecord],
    prices: Mapping[str, object] | None,
) -> KPIs:
    """Compute equity, cash, unrealized and realized P&L for the ledger."""

    records = list(transactions)
    positions = compute_positions(records)
    cash = compute_cash(records)
    values = market_values(positions, prices)

    invested_value = math.fsum(values.values())
    cost_basis = math.fsum(lot.cost_basis for lot in positions.values())
    realized = math.fsum(lot.realized_pnl for lot in positions.values())
    return KPIs(
        equity=cash + invested_value,
        cash=cash,
        unrealized=invested_value - cost_basis,
        realized=realized,
        invested_value=invested_value,
        cost_basis=cost_basis,
        positions=positions,
    )


__all__ = ["compute_kpis", "market_values", "normalize_prices"]
