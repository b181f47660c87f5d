"""Weighted-average-cost position replay."""
from __future__ import annotations

from typing import Dict, Iterable

from .ledger import coerce_number, normalize_asset, replay_order
from .models import EPSILON, PositionLot, TransactionRecord, TransactionType


def _refresh_average(lot: PositionLot) -> None:
    lot.average_cost = lot.cost_basis / lot.quantity if lot.quantity > EPSILON else 0.0


def _apply_buy(lot: PositionLot, quantity: float, price: float, fees: float) -> None:
    lot.cost_basis += quantity * price + fees
    lot.quantity += quantity
    _refresh_average(lot)


def _apply_sell(lot: PositionLot, quantity: float, price: float, fees: float) -> None:
    # Realized P&L uses the average cost held before this sale.
    proceeds = quantity * price - fees
    cost_out = quantity * lot.average_cost
    lot.realized_pnl += proceeds - cost_out
    lot.quantity -= quantity
    lot.cost_basis -= cost_out
    if abs(lot.quantity) < EPSILON:
        lot.quantity = 0.0
        lot.cost_basis = 0.0
    _refresh_average(lot)


def compute_positions(transactions: Iterable[TransactionRecord]) -> Dict[str, PositionLot]:
    """Replay the ledger chronologically into one lot per asset.

    Selling more than is held is not rejected; the lot goes negative and its
    average cost drops to zero.
    """

    lots: Dict[str, PositionLot] = {}
    for tx in replay_order(transactions):
        asset = normalize_asset(tx.asset)
        if not asset:
            continue
        lot = lots.setdefault(asset, PositionLot(asset=asset))
        quantity = coerce_number(tx.quantity)
        price = coerce_number(tx.price)
        fees = coerce_number(tx.fees)
        t_type = tx.normalized_type()
        if t_type == TransactionType.BUY:
            _apply_buy(lot, quantity, price, fees)
        elif t_type == TransactionType.SELL:
            _apply_sell(lot, quantity, price, fees)
    return lots


__all__ = ["compute_positions"]
