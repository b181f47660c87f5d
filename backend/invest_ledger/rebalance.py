"""Rebalancing suggestions against target allocation percentages."""
from __future__ import annotations

from typing import Dict, List, Mapping

from .ledger import coerce_number, normalize_asset
from .models import PositionLot, RebalanceAdvice, RebalanceLine
from .valuation import market_values

NOTE_NO_TARGETS = "Define target allocations (%) to see rebalancing suggestions."
NOTE_NO_MARKET_VALUE = "No marked-to-market position yet (add buys and prices)."
NOTE_APPROXIMATE = "Approximate amounts, valued at the current manual prices only."


def _normalize_targets(targets: Mapping[str, object] | None) -> Dict[str, float]:
    # First spelling of a ticker wins when several normalize to the same key
    normalized: Dict[str, float] = {}
    for asset, pct in (targets or {}).items():
        key = normalize_asset(asset)
        if key and key not in normalized:
            normalized[key] = coerce_number(pct)
    return normalized


def rebalance_suggestions(
    positions: Mapping[str, PositionLot],
    prices: Mapping[str, object] | None,
    targets: Mapping[str, object] | None,
) -> RebalanceAdvice:
    """Rank the trades needed to move current market values onto the targets.

    A positive ``diff`` means buy that amount, a negative one means sell.
    Lines are ordered by the largest absolute gap first; ties keep the order
    in which the targets were given.
    """

    values = market_values(positions, prices)
    total_mv = sum(values.values())
    target_map = _normalize_targets(targets)

    if not target_map:
        return RebalanceAdvice(lines=[], note=NOTE_NO_TARGETS)
    if total_mv <= 0:
        return RebalanceAdvice(lines=[], note=NOTE_NO_MARKET_VALUE)

    lines: List[RebalanceLine] = []
    for asset, pct in target_map.items():
        target_value = total_mv * pct / 100
        current_value = values.get(asset, 0.0)
        lines.append(
            RebalanceLine(
                asset=asset,
                target_pct=pct,
                current_pct=current_value / total_mv * 100,
                current_value=current_value,
                target_value=target_value,
                diff=target_value - current_value,
            )
        )
    lines.sort(key=lambda line: abs(line.diff), reverse=True)
    return RebalanceAdvice(lines=lines, note=NOTE_APPROXIMATE)


__all__ = [
    "NOTE_APPROXIMATE",
    "NOTE_NO_MARKET_VALUE",
    "NOTE_NO_TARGETS",
    "rebalance_suggestions",
]
