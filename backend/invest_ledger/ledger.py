"""Transaction ledger container and replay ordering helpers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from .models import TransactionRecord, TransactionType


def normalize_asset(value: Any) -> str:
    """Return the upper-cased, trimmed ticker (empty string for blanks)."""

    if value is None:
        return ""
    return str(value).strip().upper()


def coerce_number(value: Any) -> float:
    """Convert ``value`` to ``float`` treating missing or garbage input as zero."""

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def month_key(value: date | str) -> str:
    """Return the ``YYYY-MM`` bucket for a date or ISO date string."""

    if isinstance(value, date):
        return f"{value.year:04d}-{value.month:02d}"
    return (value or "")[:7]


def replay_order(transactions: Iterable[TransactionRecord]) -> List[TransactionRecord]:
    """Sort transactions ascending by date.

    ``sorted`` is stable, so records sharing a date keep their insertion
    order. Average cost depends on that tie-break.
    """

    return sorted(transactions, key=lambda tx: tx.date)


def filter_transactions(
    transactions: Iterable[TransactionRecord],
    *,
    search: str | None = None,
    month: str | None = None,
    type: TransactionType | str | None = None,
    asset: str | None = None,
) -> List[TransactionRecord]:
    """Select transactions matching every non-empty criterion."""

    needle = (search or "").strip().lower()
    wanted_type = TransactionType(type).value if type else ""
    wanted_asset = normalize_asset(asset)
    selected: List[TransactionRecord] = []
    for tx in transactions:
        if needle:
            haystack = f"{tx.normalized_type()} {tx.asset or ''} {tx.note or ''}".lower()
            if needle not in haystack:
                continue
        if month and month_key(tx.date) != month:
            continue
        if wanted_type and tx.normalized_type() != wanted_type:
            continue
        if wanted_asset and normalize_asset(tx.asset) != wanted_asset:
            continue
        selected.append(tx)
    return selected


@dataclass(frozen=True)
class TransactionLedger:
    """Immutable, insertion-ordered collection of transaction records."""

    records: Tuple[TransactionRecord, ...] = ()

    @classmethod
    def of(cls, records: Iterable[TransactionRecord]) -> "TransactionLedger":
        return cls(tuple(records))

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def chronological(self) -> List[TransactionRecord]:
        return replay_order(self.records)

    def find(self, transaction_id: str) -> Optional[TransactionRecord]:
        for tx in self.records:
            if tx.id == transaction_id:
                return tx
        return None

    def in_month(self, month: str) -> List[TransactionRecord]:
        return [tx for tx in self.records if month_key(tx.date) == month]

    def newest_first(self) -> List[TransactionRecord]:
        return list(reversed(self.chronological()))


__all__ = [
    "TransactionLedger",
    "coerce_number",
    "filter_transactions",
    "month_key",
    "normalize_asset",
    "replay_order",
]
