"""Cash balance replay."""
from __future__ import annotations

import math
from typing import Iterable

from .ledger import coerce_number
from .models import TransactionRecord, TransactionType


def tx_total(tx: TransactionRecord) -> float:
    """Return the signed cash impact of a single transaction.

    Cash-only events carry their amount in ``price``; trades settle
    ``quantity * price`` with fees added to buys and deducted from sells.
    """

    t_type = tx.normalized_type()
    amount = abs(coerce_number(tx.price))
    if t_type in (TransactionType.DEPOSIT, TransactionType.DIVIDEND):
        return amount
    if t_type in (TransactionType.WITHDRAW, TransactionType.FEE):
        return -amount

    gross = coerce_number(tx.quantity) * coerce_number(tx.price)
    fees = coerce_number(tx.fees)
    if t_type == TransactionType.BUY:
        return -(gross + fees)
    if t_type == TransactionType.SELL:
        return gross - fees
    return 0.0


def compute_cash(transactions: Iterable[TransactionRecord]) -> float:
    """Sum the cash impact of every transaction.

    Each record's impact depends only on its own fields, and ``math.fsum`` is
    exactly rounded, so any permutation of the ledger yields the same float.
    """

    return math.fsum(tx_total(tx) for tx in transactions)


__all__ = ["compute_cash", "tx_total"]
