from __future__ import annotations

import itertools
from datetime import date

import pytest

from invest_ledger import TransactionRecord, TransactionType, compute_cash, tx_total


def _tx(tx_id, day, t_type, asset="", quantity=0.0, price=0.0, fees=0.0):
    return TransactionRecord(
        id=tx_id,
        date=date(2024, 3, day),
        type=t_type,
        asset=asset,
        quantity=quantity,
        price=price,
        fees=fees,
    )


@pytest.mark.parametrize(
    "tx, expected",
    [
        (_tx("d", 1, TransactionType.DEPOSIT, price=100), 100),
        (_tx("w", 1, TransactionType.WITHDRAW, price=40), -40),
        (_tx("v", 1, TransactionType.DIVIDEND, price=7.5), 7.5),
        (_tx("f", 1, TransactionType.FEE, price=2), -2),
        (_tx("b", 1, TransactionType.BUY, "ABC", 3, 10, 1), -31),
        (_tx("s", 1, TransactionType.SELL, "ABC", 3, 12, 1), 35),
    ],
)
def test_tx_total_sign_by_type(tx, expected):
    assert tx_total(tx) == pytest.approx(expected)


def test_cash_events_use_absolute_amount():
    assert tx_total(_tx("w", 1, TransactionType.WITHDRAW, price=-40)) == pytest.approx(-40)
    assert tx_total(_tx("d", 1, TransactionType.DEPOSIT, price=-25)) == pytest.approx(25)


def test_missing_fees_behave_as_zero():
    tx = TransactionRecord(
        id="b",
        date=date(2024, 1, 1),
        type=TransactionType.BUY,
        asset="ABC",
        quantity=2,
        price=5,
        fees=None,  # type: ignore[arg-type]
    )
    assert tx_total(tx) == pytest.approx(-10)


def test_non_numeric_fields_coerce_to_zero():
    tx = TransactionRecord(
        id="b",
        date=date(2024, 1, 1),
        type=TransactionType.BUY,
        asset="ABC",
        quantity="oops",  # type: ignore[arg-type]
        price=5,
        fees=1,
    )
    assert tx_total(tx) == pytest.approx(-1)


def test_cash_is_identical_for_every_permutation():
    transactions = [
        _tx("a", 1, TransactionType.DEPOSIT, price=0.1),
        _tx("b", 2, TransactionType.BUY, "ABC", 0.3, 0.7, 0.01),
        _tx("c", 3, TransactionType.DIVIDEND, price=0.2),
        _tx("d", 4, TransactionType.SELL, "ABC", 0.1, 1.3, 0.02),
        _tx("e", 5, TransactionType.FEE, price=0.3),
    ]
    results = {compute_cash(list(order)) for order in itertools.permutations(transactions)}
    assert len(results) == 1


def test_empty_ledger_has_zero_cash():
    assert compute_cash([]) == 0.0
