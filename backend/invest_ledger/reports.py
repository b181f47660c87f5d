"""Monthly cash-flow reports plus budget and goal progress."""
from __future__ import annotations

from typing import Iterable, List, Mapping

from .cash import tx_total
from .ledger import coerce_number, month_key
from .models import (
    BudgetProgress,
    GoalProgress,
    MonthlyReport,
    TransactionRecord,
    TransactionType,
)

BUDGET_PCT_CAP = 999.0
GOAL_PCT_CAP = 140.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _in_month(transactions: Iterable[TransactionRecord], month: str) -> List[TransactionRecord]:
    return [tx for tx in transactions if month_key(tx.date) == month]


def monthly_report(transactions: Iterable[TransactionRecord], month: str) -> MonthlyReport:
    """Aggregate one ``YYYY-MM`` month of the ledger into cash-flow categories.

    Outflows are reported as positive magnitudes. ``net_cash_flow`` equals the
    plain sum of ``tx_total`` over the month.
    """

    selected = _in_month(transactions, month)
    deposits = withdraws = dividends = fees = buys = sells = 0.0
    for tx in selected:
        total = tx_total(tx)
        t_type = tx.normalized_type()
        if t_type == TransactionType.DEPOSIT:
            deposits += total
        elif t_type == TransactionType.WITHDRAW:
            withdraws += -total
        elif t_type == TransactionType.DIVIDEND:
            dividends += total
        elif t_type == TransactionType.FEE:
            fees += -total
        elif t_type == TransactionType.BUY:
            buys += -total
        elif t_type == TransactionType.SELL:
            sells += total

    net_cash_flow = deposits + dividends - withdraws - fees - buys + sells
    return MonthlyReport(
        month=month,
        deposits=deposits,
        withdraws=withdraws,
        dividends=dividends,
        fees=fees,
        buys=buys,
        sells=sells,
        net_cash_flow=net_cash_flow,
        count=len(selected),
    )


def deposits_in_month(transactions: Iterable[TransactionRecord], month: str) -> float:
    return sum(
        tx_total(tx)
        for tx in _in_month(transactions, month)
        if tx.normalized_type() == TransactionType.DEPOSIT
    )


def budget_progress(
    transactions: Iterable[TransactionRecord],
    budgets: Mapping[str, object] | None,
    month: str,
) -> BudgetProgress | None:
    """Compare the month's deposits with its budget; ``None`` when unbudgeted."""

    budget = coerce_number((budgets or {}).get(month))
    if budget <= 0:
        return None
    deposited = deposits_in_month(transactions, month)
    pct = _clamp(deposited / budget * 100, 0.0, BUDGET_PCT_CAP)
    return BudgetProgress(month=month, budget=budget, deposited=deposited, pct=pct)


def goal_progress(equity: float, goal: object) -> GoalProgress | None:
    target = coerce_number(goal)
    if target <= 0:
        return None
    pct = _clamp(equity / target * 100, 0.0, GOAL_PCT_CAP)
    return GoalProgress(target=target, equity=equity, pct=pct, remaining=max(0.0, target - equity))


__all__ = ["budget_progress", "deposits_in_month", "goal_progress", "monthly_report"]
