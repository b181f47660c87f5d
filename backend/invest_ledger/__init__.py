"""Ledger replay and portfolio accounting engine."""

from .cash import compute_cash, tx_total
from .ledger import (
    TransactionLedger,
    coerce_number,
    filter_transactions,
    month_key,
    normalize_asset,
    replay_order,
)
from .models import (
    EPSILON,
    BudgetProgress,
    EquityPoint,
    GoalProgress,
    KPIs,
    MonthlyReport,
    PositionLot,
    RebalanceAdvice,
    RebalanceLine,
    TransactionRecord,
    TransactionType,
)
from .positions import compute_positions
from .rebalance import rebalance_suggestions
from .reports import budget_progress, deposits_in_month, goal_progress, monthly_report
from .timeseries import reconstruct_equity_series
from .valuation import compute_kpis, market_values

__all__ = [
    "EPSILON",
    "BudgetProgress",
    "EquityPoint",
    "GoalProgress",
    "KPIs",
    "MonthlyReport",
    "PositionLot",
    "RebalanceAdvice",
    "RebalanceLine",
    "TransactionLedger",
    "TransactionRecord",
    "TransactionType",
    "budget_progress",
    "coerce_number",
    "compute_cash",
    "compute_kpis",
    "compute_positions",
    "deposits_in_month",
    "filter_transactions",
    "goal_progress",
    "market_values",
    "month_key",
    "monthly_report",
    "normalize_asset",
    "rebalance_suggestions",
    "reconstruct_equity_series",
    "replay_order",
    "tx_total",
]
