"""Domain models used by the ledger replay engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

EPSILON = 1e-12


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"
    FEE = "fee"


TRADE_TYPES = (TransactionType.BUY, TransactionType.SELL)
CASH_TYPES = (
    TransactionType.DEPOSIT,
    TransactionType.WITHDRAW,
    TransactionType.DIVIDEND,
    TransactionType.FEE,
)


@dataclass(frozen=True)
class TransactionRecord:
    """A single ledger event.

    ``price`` is the unit price for buys and sells and the cash amount for
    deposits, withdrawals, dividends and fees.
    """

    id: str
    date: date
    type: TransactionType
    asset: str = ""
    quantity: float = 0.0
    price: float = 0.0
    fees: float = 0.0
    note: str = ""

    def normalized_type(self) -> str:
        """Return the lower-cased transaction type for consistent comparisons."""

        value = self.type.value if isinstance(self.type, TransactionType) else str(self.type)
        return value.strip().lower()


@dataclass
class PositionLot:
    """Running weighted-average-cost aggregate for one asset."""

    asset: str
    quantity: float = 0.0
    average_cost: float = 0.0
    cost_basis: float = 0.0
    realized_pnl: float = 0.0


@dataclass(frozen=True)
class KPIs:
    equity: float
    cash: float
    unrealized: float
    realized: float
    invested_value: float
    cost_basis: float
    positions: Dict[str, PositionLot] = field(default_factory=dict)


@dataclass(frozen=True)
class EquityPoint:
    date: date
    equity: float


@dataclass(frozen=True)
class MonthlyReport:
    """Cash-flow categories for one calendar month, as positive magnitudes."""

    month: str
    deposits: float
    withdraws: float
    dividends: float
    fees: float
    buys: float
    sells: float
    net_cash_flow: float
    count: int


@dataclass(frozen=True)
class RebalanceLine:
    asset: str
    target_pct: float
    current_pct: float
    current_value: float
    target_value: float
    diff: float

    @property
    def action(self) -> str:
        return "buy" if self.diff >= 0 else "sell"

    @property
    def amount(self) -> float:
        return abs(self.diff)


@dataclass(frozen=True)
class RebalanceAdvice:
    lines: List[RebalanceLine]
    note: str


@dataclass(frozen=True)
class BudgetProgress:
    month: str
    budget: float
    deposited: float
    pct: float


@dataclass(frozen=True)
class GoalProgress:
    target: float
    equity: float
    pct: float
    remaining: Optional[float] = None
