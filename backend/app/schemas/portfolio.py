"""Pydantic schemas for ledger input validation and derived views."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from invest_ledger import TransactionType, normalize_asset
from invest_ledger.models import CASH_TYPES, TRADE_TYPES

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class TransactionCreateRequest(BaseModel):
    """Form payload for a new transaction.

    Invalid records are rejected here so they never reach the ledger.
    """

    date: date
    type: TransactionType = Field(..., examples=["buy"])
    asset: str = Field(default="", examples=["ABC"])
    qty: float = 0.0
    price: float = Field(default=0.0, description="Unit price for trades, amount for cash events")
    fees: float = Field(default=0.0, ge=0)
    note: str = ""

    @field_validator("asset", mode="before")
    @classmethod
    def _normalize_asset(cls, value: object) -> str:
        return normalize_asset(value)

    @model_validator(mode="after")
    def _check_type_rules(self) -> "TransactionCreateRequest":
        if self.type in TRADE_TYPES:
            if not self.asset:
                raise ValueError("asset is required for buy/sell")
            if not self.qty > 0:
                raise ValueError("qty must be > 0")
            if not self.price > 0:
                raise ValueError("price must be > 0")
        elif self.type in CASH_TYPES:
            if not self.price > 0:
                raise ValueError("amount (price) must be > 0")
        return self


class TransactionUpdateRequest(TransactionCreateRequest):
    pass


class TransactionSchemaOut(BaseModel):
    id: str
    date: date
    type: TransactionType
    asset: str
    qty: float
    price: float
    fees: float
    note: str
    total: float = Field(..., description="Signed cash impact")


class PriceUpsertRequest(BaseModel):
    price: float = Field(..., ge=0)


class GoalSchema(BaseModel):
    equity: float | None = Field(default=None, description="Target equity; empty or <= 0 clears it")


class BudgetUpdateRequest(BaseModel):
    amount: float = Field(..., description="Monthly deposit target; <= 0 removes the month")


class TargetUpsertRequest(BaseModel):
    pct: float = Field(..., gt=0, description="Target allocation in percentage points")


class PositionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset: str
    quantity: float
    average_cost: float
    cost_basis: float
    realized_pnl: float
    price: float = 0.0
    market_value: float = 0.0
    unrealized: float = 0.0


class KPIResponse(BaseModel):
    equity: float
    cash: float
    unrealized: float
    realized: float
    invested_value: float
    cost_basis: float
    positions: list[PositionSchema]


class EquityPointSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    equity: float


class EquitySeriesResponse(BaseModel):
    days: int
    points: list[EquityPointSchema]


class BudgetProgressSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    budget: float
    deposited: float
    pct: float


class GoalProgressSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    target: float
    equity: float
    pct: float
    remaining: float | None = None


class MonthlyReportSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    deposits: float
    withdraws: float
    dividends: float
    fees: float
    buys: float
    sells: float
    net_cash_flow: float
    count: int
    budget: BudgetProgressSchema | None = None


class RebalanceLineSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset: str
    target_pct: float
    current_pct: float
    current_value: float
    target_value: float
    diff: float
    action: str
    amount: float


class RebalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lines: list[RebalanceLineSchema]
    note: str


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str
    timezone: str


__all__ = [
    "MONTH_PATTERN",
    "BudgetProgressSchema",
    "BudgetUpdateRequest",
    "EquityPointSchema",
    "EquitySeriesResponse",
    "GoalProgressSchema",
    "GoalSchema",
    "HealthResponse",
    "KPIResponse",
    "MonthlyReportSchema",
    "PositionSchema",
    "PriceUpsertRequest",
    "RebalanceLineSchema",
    "RebalanceResponse",
    "TargetUpsertRequest",
    "TransactionCreateRequest",
    "TransactionSchemaOut",
    "TransactionUpdateRequest",
]
