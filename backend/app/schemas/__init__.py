"""Pydantic schema exports."""

from .portfolio import (
    MONTH_PATTERN,
    BudgetProgressSchema,
    BudgetUpdateRequest,
    EquityPointSchema,
    EquitySeriesResponse,
    GoalProgressSchema,
    GoalSchema,
    HealthResponse,
    KPIResponse,
    MonthlyReportSchema,
    PositionSchema,
    PriceUpsertRequest,
    RebalanceLineSchema,
    RebalanceResponse,
    TargetUpsertRequest,
    TransactionCreateRequest,
    TransactionSchemaOut,
    TransactionUpdateRequest,
)
from .state import GoalsSchema, PortfolioState, TransactionSchema, new_transaction_id

__all__ = [
    "MONTH_PATTERN",
    "BudgetProgressSchema",
    "BudgetUpdateRequest",
    "EquityPointSchema",
    "EquitySeriesResponse",
    "GoalProgressSchema",
    "GoalSchema",
    "GoalsSchema",
    "HealthResponse",
    "KPIResponse",
    "MonthlyReportSchema",
    "PortfolioState",
    "PositionSchema",
    "PriceUpsertRequest",
    "RebalanceLineSchema",
    "RebalanceResponse",
    "TargetUpsertRequest",
    "TransactionCreateRequest",
    "TransactionSchema",
    "TransactionSchemaOut",
    "TransactionUpdateRequest",
    "new_transaction_id",
]
