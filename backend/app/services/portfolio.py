"""Domain services backing the portfolio API.

Mutations load the stored snapshot, change an in-memory copy and write the
whole document back in one commit. Derivations are recomputed from scratch by
the ``invest_ledger`` engine on every call.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.schemas import (
    PortfolioState,
    TransactionCreateRequest,
    TransactionSchema,
    TransactionUpdateRequest,
    new_transaction_id,
)
from app.services.state_store import load_state, save_state
from invest_ledger import (
    BudgetProgress,
    EquityPoint,
    GoalProgress,
    KPIs,
    MonthlyReport,
    RebalanceAdvice,
    TransactionRecord,
    budget_progress,
    compute_kpis,
    filter_transactions,
    goal_progress,
    monthly_report,
    normalize_asset,
    rebalance_suggestions,
    reconstruct_equity_series,
)

logger = logging.getLogger(__name__)


def today_in(timezone: str | None = None) -> date:
    """Return today's date in the configured timezone."""

    tz = ZoneInfo(timezone or get_settings().timezone)
    return datetime.now(tz).date()


def _require_asset(asset: str) -> str:
    normalized = normalize_asset(asset)
    if not normalized:
        raise ValueError("Asset must not be empty")
    return normalized


# Transactions

async def list_transactions(
    session: AsyncSession,
    *,
    search: str | None = None,
    month: str | None = None,
    type: str | None = None,
    asset: str | None = None,
) -> list[TransactionRecord]:
    state = await load_state(session)
    newest_first = state.ledger().newest_first()
    return filter_transactions(newest_first, search=search, month=month, type=type, asset=asset)


async def add_transaction(session: AsyncSession, payload: TransactionCreateRequest) -> TransactionSchema:
    state = await load_state(session)
    transaction = TransactionSchema(id=new_transaction_id(), **payload.model_dump())
    state.transactions.append(transaction)
    await save_state(session, state)
    logger.info("Added %s transaction %s dated %s", transaction.type.value, transaction.id, transaction.date)
    return transaction


async def update_transaction(
    session: AsyncSession,
    transaction_id: str,
    payload: TransactionUpdateRequest,
) -> TransactionSchema:
    state = await load_state(session)
    idx = state.index_of(transaction_id)
    transaction = TransactionSchema(id=transaction_id, **payload.model_dump())
    state.transactions[idx] = transaction
    await save_state(session, state)
    logger.info("Replaced transaction %s", transaction_id)
    return transaction


async def delete_transaction(session: AsyncSession, transaction_id: str) -> None:
    state = await load_state(session)
    idx = state.index_of(transaction_id)
    del state.transactions[idx]
    await save_state(session, state)
    logger.info("Removed transaction %s", transaction_id)


# Prices, goal, budgets and targets

async def upsert_price(session: AsyncSession, asset: str, price: float) -> dict[str, float]:
    state = await load_state(session)
    state.prices[_require_asset(asset)] = float(price)
    await save_state(session, state)
    return dict(state.prices)


async def remove_price(session: AsyncSession, asset: str) -> dict[str, float]:
    state = await load_state(session)
    if state.prices.pop(normalize_asset(asset), None) is None:
        raise LookupError(f"No price stored for {normalize_asset(asset)}")
    await save_state(session, state)
    return dict(state.prices)


async def set_goal(session: AsyncSession, equity: float | None) -> float | None:
    state = await load_state(session)
    state.goals.equity = equity if equity is not None and equity > 0 else None
    await save_state(session, state)
    return state.goals.equity


async def set_budget(session: AsyncSession, month: str, amount: float) -> dict[str, float]:
    state = await load_state(session)
    if amount > 0:
        state.budgets[month] = float(amount)
    else:
        state.budgets.pop(month, None)
    await save_state(session, state)
    return dict(state.budgets)


async def upsert_target(session: AsyncSession, asset: str, pct: float) -> dict[str, float]:
    if not pct > 0:
        raise ValueError("Target percentage must be > 0")
    state = await load_state(session)
    state.targets[_require_asset(asset)] = float(pct)
    await save_state(session, state)
    return dict(state.targets)


async def remove_target(session: AsyncSession, asset: str) -> dict[str, float]:
    state = await load_state(session)
    if state.targets.pop(normalize_asset(asset), None) is None:
        raise LookupError(f"No target stored for {normalize_asset(asset)}")
    await save_state(session, state)
    return dict(state.targets)


async def clear_targets(session: AsyncSession) -> None:
    state = await load_state(session)
    state.targets = {}
    await save_state(session, state)


# Snapshot transport

async def export_state(session: AsyncSession) -> dict[str, Any]:
    state = await load_state(session)
    return state.model_dump(mode="json")


async def import_state(session: AsyncSession, payload: Any) -> PortfolioState:
    """Replace the snapshot with ``payload``.

    The payload is fully validated before storage is touched, so a malformed
    document raises ``pydantic.ValidationError`` and leaves the previous
    snapshot in effect.
    """

    state = PortfolioState.model_validate(payload)
    await save_state(session, state)
    logger.info("Imported snapshot with %d transactions", len(state.transactions))
    return state


async def reset_state(session: AsyncSession) -> PortfolioState:
    state = await save_state(session, PortfolioState())
    logger.info("Portfolio snapshot reset")
    return state


# Derivations

def kpis_for(state: PortfolioState) -> KPIs:
    return compute_kpis(state.records(), state.prices)


def equity_series_for(state: PortfolioState, days: int, *, today: date | None = None) -> list[EquityPoint]:
    return reconstruct_equity_series(state.records(), state.prices, days, today=today or today_in())


def report_for(state: PortfolioState, month: str) -> tuple[MonthlyReport, BudgetProgress | None]:
    records = state.records()
    return monthly_report(records, month), budget_progress(records, state.budgets, month)


def rebalance_for(state: PortfolioState) -> RebalanceAdvice:
    kpis = kpis_for(state)
    return rebalance_suggestions(kpis.positions, state.prices, state.targets)


def goal_progress_for(state: PortfolioState) -> GoalProgress | None:
    return goal_progress(kpis_for(state).equity, state.goals.equity)


__all__ = [
    "add_transaction",
    "clear_targets",
    "delete_transaction",
    "equity_series_for",
    "export_state",
    "goal_progress_for",
    "import_state",
    "kpis_for",
    "list_transactions",
    "rebalance_for",
    "remove_price",
    "remove_target",
    "report_for",
    "reset_state",
    "set_budget",
    "set_goal",
    "today_in",
    "update_transaction",
    "upsert_price",
    "upsert_target",
]
