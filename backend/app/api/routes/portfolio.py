"""Portfolio ledger, valuation, report and snapshot endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.db.session import Database
from app.schemas import (
    MONTH_PATTERN,
    BudgetProgressSchema,
    BudgetUpdateRequest,
    EquityPointSchema,
    EquitySeriesResponse,
    GoalProgressSchema,
    GoalSchema,
    KPIResponse,
    MonthlyReportSchema,
    PositionSchema,
    PriceUpsertRequest,
    RebalanceResponse,
    TargetUpsertRequest,
    TransactionCreateRequest,
    TransactionSchemaOut,
    TransactionUpdateRequest,
)
from app.services import portfolio as portfolio_service
from app.services.state_store import load_state
from invest_ledger import KPIs, TransactionRecord, TransactionType, tx_total
from invest_ledger.valuation import normalize_prices


def _serialize_transaction(tx: TransactionRecord) -> TransactionSchemaOut:
    return TransactionSchemaOut(
        id=tx.id,
        date=tx.date,
        type=tx.type,
        asset=tx.asset,
        qty=tx.quantity,
        price=tx.price,
        fees=tx.fees,
        note=tx.note,
        total=tx_total(tx),
    )


def _serialize_kpis(kpis: KPIs, prices: dict[str, float]) -> KPIResponse:
    price_map = normalize_prices(prices)
    positions: list[PositionSchema] = []
    for asset in sorted(kpis.positions):
        lot = kpis.positions[asset]
        price = price_map.get(asset, 0.0)
        market_value = lot.quantity * price
        positions.append(
            PositionSchema(
                asset=asset,
                quantity=lot.quantity,
                average_cost=lot.average_cost,
                cost_basis=lot.cost_basis,
                realized_pnl=lot.realized_pnl,
                price=price,
                market_value=market_value,
                unrealized=market_value - lot.cost_basis,
            )
        )
    return KPIResponse(
        equity=kpis.equity,
        cash=kpis.cash,
        unrealized=kpis.unrealized,
        realized=kpis.realized,
        invested_value=kpis.invested_value,
        cost_basis=kpis.cost_basis,
        positions=positions,
    )


def get_portfolio_router(database: Database) -> APIRouter:
    router = APIRouter()
    session_dependency = Depends(database.get_session)

    # Transactions

    @router.get("/transactions", response_model=list[TransactionSchemaOut])
    async def get_transactions(
        search: str | None = Query(default=None),
        month: str | None = Query(default=None, pattern=MONTH_PATTERN),
        type: TransactionType | None = Query(default=None),
        asset: str | None = Query(default=None),
        session: AsyncSession = session_dependency,
    ) -> list[TransactionSchemaOut]:
        records = await portfolio_service.list_transactions(
            session, search=search, month=month, type=type, asset=asset
        )
        return [_serialize_transaction(tx) for tx in records]

    @router.post("/transactions", response_model=TransactionSchemaOut, status_code=status.HTTP_201_CREATED)
    async def post_transaction(
        payload: TransactionCreateRequest,
        session: AsyncSession = session_dependency,
    ) -> TransactionSchemaOut:
        transaction = await portfolio_service.add_transaction(session, payload)
        return _serialize_transaction(transaction.to_record())

    @router.put("/transactions/{transaction_id}", response_model=TransactionSchemaOut)
    async def put_transaction(
        transaction_id: str,
        payload: TransactionUpdateRequest,
        session: AsyncSession = session_dependency,
    ) -> TransactionSchemaOut:
        try:
            transaction = await portfolio_service.update_transaction(session, transaction_id, payload)
        except LookupError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return _serialize_transaction(transaction.to_record())

    @router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_transaction(
        transaction_id: str,
        session: AsyncSession = session_dependency,
    ) -> Response:
        try:
            await portfolio_service.delete_transaction(session, transaction_id)
        except LookupError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # Prices

    @router.get("/prices", response_model=dict[str, float])
    async def get_prices(session: AsyncSession = session_dependency) -> dict[str, float]:
        state = await load_state(session)
        return dict(sorted(state.prices.items()))

    @router.put("/prices/{asset}", response_model=dict[str, float])
    async def put_price(
        asset: str,
        payload: PriceUpsertRequest,
        session: AsyncSession = session_dependency,
    ) -> dict[str, float]:
        try:
            return await portfolio_service.upsert_price(session, asset, payload.price)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    @router.delete("/prices/{asset}", response_model=dict[str, float])
    async def delete_price(asset: str, session: AsyncSession = session_dependency) -> dict[str, float]:
        try:
            return await portfolio_service.remove_price(session, asset)
        except LookupError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    # Goal and budgets

    @router.get("/goal", response_model=GoalSchema)
    async def get_goal(session: AsyncSession = session_dependency) -> GoalSchema:
        state = await load_state(session)
        return GoalSchema(equity=state.goals.equity)

    @router.put("/goal", response_model=GoalSchema)
    async def put_goal(payload: GoalSchema, session: AsyncSession = session_dependency) -> GoalSchema:
        equity = await portfolio_service.set_goal(session, payload.equity)
        return GoalSchema(equity=equity)

    @router.get("/goal/progress", response_model=GoalProgressSchema | None)
    async def get_goal_progress(session: AsyncSession = session_dependency) -> GoalProgressSchema | None:
        state = await load_state(session)
        progress = portfolio_service.goal_progress_for(state)
        return GoalProgressSchema.model_validate(progress) if progress else None

    @router.get("/budgets", response_model=dict[str, float])
    async def get_budgets(session: AsyncSession = session_dependency) -> dict[str, float]:
        state = await load_state(session)
        return dict(sorted(state.budgets.items()))

    @router.put("/budgets/{month}", response_model=dict[str, float])
    async def put_budget(
        payload: BudgetUpdateRequest,
        month: str = Path(..., pattern=MONTH_PATTERN),
        session: AsyncSession = session_dependency,
    ) -> dict[str, float]:
        return await portfolio_service.set_budget(session, month, payload.amount)

    @router.get("/budgets/{month}/progress", response_model=BudgetProgressSchema | None)
    async def get_budget_progress(
        month: str = Path(..., pattern=MONTH_PATTERN),
        session: AsyncSession = session_dependency,
    ) -> BudgetProgressSchema | None:
        state = await load_state(session)
        _, progress = portfolio_service.report_for(state, month)
        return BudgetProgressSchema.model_validate(progress) if progress else None

    # Targets

    @router.get("/targets", response_model=dict[str, float])
    async def get_targets(session: AsyncSession = session_dependency) -> dict[str, float]:
        state = await load_state(session)
        return dict(state.targets)

    @router.put("/targets/{asset}", response_model=dict[str, float])
    async def put_target(
        asset: str,
        payload: TargetUpsertRequest,
        session: AsyncSession = session_dependency,
    ) -> dict[str, float]:
        try:
            return await portfolio_service.upsert_target(session, asset, payload.pct)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    @router.delete("/targets/{asset}", response_model=dict[str, float])
    async def delete_target(asset: str, session: AsyncSession = session_dependency) -> dict[str, float]:
        try:
            return await portfolio_service.remove_target(session, asset)
        except LookupError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @router.delete("/targets", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_targets(session: AsyncSession = session_dependency) -> Response:
        await portfolio_service.clear_targets(session)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # Derived views

    @router.get("/kpis", response_model=KPIResponse)
    async def get_kpis(session: AsyncSession = session_dependency) -> KPIResponse:
        state = await load_state(session)
        return _serialize_kpis(portfolio_service.kpis_for(state), state.prices)

    @router.get("/positions", response_model=list[PositionSchema])
    async def get_positions(session: AsyncSession = session_dependency) -> list[PositionSchema]:
        state = await load_state(session)
        return _serialize_kpis(portfolio_service.kpis_for(state), state.prices).positions

    @router.get("/equity-series", response_model=EquitySeriesResponse)
    async def get_equity_series(
        days: int | None = Query(default=None, ge=1),
        session: AsyncSession = session_dependency,
    ) -> EquitySeriesResponse:
        settings = get_settings()
        window = days or settings.equity_series_days
        if window > settings.equity_series_max_days:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"days must be <= {settings.equity_series_max_days}",
            )
        state = await load_state(session)
        points = portfolio_service.equity_series_for(state, window)
        return EquitySeriesResponse(days=window, points=[EquityPointSchema.model_validate(p) for p in points])

    @router.get("/reports/{month}", response_model=MonthlyReportSchema)
    async def get_monthly_report(
        month: str = Path(..., pattern=MONTH_PATTERN),
        session: AsyncSession = session_dependency,
    ) -> MonthlyReportSchema:
        state = await load_state(session)
        report, budget = portfolio_service.report_for(state, month)
        result = MonthlyReportSchema.model_validate(report)
        if budget is not None:
            result.budget = BudgetProgressSchema.model_validate(budget)
        return result

    @router.get("/rebalance", response_model=RebalanceResponse)
    async def get_rebalance(session: AsyncSession = session_dependency) -> RebalanceResponse:
        state = await load_state(session)
        return RebalanceResponse.model_validate(portfolio_service.rebalance_for(state))

    # Snapshot transport

    @router.get("/export")
    async def export_snapshot(session: AsyncSession = session_dependency) -> dict[str, Any]:
        return await portfolio_service.export_state(session)

    @router.post("/import")
    async def import_snapshot(
        payload: Any = Body(...),
        session: AsyncSession = session_dependency,
    ) -> dict[str, Any]:
        try:
            state = await portfolio_service.import_state(session, payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=exc.errors(include_url=False, include_context=False),
            ) from exc
        return state.model_dump(mode="json")

    @router.post("/reset")
    async def reset_snapshot(session: AsyncSession = session_dependency) -> dict[str, Any]:
        state = await portfolio_service.reset_state(session)
        return state.model_dump(mode="json")

    return router


__all__ = ["get_portfolio_router"]
