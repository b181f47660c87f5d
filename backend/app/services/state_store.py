"""Load and persist the portfolio snapshot document."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import DEFAULT_STATE_KEY, PortfolioStateRecord
from app.schemas import PortfolioState

logger = logging.getLogger(__name__)


async def load_state(session: AsyncSession, *, key: str = DEFAULT_STATE_KEY) -> PortfolioState:
    """Return the stored snapshot, or an empty one when nothing was saved yet."""

    record = await session.get(PortfolioStateRecord, key)
    if record is None:
        return PortfolioState()
    return PortfolioState.model_validate(record.payload or {})


async def save_state(
    session: AsyncSession,
    state: PortfolioState,
    *,
    key: str = DEFAULT_STATE_KEY,
) -> PortfolioState:
    """Replace the stored snapshot with ``state`` in a single commit."""

    state.refresh_cash()
    payload = state.model_dump(mode="json")
    record = await session.get(PortfolioStateRecord, key)
    if record is None:
        session.add(PortfolioStateRecord(key=key, payload=payload))
    else:
        record.payload = payload
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        logger.exception("Failed to persist portfolio snapshot %s", key)
        raise
    logger.debug("Persisted snapshot %s with %d transactions", key, len(state.transactions))
    return state


__all__ = ["load_state", "save_state"]
