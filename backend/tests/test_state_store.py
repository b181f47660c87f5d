from pathlib import Path

import pytest

from app.db.init import init_database
from app.db.session import Database
from app.schemas import PortfolioState
from app.services.state_store import load_state, save_state


async def test_load_returns_empty_snapshot_before_first_save(tmp_path: Path):
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await init_database(database)
    try:
        async with database.session() as session:
            state = await load_state(session)
        assert state == PortfolioState()
    finally:
        await database.dispose()


async def test_save_replaces_document_and_refreshes_cash(tmp_path: Path):
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await init_database(database)
    try:
        state = PortfolioState.model_validate(
            {"transactions": [{"id": "d", "date": "2024-03-01", "type": "deposit", "price": 250}]}
        )
        state.transactions.append(
            PortfolioState.model_validate(
                {"transactions": [{"id": "w", "date": "2024-03-02", "type": "withdraw", "price": 50}]}
            ).transactions[0]
        )
        async with database.session() as session:
            saved = await save_state(session, state)
        assert saved.cash == pytest.approx(200)

        async with database.session() as session:
            reloaded = await load_state(session)
            assert [tx.id for tx in reloaded.transactions] == ["d", "w"]
            assert reloaded.cash == pytest.approx(200)

            await save_state(session, PortfolioState())
        async with database.session() as session:
            assert (await load_state(session)).transactions == []
    finally:
        await database.dispose()
