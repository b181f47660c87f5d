import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

from httpx import ASGITransport, AsyncClient

from app.db.session import Database
from app.main import create_app


def _database(tmp_path: Path) -> Database:
    db_path = tmp_path / "test_portfolio.db"
    return Database(url=f"sqlite+aiosqlite:///{db_path}")


def _client(database: Database):
    app = create_app(database)

    @asynccontextmanager
    async def _manager():
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client

    return _manager


async def _seed(api_client: AsyncClient) -> dict[str, str]:
    ids = {}
    for key, body in (
        ("deposit", {"date": "2024-01-15", "type": "deposit", "price": 1000}),
        ("buy", {"date": "2024-02-01", "type": "buy", "asset": "abc", "qty": 10, "price": 50, "fees": 5}),
        ("sell", {"date": "2024-02-20", "type": "sell", "asset": "ABC", "qty": 4, "price": 60, "fees": 2}),
    ):
        response = await api_client.post("/portfolio/transactions", json=body)
        assert response.status_code == 201, response.text
        ids[key] = response.json()["id"]
    response = await api_client.put("/portfolio/prices/abc", json={"price": 55})
    assert response.status_code == 200
    return ids


def test_ledger_flow_produces_expected_kpis(tmp_path: Path):
    client_manager = _client(_database(tmp_path))

    async def _scenario():
        async with client_manager() as api_client:
            await _seed(api_client)

            kpis = (await api_client.get("/portfolio/kpis")).json()
            assert kpis["cash"] == 733
            assert kpis["realized"] == 36
            assert kpis["unrealized"] == 27
            assert kpis["equity"] == 1063
            [position] = kpis["positions"]
            assert position["asset"] == "ABC"
            assert position["quantity"] == 6
            assert position["cost_basis"] == 303
            assert position["market_value"] == 330

            listing = (await api_client.get("/portfolio/transactions")).json()
            assert [tx["type"] for tx in listing] == ["sell", "buy", "deposit"]
            assert listing[0]["total"] == 238

            filtered = (await api_client.get("/portfolio/transactions", params={"month": "2024-02", "type": "buy"})).json()
            assert len(filtered) == 1 and filtered[0]["asset"] == "ABC"

            report = (await api_client.get("/portfolio/reports/2024-02")).json()
            assert report["count"] == 2
            assert report["buys"] == 505
            assert report["sells"] == 238
            assert report["net_cash_flow"] == -267
            assert report["budget"] is None

    asyncio.run(_scenario())


def test_update_and_delete_transactions(tmp_path: Path):
    client_manager = _client(_database(tmp_path))

    async def _scenario():
        async with client_manager() as api_client:
            ids = await _seed(api_client)

            updated = await api_client.put(
                f"/portfolio/transactions/{ids['deposit']}",
                json={"date": "2024-01-15", "type": "deposit", "price": 2000},
            )
            assert updated.status_code == 200
            assert updated.json()["id"] == ids["deposit"]
            assert (await api_client.get("/portfolio/kpis")).json()["cash"] == 1733

            deleted = await api_client.delete(f"/portfolio/transactions/{ids['sell']}")
            assert deleted.status_code == 204
            kpis = (await api_client.get("/portfolio/kpis")).json()
            assert kpis["realized"] == 0
            assert kpis["positions"][0]["quantity"] == 10

            missing = await api_client.delete("/portfolio/transactions/does-not-exist")
            assert missing.status_code == 404
            missing_update = await api_client.put(
                "/portfolio/transactions/does-not-exist",
                json={"date": "2024-01-15", "type": "fee", "price": 1},
            )
            assert missing_update.status_code == 404

    asyncio.run(_scenario())


def test_invalid_transactions_are_rejected(tmp_path: Path):
    client_manager = _client(_database(tmp_path))

    async def _scenario():
        async with client_manager() as api_client:
            no_asset = await api_client.post(
                "/portfolio/transactions", json={"date": "2024-01-01", "type": "buy", "qty": 1, "price": 10}
            )
            assert no_asset.status_code == 422
            bad_type = await api_client.post(
                "/portfolio/transactions", json={"date": "2024-01-01", "type": "transfer", "price": 10}
            )
            assert bad_type.status_code == 422
            assert (await api_client.get("/portfolio/transactions")).json() == []

    asyncio.run(_scenario())


def test_goal_budget_and_rebalance_endpoints(tmp_path: Path):
    client_manager = _client(_database(tmp_path))

    async def _scenario():
        async with client_manager() as api_client:
            await _seed(api_client)

            assert (await api_client.get("/portfolio/goal/progress")).json() is None
            goal = await api_client.put("/portfolio/goal", json={"equity": 2126})
            assert goal.json() == {"equity": 2126}
            progress = (await api_client.get("/portfolio/goal/progress")).json()
            assert progress["pct"] == 50
            assert progress["remaining"] == 1063

            budgets = await api_client.put("/portfolio/budgets/2024-01", json={"amount": 800})
            assert budgets.json() == {"2024-01": 800}
            budget = (await api_client.get("/portfolio/budgets/2024-01/progress")).json()
            assert budget["deposited"] == 1000
            assert budget["pct"] == 125
            assert (await api_client.put("/portfolio/budgets/2024-13", json={"amount": 1})).status_code == 422
            await api_client.put("/portfolio/budgets/2024-01", json={"amount": 0})
            assert (await api_client.get("/portfolio/budgets")).json() == {}

            empty = (await api_client.get("/portfolio/rebalance")).json()
            assert empty["lines"] == []
            assert "target" in empty["note"].lower()

            await api_client.put("/portfolio/targets/abc", json={"pct": 50})
            await api_client.put("/portfolio/targets/new", json={"pct": 50})
            assert (await api_client.put("/portfolio/targets/abc", json={"pct": 0})).status_code == 422
            advice = (await api_client.get("/portfolio/rebalance")).json()
            assert [line["asset"] for line in advice["lines"]] == ["ABC", "NEW"]
            assert advice["lines"][0]["action"] == "sell"
            assert advice["lines"][0]["amount"] == 165

            assert (await api_client.delete("/portfolio/targets/zzz")).status_code == 404
            assert (await api_client.delete("/portfolio/targets")).status_code == 204
            assert (await api_client.get("/portfolio/targets")).json() == {}

    asyncio.run(_scenario())


def test_equity_series_window(tmp_path: Path):
    client_manager = _client(_database(tmp_path))

    async def _scenario():
        async with client_manager() as api_client:
            await _seed(api_client)
            series = (await api_client.get("/portfolio/equity-series", params={"days": 7})).json()
            assert series["days"] == 7
            assert len(series["points"]) == 7
            assert series["points"][-1]["equity"] == 1063

            too_long = await api_client.get("/portfolio/equity-series", params={"days": 100000})
            assert too_long.status_code == 400

    asyncio.run(_scenario())


def test_import_export_and_reset(tmp_path: Path):
    client_manager = _client(_database(tmp_path))

    async def _scenario():
        async with client_manager() as api_client:
            await _seed(api_client)
            exported = (await api_client.get("/portfolio/export")).json()
            assert exported["cash"] == 733
            assert exported["prices"] == {"ABC": 55}

            rejected = await api_client.post(
                "/portfolio/import",
                json={"transactions": [{"date": "not-a-date", "type": "deposit", "price": 1}]},
            )
            assert rejected.status_code == 422
            assert (await api_client.get("/portfolio/export")).json() == exported

            assert (await api_client.post("/portfolio/import", json=[1, 2, 3])).status_code == 422

            reset = await api_client.post("/portfolio/reset")
            assert reset.json()["transactions"] == []
            assert (await api_client.get("/portfolio/kpis")).json()["equity"] == 0

            imported = await api_client.post("/portfolio/import", json={**exported, "cash": 1})
            assert imported.status_code == 200
            assert imported.json()["cash"] == 733
            assert (await api_client.get("/portfolio/export")).json() == exported

    asyncio.run(_scenario())


def test_health_endpoint(tmp_path: Path):
    client_manager = _client(_database(tmp_path))

    async def _scenario():
        async with client_manager() as api_client:
            response = await api_client.get("/health")
            assert response.status_code == 200
            assert response.json()["status"] == "ok"

    asyncio.run(_scenario())
