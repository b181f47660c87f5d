"""Load an exported snapshot JSON file into the configured database."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from pydantic import ValidationError

from app.config import get_settings
from app.db.init import init_database
from app.db.session import Database
from app.services.portfolio import import_state


async def _run(payload: object, database_url: str) -> int:
    database = Database(database_url)
    try:
        await init_database(database)
        async with database.session() as session:
            state = await import_state(session, payload)
        return len(state.transactions)
    finally:
        await database.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Import a snapshot into the Invest Ledger database")
    parser.add_argument("snapshot_file")
    parser.add_argument("--database-url", default=None)
    args = parser.parse_args()
    snapshot_path = Path(args.snapshot_file)
    if not snapshot_path.exists():
        raise SystemExit(f"Snapshot file not found: {snapshot_path}")
    try:
        payload = json.loads(snapshot_path.read_text())
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Snapshot is not valid JSON: {exc}") from exc
    database_url = args.database_url or get_settings().database_url
    try:
        count = asyncio.run(_run(payload, database_url))
    except ValidationError as exc:
        raise SystemExit(f"Snapshot rejected, previous data kept: {exc}") from exc
    print(f"Imported {count} transactions from {snapshot_path}")


if __name__ == "__main__":
    main()
