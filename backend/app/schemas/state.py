"""Typed schema for the persisted portfolio snapshot.

Import accepts any subset of the top-level keys; anything missing falls back
to an empty or neutral value. ``cash`` is a cache and is always recomputed
from the transactions.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from invest_ledger import (
    TransactionLedger,
    TransactionRecord,
    TransactionType,
    coerce_number,
    compute_cash,
    normalize_asset,
)


def new_transaction_id() -> str:
    return uuid.uuid4().hex


def _numeric_mapping(value: Any, *, normalize_keys: bool) -> dict[str, float]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("expected an object mapping keys to numbers")
    result: dict[str, float] = {}
    for key, raw in value.items():
        name = normalize_asset(key) if normalize_keys else str(key).strip()
        if name:
            result[name] = coerce_number(raw)
    return result


class TransactionSchema(BaseModel):
    """A transaction as stored in the snapshot (``qty``/``fees``/``note`` keys)."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_transaction_id)
    date: date
    type: TransactionType
    asset: str = ""
    qty: float = 0.0
    price: float = 0.0
    fees: float = 0.0
    note: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if value is None or value == "":
            return new_transaction_id()
        return str(value)

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("asset", mode="before")
    @classmethod
    def _normalize_asset(cls, value: Any) -> str:
        return normalize_asset(value)

    @field_validator("qty", "price", "fees", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("note", mode="before")
    @classmethod
    def _text_note(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def to_record(self) -> TransactionRecord:
        return TransactionRecord(
            id=self.id,
            date=self.date,
            type=self.type,
            asset=self.asset,
            quantity=self.qty,
            price=self.price,
            fees=self.fees,
            note=self.note,
        )

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionSchema":
        return cls(
            id=record.id,
            date=record.date,
            type=record.type,
            asset=record.asset,
            qty=record.quantity,
            price=record.price,
            fees=record.fees,
            note=record.note,
        )


class GoalsSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    equity: float | None = None

    @field_validator("equity", mode="before")
    @classmethod
    def _coerce_goal(cls, value: Any) -> float | None:
        if value is None:
            return None
        number = coerce_number(value)
        return number if number > 0 else None


class PortfolioState(BaseModel):
    """The whole persisted snapshot: raw inputs plus the cached cash balance."""

    model_config = ConfigDict(extra="ignore")

    cash: float = 0.0
    transactions: list[TransactionSchema] = Field(default_factory=list)
    prices: dict[str, float] = Field(default_factory=dict)
    goals: GoalsSchema = Field(default_factory=GoalsSchema)
    budgets: dict[str, float] = Field(default_factory=dict)
    targets: dict[str, float] = Field(default_factory=dict)

    @field_validator("transactions", mode="before")
    @classmethod
    def _default_transactions(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("goals", mode="before")
    @classmethod
    def _default_goals(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("prices", "targets", mode="before")
    @classmethod
    def _asset_mapping(cls, value: Any) -> dict[str, float]:
        return _numeric_mapping(value, normalize_keys=True)

    @field_validator("budgets", mode="before")
    @classmethod
    def _budget_mapping(cls, value: Any) -> dict[str, float]:
        return _numeric_mapping(value, normalize_keys=False)

    @model_validator(mode="after")
    def _recompute_cash(self) -> "PortfolioState":
        self.cash = compute_cash(self.records())
        return self

    def records(self) -> list[TransactionRecord]:
        return [tx.to_record() for tx in self.transactions]

    def ledger(self) -> TransactionLedger:
        return TransactionLedger.of(self.records())

    def refresh_cash(self) -> None:
        """Re-derive the cached cash balance after an in-place mutation."""

        self.cash = compute_cash(self.records())

    def index_of(self, transaction_id: str) -> int:
        for idx, tx in enumerate(self.transactions):
            if tx.id == transaction_id:
                return idx
        raise LookupError(f"Transaction {transaction_id} not found")


__all__ = [
    "GoalsSchema",
    "PortfolioState",
    "TransactionSchema",
    "new_transaction_id",
]
