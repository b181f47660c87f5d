"""Persisted portfolio snapshot document."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base

DEFAULT_STATE_KEY = "default"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PortfolioStateRecord(Base):
    """One row per snapshot; the whole ledger lives in ``payload``."""

    __tablename__ = "portfolio_state"

    key: Mapped[str] = mapped_column(String(64), primary_key=True, default=DEFAULT_STATE_KEY)
    payload: Mapped[dict] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


__all__ = ["DEFAULT_STATE_KEY", "PortfolioStateRecord"]
