"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from app.db.session import Database

from .portfolio import get_portfolio_router


def build_api_router(database: Database) -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(get_portfolio_router(database), prefix="/portfolio", tags=["portfolio"])
    return api_router


__all__ = ["build_api_router"]
