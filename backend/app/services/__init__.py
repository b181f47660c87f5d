"""Service layer helpers."""

from . import portfolio, state_store

__all__ = ["portfolio", "state_store"]
