"""Database model exports."""

from .state import DEFAULT_STATE_KEY, PortfolioStateRecord

__all__ = [
    "DEFAULT_STATE_KEY",
    "PortfolioStateRecord",
]
