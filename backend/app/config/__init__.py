"""Configuration package for the Invest Ledger service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
