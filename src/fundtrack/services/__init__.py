"""Service module exports."""

from . import accounts, entry, formatting, history, market_data, positions, summary

__all__ = [
    "accounts",
    "entry",
    "formatting",
    "history",
    "market_data",
    "positions",
    "summary",
]
