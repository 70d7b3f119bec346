"""Persistence layer for forecast runs."""

from .db import get_engine
from .store import ALL_SCOPES_KEY, ForecastStore, ensure_table, scope_key

__all__ = [
    "ALL_SCOPES_KEY",
    "ForecastStore",
    "ensure_table",
    "get_engine",
    "scope_key",
]
