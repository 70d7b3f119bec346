"""SQLAlchemy engine construction from settings.

The DSN comes from ``DB_DSN``; when unset a SQLite file at
``DB_SQLITE_PATH`` is used.  ``sqlite:///:memory:`` is understood and shares
a single connection so every caller sees the same database.
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from ..config import get_settings


def _sqlite_path(dsn: str) -> str | None:
    if not dsn.startswith("sqlite"):
        return None
    parts = dsn.split(":///", 1)
    return parts[1] if len(parts) == 2 else ":memory:"


def get_engine(url: str | None = None, echo: bool | None = None) -> Engine:
    """Create an engine for ``url`` or the configured store DSN."""

    settings = get_settings()
    dsn = url or settings.store_dsn
    echo = settings.db_echo if echo is None else echo
    path = _sqlite_path(dsn)
    if path is None:
        return create_engine(dsn, echo=echo)
    if path in ("", ":memory:"):
        return create_engine(
            "sqlite://",
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(dsn, echo=echo)


__all__ = ["get_engine"]
