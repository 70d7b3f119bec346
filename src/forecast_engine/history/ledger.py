"""Order ledger sources feeding the historical metrics loader."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

ORDER_COLUMNS = ["created_at", "total", "status", "scope_id", "uses_package", "customer_created_at"]

DEFAULT_COLS: Dict[str, str] = {
    "created_at": "created_at",
    "total": "total",
    "status": "status",
    "scope": "branch_id",
    "package_usages": "package_usages",
    "customer_id": "customer_id",
}


def _qualify_table(table: str, schema: Optional[str]) -> str:
    if "." in table:
        return table
    return f"{schema}.{table}" if schema else table


def _sql_ts(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%d %H:%M:%S")


def normalise_orders(frame: pd.DataFrame) -> pd.DataFrame:
    """Coerce a raw order frame into the ledger column contract.

    ``created_at`` becomes tz-aware UTC, ``total`` float and
    ``uses_package`` boolean (derived from ``package_usages`` when absent).
    """

    if frame.empty:
        return pd.DataFrame(columns=ORDER_COLUMNS)
    df = frame.copy()
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
    df["total"] = pd.to_numeric(df["total"], errors="coerce").fillna(0.0).astype(float)
    if "status" not in df.columns:
        df["status"] = None
    if "scope_id" not in df.columns:
        df["scope_id"] = df["branch_id"] if "branch_id" in df.columns else None
    if "uses_package" not in df.columns:
        if "package_usages" in df.columns:
            df["uses_package"] = df["package_usages"].notna()
        else:
            df["uses_package"] = False
    df["uses_package"] = df["uses_package"].fillna(False).astype(bool)
    if "customer_created_at" not in df.columns:
        df["customer_created_at"] = pd.NaT
    return df[ORDER_COLUMNS].sort_values("created_at").reset_index(drop=True)


class OrderLedger:
    """Source of raw order records."""

    def fetch_orders(
        self, scope_id: Optional[str], start: datetime, end: datetime
    ) -> pd.DataFrame:
        """Return orders created in ``[start, end)`` for the scope (all scopes when ``None``)."""

        raise NotImplementedError


class SqlOrderLedger(OrderLedger):
    """Read orders from a relational table through SQLAlchemy."""

    def __init__(
        self,
        engine: Engine | str,
        table: str = "orders",
        schema: Optional[str] = None,
        customers_table: Optional[str] = None,
        cols: Optional[Dict[str, str]] = None,
    ) -> None:
        self.engine = create_engine(engine) if isinstance(engine, str) else engine
        self.table = _qualify_table(table, schema)
        self.customers_table = _qualify_table(customers_table, schema) if customers_table else None
        self.cols = {**DEFAULT_COLS, **(cols or {})}

    def _build_query(self, scope_id: Optional[str]) -> str:
        c = self.cols
        select = [
            f"o.{c['created_at']} AS created_at",
            f"o.{c['total']} AS total",
            f"o.{c['status']} AS status",
            f"o.{c['scope']} AS scope_id",
            f"CASE WHEN o.{c['package_usages']} IS NULL THEN 0 ELSE 1 END AS uses_package",
        ]
        join = ""
        if self.customers_table:
            select.append("cu.created_at AS customer_created_at")
            join = f"LEFT JOIN {self.customers_table} cu ON cu.id = o.{c['customer_id']}"
        scope_filter = f"AND o.{c['scope']} = :scope_id" if scope_id is not None else ""
        return f"""
          SELECT {", ".join(select)}
          FROM {self.table} o
          {join}
          WHERE o.{c['created_at']} >= :start AND o.{c['created_at']} < :end
            {scope_filter}
          ORDER BY o.{c['created_at']} ASC
        """

    def fetch_orders(
        self, scope_id: Optional[str], start: datetime, end: datetime
    ) -> pd.DataFrame:
        params = {"start": _sql_ts(start), "end": _sql_ts(end)}
        if scope_id is not None:
            params["scope_id"] = scope_id
        logger.debug("Querying %s between %s and %s", self.table, params["start"], params["end"])
        with self.engine.connect() as conn:
            df = pd.read_sql(text(self._build_query(scope_id)), conn, params=params)
        return normalise_orders(df)


class FrameOrderLedger(OrderLedger):
    """In-memory ledger backed by a pandas DataFrame."""

    def __init__(self, frame: pd.DataFrame) -> None:
        self.frame = normalise_orders(frame)

    def append(self, frame: pd.DataFrame) -> None:
        incoming = normalise_orders(frame)
        if self.frame.empty or incoming.empty:
            self.frame = incoming if self.frame.empty else self.frame
            return
        combined = pd.concat([self.frame, incoming], ignore_index=True)
        self.frame = combined.sort_values("created_at").reset_index(drop=True)

    def fetch_orders(
        self, scope_id: Optional[str], start: datetime, end: datetime
    ) -> pd.DataFrame:
        df = self.frame
        if df.empty:
            return df.copy()
        start_ts = pd.Timestamp(start)
        end_ts = pd.Timestamp(end)
        if start_ts.tzinfo is None:
            start_ts = start_ts.tz_localize("UTC")
        if end_ts.tzinfo is None:
            end_ts = end_ts.tz_localize("UTC")
        mask = (df["created_at"] >= start_ts) & (df["created_at"] < end_ts)
        if scope_id is not None:
            mask &= df["scope_id"].astype(str) == str(scope_id)
        return df[mask].reset_index(drop=True)


__all__ = [
    "ORDER_COLUMNS",
    "OrderLedger",
    "SqlOrderLedger",
    "FrameOrderLedger",
    "normalise_orders",
]
