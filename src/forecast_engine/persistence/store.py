"""Persistence of forecast runs in the ``analytics_forecasts`` table."""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..core.cohorts import cohort_key
from ..core.schemas import (
    CohortFilter,
    ForecastMetric,
    ForecastRecord,
    HistoricalMetricRow,
)
from ..history.loader import HistoricalMetricsLoader

logger = logging.getLogger(__name__)

ALL_SCOPES_KEY = "__all__"

_COLUMNS = (
    "id",
    "metric",
    "target_date",
    "scope_id",
    "scope_key",
    "cohort",
    "cohort_key",
    "horizon_days",
    "value",
    "lower_bound",
    "upper_bound",
    "seasonal_influence",
    "metadata",
    "generated_at",
)


def scope_key(scope_id: Optional[str]) -> str:
    return ALL_SCOPES_KEY if scope_id is None else str(scope_id)


def ensure_table(engine: Engine, table: str) -> None:
    """Create the forecasts table if it does not already exist."""

    ddl = f"""
    CREATE TABLE IF NOT EXISTS {table} (
      id VARCHAR(36) PRIMARY KEY,
      metric VARCHAR(32) NOT NULL,
      target_date DATE NOT NULL,
      scope_id VARCHAR(64) NULL,
      scope_key VARCHAR(64) NOT NULL,
      cohort TEXT NULL,
      cohort_key VARCHAR(64) NOT NULL,
      horizon_days INTEGER NOT NULL,
      value DOUBLE PRECISION NOT NULL,
      lower_bound DOUBLE PRECISION NOT NULL,
      upper_bound DOUBLE PRECISION NOT NULL,
      seasonal_influence TEXT NULL,
      metadata TEXT NULL,
      generated_at VARCHAR(40) NOT NULL,
      UNIQUE (metric, scope_key, cohort_key, target_date)
    )
    """
    index = f"""
    CREATE INDEX IF NOT EXISTS ix_{table}_key
      ON {table} (metric, scope_key, cohort_key)
    """
    with engine.begin() as conn:
        conn.execute(text(ddl))
        conn.execute(text(index))


def _format_ts(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _load_json(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, (dict, list)):
        return value
    return json.loads(value)


def _build_row(record: ForecastRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "metric": ForecastMetric(record.metric).value,
        "target_date": record.target_date.isoformat(),
        "scope_id": record.scope_id,
        "scope_key": scope_key(record.scope_id),
        "cohort": record.cohort.model_dump_json() if record.cohort else None,
        "cohort_key": record.cohort_key,
        "horizon_days": record.horizon_days,
        "value": record.value,
        "lower_bound": record.lower_bound,
        "upper_bound": record.upper_bound,
        "seasonal_influence": (
            record.seasonal_influence.model_dump_json() if record.seasonal_influence else None
        ),
        "metadata": json.dumps(record.metadata or {}),
        "generated_at": _format_ts(record.generated_at),
    }


def _row_to_record(row) -> ForecastRecord:
    data = dict(row._mapping) if hasattr(row, "_mapping") else dict(row)
    return ForecastRecord(
        id=str(data["id"]),
        metric=ForecastMetric(data["metric"]),
        target_date=_parse_date(data["target_date"]),
        scope_id=data.get("scope_id"),
        cohort=_load_json(data.get("cohort")),
        cohort_key=data["cohort_key"],
        horizon_days=int(data["horizon_days"]),
        value=float(data["value"]),
        lower_bound=float(data["lower_bound"]),
        upper_bound=float(data["upper_bound"]),
        seasonal_influence=_load_json(data.get("seasonal_influence")),
        metadata=_load_json(data.get("metadata")) or {},
        generated_at=_parse_ts(data["generated_at"]),
    )


def _chunk(rows: List[dict], size: int) -> Iterable[List[dict]]:
    for i in range(0, len(rows), size):
        yield rows[i : i + size]


class ForecastStore:
    """Forecast runs keyed by ``(metric, scope, cohort_key)``.

    ``replace`` deletes and inserts in one transaction but takes no lock:
    callers must serialize runs for the same key.
    """

    def __init__(
        self,
        engine: Engine,
        loader: HistoricalMetricsLoader,
        table: str = "analytics_forecasts",
    ) -> None:
        self.engine = engine
        self.loader = loader
        self.table = table
        self._ensured = False

    def ensure_table(self) -> None:
        if self._ensured:
            return
        ensure_table(self.engine, self.table)
        self._ensured = True

    def replace(self, records: Sequence[ForecastRecord]) -> Dict[str, int]:
        """Swap every stored record of the batch's key for the batch."""

        self.ensure_table()
        if not records:
            return {"deleted": 0, "inserted": 0}
        keys = {
            (ForecastMetric(r.metric).value, scope_key(r.scope_id), r.cohort_key) for r in records
        }
        if len(keys) != 1:
            raise ValueError("replace() expects records for a single (metric, scope, cohort) key")
        metric, scope, cohort = keys.pop()
        rows = [_build_row(r) for r in records]
        delete_sql = text(
            f"DELETE FROM {self.table} "
            "WHERE metric = :metric AND scope_key = :scope_key AND cohort_key = :cohort_key"
        )
        insert_sql = text(
            f"INSERT INTO {self.table} ({', '.join(_COLUMNS)}) "
            f"VALUES ({', '.join(':' + c for c in _COLUMNS)})"
        )
        with self.engine.begin() as conn:
            result = conn.execute(
                delete_sql, {"metric": metric, "scope_key": scope, "cohort_key": cohort}
            )
            deleted = max(result.rowcount or 0, 0)
            for chunk in _chunk(rows, 500):
                conn.execute(insert_sql, chunk)
        logger.info(
            "Replaced forecasts metric=%s scope=%s cohort_key=%s: deleted=%d inserted=%d",
            metric,
            scope,
            cohort,
            deleted,
            len(rows),
        )
        return {"deleted": deleted, "inserted": len(rows)}

    def list(
        self,
        metric: ForecastMetric | str,
        scope_id: Optional[str],
        cohort: Optional[CohortFilter],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[ForecastRecord]:
        """Stored records for the key, inclusive date bounds, ascending by date."""

        self.ensure_table()
        clauses = ["metric = :metric", "scope_key = :scope_key", "cohort_key = :cohort_key"]
        params: Dict[str, Any] = {
            "metric": ForecastMetric(metric).value,
            "scope_key": scope_key(scope_id),
            "cohort_key": cohort_key(cohort),
        }
        if start_date is not None:
            clauses.append("target_date >= :start")
            params["start"] = start_date.isoformat()
        if end_date is not None:
            clauses.append("target_date <= :end")
            params["end"] = end_date.isoformat()
        query = (
            f"SELECT {', '.join(_COLUMNS)} FROM {self.table} "
            "WHERE " + " AND ".join(clauses) + " ORDER BY target_date ASC"
        )
        with self.engine.connect() as conn:
            rows = conn.execute(text(query), params).fetchall()
        return [_row_to_record(row) for row in rows]

    def load_actuals(
        self,
        metric: ForecastMetric | str,
        scope_id: Optional[str],
        cohort: Optional[CohortFilter],
        start_date: date,
        end_date: date,
    ) -> List[HistoricalMetricRow]:
        return self.loader.load(metric, scope_id, cohort, start_date, end_date)


__all__ = ["ALL_SCOPES_KEY", "ForecastStore", "ensure_table", "scope_key"]
