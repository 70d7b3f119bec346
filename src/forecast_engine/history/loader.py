"""Aggregate raw orders into daily historical metric rows."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

import pandas as pd

from ..clock import Clock, system_clock
from ..core.cohorts import cohort_predicate
from ..core.schemas import CohortFilter, ForecastMetric, HistoricalMetricRow
from .ledger import OrderLedger

logger = logging.getLogger(__name__)

# Ledger queries are padded so that day boundaries in any reference time zone
# fall inside the fetched range; the exact window is applied afterwards.
_QUERY_PADDING = timedelta(days=1)


def _day_start(day: date, tz_name: str) -> pd.Timestamp:
    # midnight may not exist on DST change days; use the first valid instant
    return pd.Timestamp(day).tz_localize(tz_name, ambiguous=False, nonexistent="shift_forward")


class HistoricalMetricsLoader:
    """Daily ``{date, order_count, revenue_total}`` rows for a metric scope.

    Orders whose status is in ``excluded_statuses`` never count, whatever the
    metric.  Ledger errors propagate to the caller.
    """

    def __init__(
        self,
        ledger: OrderLedger,
        *,
        reference_tz: str = "UTC",
        excluded_statuses: Iterable[str] = ("cancelled",),
        high_value_threshold: float = 500.0,
        new_customer_days: int = 30,
        clock: Optional[Clock] = None,
    ) -> None:
        self.ledger = ledger
        self.reference_tz = reference_tz
        self.excluded_statuses = frozenset(excluded_statuses)
        self.high_value_threshold = high_value_threshold
        self.new_customer_days = new_customer_days
        self.clock = clock or system_clock

    def load(
        self,
        metric: ForecastMetric | str,
        scope_id: Optional[str],
        cohort: Optional[CohortFilter],
        start_date: date,
        end_date: date,
    ) -> List[HistoricalMetricRow]:
        """Return one row per active day in ``[start_date, end_date)``, ascending."""

        metric = ForecastMetric(metric)
        if end_date <= start_date:
            return []
        start_ts = _day_start(start_date, self.reference_tz)
        end_ts = _day_start(end_date, self.reference_tz)
        raw = self.ledger.fetch_orders(
            scope_id,
            (start_ts - _QUERY_PADDING).to_pydatetime(),
            (end_ts + _QUERY_PADDING).to_pydatetime(),
        )
        rows = self._aggregate(raw, cohort, start_ts, end_ts)
        logger.debug(
            "Loaded %d daily rows for metric=%s scope=%s cohort=%s [%s, %s)",
            len(rows),
            metric.value,
            scope_id,
            cohort.id if cohort else None,
            start_date,
            end_date,
        )
        return rows

    def _aggregate(
        self,
        raw: pd.DataFrame,
        cohort: Optional[CohortFilter],
        start_ts: pd.Timestamp,
        end_ts: pd.Timestamp,
    ) -> List[HistoricalMetricRow]:
        if raw.empty:
            return []
        df = raw.copy()
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True).dt.tz_convert(self.reference_tz)
        mask = (df["created_at"] >= start_ts) & (df["created_at"] < end_ts)
        if self.excluded_statuses:
            mask &= ~df["status"].isin(self.excluded_statuses)
        now: datetime = self.clock()
        predicate = cohort_predicate(
            cohort,
            high_value_threshold=self.high_value_threshold,
            new_customer_days=self.new_customer_days,
            now=now,
        )
        df = df[mask]
        df = df[predicate.mask(df)].copy()
        if df.empty:
            return []
        df["day"] = df["created_at"].dt.date
        daily = (
            df.groupby("day", sort=True)
            .agg(order_count=("total", "size"), revenue_total=("total", "sum"))
            .reset_index()
        )
        return [
            HistoricalMetricRow(
                date=row.day,
                order_count=int(row.order_count),
                revenue_total=round(float(row.revenue_total), 2),
            )
            for row in daily.itertuples(index=False)
        ]


__all__ = ["HistoricalMetricsLoader"]
