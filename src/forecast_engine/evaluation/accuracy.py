"""Grade stored forecasts against realized daily actuals."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from ..clock import Clock, local_today, system_clock
from ..core.schemas import AccuracyResult, CohortFilter, ForecastMetric
from ..models.trend import metric_value
from ..persistence.store import ForecastStore
from . import metrics

logger = logging.getLogger(__name__)


class AccuracyEvaluator:
    def __init__(
        self,
        store: ForecastStore,
        clock: Optional[Clock] = None,
        reference_tz: str = "UTC",
    ) -> None:
        self.store = store
        self.clock = clock or system_clock
        self.reference_tz = reference_tz

    def evaluate(
        self,
        metric: ForecastMetric | str,
        scope_id: Optional[str],
        cohort: Optional[CohortFilter],
        compare_days: int,
    ) -> AccuracyResult:
        """MAE/MAPE over the trailing ``compare_days`` complete days.

        Days without both an actual and a stored forecast are ignored; no
        overlap yields a zero result.
        """

        metric = ForecastMetric(metric)
        today = local_today(self.clock, self.reference_tz)
        start = today - timedelta(days=compare_days)
        actuals = self.store.load_actuals(metric, scope_id, cohort, start, today)
        forecasts = self.store.list(
            metric, scope_id, cohort, start_date=start, end_date=today - timedelta(days=1)
        )
        actual_by_day = {row.date: metric_value(row, metric) for row in actuals}
        pairs: List[Tuple[float, float]] = [
            (actual_by_day[record.target_date], record.value)
            for record in forecasts
            if record.target_date in actual_by_day
        ]
        if not pairs:
            logger.info("No overlapping actuals for metric=%s scope=%s", metric.value, scope_id)
            return AccuracyResult()
        summary = metrics.compute(pairs)
        result = AccuracyResult(
            mean_absolute_error=round(summary["mae"], 2),
            mean_absolute_percentage_error=round(summary["mape"], 4),
            sample_size=len(pairs),
        )
        logger.info(
            "Accuracy metric=%s scope=%s: mae=%.2f mape=%.4f n=%d",
            metric.value,
            scope_id,
            result.mean_absolute_error,
            result.mean_absolute_percentage_error,
            result.sample_size,
        )
        return result


__all__ = ["AccuracyEvaluator"]
