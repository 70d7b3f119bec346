"""Turn a baseline, a slope and seasonal factors into a forecast horizon."""
from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..core.cohorts import cohort_key
from ..core.schemas import (
    CohortFilter,
    ForecastMetric,
    ForecastRecord,
    HistoricalMetricRow,
    SeasonalFactor,
)

MAX_CONFIDENCE = 0.25
MIN_CONFIDENCE = 0.05
CONFIDENCE_STEP = 0.01
PRECIPITATION_WEIGHT = 0.1


def confidence_for(step: int) -> float:
    """Relative half-width of the band for 1-based horizon ``step``."""

    return max(MIN_CONFIDENCE, round(MAX_CONFIDENCE - CONFIDENCE_STEP * step, 10))


def weather_penalty(factor: Optional[SeasonalFactor]) -> float:
    if factor is None:
        return 1.0
    return 1 - factor.precipitation_probability * PRECIPITATION_WEIGHT


def derived_average_order_value(rows: Sequence[HistoricalMetricRow]) -> float:
    """Mean historical revenue over mean historical orders (0 without orders)."""

    if not rows:
        return 0.0
    avg_orders = sum(row.order_count for row in rows) / len(rows)
    avg_revenue = sum(row.revenue_total for row in rows) / len(rows)
    if avg_orders <= 0:
        return 0.0
    return avg_revenue / avg_orders


class ForecastGenerator:
    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def generate(
        self,
        metric: ForecastMetric | str,
        scope_id: Optional[str],
        cohort: Optional[CohortFilter],
        horizon_days: int,
        baseline: float,
        slope: float,
        seasonal_factors: Sequence[SeasonalFactor],
        *,
        start_date: date,
        generated_at: datetime,
        historical: Optional[Sequence[HistoricalMetricRow]] = None,
    ) -> List[ForecastRecord]:
        """Project ``horizon_days`` consecutive days starting at ``start_date``.

        ``seasonal_factors[i - 1]`` applies to horizon step ``i``; missing
        factors leave the trend unadjusted.
        """

        metric = ForecastMetric(metric)
        key = cohort_key(cohort)
        extra = {}
        if metric is ForecastMetric.AVERAGE_ORDER_VALUE:
            extra["derived_from_historical"] = round(derived_average_order_value(historical or []), 2)

        records: List[ForecastRecord] = []
        for step in range(1, horizon_days + 1):
            factor = seasonal_factors[step - 1] if step - 1 < len(seasonal_factors) else None
            trend_value = baseline + slope * step
            adjusted = trend_value * (factor.seasonality_index if factor else 1.0)
            penalty = weather_penalty(factor)
            value = adjusted * penalty
            if metric.non_negative:
                value = max(0.0, value)
            confidence = confidence_for(step)
            lower = max(0.0, value * (1 - confidence))
            upper = value * (1 + confidence)
            records.append(
                ForecastRecord(
                    id=self.id_factory(),
                    metric=metric,
                    target_date=start_date + timedelta(days=step - 1),
                    scope_id=scope_id,
                    cohort=cohort,
                    cohort_key=key,
                    horizon_days=step,
                    value=round(value, 2),
                    lower_bound=round(lower, 2),
                    upper_bound=round(upper, 2),
                    seasonal_influence=factor,
                    metadata={
                        "baseline": round(baseline, 2),
                        "slope": round(slope, 4),
                        "weather_penalty": round(penalty, 3),
                        "confidence": confidence,
                        **extra,
                    },
                    generated_at=generated_at,
                )
            )
        return records


__all__ = [
    "ForecastGenerator",
    "confidence_for",
    "derived_average_order_value",
    "weather_penalty",
]
