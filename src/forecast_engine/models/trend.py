"""Baseline level and per-day slope from a sparse daily series."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..core.schemas import ForecastMetric, HistoricalMetricRow


def metric_value(row: HistoricalMetricRow, metric: ForecastMetric | str) -> float:
    metric = ForecastMetric(metric)
    if metric is ForecastMetric.ORDERS:
        return float(row.order_count)
    if metric is ForecastMetric.REVENUE:
        return float(row.revenue_total)
    return row.revenue_total / max(1, row.order_count)


def metric_series(rows: Sequence[HistoricalMetricRow], metric: ForecastMetric | str) -> List[float]:
    return [metric_value(row, metric) for row in rows]


def baseline(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


class SlopeEstimator:
    """Per-day rate of change of a metric series."""

    def estimate(self, rows: Sequence[HistoricalMetricRow], values: Sequence[float]) -> float:
        raise NotImplementedError


class EndpointSlopeEstimator(SlopeEstimator):
    """``(last - first) / (N - 1)`` over rows, not calendar days."""

    def estimate(self, rows: Sequence[HistoricalMetricRow], values: Sequence[float]) -> float:
        if len(values) < 2:
            return 0.0
        return (values[-1] - values[0]) / (len(values) - 1)


class LeastSquaresSlopeEstimator(SlopeEstimator):
    """Ordinary least squares slope against calendar-day offsets."""

    def estimate(self, rows: Sequence[HistoricalMetricRow], values: Sequence[float]) -> float:
        if len(values) < 2:
            return 0.0
        first = rows[0].date
        x = np.array([(row.date - first).days for row in rows], dtype=float)
        y = np.asarray(values, dtype=float)
        if np.ptp(x) == 0:
            return 0.0
        slope, _intercept = np.polyfit(x, y, 1)
        return float(slope)


@dataclass(frozen=True)
class Trend:
    baseline: float
    slope: float
    sample_size: int


class TrendModel:
    def __init__(self, estimator: Optional[SlopeEstimator] = None) -> None:
        self.estimator = estimator or EndpointSlopeEstimator()

    def fit(self, rows: Sequence[HistoricalMetricRow], metric: ForecastMetric | str) -> Trend:
        values = metric_series(rows, metric)
        return Trend(
            baseline=baseline(values),
            slope=self.estimator.estimate(rows, values),
            sample_size=len(values),
        )


__all__ = [
    "EndpointSlopeEstimator",
    "LeastSquaresSlopeEstimator",
    "SlopeEstimator",
    "Trend",
    "TrendModel",
    "baseline",
    "metric_series",
    "metric_value",
]
