"""Forecasting engine for order volume, revenue and average order value."""

from .core.schemas import (
    AccuracyResult,
    AccuracySpec,
    CohortFilter,
    ForecastMetric,
    ForecastQuerySpec,
    ForecastRecord,
    ForecastRunSpec,
    HistoricalMetricRow,
    HistorySpec,
    SeasonalFactor,
)
from .service import ForecastingService, forecast_key

__all__ = [
    "AccuracyResult",
    "AccuracySpec",
    "CohortFilter",
    "ForecastMetric",
    "ForecastQuerySpec",
    "ForecastRecord",
    "ForecastRunSpec",
    "ForecastingService",
    "HistoricalMetricRow",
    "HistorySpec",
    "SeasonalFactor",
    "forecast_key",
]
