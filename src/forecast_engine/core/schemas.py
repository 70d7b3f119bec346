"""Pydantic models describing forecasts, history rows and requests."""
from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ForecastMetric(str, Enum):
    """Metrics the engine can project."""

    ORDERS = "orders"
    REVENUE = "revenue"
    AVERAGE_ORDER_VALUE = "average_order_value"

    @property
    def non_negative(self) -> bool:
        return self is not ForecastMetric.AVERAGE_ORDER_VALUE


class CohortFilter(BaseModel):
    """Named customer/order segment."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: Optional[str] = None


class HistoricalMetricRow(BaseModel):
    """Daily aggregate of the order ledger."""

    date: dt.date
    order_count: int = Field(ge=0)
    revenue_total: float = Field(ge=0)


class SeasonalFactor(BaseModel):
    """Seasonal/weather influence for a single calendar day."""

    date: dt.date
    temperature_proxy: float
    precipitation_probability: float = Field(ge=0, le=1)
    seasonality_index: float


class ForecastRecord(BaseModel):
    """One projected day of a forecast run."""

    id: str
    metric: ForecastMetric
    target_date: date
    scope_id: Optional[str] = None
    cohort: Optional[CohortFilter] = None
    cohort_key: str
    horizon_days: int = Field(ge=1)
    value: float
    lower_bound: float
    upper_bound: float
    seasonal_influence: Optional[SeasonalFactor] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime


class AccuracyResult(BaseModel):
    """Error statistics of stored forecasts against realized actuals."""

    mean_absolute_error: float = 0.0
    mean_absolute_percentage_error: float = 0.0
    sample_size: int = 0


class ForecastRunSpec(BaseModel):
    """Options for a single forecasting run."""

    model_config = ConfigDict(extra="forbid")

    metric: ForecastMetric
    scope_id: Optional[str] = None
    cohort_id: Optional[str] = None
    history_days: Optional[int] = Field(default=None, ge=1)
    horizon_days: Optional[int] = Field(default=None, ge=1)
    location: Optional[str] = None


class ForecastQuerySpec(BaseModel):
    """Filter for stored forecasts; date bounds are inclusive."""

    model_config = ConfigDict(extra="forbid")

    metric: ForecastMetric
    scope_id: Optional[str] = None
    cohort_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class AccuracySpec(BaseModel):
    """Trailing window over which stored forecasts are graded."""

    model_config = ConfigDict(extra="forbid")

    metric: ForecastMetric
    scope_id: Optional[str] = None
    cohort_id: Optional[str] = None
    compare_days: Optional[int] = Field(default=None, ge=1)


class HistorySpec(BaseModel):
    """Inclusive date range of historical aggregates."""

    model_config = ConfigDict(extra="forbid")

    metric: ForecastMetric
    scope_id: Optional[str] = None
    cohort_id: Optional[str] = None
    start_date: date
    end_date: date


__all__ = [
    "ForecastMetric",
    "CohortFilter",
    "HistoricalMetricRow",
    "SeasonalFactor",
    "ForecastRecord",
    "AccuracyResult",
    "ForecastRunSpec",
    "ForecastQuerySpec",
    "AccuracySpec",
    "HistorySpec",
]
