"""Forecasting service: load, model, generate, persist and grade.

Collaborators are passed in explicitly; ``forecast_engine.runner.build_service``
assembles the default set from settings.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from .clock import Clock, local_today, system_clock
from .config import Settings, get_settings
from .core.cohorts import cohort_key, resolve_cohort
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
)
from .evaluation.accuracy import AccuracyEvaluator
from .forecast.generator import ForecastGenerator
from .history.loader import HistoricalMetricsLoader
from .models.trend import TrendModel
from .persistence.store import ForecastStore, scope_key
from .signals.base import SeasonalSignalProvider
from .signals.seasonal import SyntheticSeasonalProvider

logger = logging.getLogger(__name__)


def forecast_key(
    metric: ForecastMetric | str, scope_id: Optional[str], cohort: Optional[CohortFilter]
) -> Tuple[str, str, str]:
    """Key that concurrent runs must be serialized on."""

    return ForecastMetric(metric).value, scope_key(scope_id), cohort_key(cohort)


class ForecastingService:
    def __init__(
        self,
        store: ForecastStore,
        loader: HistoricalMetricsLoader,
        signal_provider: Optional[SeasonalSignalProvider] = None,
        clock: Optional[Clock] = None,
        trend_model: Optional[TrendModel] = None,
        generator: Optional[ForecastGenerator] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.loader = loader
        self.signal_provider = signal_provider or SyntheticSeasonalProvider()
        self.clock = clock or system_clock
        self.trend_model = trend_model or TrendModel()
        self.generator = generator or ForecastGenerator()
        self.evaluator = AccuracyEvaluator(store, self.clock, self.settings.reference_tz)

    def _today(self):
        return local_today(self.clock, self.settings.reference_tz)

    def run_job(self, spec: ForecastRunSpec) -> List[ForecastRecord]:
        """Generate and persist a full horizon for the request's key.

        Not safe to call concurrently for the same ``forecast_key``.
        """

        history_days = spec.history_days or self.settings.history_days
        horizon_days = spec.horizon_days or self.settings.horizon_days
        cohort = resolve_cohort(spec.cohort_id)
        generated_at = self.clock()
        today = self._today()

        historical = self.loader.load(
            spec.metric, spec.scope_id, cohort, today - timedelta(days=history_days), today
        )
        trend = self.trend_model.fit(historical, spec.metric)
        # factor i covers target day i, so the provider starts at tomorrow, not today
        first_day = today + timedelta(days=1)
        factors = self.signal_provider.get_factors(first_day, horizon_days, spec.location)
        records = self.generator.generate(
            spec.metric,
            spec.scope_id,
            cohort,
            horizon_days,
            trend.baseline,
            trend.slope,
            factors,
            start_date=first_day,
            generated_at=generated_at,
            historical=historical,
        )
        self.store.replace(records)
        logger.info(
            "Forecast run metric=%s scope=%s cohort=%s: %d history rows, baseline=%.2f slope=%.4f, %d days",
            ForecastMetric(spec.metric).value,
            spec.scope_id,
            cohort.id if cohort else "all",
            trend.sample_size,
            trend.baseline,
            trend.slope,
            len(records),
        )
        return records

    def get_forecasts(self, spec: ForecastQuerySpec) -> List[ForecastRecord]:
        return self.store.list(
            spec.metric,
            spec.scope_id,
            resolve_cohort(spec.cohort_id),
            start_date=spec.start_date,
            end_date=spec.end_date,
        )

    def evaluate_accuracy(self, spec: AccuracySpec) -> AccuracyResult:
        return self.evaluator.evaluate(
            spec.metric,
            spec.scope_id,
            resolve_cohort(spec.cohort_id),
            spec.compare_days or self.settings.compare_days,
        )

    def get_historical_series(self, spec: HistorySpec) -> List[HistoricalMetricRow]:
        """Daily aggregates for the inclusive ``[start_date, end_date]`` range."""

        return self.store.load_actuals(
            spec.metric,
            spec.scope_id,
            resolve_cohort(spec.cohort_id),
            spec.start_date,
            spec.end_date + timedelta(days=1),
        )


__all__ = ["ForecastingService", "forecast_key"]
