"""Core data model and cohort catalog."""

from .cohorts import (
    ALL_COHORTS_KEY,
    CohortPredicate,
    cohort_key,
    cohort_predicate,
    list_cohorts,
    resolve_cohort,
)
from .schemas import (
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

__all__ = [
    "ALL_COHORTS_KEY",
    "AccuracyResult",
    "AccuracySpec",
    "CohortFilter",
    "CohortPredicate",
    "ForecastMetric",
    "ForecastQuerySpec",
    "ForecastRecord",
    "ForecastRunSpec",
    "HistoricalMetricRow",
    "HistorySpec",
    "SeasonalFactor",
    "cohort_key",
    "cohort_predicate",
    "list_cohorts",
    "resolve_cohort",
]
