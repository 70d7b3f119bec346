from datetime import date, datetime, timezone

import pandas as pd
import pytest

from forecast_engine.core.cohorts import cohort_key
from forecast_engine.core.schemas import ForecastRecord
from forecast_engine.evaluation import AccuracyEvaluator
from forecast_engine.evaluation.metrics import compute


def _orders() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "created_at": ["2024-03-01 10:00:00", "2024-03-02 10:00:00", "2024-03-03 10:00:00"],
            "total": [0.0, 10.0, 20.0],
            "status": ["completed"] * 3,
        }
    )


def _record(day: int, value: float, metric: str = "revenue") -> ForecastRecord:
    return ForecastRecord(
        id=f"f-{metric}-{day}",
        metric=metric,
        target_date=date(2024, 3, day),
        cohort_key=cohort_key(None),
        horizon_days=day,
        value=value,
        lower_bound=value * 0.8,
        upper_bound=value * 1.2,
        generated_at=datetime(2024, 2, 29, tzinfo=timezone.utc),
    )


def test_metrics_treat_zero_actuals_as_exact():
    summary = compute([(0.0, 5.0), (10.0, 8.0), (20.0, 25.0)])
    assert summary["mae"] == pytest.approx(4.0)
    assert summary["mape"] == pytest.approx(0.15)
    assert summary["n"] == 3
    assert isinstance(summary["n"], int)


def test_evaluate_matches_trailing_window(make_store, clock):
    clock.now = datetime(2024, 3, 4, 12, tzinfo=timezone.utc)
    store = make_store(_orders())
    store.replace([_record(1, 5.0), _record(2, 8.0), _record(3, 25.0), _record(4, 100.0)])
    result = AccuracyEvaluator(store, clock).evaluate("revenue", None, None, 3)
    assert result.mean_absolute_error == 4.0
    assert result.mean_absolute_percentage_error == 0.15
    assert result.sample_size == 3


def test_window_drops_days_outside_compare_range(make_store, clock):
    clock.now = datetime(2024, 3, 4, 12, tzinfo=timezone.utc)
    store = make_store(_orders())
    store.replace([_record(1, 5.0), _record(2, 8.0), _record(3, 25.0)])
    result = AccuracyEvaluator(store, clock).evaluate("revenue", None, None, 1)
    assert result.sample_size == 1
    assert result.mean_absolute_error == 5.0
    assert result.mean_absolute_percentage_error == 0.25


def test_no_overlap_yields_zero_result(make_store, clock):
    clock.now = datetime(2024, 3, 4, 12, tzinfo=timezone.utc)
    store = make_store(_orders())
    store.replace([_record(1, 5.0), _record(2, 8.0)])
    result = AccuracyEvaluator(store, clock).evaluate("orders", None, None, 3)
    assert result.model_dump() == {
        "mean_absolute_error": 0.0,
        "mean_absolute_percentage_error": 0.0,
        "sample_size": 0,
    }
    empty = AccuracyEvaluator(make_store(pd.DataFrame()), clock).evaluate("revenue", None, None, 3)
    assert empty.sample_size == 0
