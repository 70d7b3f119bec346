from datetime import date, datetime, timezone

import pandas as pd
import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from forecast_engine.core.cohorts import resolve_cohort
from forecast_engine.core.schemas import ForecastMetric
from forecast_engine.forecast import ForecastGenerator
from forecast_engine.persistence import ensure_table
from forecast_engine.signals import SyntheticSeasonalProvider

GENERATED_AT = datetime(2024, 2, 15, tzinfo=timezone.utc)
START = date(2024, 2, 16)


def _records(horizon, metric="revenue", scope_id=None, cohort=None, baseline=1000.0):
    return ForecastGenerator().generate(
        metric,
        scope_id,
        cohort,
        horizon,
        baseline,
        10.0,
        SyntheticSeasonalProvider().get_factors(START, horizon),
        start_date=START,
        generated_at=GENERATED_AT,
    )


def test_fresh_store_lists_nothing(make_store):
    store = make_store(pd.DataFrame())
    assert store.list("revenue", None, None) == []


def test_replace_is_idempotent_per_key(make_store):
    store = make_store(pd.DataFrame())
    first = store.replace(_records(7))
    assert first == {"deleted": 0, "inserted": 7}
    second = store.replace(_records(7))
    assert second == {"deleted": 7, "inserted": 7}
    assert len(store.list("revenue", None, None)) == 7


def test_shorter_run_fully_replaces_previous(make_store):
    store = make_store(pd.DataFrame())
    store.replace(_records(10))
    store.replace(_records(3, baseline=50.0))
    stored = store.list("revenue", None, None)
    assert [r.horizon_days for r in stored] == [1, 2, 3]
    assert all(r.metadata["baseline"] == 50.0 for r in stored)


def test_other_keys_are_untouched(make_store):
    store = make_store(pd.DataFrame())
    high = resolve_cohort("highValue")
    store.replace(_records(5))
    store.replace(_records(4, cohort=high))
    store.replace(_records(3, scope_id="branch-1"))
    store.replace(_records(2, metric="orders", baseline=20.0))
    store.replace(_records(1, cohort=high))
    assert len(store.list("revenue", None, None)) == 5
    assert len(store.list("revenue", None, high)) == 1
    assert len(store.list("revenue", "branch-1", None)) == 3
    assert len(store.list("orders", None, None)) == 2


def test_list_bounds_are_inclusive_and_ascending(make_store):
    store = make_store(pd.DataFrame())
    records = _records(10)
    store.replace(list(reversed(records)))
    window = store.list(
        "revenue", None, None, start_date=date(2024, 2, 18), end_date=date(2024, 2, 20)
    )
    assert [r.target_date for r in window] == [date(2024, 2, 18), date(2024, 2, 19), date(2024, 2, 20)]
    assert [r.target_date for r in store.list("revenue", None, None, start_date=date(2024, 2, 24))] == [
        date(2024, 2, 24),
        date(2024, 2, 25),
    ]


def test_records_round_trip(make_store):
    store = make_store(pd.DataFrame())
    records = _records(3, scope_id="branch-1", cohort=resolve_cohort("recurring"))
    store.replace(records)
    loaded = store.list("revenue", "branch-1", resolve_cohort("recurring"))
    assert loaded == records
    assert loaded[0].metric is ForecastMetric.REVENUE
    assert loaded[0].generated_at.tzinfo is not None
    assert loaded[0].cohort.label == "Package members"
    assert loaded[0].seasonal_influence.date == START


def test_failed_replace_keeps_previous_run(make_store):
    store = make_store(pd.DataFrame())
    store.replace(_records(4))
    broken = _records(3, baseline=1.0)
    broken[2] = broken[2].model_copy(update={"target_date": broken[0].target_date})
    with pytest.raises(IntegrityError):
        store.replace(broken)
    stored = store.list("revenue", None, None)
    assert len(stored) == 4
    assert all(r.metadata["baseline"] == 1000.0 for r in stored)


def test_replace_rejects_mixed_keys(make_store):
    store = make_store(pd.DataFrame())
    mixed = _records(2) + _records(2, scope_id="branch-1")
    with pytest.raises(ValueError):
        store.replace(mixed)
    assert store.replace([]) == {"deleted": 0, "inserted": 0}


def test_ensure_table_creates_key_index_once(make_store):
    store = make_store(pd.DataFrame())
    store.ensure_table()
    ensure_table(store.engine, store.table)
    with store.engine.connect() as conn:
        names = conn.execute(
            text("SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = :t"),
            {"t": store.table},
        ).scalars().all()
    assert "ix_analytics_forecasts_key" in names
