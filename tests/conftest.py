from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd
import pytest

from forecast_engine.config import reset_settings_cache
from forecast_engine.history import FrameOrderLedger, HistoricalMetricsLoader
from forecast_engine.persistence import ForecastStore, get_engine

from helpers import MutableClock


@pytest.fixture
def sqlite_dsn(tmp_path, monkeypatch):
    dsn = f"sqlite:///{tmp_path / 'forecasts.db'}"
    monkeypatch.setenv("DB_DSN", dsn)
    reset_settings_cache()
    yield dsn
    reset_settings_cache()


@pytest.fixture
def clock():
    return MutableClock(datetime(2024, 2, 15, tzinfo=timezone.utc))


@pytest.fixture
def make_store(sqlite_dsn, clock):
    def _make(frame: pd.DataFrame) -> ForecastStore:
        loader = HistoricalMetricsLoader(FrameOrderLedger(frame), clock=clock)
        return ForecastStore(get_engine(sqlite_dsn), loader)

    return _make
