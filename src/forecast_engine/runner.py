"""Default wiring of the forecasting service and one-shot entry points."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .clock import Clock, system_clock
from .config import Settings, get_settings
from .core.schemas import AccuracySpec, ForecastQuerySpec, ForecastRunSpec, HistorySpec
from .history.ledger import OrderLedger, SqlOrderLedger
from .history.loader import HistoricalMetricsLoader
from .persistence.db import get_engine
from .persistence.store import ForecastStore
from .service import ForecastingService


def build_service(
    settings: Optional[Settings] = None,
    *,
    ledger: Optional[OrderLedger] = None,
    clock: Optional[Clock] = None,
) -> ForecastingService:
    """Assemble a service against the configured store and order ledger."""

    settings = settings or get_settings()
    clock = clock or system_clock
    engine = get_engine(settings.store_dsn, settings.db_echo)
    if ledger is None:
        ledger_engine = (
            engine
            if settings.effective_ledger_dsn == settings.store_dsn
            else get_engine(settings.effective_ledger_dsn, settings.db_echo)
        )
        ledger = SqlOrderLedger(
            ledger_engine,
            table=settings.ledger_table,
            customers_table=settings.customers_table,
        )
    loader = HistoricalMetricsLoader(
        ledger,
        reference_tz=settings.reference_tz,
        excluded_statuses=settings.excluded_statuses,
        high_value_threshold=settings.high_value_threshold,
        new_customer_days=settings.new_customer_days,
        clock=clock,
    )
    store = ForecastStore(engine, loader, table=settings.forecasts_table)
    return ForecastingService(store, loader, clock=clock, settings=settings)


def _dump(items) -> List[Dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]


def run_forecast(spec: ForecastRunSpec, service: Optional[ForecastingService] = None) -> Dict[str, Any]:
    service = service or build_service()
    records = service.run_job(spec)
    return {
        "metric": spec.metric.value,
        "scope_id": spec.scope_id,
        "count": len(records),
        "forecasts": _dump(records),
    }


def fetch_forecasts(spec: ForecastQuerySpec, service: Optional[ForecastingService] = None) -> Dict[str, Any]:
    service = service or build_service()
    records = service.get_forecasts(spec)
    return {"metric": spec.metric.value, "count": len(records), "forecasts": _dump(records)}


def fetch_accuracy(spec: AccuracySpec, service: Optional[ForecastingService] = None) -> Dict[str, Any]:
    service = service or build_service()
    return {"metric": spec.metric.value, **service.evaluate_accuracy(spec).model_dump()}


def fetch_history(spec: HistorySpec, service: Optional[ForecastingService] = None) -> Dict[str, Any]:
    service = service or build_service()
    rows = service.get_historical_series(spec)
    return {"metric": spec.metric.value, "count": len(rows), "rows": _dump(rows)}


__all__ = [
    "build_service",
    "fetch_accuracy",
    "fetch_forecasts",
    "fetch_history",
    "run_forecast",
]
