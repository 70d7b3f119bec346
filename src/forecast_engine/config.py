from __future__ import annotations

"""Settings loader backed by environment variables.

``get_settings`` reads the environment once and caches the resulting
``Settings`` object.  Tests that change environment variables at runtime call
``reset_settings_cache`` to force a reload.
"""

from dataclasses import dataclass, field
import os
from functools import lru_cache


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return float(value)


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass
class Settings:
    db_dsn: str | None = None
    db_sqlite_path: str = ".db/forecasts.db"
    db_echo: bool = False
    ledger_dsn: str | None = None
    ledger_table: str = "orders"
    customers_table: str | None = None
    forecasts_table: str = "analytics_forecasts"
    reference_tz: str = "UTC"
    excluded_statuses: tuple[str, ...] = field(default_factory=lambda: ("cancelled",))
    high_value_threshold: float = 500.0
    new_customer_days: int = 30
    history_days: int = 120
    horizon_days: int = 21
    compare_days: int = 14
    log_level: str = "INFO"

    @property
    def store_dsn(self) -> str:
        return self.db_dsn or f"sqlite:///{self.db_sqlite_path}"

    @property
    def effective_ledger_dsn(self) -> str:
        return self.ledger_dsn or self.store_dsn


@lru_cache()
def get_settings() -> Settings:
    """Return settings loaded from environment variables."""

    return Settings(
        db_dsn=os.getenv("DB_DSN"),
        db_sqlite_path=os.getenv("DB_SQLITE_PATH", ".db/forecasts.db"),
        db_echo=os.getenv("DB_ECHO", "false").lower() == "true",
        ledger_dsn=os.getenv("FE_LEDGER_DSN"),
        ledger_table=os.getenv("FE_LEDGER_TABLE", "orders"),
        customers_table=os.getenv("FE_CUSTOMERS_TABLE") or None,
        forecasts_table=os.getenv("FE_FORECASTS_TABLE", "analytics_forecasts"),
        reference_tz=os.getenv("FE_REFERENCE_TZ", "UTC"),
        excluded_statuses=_env_list("FE_EXCLUDED_STATUSES", ("cancelled",)),
        high_value_threshold=_env_float("FE_HIGH_VALUE_THRESHOLD", 500.0),
        new_customer_days=_env_int("FE_NEW_CUSTOMER_DAYS", 30),
        history_days=_env_int("FE_HISTORY_DAYS", 120),
        horizon_days=_env_int("FE_HORIZON_DAYS", 21),
        compare_days=_env_int("FE_COMPARE_DAYS", 14),
        log_level=os.getenv("FE_LOG_LEVEL", "INFO"),
    )


def reset_settings_cache() -> None:
    """Clear the settings cache (mainly for tests)."""

    get_settings.cache_clear()
