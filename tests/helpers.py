"""Shared builders for the test suite."""
from __future__ import annotations

from datetime import datetime
from typing import List

import pandas as pd


class MutableClock:
    """Clock whose current time tests can move forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def daily_orders(
    start: str,
    days: int,
    base_total: float,
    growth: float,
    per_day: int = 1,
    branch_id: str | None = None,
) -> pd.DataFrame:
    """``per_day`` orders at noon UTC each day; the daily total grows linearly."""

    first = pd.Timestamp(start, tz="UTC") + pd.Timedelta(hours=12)
    rows: List[dict] = []
    for day in range(days):
        for _ in range(per_day):
            rows.append(
                {
                    "created_at": first + pd.Timedelta(days=day),
                    "total": (base_total + growth * day) / per_day,
                    "status": "completed",
                    "branch_id": branch_id,
                    "package_usages": None,
                }
            )
    return pd.DataFrame(rows)
