"""Closed-form seasonal and weather signal.

No network access is involved: temperature and precipitation come from a
monthly climate table with a small deterministic wobble per horizon offset,
and the seasonality index follows a smooth +/-8% annual cycle keyed to the
calendar month.  A real weather integration implements the same
``SeasonalSignalProvider`` interface.
"""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import List, Optional, Sequence

from ..core.schemas import SeasonalFactor
from .base import SeasonalSignalProvider

MONTHLY_TEMPERATURE: Sequence[float] = (19, 21, 24, 28, 33, 37, 39, 38, 34, 30, 25, 21)
MONTHLY_PRECIPITATION: Sequence[float] = (
    0.10, 0.15, 0.20, 0.10, 0.05, 0.02, 0.01, 0.01, 0.05, 0.08, 0.12, 0.18,
)
SEASONAL_AMPLITUDE = 0.08


def seasonality_index(month: int) -> float:
    """Annual cycle for a 1-based calendar month."""

    return 1 + math.sin((month / 12) * 2 * math.pi) * SEASONAL_AMPLITUDE


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(high, max(low, value))


class SyntheticSeasonalProvider(SeasonalSignalProvider):
    """Deterministic provider; ``location`` is accepted but not used."""

    def __init__(
        self,
        temperatures: Sequence[float] = MONTHLY_TEMPERATURE,
        precipitation: Sequence[float] = MONTHLY_PRECIPITATION,
    ) -> None:
        if len(temperatures) != 12 or len(precipitation) != 12:
            raise ValueError("monthly tables must have 12 entries")
        self.temperatures = tuple(temperatures)
        self.precipitation = tuple(precipitation)

    def factor_for(self, day: date, offset: int) -> SeasonalFactor:
        idx = day.month - 1
        temperature = self.temperatures[idx] + math.sin(offset / 7) * 2
        rain = _clamp(self.precipitation[idx] + math.cos(offset / 5) * 0.05)
        return SeasonalFactor(
            date=day,
            temperature_proxy=round(temperature, 2),
            precipitation_probability=round(rain, 2),
            seasonality_index=round(seasonality_index(day.month), 3),
        )

    def get_factors(
        self, reference_date: date, horizon_days: int, location: Optional[str] = None
    ) -> List[SeasonalFactor]:
        return [
            self.factor_for(reference_date + timedelta(days=offset), offset)
            for offset in range(max(0, horizon_days))
        ]


__all__ = [
    "MONTHLY_PRECIPITATION",
    "MONTHLY_TEMPERATURE",
    "SyntheticSeasonalProvider",
    "seasonality_index",
]
