"""Seasonal signal provider base class."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from ..core.schemas import SeasonalFactor


class SeasonalSignalProvider:
    """Source of per-day seasonal/weather factors for a forecast horizon."""

    def get_factors(
        self, reference_date: date, horizon_days: int, location: Optional[str] = None
    ) -> List[SeasonalFactor]:
        raise NotImplementedError
