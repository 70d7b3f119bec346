"""Seasonal/weather signal providers."""

from .base import SeasonalSignalProvider
from .seasonal import SyntheticSeasonalProvider, seasonality_index

__all__ = ["SeasonalSignalProvider", "SyntheticSeasonalProvider", "seasonality_index"]
