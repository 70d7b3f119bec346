from datetime import date, timedelta

import pytest

from forecast_engine.signals import SyntheticSeasonalProvider, seasonality_index


def test_factors_cover_horizon_with_consecutive_dates():
    provider = SyntheticSeasonalProvider()
    factors = provider.get_factors(date(2024, 1, 30), 5)
    assert [f.date for f in factors] == [date(2024, 1, 30) + timedelta(days=i) for i in range(5)]
    assert all(0 <= f.precipitation_probability <= 1 for f in factors)


def test_first_offset_uses_monthly_table_values():
    factor = SyntheticSeasonalProvider().get_factors(date(2024, 1, 10), 1)[0]
    assert factor.temperature_proxy == 19.0
    assert factor.precipitation_probability == 0.15
    assert factor.seasonality_index == 1.04


def test_seasonality_index_follows_annual_cycle():
    assert seasonality_index(3) == pytest.approx(1.08)
    assert seasonality_index(9) == pytest.approx(0.92)
    assert seasonality_index(12) == pytest.approx(1.0)
    factors = SyntheticSeasonalProvider().get_factors(date(2024, 2, 28), 3)
    assert [f.seasonality_index for f in factors] == [
        round(seasonality_index(2), 3),
        round(seasonality_index(2), 3),
        round(seasonality_index(3), 3),
    ]


def test_precipitation_is_clamped():
    wet = SyntheticSeasonalProvider(precipitation=[1.0] * 12)
    assert wet.get_factors(date(2024, 5, 1), 1)[0].precipitation_probability == 1.0
    dry = SyntheticSeasonalProvider(precipitation=[0.0] * 12)
    # cos(10 / 5) < 0
    assert dry.get_factors(date(2024, 5, 1), 11)[10].precipitation_probability == 0.0


def test_provider_is_deterministic_and_ignores_location():
    provider = SyntheticSeasonalProvider()
    first = provider.get_factors(date(2024, 7, 1), 21)
    second = provider.get_factors(date(2024, 7, 1), 21, location="Cairo")
    assert first == second


def test_monthly_tables_must_have_twelve_entries():
    with pytest.raises(ValueError):
        SyntheticSeasonalProvider(temperatures=[20] * 11)
