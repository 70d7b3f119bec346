"""Forecast error metrics."""
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple


def absolute_errors(pairs: Sequence[Tuple[float, float]]) -> List[float]:
    return [abs(actual - forecast) for actual, forecast in pairs]


def absolute_percentage_errors(pairs: Sequence[Tuple[float, float]]) -> List[float]:
    # zero actuals contribute 0 rather than being dropped
    return [
        0.0 if actual == 0 else abs((actual - forecast) / actual)
        for actual, forecast in pairs
    ]


def mean_absolute_error(pairs: Sequence[Tuple[float, float]]) -> float:
    if not pairs:
        return 0.0
    return sum(absolute_errors(pairs)) / len(pairs)


def mean_absolute_percentage_error(pairs: Sequence[Tuple[float, float]]) -> float:
    if not pairs:
        return 0.0
    return sum(absolute_percentage_errors(pairs)) / len(pairs)


def compute(pairs: Sequence[Tuple[float, float]]) -> Dict[str, float]:
    """``pairs`` holds ``(actual, forecast)`` tuples for matched days."""

    return {
        "mae": mean_absolute_error(pairs),
        "mape": mean_absolute_percentage_error(pairs),
        "n": len(pairs),
    }
