from .trend import (
    EndpointSlopeEstimator,
    LeastSquaresSlopeEstimator,
    SlopeEstimator,
    Trend,
    TrendModel,
)

__all__ = [
    "EndpointSlopeEstimator",
    "LeastSquaresSlopeEstimator",
    "SlopeEstimator",
    "Trend",
    "TrendModel",
]
