"""Historical order aggregates."""

from .ledger import FrameOrderLedger, OrderLedger, SqlOrderLedger, normalise_orders
from .loader import HistoricalMetricsLoader

__all__ = [
    "FrameOrderLedger",
    "HistoricalMetricsLoader",
    "OrderLedger",
    "SqlOrderLedger",
    "normalise_orders",
]
