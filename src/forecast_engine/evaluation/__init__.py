from .accuracy import AccuracyEvaluator
from .metrics import mean_absolute_error, mean_absolute_percentage_error

__all__ = ["AccuracyEvaluator", "mean_absolute_error", "mean_absolute_percentage_error"]
