from .generator import ForecastGenerator, confidence_for, weather_penalty

__all__ = ["ForecastGenerator", "confidence_for", "weather_penalty"]
