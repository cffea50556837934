"""Service layer public exports."""

from roadtrip.services.weather_advice import annotate_current, annotate_forecast, outfit_advice

__all__ = ["annotate_current", "annotate_forecast", "outfit_advice"]
