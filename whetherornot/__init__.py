"""Weather and geocoding data access for the Whether or Not app."""
from .app import build_weather_service, get_weather_service
from .config import ImproperlyConfigured, Settings, configure_logging
from .entities import (
    Coordinate,
    Failure,
    LocationFix,
    PostalLocation,
    PostalSuccess,
    SavedLocation,
    WeatherSuccess,
)

__all__ = [
    "build_weather_service",
    "get_weather_service",
    "Settings",
    "ImproperlyConfigured",
    "configure_logging",
    "Coordinate",
    "LocationFix",
    "PostalLocation",
    "SavedLocation",
    "WeatherSuccess",
    "PostalSuccess",
    "Failure",
]
