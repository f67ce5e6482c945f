"""Wires settings, the shared HTTP session and the services together."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

import requests

from .config import Settings
from .providers.base import RequestConfig
from .providers.location import DeviceLocator, IpGeolocationBackend, LocationBackend
from .providers.openweather import OpenWeatherGateway
from .services.weather import WeatherFetchService
from .storage import LocationStore


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": "whetherornot/0.1", "Accept": "application/json"})
    return session


def build_weather_service(
    settings: Settings,
    *,
    session: Optional[requests.Session] = None,
    location_backend: Optional[LocationBackend] = None,
) -> WeatherFetchService:
    """Build a service whose providers all share one session."""

    session = session or build_session()
    request_config = RequestConfig(timeout=settings.request_timeout, log_bodies=settings.log_bodies)
    gateway = OpenWeatherGateway(
        api_key=settings.api_key,
        base_url=settings.base_url,
        units=settings.units,
        exclude=settings.exclude,
        session=session,
        request_config=request_config,
    )
    backend = location_backend or IpGeolocationBackend(
        consent=settings.location_consent,
        session=session,
        request_config=request_config,
    )
    store = LocationStore(settings.database_path) if settings.database_path else None
    return WeatherFetchService(
        gateway=gateway,
        locator=DeviceLocator(backend),
        location_store=store,
        max_workers=settings.max_workers,
    )


@lru_cache(maxsize=1)
def get_weather_service() -> WeatherFetchService:
    return build_weather_service(Settings.from_env())


__all__ = ["build_session", "build_weather_service", "get_weather_service"]
