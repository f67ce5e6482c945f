"""OpenWeatherMap gateway: One Call weather and zip code geocoding."""
from __future__ import annotations

import logging
from typing import Dict, Optional, Type

from pydantic import ValidationError

from .base import (
    ApiError,
    GatewayError,
    HttpProvider,
    NetworkError,
    SerializationError,
    dump_payload,
)
from ..entities import (
    Failure,
    PostalLocation,
    PostalLookupResult,
    PostalSuccess,
    WeatherQueryResult,
    WeatherSuccess,
)
from ..schemas import ZipCodePayload


WEATHER_MESSAGES: Dict[Type[GatewayError], str] = {
    NetworkError: "Network error: {}",
    ApiError: "API call failed: {}",
    SerializationError: "JSON conversion error: {}",
}

GEOCODING_MESSAGES: Dict[Type[GatewayError], str] = {
    NetworkError: "Geocoding network error: {}",
    ApiError: "Geocoding API call failed: {}",
    SerializationError: "Geocoding response error: {}",
}


def build_postal_query(postal_code: str, country_code: str = "US") -> str:
    return f"{postal_code},{country_code}"


def _failure(exc: GatewayError, messages: Dict[Type[GatewayError], str]) -> Failure:
    for error_type, template in messages.items():
        if isinstance(exc, error_type):
            return Failure(template.format(exc), error=exc)
    return Failure(str(exc), error=exc)


class OpenWeatherGateway(HttpProvider):
    """Issues the weather and geocoding requests for one API key.

    Every public operation performs exactly one HTTP request and never
    raises for upstream faults: the outcome is folded into a
    ``WeatherSuccess``/``PostalSuccess`` or a ``Failure``.
    """

    base_url = "https://api.openweathermap.org"
    weather_path = "/data/3.0/onecall"
    geocoding_path = "/geo/1.0/zip"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        units: str = "imperial",
        exclude: str = "minutely,alerts",
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = (base_url or self.base_url).rstrip("/")
        self.units = units
        self.exclude = exclude
        self._log = logging.getLogger(self.__class__.__name__)

    @property
    def weather_url(self) -> str:
        return self.base_url + self.weather_path

    @property
    def geocoding_url(self) -> str:
        return self.base_url + self.geocoding_path

    # Public API ---------------------------------------------------------
    def fetch_weather_by_coordinate(self, latitude: float, longitude: float) -> WeatherQueryResult:
        try:
            payload = self.get_weather_json(latitude, longitude)
        except GatewayError as exc:
            self._log.warning("Weather fetch for %s,%s failed: %s", latitude, longitude, exc)
            return _failure(exc, WEATHER_MESSAGES)
        return WeatherSuccess(payload)

    def resolve_coordinate_from_postal_code(
        self, postal_code: str, country_code: str = "US"
    ) -> PostalLookupResult:
        try:
            location = self.lookup_postal_code(postal_code, country_code)
        except GatewayError as exc:
            self._log.warning("Geocoding for %s failed: %s", postal_code, exc)
            return _failure(exc, GEOCODING_MESSAGES)
        return PostalSuccess(coordinate=location.coordinate, location=location)

    # Raising variants ---------------------------------------------------
    def get_weather_json(self, latitude: float, longitude: float) -> str:
        params = {
            "lat": latitude,
            "lon": longitude,
            "exclude": self.exclude,
            "appid": self.api_key,
            "units": self.units,
        }
        data = self._get_json_object(self.weather_url, params)
        return dump_payload(data)

    def lookup_postal_code(self, postal_code: str, country_code: str = "US") -> PostalLocation:
        query = build_postal_query(postal_code, country_code)
        data = self._get_json_object(self.geocoding_url, {"zip": query, "appid": self.api_key})
        try:
            record = ZipCodePayload.model_validate(data)
        except ValidationError as exc:
            raise SerializationError(f"missing coordinates in geocoding response ({exc.error_count()} errors)") from exc
        self._log.debug("Resolved %s to %s,%s", query, record.lat, record.lon)
        return record.to_location(fallback_zip=postal_code)


__all__ = [
    "OpenWeatherGateway",
    "build_postal_query",
    "WEATHER_MESSAGES",
    "GEOCODING_MESSAGES",
]
