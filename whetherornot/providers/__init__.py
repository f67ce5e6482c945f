from .base import ApiError, GatewayError, HttpProvider, NetworkError, RequestConfig, SerializationError
from .location import (
    DeviceLocator,
    IpGeolocationBackend,
    LocationError,
    LocationPermissionError,
    LocationUnavailableError,
    PlatformError,
    StaticLocationBackend,
)
from .openweather import OpenWeatherGateway, build_postal_query

__all__ = [
    "HttpProvider",
    "RequestConfig",
    "GatewayError",
    "NetworkError",
    "ApiError",
    "SerializationError",
    "OpenWeatherGateway",
    "build_postal_query",
    "DeviceLocator",
    "IpGeolocationBackend",
    "StaticLocationBackend",
    "LocationError",
    "LocationPermissionError",
    "LocationUnavailableError",
    "PlatformError",
]
