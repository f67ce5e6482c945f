"""Device location resolution."""
from __future__ import annotations

import logging
from typing import Optional, Protocol, Tuple

from pydantic import ValidationError

from .base import GatewayError, HttpProvider
from ..entities import LocationFix
from ..schemas import IpLocationPayload


logger = logging.getLogger(__name__)


class LocationError(RuntimeError):
    """Base error for device location failures."""


class LocationPermissionError(LocationError):
    """Location access has not been granted."""


class LocationUnavailableError(LocationError):
    """No position fix could be obtained."""


class PlatformError(LocationError):
    """Wraps any other failure of the location capability."""


class LocationBackend(Protocol):
    """A source of one-shot position fixes."""

    def has_permission(self) -> bool:
        ...

    def current_fix(self) -> Optional[Tuple[float, float]]:
        """Return ``(latitude, longitude)`` or ``None`` when no fix is available."""
        ...


def format_location_label(latitude: float, longitude: float) -> str:
    lat_hemisphere = "N" if latitude >= 0 else "S"
    lon_hemisphere = "E" if longitude >= 0 else "W"
    return (
        f"Current Location ({abs(latitude):.4f}°{lat_hemisphere}, "
        f"{abs(longitude):.4f}°{lon_hemisphere})"
    )


class DeviceLocator:
    """Resolves the device coordinate through a ``LocationBackend``.

    Resolution may block while waiting for a fix, so callers run it on a
    worker thread.
    """

    def __init__(self, backend: LocationBackend) -> None:
        self.backend = backend

    def resolve_device_coordinate(self) -> LocationFix:
        try:
            if not self.backend.has_permission():
                raise LocationPermissionError("Location permission not granted")
            fix = self.backend.current_fix()
        except LocationError:
            raise
        except Exception as exc:
            logger.error("Location backend %s failed", type(self.backend).__name__, exc_info=exc)
            raise PlatformError(f"Location lookup failed: {exc}") from exc
        if fix is None:
            raise LocationUnavailableError("Unable to obtain a location fix")
        latitude, longitude = fix
        return LocationFix(latitude, longitude, format_location_label(latitude, longitude))


class StaticLocationBackend:
    """Backend returning a fixed position, e.g. a configured home location."""

    def __init__(self, latitude: float, longitude: float, permitted: bool = True) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.permitted = permitted

    def has_permission(self) -> bool:
        return self.permitted

    def current_fix(self) -> Optional[Tuple[float, float]]:
        return self.latitude, self.longitude


class IpGeolocationBackend(HttpProvider):
    """Approximates the device position from its public IP address.

    ``consent`` plays the role of the platform permission: without it no
    request is made.
    """

    base_url = "http://ip-api.com/json/"

    def __init__(self, consent: bool = False, base_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.consent = consent
        self.base_url = base_url or self.base_url

    def has_permission(self) -> bool:
        return self.consent

    def current_fix(self) -> Optional[Tuple[float, float]]:
        try:
            data = self._get_json_object(self.base_url, {"fields": "status,message,lat,lon,city,country"})
        except GatewayError as exc:
            raise PlatformError(f"IP geolocation failed: {exc}") from exc
        try:
            payload = IpLocationPayload.model_validate(data)
        except ValidationError as exc:
            raise PlatformError(f"IP geolocation returned an unexpected body: {exc.error_count()} errors") from exc
        if not payload.has_fix:
            self._log.warning("IP geolocation gave no fix: %s", payload.message)
            return None
        self._log.info("Located device near %s, %s", payload.city, payload.country)
        return payload.lat, payload.lon


__all__ = [
    "LocationBackend",
    "DeviceLocator",
    "StaticLocationBackend",
    "IpGeolocationBackend",
    "LocationError",
    "LocationPermissionError",
    "LocationUnavailableError",
    "PlatformError",
    "format_location_label",
]
