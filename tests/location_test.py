from __future__ import annotations

import pytest
import responses

from whetherornot.providers.location import (
    DeviceLocator,
    IpGeolocationBackend,
    LocationPermissionError,
    LocationUnavailableError,
    PlatformError,
    StaticLocationBackend,
    format_location_label,
)


IP_URL = "http://ip.test/json/"


class _FailingBackend:
    def has_permission(self) -> bool:
        return True

    def current_fix(self):
        raise OSError("location service crashed")


class _PermissionServiceDown:
    def has_permission(self) -> bool:
        raise OSError("permission service down")

    def current_fix(self):
        raise AssertionError("fix requested without permission")


def test_format_location_label_uses_hemispheres():
    assert format_location_label(46.8384, -92.18) == "Current Location (46.8384°N, 92.1800°W)"
    assert format_location_label(-33.86882, 151.20929) == "Current Location (33.8688°S, 151.2093°E)"


def test_static_backend_resolves_fix():
    fix = DeviceLocator(StaticLocationBackend(10.0, 20.0)).resolve_device_coordinate()

    assert (fix.latitude, fix.longitude) == (10.0, 20.0)
    assert fix.coordinate.latitude == 10.0


def test_permission_checked_before_backend():
    with pytest.raises(LocationPermissionError):
        DeviceLocator(StaticLocationBackend(10.0, 20.0, permitted=False)).resolve_device_coordinate()


def test_backend_crash_is_platform_error():
    with pytest.raises(PlatformError) as excinfo:
        DeviceLocator(_FailingBackend()).resolve_device_coordinate()

    assert "location service crashed" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_permission_check_crash_is_platform_error():
    with pytest.raises(PlatformError) as excinfo:
        DeviceLocator(_PermissionServiceDown()).resolve_device_coordinate()

    assert "permission service down" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_ip_backend_returns_fix():
    backend = IpGeolocationBackend(consent=True, base_url=IP_URL)
    with responses.RequestsMock() as rsps:
        rsps.add(
            "GET",
            IP_URL,
            json={"status": "success", "lat": 46.7867, "lon": -92.1005, "city": "Duluth", "country": "United States"},
            status=200,
        )
        fix = DeviceLocator(backend).resolve_device_coordinate()

        assert len(rsps.calls) == 1

    assert fix.label == "Current Location (46.7867°N, 92.1005°W)"


def test_ip_backend_failed_lookup_is_unavailable():
    backend = IpGeolocationBackend(consent=True, base_url=IP_URL)
    with responses.RequestsMock() as rsps:
        rsps.add("GET", IP_URL, json={"status": "fail", "message": "reserved range"}, status=200)
        with pytest.raises(LocationUnavailableError):
            DeviceLocator(backend).resolve_device_coordinate()


def test_ip_backend_http_error_is_platform_error():
    backend = IpGeolocationBackend(consent=True, base_url=IP_URL)
    with responses.RequestsMock() as rsps:
        rsps.add("GET", IP_URL, status=429)
        with pytest.raises(PlatformError):
            DeviceLocator(backend).resolve_device_coordinate()


def test_ip_backend_without_consent_makes_no_request():
    backend = IpGeolocationBackend(consent=False, base_url=IP_URL)
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add("GET", IP_URL, json={"status": "success", "lat": 1.0, "lon": 2.0})
        with pytest.raises(LocationPermissionError):
            DeviceLocator(backend).resolve_device_coordinate()

        assert len(rsps.calls) == 0
