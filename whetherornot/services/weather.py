"""Chained weather fetches: postal code or device location, then weather."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from ..entities import Failure, LocationFix, PostalLocation, RequestContext, WeatherQueryResult
from ..providers.location import DeviceLocator, LocationError
from ..providers.openweather import OpenWeatherGateway
from ..storage import LocationStore
from .delivery import ConsumerHandle


LocationListener = Callable[[LocationFix], None]


class WeatherFetchService:
    """Runs the two-step weather chains and delivers one terminal result.

    The second step of a chain only starts once the first one has produced
    its result, and the first failure ends the chain with that failure's
    message.  Each ``submit_*`` call runs its chain on one pool worker.
    """

    def __init__(
        self,
        *,
        gateway: OpenWeatherGateway,
        locator: Optional[DeviceLocator] = None,
        location_store: Optional[LocationStore] = None,
        max_workers: int = 4,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.gateway = gateway
        self.locator = locator
        self.location_store = location_store
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="weather-fetch")
        self._log = logger or logging.getLogger(self.__class__.__name__)

    # Synchronous chains -------------------------------------------------
    def weather_by_coordinate(self, latitude: float, longitude: float) -> WeatherQueryResult:
        context = RequestContext("coordinate")
        self._log.info("[%s] Fetching weather for lat=%s, lon=%s", context.request_id, latitude, longitude)
        return self._fetch_weather(context, latitude, longitude)

    def weather_by_postal_code(self, postal_code: str, country_code: str = "US") -> WeatherQueryResult:
        context = RequestContext("postal_code")
        self._log.info("[%s] Getting coordinates for zip code: %s", context.request_id, postal_code)
        lookup = self.gateway.resolve_coordinate_from_postal_code(postal_code, country_code)
        if not lookup.ok:
            self._log.error(
                "[%s] Failed to get coordinates for zip %s: %s", context.request_id, postal_code, lookup.message
            )
            return lookup

        coordinate = lookup.coordinate
        self._log.info(
            "[%s] Got coordinates from zip %s: lat=%s, lon=%s",
            context.request_id,
            postal_code,
            coordinate.latitude,
            coordinate.longitude,
        )
        if lookup.location is not None:
            self._remember(context, lookup.location)
        return self._fetch_weather(context, coordinate.latitude, coordinate.longitude)

    def weather_by_device_location(
        self, on_location_resolved: Optional[LocationListener] = None
    ) -> WeatherQueryResult:
        context = RequestContext("device_location")
        if self.locator is None:
            return Failure("Device location is not configured")
        try:
            fix = self.locator.resolve_device_coordinate()
        except LocationError as exc:
            self._log.warning("[%s] Device location failed: %s", context.request_id, exc)
            return Failure(str(exc), error=exc)

        self._log.info("[%s] Device located at %s", context.request_id, fix.label)
        if on_location_resolved is not None:
            try:
                on_location_resolved(fix)
            except Exception as exc:  # noqa: BLE001
                self._log.error("[%s] Location listener failed", context.request_id, exc_info=exc)
                return Failure(f"UI update error: {exc}", error=exc)
        return self._fetch_weather(context, fix.latitude, fix.longitude)

    # Background chains --------------------------------------------------
    def submit_coordinate_fetch(
        self, consumer: ConsumerHandle, latitude: float, longitude: float
    ) -> "Future[WeatherQueryResult]":
        return self._submit(consumer, lambda: self.weather_by_coordinate(latitude, longitude))

    def submit_postal_code_fetch(
        self, consumer: ConsumerHandle, postal_code: str, country_code: str = "US"
    ) -> "Future[WeatherQueryResult]":
        return self._submit(consumer, lambda: self.weather_by_postal_code(postal_code, country_code))

    def submit_device_location_fetch(self, consumer: ConsumerHandle) -> "Future[WeatherQueryResult]":
        return self._submit(
            consumer,
            lambda: self.weather_by_device_location(on_location_resolved=consumer.notify_location_resolved),
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    # Helpers ------------------------------------------------------------
    def _submit(
        self, consumer: ConsumerHandle, chain: Callable[[], WeatherQueryResult]
    ) -> "Future[WeatherQueryResult]":
        def run() -> WeatherQueryResult:
            try:
                result = chain()
            except Exception as exc:  # noqa: BLE001
                self._log.exception("Weather chain crashed")
                result = Failure(f"Unexpected error: {exc}", error=exc)
            consumer.deliver(result)
            return result

        return self._executor.submit(run)

    def _fetch_weather(self, context: RequestContext, latitude: float, longitude: float) -> WeatherQueryResult:
        self._log.debug("[%s] Calling weather API with coordinates: lat=%s, lon=%s", context.request_id, latitude, longitude)
        result = self.gateway.fetch_weather_by_coordinate(latitude, longitude)
        if result.ok:
            self._log.info("[%s] Weather fetched (%d bytes)", context.request_id, len(result.payload))
        else:
            self._log.error("[%s] Weather fetch failed: %s", context.request_id, result.message)
        return result

    def _remember(self, context: RequestContext, location: PostalLocation) -> None:
        if self.location_store is None:
            return
        try:
            self.location_store.save_or_update(location)
        except Exception as exc:  # noqa: BLE001
            self._log.error("[%s] Failed to save location %s: %s", context.request_id, location.zip, exc)


__all__ = ["WeatherFetchService", "LocationListener"]
