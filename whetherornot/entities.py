from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union
from uuid import uuid4


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocationFix:
    """Device position together with a label suitable for display."""

    latitude: float
    longitude: float
    label: str

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class PostalLocation:
    """Geocoding record returned for a postal code lookup."""

    zip: str
    name: str
    latitude: float
    longitude: float
    country: str

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class SavedLocation:
    """A postal location remembered by the local store.

    ``searched_at`` is expressed in epoch milliseconds.
    """

    location: PostalLocation
    searched_at: int
    is_favorite: bool = False

    @property
    def zip(self) -> str:
        return self.location.zip

    @property
    def name(self) -> str:
        return self.location.name


@dataclass(frozen=True)
class WeatherSuccess:
    payload: str

    ok = True


@dataclass(frozen=True)
class PostalSuccess:
    coordinate: Coordinate
    location: Optional[PostalLocation] = None

    ok = True


@dataclass(frozen=True)
class Failure:
    """Terminal error outcome.

    Only ``message`` is meant for the presentation layer, ``error`` keeps the
    exception that produced it.
    """

    message: str
    error: Optional[BaseException] = field(default=None, compare=False)

    ok = False


WeatherQueryResult = Union[WeatherSuccess, Failure]
PostalLookupResult = Union[PostalSuccess, Failure]


@dataclass(frozen=True)
class RequestContext:
    """Correlates the log lines of one user-initiated fetch."""

    operation: str
    request_id: str = field(default_factory=lambda: uuid4().hex[:8])


__all__ = [
    "Coordinate",
    "LocationFix",
    "PostalLocation",
    "SavedLocation",
    "WeatherSuccess",
    "PostalSuccess",
    "Failure",
    "WeatherQueryResult",
    "PostalLookupResult",
    "RequestContext",
]
