"""Pydantic schemas for the JSON bodies returned by upstream services."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .entities import PostalLocation

__all__ = ["ZipCodePayload", "IpLocationPayload"]


class ZipCodePayload(BaseModel):
    """Body of the OpenWeatherMap ``geo/1.0/zip`` endpoint."""

    model_config = ConfigDict(extra="ignore")

    zip: Optional[str] = None
    name: str = ""
    lat: float
    lon: float
    country: str = ""

    def to_location(self, fallback_zip: str) -> PostalLocation:
        return PostalLocation(
            zip=self.zip or fallback_zip,
            name=self.name,
            latitude=self.lat,
            longitude=self.lon,
            country=self.country,
        )


class IpLocationPayload(BaseModel):
    """Body of the ip-api.com lookup endpoint."""

    model_config = ConfigDict(extra="ignore")

    status: str = "success"
    message: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    city: Optional[str] = None
    country: Optional[str] = None

    @property
    def has_fix(self) -> bool:
        return self.status != "fail" and self.lat is not None and self.lon is not None
