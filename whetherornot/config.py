"""Runtime configuration for the weather data layer."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional


class ImproperlyConfigured(RuntimeError):
    """Raised when a required setting is missing."""


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None or value == "":
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str = "https://api.openweathermap.org"
    units: str = "imperial"
    exclude: str = "minutely,alerts"
    request_timeout: float = 30.0
    max_workers: int = 4
    database_path: Optional[str] = None
    location_consent: bool = False
    log_bodies: bool = False

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ImproperlyConfigured("api_key must be provided")
        if self.request_timeout <= 0:
            raise ImproperlyConfigured("request_timeout must be positive")
        if self.max_workers < 1:
            raise ImproperlyConfigured("max_workers must be at least 1")

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """Build settings with the API key taken from ``OPENWEATHER_API_KEY``."""

        return cls(api_key=env("OPENWEATHER_API_KEY"), **overrides)


def configure_logging(level: str | int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["Settings", "ImproperlyConfigured", "env", "configure_logging"]
