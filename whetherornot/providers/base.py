from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import Response


class GatewayError(RuntimeError):
    """Base error raised by HTTP providers."""


class NetworkError(GatewayError):
    """No response was obtained (DNS failure, timeout, connection reset)."""


class ApiError(GatewayError):
    """The upstream answered with a non-success status."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"{status_code} - {reason}")
        self.status_code = status_code
        self.reason = reason


class SerializationError(GatewayError):
    """The response body could not be decoded into the expected shape."""


@dataclass(frozen=True)
class RequestConfig:
    timeout: float = 30.0
    log_bodies: bool = False


class HttpProvider:
    """Base class issuing single-attempt requests through a shared session."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session or requests.Session()
        self._log = logging.getLogger(self.__class__.__name__)

    def _handle_response(self, response: Response) -> Response:
        if self.request_config.log_bodies:
            self._log.debug(
                "Response %s %s: %s", response.status_code, response.url, response.text[:500]
            )
        if not 200 <= response.status_code < 300:
            self._log.error("Provider returned %s: %s", response.status_code, response.reason)
            raise ApiError(response.status_code, response.reason or "")
        return response

    def _request(self, method: str, url: str, **kwargs) -> Response:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.request_config.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            self._log.error("Request to %s failed: %s", url, exc)
            raise NetworkError(str(exc)) from exc
        return self._handle_response(response)

    def _get_json_object(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = self._request("GET", url, params=params)
        try:
            data = response.json()
        except ValueError as exc:
            self._log.error("Failed to decode JSON from %s", url)
            raise SerializationError(f"invalid JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise SerializationError(f"expected a JSON object, got {type(data).__name__}")
        return data


def dump_payload(data: Dict[str, Any]) -> str:
    """Re-serialize a decoded body for raw display."""

    try:
        return json.dumps(data, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc


__all__ = [
    "HttpProvider",
    "RequestConfig",
    "GatewayError",
    "NetworkError",
    "ApiError",
    "SerializationError",
    "dump_payload",
]
