"""Observer location providers.

A provider wraps the host's asynchronous "current position" query. It
either returns :class:`Coordinates` or raises one of:

- :class:`LocationUnsupportedError` when the host has no location capability
- :class:`LocationAcquisitionError` for permission, timeout or
  position-unavailable failures reported by the host
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from ambutrack._constants import USER_AGENT
from ambutrack.config import TrackerConfig
from ambutrack.exceptions import (
    LocationAcquisitionError,
    LocationUnsupportedError,
    TrackerError,
)
from ambutrack.models.coordinates import Coordinates

_logger = logging.getLogger(__name__)


class LocationProvider(Protocol):
    async def acquire(self) -> Coordinates:
        ...


class StaticLocationProvider:
    """Always resolves to the same fix, e.g. one given on the command line."""

    def __init__(self, coordinates: Coordinates) -> None:
        self._coordinates = coordinates

    async def acquire(self) -> Coordinates:
        return self._coordinates


class UnsupportedLocationProvider:
    """Provider for hosts without any location capability."""

    async def acquire(self) -> Coordinates:
        raise LocationUnsupportedError("Geolocation is not supported on this host")


class CallbackLocationProvider:
    """Adapts a host callback to :class:`LocationProvider`.

    ``query`` is an async callable returning a :class:`Coordinates`, or a
    mapping with ``latitude``/``longitude`` keys. Passing ``None`` models a
    host without the capability.
    """

    def __init__(
        self,
        query: Callable[[], Awaitable[Any]] | None,
        *,
        timeout: float | None = None,
    ) -> None:
        self._query = query
        self._timeout = timeout

    async def acquire(self) -> Coordinates:
        if self._query is None:
            raise LocationUnsupportedError("Geolocation is not supported on this host")
        try:
            if self._timeout is None:
                result = await self._query()
            else:
                result = await asyncio.wait_for(self._query(), self._timeout)
        except TrackerError:
            raise
        except TimeoutError as exc:
            raise LocationAcquisitionError("Location request timed out", reason="timeout") from exc
        except Exception as exc:
            raise LocationAcquisitionError(f"Location request failed: {exc}", reason="unavailable") from exc

        if isinstance(result, Coordinates):
            return result
        try:
            return Coordinates.model_validate(result)
        except ValidationError as exc:
            raise LocationAcquisitionError(
                f"Host returned an invalid position: {result!r}",
                reason="unavailable",
            ) from exc


class IpGeolocationProvider:
    """Approximates the observer position from an IP geolocation service.

    Expects a JSON body with ``lat``/``lon`` (or ``latitude``/``longitude``)
    keys, as returned by ip-api.com style services. A ``"status": "fail"``
    body is reported as an acquisition failure.
    """

    def __init__(self, config: TrackerConfig, session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = session

    async def acquire(self) -> Coordinates:
        url = self._config.geolocation_url
        timeout = aiohttp.ClientTimeout(total=self._config.location_timeout)
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s", url)
        try:
            async with self._http.get(url, headers=headers, timeout=timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise LocationAcquisitionError(
                        f"HTTP {resp.status} from {url}",
                        reason="unavailable",
                    )
        except LocationAcquisitionError:
            raise
        except TimeoutError as exc:
            raise LocationAcquisitionError(f"Request to {url} timed out", reason="timeout") from exc
        except aiohttp.ClientError as exc:
            raise LocationAcquisitionError(f"Request to {url} failed: {exc}", reason="unavailable") from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LocationAcquisitionError(f"Invalid JSON from {url}", reason="unavailable") from exc

        if not isinstance(body, dict) or str(body.get("status", "success")).lower() == "fail":
            message = body.get("message", "") if isinstance(body, dict) else ""
            raise LocationAcquisitionError(f"Geolocation lookup failed: {message}", reason="unavailable")

        try:
            return Coordinates.model_validate(body)
        except ValidationError as exc:
            raise LocationAcquisitionError(f"Position missing from {url} response", reason="unavailable") from exc
