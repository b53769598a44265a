"""HTTP client for the beacon status endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from ambutrack._constants import USER_AGENT
from ambutrack.config import TrackerConfig
from ambutrack.exceptions import BeaconPollError, TrackerError
from ambutrack.ingestion.apply import parse_beacon_payload
from ambutrack.models.beacon import BeaconSnapshot

_logger = logging.getLogger(__name__)


class BeaconSource(Protocol):
    """Structural interface for anything that can be polled for a beacon snapshot.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (:class:`BeaconStatusClient`) concrete.
    """

    async def poll(self) -> BeaconSnapshot:
        ...


class BeaconStatusClient:
    """Polls the beacon endpoint once per :meth:`poll` call.

    Usage::

        async with BeaconStatusClient(config) as client:
            snapshot = await client.poll()

    A caller-supplied ``aiohttp.ClientSession`` is used as-is and never
    closed by this client.
    """

    def __init__(
        self,
        config: TrackerConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session

    async def __aenter__(self) -> BeaconStatusClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise TrackerError("Client not initialized. Use 'async with BeaconStatusClient(...) as client:'")
        return self._http_session

    async def poll(self) -> BeaconSnapshot:
        """Fetch and parse the current beacon snapshot.

        Raises :class:`BeaconPollError` on transport, HTTP status, JSON or
        payload failures. Never retries.
        """
        http = self._require_session()
        url = self._config.endpoint_url
        headers = {"accept": "application/json", "user-agent": USER_AGENT}
        timeout = aiohttp.ClientTimeout(total=self._config.poll_timeout)

        _logger.debug("GET %s", url)

        try:
            async with http.get(url, headers=headers, timeout=timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise BeaconPollError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except BeaconPollError:
            raise
        except TimeoutError as exc:
            raise BeaconPollError(
                f"Request to {url} timed out after {self._config.poll_timeout}s",
                endpoint=url,
            ) from exc
        except aiohttp.ClientError as exc:
            raise BeaconPollError(
                f"Request to {url} failed: {exc}",
                endpoint=url,
            ) from exc

        try:
            body_json = json.loads(text)
        except json.JSONDecodeError as exc:
            raise BeaconPollError(
                f"Invalid JSON from {url}: {text[:200]}",
                endpoint=url,
            ) from exc

        snapshot = parse_beacon_payload(body_json, endpoint=url)
        _logger.debug(
            "Beacon snapshot status=%s latitude=%s longitude=%s",
            snapshot.status,
            snapshot.latitude,
            snapshot.longitude,
        )
        return snapshot


async def poll_with_timeout(source: BeaconSource, timeout: float) -> BeaconSnapshot:
    """Bound any :class:`BeaconSource` poll, mapping a timeout to :class:`BeaconPollError`."""
    try:
        return await asyncio.wait_for(source.poll(), timeout)
    except TimeoutError as exc:
        raise BeaconPollError(f"Beacon poll timed out after {timeout}s") from exc
