from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import aiohttp
import pytest
from aiohttp import test_utils, web

from ambutrack.config import TrackerConfig
from ambutrack.exceptions import BeaconPollError, TrackerError
from ambutrack.models.beacon import BeaconSnapshot, BeaconStatus
from ambutrack.remote import BeaconStatusClient, poll_with_timeout

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _server(handler: Handler) -> test_utils.TestServer:
    app = web.Application()
    app.router.add_get("/fetch", handler)
    return test_utils.TestServer(app)


def _config(server: test_utils.TestServer, **overrides: float) -> TrackerConfig:
    return TrackerConfig(endpoint_url=str(server.make_url("/fetch")), **overrides)


@pytest.mark.asyncio
async def test_poll_parses_snapshot() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.json_response({"status": "ON", "latitude": 12.9, "longitude": 77.6})

    async with _server(handler) as server, BeaconStatusClient(_config(server)) as client:
        snapshot = await client.poll()

    assert snapshot.status == BeaconStatus.ON
    assert snapshot.latitude == 12.9
    assert snapshot.longitude == 77.6


@pytest.mark.asyncio
async def test_poll_accepts_null_coordinates() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.json_response({"status": "OFF", "latitude": None, "longitude": None})

    async with _server(handler) as server, BeaconStatusClient(_config(server)) as client:
        snapshot = await client.poll()

    assert snapshot.status == BeaconStatus.OFF
    assert snapshot.position is None


@pytest.mark.asyncio
async def test_non_200_raises_poll_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(status=503, text="waking up")

    async with _server(handler) as server, BeaconStatusClient(_config(server)) as client:
        with pytest.raises(BeaconPollError) as excinfo:
            await client.poll()

    assert excinfo.value.status_code == 503
    assert excinfo.value.endpoint.endswith("/fetch")


@pytest.mark.asyncio
async def test_invalid_json_raises_poll_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(text="<html>not json</html>")

    async with _server(handler) as server, BeaconStatusClient(_config(server)) as client:
        with pytest.raises(BeaconPollError, match="Invalid JSON"):
            await client.poll()


@pytest.mark.asyncio
async def test_invalid_payload_raises_poll_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.json_response({"status": "ON", "latitude": 123.0, "longitude": 0.0})

    async with _server(handler) as server, BeaconStatusClient(_config(server)) as client:
        with pytest.raises(BeaconPollError, match="Invalid beacon payload"):
            await client.poll()


@pytest.mark.asyncio
async def test_slow_endpoint_times_out() -> None:
    async def handler(_request: web.Request) -> web.Response:
        await asyncio.sleep(0.5)
        return web.json_response({"status": "ON"})

    async with _server(handler) as server, BeaconStatusClient(_config(server, poll_timeout=0.05)) as client:
        with pytest.raises(BeaconPollError):
            await client.poll()


@pytest.mark.asyncio
async def test_connection_error_raises_poll_error() -> None:
    config = TrackerConfig(endpoint_url="http://127.0.0.1:9/fetch", poll_timeout=1.0)

    async with BeaconStatusClient(config) as client:
        with pytest.raises(BeaconPollError, match="failed"):
            await client.poll()


@pytest.mark.asyncio
async def test_external_session_is_not_closed() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.json_response({"status": "OFF"})

    async with _server(handler) as server, aiohttp.ClientSession() as http:
        async with BeaconStatusClient(_config(server), session=http) as client:
            await client.poll()
        assert not http.closed


@pytest.mark.asyncio
async def test_poll_requires_context() -> None:
    client = BeaconStatusClient(TrackerConfig())

    with pytest.raises(TrackerError, match="not initialized"):
        await client.poll()


@pytest.mark.asyncio
async def test_poll_with_timeout_maps_timeout() -> None:
    class _Hanging:
        async def poll(self) -> BeaconSnapshot:
            await asyncio.sleep(10)
            raise AssertionError("unreachable")

    with pytest.raises(BeaconPollError, match="timed out"):
        await poll_with_timeout(_Hanging(), 0.01)
