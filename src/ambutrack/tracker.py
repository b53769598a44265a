"""Async tracker runtime.

``BeaconTracker`` wires the beacon poller and a location provider to the
state store. All state changes go through one ``asyncio.Queue`` drained by
a single consumer task, so transitions never interleave even when a poll
and a location request complete at the same time.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from ambutrack.config import TrackerConfig
from ambutrack.exceptions import BeaconPollError, LocationError, LocationUnsupportedError, TrackerError
from ambutrack.ingestion.apply import build_location_event, build_poll_event
from ambutrack.location import LocationProvider, UnsupportedLocationProvider
from ambutrack.models.beacon import BeaconSnapshot
from ambutrack.models.coordinates import Coordinates
from ambutrack.remote import BeaconSource, BeaconStatusClient, poll_with_timeout
from ambutrack.state.events import AlertDismissed, LocationRequested, MapClosed, ObserverLocated, TrackerEvent
from ambutrack.state.policy import next_request_id, should_accept_location
from ambutrack.state.reducer import TrackerState
from ambutrack.state.store import StateListener, TrackerStore

_logger = logging.getLogger(__name__)


class BeaconTracker:
    """Tracks one beacon and the observer's own position.

    Usage::

        async with BeaconTracker(config, location=provider) as tracker:
            tracker.subscribe(renderer)
            await tracker.acquire_location()

    On enter the tracker polls immediately and then every
    ``config.poll_interval`` seconds until exit. Failed polls and failed
    location requests are logged and leave the state untouched.
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        source: BeaconSource | None = None,
        location: LocationProvider | None = None,
        session: aiohttp.ClientSession | None = None,
        autopoll: bool = True,
    ) -> None:
        self._config = config or TrackerConfig()
        self._source = source
        self._location: LocationProvider = location or UnsupportedLocationProvider()
        self._external_session = session is not None
        self._http_session = session
        self._autopoll = autopoll
        self._store = TrackerStore()
        self._queue: asyncio.Queue[TrackerEvent] | None = None
        self._consumer_task: asyncio.Task[None] | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._acquisitions: dict[int, asyncio.Task[Coordinates | None]] = {}
        self._location_outcomes: dict[int, asyncio.Future[bool]] = {}
        self._request_counter = 0
        self._alive = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> BeaconTracker:
        if self._source is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._source = BeaconStatusClient(self._config, session=self._http_session)
        self._queue = asyncio.Queue()
        self._alive = True
        self._consumer_task = asyncio.create_task(self._consume(self._queue), name="ambutrack-consumer")
        if self._autopoll:
            self._poll_task = asyncio.create_task(self._poll_loop(), name="ambutrack-poll")
        _logger.debug("Tracker started endpoint=%s interval=%ss", self._config.endpoint_url, self._config.poll_interval)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop polling, cancel pending location requests and stop applying events."""
        if not self._alive:
            return
        self._alive = False

        poll_task = self._poll_task
        self._poll_task = None
        if poll_task is not None:
            poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await poll_task

        pending = list(self._acquisitions.values())
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            _logger.debug("Cancelled %d pending location request(s)", len(pending))

        # Apply whatever was queued before teardown, then stop the consumer.
        if self._queue is not None:
            await self._queue.join()
        consumer = self._consumer_task
        self._consumer_task = None
        if consumer is not None:
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer
        for request_id in list(self._location_outcomes):
            self._settle_location(request_id, False)

        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        _logger.debug("Tracker stopped")

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def state(self) -> TrackerState:
        return self._store.state

    @property
    def is_running(self) -> bool:
        return self._alive

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with every new state; returns an unsubscribe callable."""
        return self._store.subscribe(listener)

    async def join(self) -> None:
        """Wait until every queued event has been applied."""
        if self._queue is not None and self._alive:
            await self._queue.join()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_running(self) -> asyncio.Queue[TrackerEvent]:
        if self._queue is None or not self._alive:
            raise TrackerError("Tracker not running. Use 'async with BeaconTracker(...) as tracker:'")
        return self._queue

    def _enqueue(self, event: TrackerEvent) -> None:
        if not self._alive or self._queue is None:
            _logger.debug("Dropping %s after teardown", type(event).__name__)
            return
        self._queue.put_nowait(event)

    async def _consume(self, queue: asyncio.Queue[TrackerEvent]) -> None:
        while True:
            event = await queue.get()
            accepted = False
            try:
                if isinstance(event, ObserverLocated):
                    # Decided against the state the fix is applied to, not a later one.
                    accepted = should_accept_location(
                        latest_request_id=self._store.state.location_request_id,
                        incoming_request_id=event.request_id,
                    )
                self._store.apply(event)
            except Exception:
                accepted = False
                _logger.exception("Failed to apply %s", type(event).__name__)
            finally:
                if isinstance(event, ObserverLocated):
                    self._settle_location(event.request_id, accepted)
                queue.task_done()

    def _settle_location(self, request_id: int, accepted: bool) -> None:
        outcome = self._location_outcomes.pop(request_id, None)
        if outcome is not None and not outcome.done():
            outcome.set_result(accepted)

    # ------------------------------------------------------------------
    # Beacon polling
    # ------------------------------------------------------------------

    async def _poll_loop(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._config.poll_interval
        while True:
            started = loop.time()
            await self.poll_once()
            # A tick waits for its bounded poll, so ticks never overlap.
            await asyncio.sleep(max(0.0, interval - (loop.time() - started)))

    async def poll_once(self) -> BeaconSnapshot | None:
        """Run one tick: poll the beacon and queue the result.

        Returns the snapshot, or ``None`` when the poll failed.
        """
        self._require_running()
        assert self._source is not None  # noqa: S101
        try:
            snapshot = await poll_with_timeout(self._source, self._config.poll_timeout)
        except BeaconPollError as exc:
            _logger.warning("Beacon poll failed: %s", exc)
            return None
        except Exception:
            _logger.exception("Unexpected error while polling beacon")
            return None

        self._enqueue(build_poll_event(snapshot))
        return snapshot

    # ------------------------------------------------------------------
    # Observer location
    # ------------------------------------------------------------------

    def _start_acquisition(self) -> tuple[int, asyncio.Task[Coordinates | None], asyncio.Future[bool]]:
        self._require_running()
        self._request_counter = next_request_id(self._request_counter)
        request_id = self._request_counter
        self._enqueue(LocationRequested(request_id=request_id))

        outcome: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self._location_outcomes[request_id] = outcome
        task = asyncio.create_task(self._acquire(request_id), name=f"ambutrack-location-{request_id}")
        self._acquisitions[request_id] = task
        task.add_done_callback(functools.partial(self._finish_acquisition, request_id))
        return request_id, task, outcome

    def _finish_acquisition(self, request_id: int, task: asyncio.Task[Coordinates | None]) -> None:
        self._acquisitions.pop(request_id, None)
        # No fix was queued, so the consumer will never settle this request.
        if task.cancelled() or task.exception() is not None or task.result() is None:
            self._settle_location(request_id, False)

    async def _acquire(self, request_id: int) -> Coordinates | None:
        try:
            coordinates = await self._location.acquire()
        except LocationUnsupportedError as exc:
            _logger.warning("Location request %d: %s", request_id, exc)
            return None
        except LocationError as exc:
            _logger.warning("Location request %d failed: %s", request_id, exc)
            return None
        except Exception:
            _logger.exception("Unexpected error in location request %d", request_id)
            return None

        if not self._alive:
            _logger.debug("Location request %d resolved after teardown; discarded", request_id)
            return None
        self._enqueue(build_location_event(request_id, coordinates))
        return coordinates

    def request_location(self) -> int:
        """Ask the provider for the observer position without waiting.

        Returns the request id. Only the most recently issued request may
        update state; older ones are discarded when they resolve.
        """
        request_id, _task, _outcome = self._start_acquisition()
        return request_id

    async def acquire_location(self) -> Coordinates | None:
        """Request the observer position and wait for the outcome.

        Returns the coordinates applied to state, or ``None`` when the
        request failed, was superseded by a newer request before its fix
        was applied, or the tracker stopped before it resolved.
        """
        _request_id, task, outcome = self._start_acquisition()
        try:
            coordinates = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            # Cancelled by close().
            return None
        if coordinates is None:
            return None
        if not await outcome:
            return None
        return coordinates

    @property
    def pending_location_requests(self) -> int:
        return len(self._acquisitions)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def dismiss_alert(self) -> None:
        self._require_running()
        self._enqueue(AlertDismissed())

    def close_map(self) -> None:
        self._require_running()
        self._enqueue(MapClosed())
