#!/usr/bin/env python3
"""Follow the ambulance beacon from a terminal.

Renders a text frame every time the tracker state changes. Commands are
read from stdin, one per line:

- ``m`` / ``map``      request the observer location and open the map
- ``d`` / ``dismiss``  dismiss the alert
- ``c`` / ``close``    close the map
- ``q`` / ``quit``     stop

The observer position comes from ``--lat/--lon`` when given, otherwise from
an IP geolocation lookup.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from ambutrack import (  # noqa: E402
    BeaconTracker,
    Coordinates,
    IpGeolocationProvider,
    LocationProvider,
    StateRenderer,
    StaticLocationProvider,
    TextRenderer,
    TrackerConfig,
    bind_renderer,
)


async def _read_commands(tracker: BeaconTracker) -> None:
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            return
        command = line.strip().lower()
        if command in {"q", "quit"}:
            return
        if command in {"m", "map"}:
            tracker.request_location()
        elif command in {"d", "dismiss"}:
            tracker.dismiss_alert()
        elif command in {"c", "close"}:
            tracker.close_map()
        elif command:
            print(f"Unknown command: {command}", file=sys.stderr)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Track the ambulance beacon and compare it with your position.")
    parser.add_argument("--endpoint", help="Beacon status URL (default: AMBUTRACK_ENDPOINT_URL or built-in)")
    parser.add_argument("--interval", type=float, help="Seconds between polls")
    parser.add_argument("--lat", type=float, help="Observer latitude")
    parser.add_argument("--lon", type=float, help="Observer longitude")
    parser.add_argument(
        "--placeholder-distance",
        action="store_true",
        help="Show the fixed legacy distance readout instead of the computed one",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, object] = {}
    if args.endpoint:
        overrides["endpoint_url"] = args.endpoint
    if args.interval:
        overrides["poll_interval"] = args.interval
    if args.placeholder_distance:
        overrides["distance_mode"] = "placeholder"
    config = TrackerConfig.from_env(**overrides)

    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")

    async with aiohttp.ClientSession() as http:
        location: LocationProvider
        if args.lat is not None:
            location = StaticLocationProvider(Coordinates(latitude=args.lat, longitude=args.lon))
        else:
            location = IpGeolocationProvider(config, http)

        async with BeaconTracker(config, location=location, session=http) as tracker:
            renderer: StateRenderer = TextRenderer(sys.stdout)
            tracker.subscribe(bind_renderer(renderer, distance_mode=config.distance_mode))
            await _read_commands(tracker)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
