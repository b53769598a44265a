"""Great-circle distance helpers."""

from __future__ import annotations

import math

from ambutrack.models.coordinates import Coordinates

#: Mean Earth radius in metres.
EARTH_RADIUS_M: float = 6_371_000.0


def haversine_m(a: Coordinates, b: Coordinates) -> float:
    """Compute great-circle distance in meters between two points."""
    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlambda = math.radians(b.longitude - a.longitude)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def format_distance(meters: float) -> str:
    """Render a distance the way the map readout shows it (``"850 m"``, ``"2.4 km"``)."""
    if meters < 1000:
        return f"{round(meters):d} m"
    return f"{meters / 1000:.1f} km"
