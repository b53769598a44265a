"""Tracker configuration for ambutrack."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from ambutrack._constants import (
    DISTANCE_MODE_HAVERSINE,
    DISTANCE_MODES,
    ENDPOINT_URL,
    GEOLOCATION_URL,
    LOCATION_TIMEOUT_S,
    POLL_INTERVAL_S,
    POLL_TIMEOUT_S,
)
from ambutrack.exceptions import TrackerConfigError


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise TrackerConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    endpoint_url : str
        Beacon status endpoint. ``GET`` returns
        ``{"status": "ON"|"OFF", "latitude": ..., "longitude": ...}``.
    poll_interval : float
        Seconds between two polls of the endpoint.
    poll_timeout : float
        Upper bound in seconds for a single poll. Keep it at or below
        ``poll_interval`` so ticks never overlap.
    location_timeout : float
        Host-level timeout in seconds for location providers that talk to
        an external service.
    distance_mode : str
        ``"haversine"`` computes the great-circle distance between observer
        and beacon; ``"placeholder"`` shows the fixed legacy readout.
    geolocation_url : str
        Service used by :class:`ambutrack.location.IpGeolocationProvider`.
    """

    endpoint_url: str = ENDPOINT_URL
    poll_interval: float = POLL_INTERVAL_S
    poll_timeout: float = POLL_TIMEOUT_S
    location_timeout: float = LOCATION_TIMEOUT_S
    distance_mode: str = DISTANCE_MODE_HAVERSINE
    geolocation_url: str = GEOLOCATION_URL

    def __post_init__(self) -> None:
        if not self.endpoint_url.strip():
            raise TrackerConfigError("endpoint_url must be non-empty")
        for name in ("poll_interval", "poll_timeout", "location_timeout"):
            value = getattr(self, name)
            if value <= 0:
                raise TrackerConfigError(f"{name} must be positive, got {value}")
        if self.distance_mode not in DISTANCE_MODES:
            raise TrackerConfigError(
                f"distance_mode must be one of {sorted(DISTANCE_MODES)}, got {self.distance_mode!r}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from ``AMBUTRACK_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "AMBUTRACK_ENDPOINT_URL": "endpoint_url",
            "AMBUTRACK_DISTANCE_MODE": "distance_mode",
            "AMBUTRACK_GEOLOCATION_URL": "geolocation_url",
        }
        _ENV_FLOAT_MAP = {
            "AMBUTRACK_POLL_INTERVAL": "poll_interval",
            "AMBUTRACK_POLL_TIMEOUT": "poll_timeout",
            "AMBUTRACK_LOCATION_TIMEOUT": "location_timeout",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = val.strip()
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
