"""Custom exception hierarchy for ambutrack."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for all ambutrack errors."""


class TrackerConfigError(TrackerError):
    """Invalid or missing configuration."""


class BeaconPollError(TrackerError):
    """Polling the beacon endpoint failed (network, non-200, invalid JSON or payload)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class LocationError(TrackerError):
    """Observer location could not be acquired."""


class LocationUnsupportedError(LocationError):
    """The host has no location capability."""


class LocationAcquisitionError(LocationError):
    """The host reported a failure (permission denied, timeout, position unavailable).

    ``reason`` carries the host-level cause when one is known.
    """

    def __init__(self, message: str, *, reason: str = "") -> None:
        self.reason = reason
        super().__init__(message)
