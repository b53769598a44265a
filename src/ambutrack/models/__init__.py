"""Data models for beacon and observer positions."""

from ambutrack.models._base import TrackerBaseModel
from ambutrack.models.beacon import BeaconSnapshot, BeaconStatus
from ambutrack.models.coordinates import Coordinates

__all__ = [
    "BeaconSnapshot",
    "BeaconStatus",
    "Coordinates",
    "TrackerBaseModel",
]
