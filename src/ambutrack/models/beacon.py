"""Beacon status models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator, model_validator

from ambutrack.ingestion.normalize import safe_float
from ambutrack.models._base import TrackerBaseModel
from ambutrack.models.coordinates import Coordinates


class BeaconStatus(StrEnum):
    """Power state reported by the beacon."""

    OFF = "OFF"
    ON = "ON"


class BeaconSnapshot(TrackerBaseModel):
    """One poll result of the beacon endpoint.

    ``latitude``/``longitude`` are ``None`` when the endpoint reports no fix.
    A snapshot with only one of the two values has no :attr:`position`.
    """

    status: BeaconStatus
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> Any:
        parsed = safe_float(value)
        return value if parsed is None else parsed

    @model_validator(mode="before")
    @classmethod
    def _accept_short_keys(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if "latitude" in values or "longitude" in values:
            return values
        merged = dict(values)
        if "lat" in values:
            merged["latitude"] = values["lat"]
        for key in ("lng", "lon"):
            if key in values:
                merged["longitude"] = values[key]
                break
        merged.setdefault("raw", values)
        return merged

    @property
    def is_on(self) -> bool:
        return self.status == BeaconStatus.ON

    @property
    def position(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)
