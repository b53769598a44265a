"""Coordinate pair model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ambutrack.ingestion.normalize import safe_float


class Coordinates(BaseModel):
    """A WGS84 position.

    Parameters
    ----------
    latitude : float
        Latitude in degrees, ``-90 <= latitude <= 90``.
    longitude : float
        Longitude in degrees, ``-180 <= longitude <= 180``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("longitude", "lng", "lon"),
    )

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> Any:
        parsed = safe_float(value)
        # Leave unparseable input as-is so pydantic reports it.
        return value if parsed is None else parsed

    def as_pair(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)
