"""Base model for beacon endpoint responses.

Every response model inherits from :class:`TrackerBaseModel` which
provides:

* A ``model_validator(mode="before")`` that strips placeholder values
  (``""``, ``"--"``, NaN, ``None``) so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Placeholder strings the endpoint (or the firmware behind it) uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null"})


class TrackerBaseModel(BaseModel):
    """Base for endpoint response models.

    Handles:
    * placeholder values (``""``, ``"--"``, NaN) dropped so the field
      default is used instead
    * stashes the original payload dict in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original endpoint payload."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip placeholder values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = TrackerBaseModel._clean_dict(original)

        # Keep an explicit raw= from the caller.
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
