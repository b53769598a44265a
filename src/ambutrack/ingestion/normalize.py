"""Normalization helpers.

Centralizes defensive parsing and placeholder handling.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def unwrap_payload(payload: Any) -> Any:
    """Return the status object from an endpoint body.

    Some deployments wrap the record as ``{"data": {...}}``.
    """

    if isinstance(payload, dict):
        nested = payload.get("data")
        if isinstance(nested, dict) and "status" not in payload:
            return nested
    return payload
