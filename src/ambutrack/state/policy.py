"""Deterministic acceptance policy for observer fixes.

This module contains *no* state mutation; the reducer asks it whether a
resolved location request may still update state.
"""

from __future__ import annotations


def next_request_id(current: int) -> int:
    """Request ids are issued in strictly increasing order starting at 1."""
    return current + 1


def should_accept_location(*, latest_request_id: int, incoming_request_id: int) -> bool:
    """Decide whether a resolved location request may update state.

    Policy: the latest *issued* request governs. A request that resolves
    after a newer one was issued is stale and dropped, whichever of the two
    resolves first.
    """
    return incoming_request_id == latest_request_id
