"""Exceptions raised at the engine boundary."""

from __future__ import annotations

from collections.abc import Mapping


class SnapshotIncompleteError(ValueError):
    """Raised when availability would be computed from a partial snapshot."""

    def __init__(self, message: str, *, failures: Mapping[str, BaseException] | None = None) -> None:
        super().__init__(message)
        self.failures: dict[str, BaseException] = dict(failures or {})


class BookingRejectedError(Exception):
    """Raised by a create call when the server refuses a slot.

    The usual cause is a race with another booking that the advisory client
    check could not see. Callers re-fetch and re-enumerate before retrying.
    """

    def __init__(self, message: str = "Slot is no longer available", *, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason


__all__ = ["BookingRejectedError", "SnapshotIncompleteError"]
