"""Exceptions raised inside the relay remote engine."""

from __future__ import annotations


class RelayRemoteError(Exception):
    """Base class for all relay remote errors."""


class InvalidDataError(RelayRemoteError):
    """A received message is not a usable event envelope."""

    def __init__(self, raw: str, reason: str = "invalid data") -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"{reason}: {raw!r}")


class HandlerFailedError(RelayRemoteError):
    """One or more body elements of a message could not be applied."""

    def __init__(self, body_type: str, failures: int, total: int) -> None:
        self.body_type = body_type
        self.failures = failures
        self.total = total
        super().__init__(
            f"callback failed for body type {body_type!r} ({failures}/{total} elements)"
        )


class StoreError(RelayRemoteError):
    """The conversation store rejected an operation."""
