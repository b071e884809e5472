"""Custom exception hierarchy for netsense."""

from __future__ import annotations


class NetsenseError(Exception):
    """Base exception for all netsense errors."""


class NetsenseConfigError(NetsenseError):
    """Invalid or missing configuration."""


class CellPermissionError(NetsenseError, PermissionError):
    """Location or phone-state authorization is missing or was revoked.

    This is the only error allowed to halt the acquisition pipeline: the
    scheduler stops and the error is handed to the caller.
    """


class TransientProviderError(NetsenseError):
    """A measurement provider failed internally (network, non-200, invalid JSON).

    The coordinator recovers from this by treating the provider result as
    empty for the current cycle.
    """

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


class MalformedRecordError(NetsenseError):
    """A raw measurement carried an unrecognized or mismatched technology tag.

    The normalizer recovers from this by producing an ``Unknown`` record,
    so the measurement is never dropped silently.
    """

    def __init__(self, message: str, *, technology: str = "") -> None:
        self.technology = technology
        super().__init__(message)


class StoreError(NetsenseError):
    """The durable store rejected an insert, query, or delete."""
