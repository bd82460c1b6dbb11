"""Custom exception hierarchy for canhealth."""

from __future__ import annotations


class CanHealthError(Exception):
    """Base exception for all canhealth errors."""


class CanHealthConfigError(CanHealthError):
    """Invalid or missing configuration."""


class CanHealthTransportError(CanHealthError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON).

    Every non-success response is treated the same way; ``status_code`` is
    kept for logging only.
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


class _EndpointError(CanHealthError):
    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class TransientFetchError(_EndpointError):
    """Listing, quality or export fetch failed.

    Covers network failures, server errors and malformed payloads.  The
    sync controller records it as the current error and keeps the data it
    already has; the next poll (or a manual retry) tries again.
    """


class RefreshSubmissionError(_EndpointError):
    """Force-refresh submission or status polling failed.

    Ends the force-refresh job immediately; it is never retried
    automatically.
    """


class RefreshTimeoutError(RefreshSubmissionError):
    """The server kept reporting the refresh job as running past the allowed status checks."""


class ExportError(CanHealthError):
    """Export fetch or spreadsheet build failed.

    Reported once to the caller; the displayed view state is left untouched.
    """
