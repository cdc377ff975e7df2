"""Error taxonomy for upstream fetches and the retry classification."""

from enum import Enum
from typing import Optional

import httpx


class ErrorKind(str, Enum):
    """Closed set of failure kinds a fetch collaborator can raise."""

    NETWORK = "network"
    UPSTREAM = "upstream"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


class RadarError(Exception):
    """Base class for every error raised by the radar fetch layer."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class NetworkError(RadarError):
    """Transport failure: DNS, connection refused, timeout."""

    kind = ErrorKind.NETWORK


class UpstreamError(RadarError):
    """HTTP-shaped failure reported by a registry."""

    kind = ErrorKind.UPSTREAM

    def __init__(self, message: str, status: int, *, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.status = status


class ValidationError(RadarError):
    """Malformed or undecodable data received from upstream."""

    kind = ErrorKind.VALIDATION


class NotFoundError(RadarError):
    """Logical absence, e.g. an unknown package or a version without a release."""

    kind = ErrorKind.NOT_FOUND


class UnknownError(RadarError):
    """Catch-all for failures that fit no other kind."""

    kind = ErrorKind.UNKNOWN


def _is_retryable_status(status: int) -> bool:
    return status >= 500 or status == 429


def is_retryable(error: BaseException) -> bool:
    """Return True when a failed fetch is worth attempting again.

    Network failures and upstream statuses >= 500 or == 429 are retryable.
    Everything else (404, validation errors, unknown shapes) is not.
    """
    if isinstance(error, RadarError):
        if error.kind is ErrorKind.NETWORK:
            return True
        if error.kind is ErrorKind.UPSTREAM:
            return _is_retryable_status(error.status)
        return False

    # Raw httpx errors from collaborators that skip the typed wrappers
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return _is_retryable_status(error.response.status_code)

    return False
