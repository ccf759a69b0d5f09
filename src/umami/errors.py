"""Typed failures from the Umami upstream.

The /metrics route collapses all of these into one generic 500, but logs
each kind separately.
"""
from __future__ import annotations

from typing import Optional


class UmamiError(Exception):
    """Base class for every upstream failure."""

    kind = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamAuthError(UmamiError):
    """Login rejected or no usable token in the login response."""

    kind = "auth"


class UpstreamFetchError(UmamiError):
    """Network failure or non-2xx response from a data endpoint."""

    kind = "fetch"


class MalformedResponseError(UmamiError):
    """Body was not JSON, or not the JSON shape we consume."""

    kind = "malformed"
