"""
MAAS API client exceptions.

Every failure surfaced by the client is a distinct kind so callers can tell
"the network failed" from "the server rejected the call" from "we don't
understand the response".
"""

from __future__ import annotations

from typing import Mapping

import httpx


class MAASError(Exception):
    """Base exception for all MAAS client errors."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self._original_cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Dispatch errors
# =============================================================================


class TransportError(MAASError):
    """No HTTP response was obtained (DNS, refused connection, bad framing)."""

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        self.url = url
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"transport error for {url}{detail}", cause=cause)


class ServerError(MAASError):
    """
    The server answered with a non-2xx status.

    Carries the status code, the full response body and the response headers.
    """

    def __init__(
        self,
        status_code: int,
        body_message: str = "",
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.body_message = body_message
        self.headers = dict(headers or {})
        reason = httpx.codes.get_reason_phrase(status_code)
        super().__init__(f"ServerError: {status_code} {reason} ({body_message})")


def get_server_error(error: BaseException | None) -> ServerError | None:
    """Return ``error`` if it is a ServerError, else None."""
    if isinstance(error, ServerError):
        return error
    return None


# =============================================================================
# Negotiation and classification errors
# =============================================================================


class UnsupportedVersionError(MAASError):
    """Unknown version segment, or no candidate version is offered."""


class DeserializationError(MAASError):
    """A response body did not have the expected structure."""


class PermissionDeniedError(MAASError):
    """Credentials were rejected (401/403)."""

    def __init__(
        self,
        message: str = "Permission denied",
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, cause=cause)


class UnexpectedError(MAASError):
    """A failure that does not fit any specific kind."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"unexpected: {cause}", cause=cause)


# =============================================================================
# Configuration errors
# =============================================================================


class InvalidAPIKeyError(MAASError):
    """The API key is not of the form ``consumer_key:token_key:token_secret``."""

    def __init__(self, parts: int) -> None:
        self.parts = parts
        super().__init__(
            f"invalid API key: expected 3 colon-separated parts, got {parts}"
        )


__all__ = [
    "MAASError",
    "TransportError",
    "ServerError",
    "get_server_error",
    "UnsupportedVersionError",
    "DeserializationError",
    "PermissionDeniedError",
    "UnexpectedError",
    "InvalidAPIKeyError",
]
