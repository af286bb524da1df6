"""
API version negotiation.

Before any resource call, find an API version the server offers, read its
capability set and verify the credentials. Candidates are tried most
desirable first:

- 404 or 410 on ``version/`` means the version is not offered: try the next
- an HTML login page instead of JSON also means not offered (see
  ``is_login_page_redirect``)
- anything else is fatal and raised unchanged, so an outage is never
  reported as a version mismatch

Usage:
    >>> from maasapi.negotiation import new_controller
    >>> controller = new_controller("http://maas:5240/MAAS", "a:b:c")
    >>> str(controller.api_version)
    '2.0'
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Sequence

import httpx
from pydantic import ValidationError

from maasapi.client import APIClient
from maasapi.controller import Controller
from maasapi.dispatcher import Dispatcher, Failure
from maasapi.exceptions import (
    DeserializationError,
    PermissionDeniedError,
    UnexpectedError,
    UnsupportedVersionError,
)
from maasapi.logging import get_logger
from maasapi.models import APIVersion, VersionInfo
from maasapi.signer import signer_for
from maasapi.urls import add_api_version_to_url, split_versioned_url

logger = get_logger(__name__)

# Ordered from most desirable to least; tried in this order.
SUPPORTED_API_VERSIONS: tuple[str, ...] = ("2.0", "2.1", "2.3", "2.4")

NOT_OFFERED_STATUSES = frozenset({httpx.codes.NOT_FOUND, httpx.codes.GONE})

LOGIN_PAGE_PREFIX = b"<html><head"


def is_login_page_redirect(body: bytes) -> bool:
    """
    True if a version probe came back as the HTML login page.

    Some servers (MAAS 1.9.4, lp:1583715) redirect an unknown API version to
    the login page instead of answering 404. Only this exact prefix at
    offset 0 counts; do not widen it.
    """
    return body.startswith(LOGIN_PAGE_PREFIX)


def parse_version_info(body: bytes) -> VersionInfo:
    """
    Parse a ``version/`` response.

    Raises:
        DeserializationError: If the body is not a version document
    """
    try:
        return VersionInfo.model_validate_json(body)
    except ValidationError as e:
        raise DeserializationError(f"version response: {e}", cause=e) from e


class NegotiationState(str, Enum):
    """Where a negotiation stands."""

    IDLE = "idle"
    TRYING = "trying"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    FATAL = "fatal"


class VersionNegotiator:
    """
    Finds the API version to use and yields a Controller for it.

    Negotiation makes only GET requests, so it can be re-run at any time;
    each run starts again from the first candidate.

    Without an injected dispatcher every run builds its own, closes it if the
    run fails and hands it to the returned Controller otherwise. An injected
    dispatcher is shared by all runs and never closed here.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        versions: Sequence[str] = SUPPORTED_API_VERSIONS,
        dispatcher: Dispatcher | None = None,
        **dispatcher_kwargs: Any,
    ) -> None:
        """
        Initialize negotiator.

        Args:
            base_url: Server URL, optionally ending in ``api/<version>/``
            api_key: ``consumer_key:token_key:token_secret`` (None for anonymous)
            versions: Candidate versions, most desirable first
            dispatcher: Shared dispatcher (one per run is built from api_key
                otherwise)
            **dispatcher_kwargs: Passed to Dispatcher when one is built

        Raises:
            InvalidAPIKeyError: If api_key is malformed
        """
        self.base_url = base_url
        self.versions: tuple[str, ...] = tuple(versions)
        self.dispatcher = dispatcher
        self._signer = signer_for(api_key) if dispatcher is None else None
        self._dispatcher_kwargs = dispatcher_kwargs
        self.state = NegotiationState.IDLE
        self.current_version: str | None = None
        self.probed: list[str] = []

    def negotiate(self) -> Controller:
        """
        Run negotiation.

        Returns:
            Controller bound to the first offered version

        Raises:
            UnsupportedVersionError: Version segment unknown, or none offered
            PermissionDeniedError: Credentials rejected (401)
            UnexpectedError: Credential probe failed otherwise
            TransportError, ServerError, DeserializationError: Fatal probe failure
        """
        if self.dispatcher is not None:
            return self._negotiate(self.dispatcher, owns_dispatcher=False)

        dispatcher = Dispatcher(self._signer, **self._dispatcher_kwargs)
        try:
            return self._negotiate(dispatcher, owns_dispatcher=True)
        except BaseException:
            dispatcher.close()
            raise

    def _negotiate(self, dispatcher: Dispatcher, *, owns_dispatcher: bool) -> Controller:
        self.probed = []
        self.current_version = None
        base, version, includes_version = split_versioned_url(self.base_url)
        if includes_version:
            if version not in self.versions:
                self.state = NegotiationState.FATAL
                raise UnsupportedVersionError(f"version {version}")
            candidates: tuple[str, ...] = (version,)
        else:
            candidates = self.versions

        for version in candidates:
            self.state = NegotiationState.TRYING
            self.current_version = version
            self.probed.append(version)
            client = APIClient(add_api_version_to_url(base, version), dispatcher)
            try:
                info = self._read_version_info(client)
                if info is None:
                    logger.debug("API version %s not offered by %s", version, base)
                    continue
                self._check_credentials(client)
            except Exception:
                self.state = NegotiationState.FATAL
                raise

            self.state = NegotiationState.SUCCESS
            logger.info(
                "negotiated API version %s at %s (%d capabilities)",
                version,
                client.api_url,
                len(info.capabilities),
            )
            return Controller(
                client,
                APIVersion.parse(version),
                frozenset(info.capabilities),
                owns_dispatcher=owns_dispatcher,
            )

        self.state = NegotiationState.EXHAUSTED
        raise UnsupportedVersionError(
            f"controller at {self.base_url} does not support any of "
            f"{list(candidates)}"
        )

    def _read_version_info(self, client: APIClient) -> VersionInfo | None:
        """Probe ``version/``; None means this version is not offered."""
        outcome = client.dispatch(client.request("GET", "version/"))
        if isinstance(outcome, Failure):
            server_error = outcome.server_error
            if server_error is not None and server_error.status_code in NOT_OFFERED_STATUSES:
                return None
            raise outcome.error
        try:
            return parse_version_info(outcome.body)
        except DeserializationError:
            if is_login_page_redirect(outcome.body):
                return None
            raise

    def _check_credentials(self, client: APIClient) -> None:
        outcome = client.dispatch(client.request("GET", "users/", op="whoami"))
        if not isinstance(outcome, Failure):
            return
        server_error = outcome.server_error
        if server_error is not None and server_error.status_code == httpx.codes.UNAUTHORIZED:
            raise PermissionDeniedError(
                server_error.body_message or "Permission denied",
                status_code=server_error.status_code,
                cause=server_error,
            ) from server_error
        raise UnexpectedError(outcome.error) from outcome.error

    def __repr__(self) -> str:
        return f"<VersionNegotiator base_url={self.base_url!r} state={self.state.value}>"


def new_controller(
    base_url: str,
    api_key: str | None = None,
    **kwargs: Any,
) -> Controller:
    """
    Negotiate and return a Controller for ``base_url``.

    If ``base_url`` names an API version, that version is used; otherwise the
    most desirable supported version the server offers.
    """
    return VersionNegotiator(base_url, api_key, **kwargs).negotiate()


__all__ = [
    "SUPPORTED_API_VERSIONS",
    "NegotiationState",
    "VersionNegotiator",
    "is_login_page_redirect",
    "parse_version_info",
    "new_controller",
]
