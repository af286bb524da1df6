"""
MAAS API client.

Signed, retrying dispatch and API version negotiation for the MAAS REST API.

Usage:
    >>> from maasapi import new_controller
    >>>
    >>> with new_controller("http://maas:5240/MAAS", "consumer:token:secret") as maas:
    ...     print(maas.api_version, sorted(maas.capabilities))
    ...     machines = maas.get("machines/")
"""

from __future__ import annotations

from maasapi.client import APIClient
from maasapi.config import SDKSettings, configure_settings, get_settings, reset_settings
from maasapi.controller import Controller
from maasapi.dispatcher import (
    Dispatcher,
    DispatchOutcome,
    Failure,
    FailureKind,
    RequestCounter,
    Success,
)
from maasapi.exceptions import (
    DeserializationError,
    InvalidAPIKeyError,
    MAASError,
    PermissionDeniedError,
    ServerError,
    TransportError,
    UnexpectedError,
    UnsupportedVersionError,
    get_server_error,
)
from maasapi.models import APIVersion, PreparedRequest, VersionInfo
from maasapi.negotiation import (
    SUPPORTED_API_VERSIONS,
    NegotiationState,
    VersionNegotiator,
    new_controller,
)
from maasapi.signer import AnonymousSigner, Credentials, PlainTextOAuthSigner, signer_for
from maasapi.urls import add_api_version_to_url, split_versioned_url

__version__ = "0.1.0"

__all__ = [
    # Negotiation
    "new_controller",
    "VersionNegotiator",
    "NegotiationState",
    "SUPPORTED_API_VERSIONS",
    "Controller",
    # Dispatch
    "APIClient",
    "Dispatcher",
    "DispatchOutcome",
    "Success",
    "Failure",
    "FailureKind",
    "RequestCounter",
    "PreparedRequest",
    # Signing
    "Credentials",
    "AnonymousSigner",
    "PlainTextOAuthSigner",
    "signer_for",
    # Models
    "APIVersion",
    "VersionInfo",
    # URLs
    "add_api_version_to_url",
    "split_versioned_url",
    # Config
    "SDKSettings",
    "get_settings",
    "configure_settings",
    "reset_settings",
    # Errors
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
