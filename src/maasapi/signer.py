"""
Request signing.

MAAS authenticates API calls with OAuth 1.0a using the PLAINTEXT signature
method. An API key is three colon-separated parts,
``consumer_key:token_key:token_secret``; there is no consumer secret.
"""

from __future__ import annotations

import time
import uuid
from typing import Protocol
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict

from maasapi.exceptions import InvalidAPIKeyError
from maasapi.models import PreparedRequest


class Credentials(BaseModel):
    """OAuth token material parsed from an API key."""

    model_config = ConfigDict(frozen=True)

    consumer_key: str
    token_key: str
    token_secret: str

    @classmethod
    def parse(cls, api_key: str) -> Credentials:
        """
        Parse ``consumer_key:token_key:token_secret``.

        Raises:
            InvalidAPIKeyError: If the key does not have exactly three parts
        """
        parts = api_key.split(":")
        if len(parts) != 3:
            raise InvalidAPIKeyError(len(parts))
        consumer_key, token_key, token_secret = parts
        return cls(
            consumer_key=consumer_key,
            token_key=token_key,
            token_secret=token_secret,
        )

    def __repr__(self) -> str:
        return f"Credentials(consumer_key={self.consumer_key!r}, token_key={self.token_key!r})"


class RequestSigner(Protocol):
    """Adds authentication to a prepared request."""

    def sign(self, request: PreparedRequest) -> PreparedRequest: ...


class AnonymousSigner:
    """Signer for anonymous access: returns the request unchanged."""

    def sign(self, request: PreparedRequest) -> PreparedRequest:
        return request

    def __repr__(self) -> str:
        return "AnonymousSigner()"


class PlainTextOAuthSigner:
    """
    OAuth 1.0a PLAINTEXT signer.

    The signature is ``consumer_secret & token_secret`` sent as-is, with an
    always-empty consumer secret. Each call produces a fresh nonce and
    timestamp, so re-signing a retried request is safe.
    """

    def __init__(self, credentials: Credentials, realm: str = "") -> None:
        self.credentials = credentials
        self.realm = realm

    def authorization_header(self) -> str:
        """Build the ``Authorization`` header value."""
        auth_data = {
            "realm": self.realm,
            "oauth_consumer_key": self.credentials.consumer_key,
            "oauth_token": self.credentials.token_key,
            "oauth_signature_method": "PLAINTEXT",
            "oauth_signature": "&" + self.credentials.token_secret,
            "oauth_timestamp": str(int(time.time())),
            "oauth_nonce": str(uuid.uuid4()),
            "oauth_version": "1.0",
        }
        fields = ", ".join(
            f'{key}="{quote_plus(value)}"' for key, value in auth_data.items()
        )
        return f"OAuth {fields}"

    def sign(self, request: PreparedRequest) -> PreparedRequest:
        return request.with_header("Authorization", self.authorization_header())

    def __repr__(self) -> str:
        return f"PlainTextOAuthSigner({self.credentials!r})"


def signer_for(api_key: str | None) -> RequestSigner:
    """
    Pick a signer for an API key.

    An empty or missing key means anonymous access; anything else must parse
    as a three-part key.
    """
    if not api_key:
        return AnonymousSigner()
    return PlainTextOAuthSigner(Credentials.parse(api_key))


__all__ = [
    "Credentials",
    "RequestSigner",
    "AnonymousSigner",
    "PlainTextOAuthSigner",
    "signer_for",
]
