"""
Tests for OAuth PLAINTEXT request signing.
"""

import re
from unittest.mock import patch

import pytest

from maasapi.exceptions import InvalidAPIKeyError
from maasapi.models import PreparedRequest
from maasapi.signer import (
    AnonymousSigner,
    Credentials,
    PlainTextOAuthSigner,
    signer_for,
)


def _auth_fields(header: str) -> dict[str, str]:
    assert header.startswith("OAuth ")
    return dict(re.findall(r'(\w+)="([^"]*)"', header))


class TestCredentials:
    """Tests for API key parsing."""

    def test_parse(self):
        """Test a three-part key is split in order."""
        credentials = Credentials.parse("consumerKey:tokenKey:tokenSecret")
        assert credentials.consumer_key == "consumerKey"
        assert credentials.token_key == "tokenKey"
        assert credentials.token_secret == "tokenSecret"

    def test_empty_parts_allowed(self):
        """Test components are not validated for emptiness."""
        credentials = Credentials.parse("::")
        assert credentials.token_secret == ""

    @pytest.mark.parametrize("api_key", ["invalid", "a:b", "a:b:c:d"])
    def test_wrong_arity(self, api_key):
        """Test keys without exactly three parts are rejected."""
        with pytest.raises(InvalidAPIKeyError) as exc:
            Credentials.parse(api_key)
        assert exc.value.parts == len(api_key.split(":"))

    def test_repr_hides_secret(self):
        """Test the token secret does not leak into repr."""
        credentials = Credentials.parse("a:b:supersecret")
        assert "supersecret" not in repr(credentials)


class TestPlainTextOAuthSigner:
    """Tests for PlainTextOAuthSigner."""

    def test_header_fields(self):
        """Test the header carries the PLAINTEXT OAuth fields."""
        signer = PlainTextOAuthSigner(Credentials.parse("a:b:c"))
        request = PreparedRequest.build("GET", "http://maas.test/api/2.0/version/")

        with patch("maasapi.signer.time.time", return_value=1700000000.5):
            signed = signer.sign(request)

        fields = _auth_fields(signed.headers["Authorization"])
        assert fields["oauth_consumer_key"] == "a"
        assert fields["oauth_token"] == "b"
        assert fields["oauth_signature"] == "%26c"
        assert fields["oauth_signature_method"] == "PLAINTEXT"
        assert fields["oauth_version"] == "1.0"
        assert fields["oauth_timestamp"] == "1700000000"
        assert fields["realm"] == ""
        assert fields["oauth_nonce"]

    def test_does_not_alter_request(self):
        """Test method, URL and body are untouched."""
        signer = PlainTextOAuthSigner(Credentials.parse("a:b:c"))
        request = PreparedRequest.build(
            "POST", "http://maas.test/api/2.0/files/", content=b"payload"
        )

        signed = signer.sign(request)

        assert signed.method == request.method
        assert signed.url == request.url
        assert signed.body == request.body
        assert "Authorization" not in request.headers

    def test_fresh_nonce_per_call(self):
        """Test repeated signing produces different nonces."""
        signer = PlainTextOAuthSigner(Credentials.parse("a:b:c"))
        nonces = {_auth_fields(signer.authorization_header())["oauth_nonce"] for _ in range(5)}
        assert len(nonces) == 5

    def test_secret_is_escaped(self):
        """Test reserved characters in the secret are percent-encoded."""
        signer = PlainTextOAuthSigner(Credentials.parse("a:b:s=cr&t"))
        fields = _auth_fields(signer.authorization_header())
        assert fields["oauth_signature"] == "%26s%3Dcr%26t"


class TestSignerFor:
    """Tests for signer selection."""

    def test_empty_key_is_anonymous(self):
        """Test empty credentials give an anonymous signer."""
        assert isinstance(signer_for(""), AnonymousSigner)
        assert isinstance(signer_for(None), AnonymousSigner)

    def test_anonymous_adds_no_header(self):
        """Test anonymous signing is the identity."""
        request = PreparedRequest.build("GET", "http://maas.test/")
        assert signer_for("").sign(request) is request

    def test_key_gives_oauth_signer(self):
        """Test a key gives a PLAINTEXT signer with parsed credentials."""
        signer = signer_for("the:api:key")
        assert isinstance(signer, PlainTextOAuthSigner)
        assert signer.credentials.token_key == "api"

    def test_bad_key_raises(self):
        """Test a malformed key fails before any request."""
        with pytest.raises(InvalidAPIKeyError):
            signer_for("invalid")
