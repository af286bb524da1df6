"""
Value types shared by the dispatcher and the negotiator.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Headers httpx recomputes on send.
_TRANSIENT_HEADERS = frozenset({"host", "content-length"})


class PreparedRequest(BaseModel):
    """
    A request ready for dispatch.

    The body is always fully buffered bytes so it can be resent unchanged
    on retry. Instances are frozen; signing returns a copy.
    """

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        files: Mapping[str, bytes] | None = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> PreparedRequest:
        """
        Encode a request with httpx and buffer its body.

        ``data`` is sent form-urlencoded, or multipart when ``files`` is given.
        """
        multipart = None
        if files:
            multipart = {name: (name, payload) for name, payload in files.items()}
        request = httpx.Request(
            method,
            url,
            params=params,
            data=data,
            files=multipart,
            content=content,
            headers=headers,
        )
        body = request.read()
        kept = {
            key: value
            for key, value in request.headers.items()
            if key.lower() not in _TRANSIENT_HEADERS
        }
        return cls(method=request.method, url=str(request.url), headers=kept, body=body)

    def with_header(self, name: str, value: str) -> PreparedRequest:
        """Return a copy with one header set, replacing it in any letter case."""
        headers = {
            key: existing
            for key, existing in self.headers.items()
            if key.lower() != name.lower()
        }
        headers[name] = value
        return self.model_copy(update={"headers": headers})


class APIVersion(BaseModel):
    """A ``major.minor`` API version."""

    model_config = ConfigDict(frozen=True)

    major: int
    minor: int

    @classmethod
    def parse(cls, value: str) -> APIVersion:
        major, _, minor = value.partition(".")
        if not major.isdigit() or not minor.isdigit():
            raise ValueError(f"bad API version {value!r}")
        return cls(major=int(major), minor=int(minor))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


class VersionInfo(BaseModel):
    """Body of ``GET version/``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    version: str = ""
    subversion: str = ""
    capabilities: list[str] = Field(
        validation_alias=AliasChoices("capabilities", "Capabilities"),
    )


__all__ = ["PreparedRequest", "APIVersion", "VersionInfo"]
