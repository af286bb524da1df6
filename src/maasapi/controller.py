"""
Version-bound controller.

A Controller is what negotiation hands out: one API client fixed to one
negotiated version and capability set. Resource code uses its verb helpers.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from maasapi.client import APIClient, Params
from maasapi.exceptions import MAASError, PermissionDeniedError, get_server_error
from maasapi.logging import get_logger
from maasapi.models import APIVersion
from maasapi.urls import ensure_trailing_slash

logger = get_logger(__name__)

# Capabilities advertised by MAAS servers.
NETWORKS_MANAGEMENT = "networks-management"
STATIC_IP_ADDRESSES = "static-ipaddresses"
IPV6_DEPLOYMENT_UBUNTU = "ipv6-deployment-ubuntu"
DEVICES_MANAGEMENT = "devices-management"
STORAGE_DEPLOYMENT_UBUNTU = "storage-deployment-ubuntu"
NETWORK_DEPLOYMENT_UBUNTU = "network-deployment-ubuntu"

_AUTH_STATUSES = (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN)


class Controller:
    """
    API connection to a MAAS controller at a negotiated version.

    The version and capability set are fixed at construction; negotiating
    again yields a new Controller.

    ``close`` only closes the client's dispatcher when ``owns_dispatcher`` is
    set. A dispatcher passed in by the caller stays the caller's to close.
    """

    __slots__ = ("_client", "_api_version", "_capabilities", "_owns_dispatcher")

    def __init__(
        self,
        client: APIClient,
        api_version: APIVersion,
        capabilities: frozenset[str] | set[str] = frozenset(),
        *,
        owns_dispatcher: bool = False,
    ) -> None:
        object.__setattr__(self, "_client", client)
        object.__setattr__(self, "_api_version", api_version)
        object.__setattr__(self, "_capabilities", frozenset(capabilities))
        object.__setattr__(self, "_owns_dispatcher", owns_dispatcher)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def client(self) -> APIClient:
        return self._client

    @property
    def api_version(self) -> APIVersion:
        return self._api_version

    @property
    def capabilities(self) -> frozenset[str]:
        return self._capabilities

    @property
    def api_url(self) -> str:
        return self._client.api_url

    def has_capability(self, name: str) -> bool:
        return name in self._capabilities

    # =========================================================================
    # Verb helpers
    # =========================================================================

    def get(self, path: str, op: str = "", params: Params | None = None) -> bytes:
        return self._call(self._client.get, ensure_trailing_slash(path), op, params)

    def post(
        self,
        path: str,
        op: str = "",
        params: Params | None = None,
        files: Mapping[str, bytes] | None = None,
    ) -> bytes:
        return self._call(
            self._client.post, ensure_trailing_slash(path), op, params, files
        )

    def post_file(
        self,
        path: str,
        op: str,
        params: Params | None,
        content: bytes,
    ) -> bytes:
        """POST a single file, sent under the name ``file``."""
        return self.post(path, op, params, {"file": content})

    def put(self, path: str, params: Params | None = None) -> bytes:
        return self._call(self._client.put, ensure_trailing_slash(path), params)

    def delete(self, path: str) -> None:
        self._call(self._client.delete, ensure_trailing_slash(path))

    def _call(self, method: Any, *args: Any) -> Any:
        try:
            return method(*args)
        except MAASError as e:
            server_error = get_server_error(e)
            if server_error is not None and server_error.status_code in _AUTH_STATUSES:
                raise PermissionDeniedError(
                    server_error.body_message or "Permission denied",
                    status_code=server_error.status_code,
                    cause=server_error,
                ) from server_error
            logger.debug("error detail: %r", e)
            raise

    @property
    def owns_dispatcher(self) -> bool:
        return self._owns_dispatcher

    def close(self) -> None:
        if self._owns_dispatcher:
            self._client.close()

    def __enter__(self) -> Controller:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<Controller api_url={self.api_url!r} version={self._api_version} "
            f"capabilities={len(self._capabilities)}>"
        )


__all__ = [
    "Controller",
    "NETWORKS_MANAGEMENT",
    "STATIC_IP_ADDRESSES",
    "IPV6_DEPLOYMENT_UBUNTU",
    "DEVICES_MANAGEMENT",
    "STORAGE_DEPLOYMENT_UBUNTU",
    "NETWORK_DEPLOYMENT_UBUNTU",
]
