"""
MAAS API client.

Builds requests against one API root (``.../api/<version>/``) and sends them
through a Dispatcher. The verb helpers raise the dispatch error on failure;
``dispatch`` returns the raw outcome for callers that classify it themselves.
"""

from __future__ import annotations

from typing import Any, Mapping

from maasapi.dispatcher import Dispatcher, DispatchOutcome
from maasapi.models import PreparedRequest
from maasapi.signer import signer_for
from maasapi.urls import add_api_version_to_url, ensure_trailing_slash, join_urls

Params = Mapping[str, Any]


class APIClient:
    """
    Client bound to one API root URL.

    Example:
        >>> client = APIClient.authenticated("http://maas/MAAS/api/2.0", "a:b:c")
        >>> client.api_url
        'http://maas/MAAS/api/2.0/'
        >>> client.get("machines/", op="list_allocated")
    """

    def __init__(self, api_url: str, dispatcher: Dispatcher) -> None:
        self.api_url = ensure_trailing_slash(api_url)
        self.dispatcher = dispatcher

    @classmethod
    def anonymous(cls, base_url: str, api_version: str, **dispatcher_kwargs: Any) -> APIClient:
        """Anonymous client for ``base_url`` at ``api_version``."""
        return cls(
            add_api_version_to_url(base_url, api_version),
            Dispatcher(**dispatcher_kwargs),
        )

    @classmethod
    def authenticated(cls, api_url: str, api_key: str, **dispatcher_kwargs: Any) -> APIClient:
        """
        OAuth-signed client for an already versioned API URL.

        Raises:
            InvalidAPIKeyError: If the key is malformed (before any request)
        """
        return cls(api_url, Dispatcher(signer_for(api_key), **dispatcher_kwargs))

    def get_url(self, uri: str) -> str:
        """Absolute URL for a path relative to the API root."""
        return join_urls(self.api_url, uri)

    def request(
        self,
        method: str,
        uri: str,
        *,
        op: str = "",
        params: Params | None = None,
        data: Params | None = None,
        files: Mapping[str, bytes] | None = None,
    ) -> PreparedRequest:
        """Build a prepared request for ``uri`` (``op`` goes in the query)."""
        query = dict(params or {})
        if op:
            query["op"] = op
        return PreparedRequest.build(
            method,
            self.get_url(uri),
            params=query or None,
            data=data,
            files=files,
        )

    def dispatch(self, request: PreparedRequest) -> DispatchOutcome:
        return self.dispatcher.dispatch(request)

    def get(self, uri: str, op: str = "", params: Params | None = None) -> bytes:
        """GET ``uri`` with ``params`` and optional ``op`` in the query string."""
        return self.dispatch(self.request("GET", uri, op=op, params=params)).unwrap()

    def post(
        self,
        uri: str,
        op: str = "",
        params: Params | None = None,
        files: Mapping[str, bytes] | None = None,
    ) -> bytes:
        """
        POST form ``params`` to ``uri``.

        When ``files`` is given the body is multipart; each file is sent under
        its own name.
        """
        request = self.request("POST", uri, op=op, data=params, files=files)
        return self.dispatch(request).unwrap()

    def put(self, uri: str, params: Params | None = None) -> bytes:
        """PUT form ``params`` to ``uri``."""
        return self.dispatch(self.request("PUT", uri, data=params)).unwrap()

    def delete(self, uri: str) -> None:
        """DELETE ``uri``."""
        self.dispatch(self.request("DELETE", uri)).unwrap()

    def close(self) -> None:
        self.dispatcher.close()

    def __enter__(self) -> APIClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<APIClient api_url={self.api_url!r}>"


__all__ = ["APIClient"]
