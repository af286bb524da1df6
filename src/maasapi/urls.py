"""URL shape helpers for MAAS API endpoints."""

from __future__ import annotations

import re

# ".../api/<major>.<minor>" with an optional trailing slash.
_VERSIONED_URL = re.compile(r"^(?P<base>.*/)api/(?P<version>\d+\.\d+)/?$")


def ensure_trailing_slash(url: str) -> str:
    """
    Append a slash unless there already is one.

    The server redirects URLs without a trailing slash, so every endpoint is
    normalized this way.
    """
    if url.endswith("/"):
        return url
    return url + "/"


def join_urls(base_url: str, path: str) -> str:
    """Join base and path with exactly one slash between them."""
    return base_url.rstrip("/") + "/" + path.lstrip("/")


def add_api_version_to_url(base_url: str, api_version: str) -> str:
    """
    Point a base URL at a specific API version.

    Example:
        >>> add_api_version_to_url("http://x/maas", "1.0")
        'http://x/maas/api/1.0/'
    """
    return ensure_trailing_slash(base_url) + f"api/{api_version}/"


def split_versioned_url(url: str) -> tuple[str, str, bool]:
    """
    Split a URL that already names an API version.

    Returns:
        ``(base, version, True)`` for ``.../api/<version>[/]``, otherwise
        ``(url, "", False)``.

    Example:
        >>> split_versioned_url("http://x/maas/api/3.0")
        ('http://x/maas/', '3.0', True)
    """
    match = _VERSIONED_URL.match(url)
    if match is None:
        return url, "", False
    return match.group("base"), match.group("version"), True


__all__ = [
    "ensure_trailing_slash",
    "join_urls",
    "add_api_version_to_url",
    "split_versioned_url",
]
