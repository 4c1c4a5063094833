r"""Build and parse the URLs used by the request functions.

Parsing relies on ``httpx.URL``, a real URI parser, and fails with a
``UrlError`` on malformed input instead of returning partial fields.
"""

from __future__ import annotations

__all__ = ["ParsedUrl", "build_url", "encode_query", "merge_query", "parse_url"]

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from adeferred.core.config import DEFAULT_PORTS
from adeferred.exceptions import UrlError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedUrl:
    """Components of a parsed URL.

    Args:
        scheme: The lower-cased scheme, e.g. ``"https"``.
        host: The host name.
        port: The explicit port, or ``None`` when absent or equal to
            the scheme default.
        path: The percent-encoded path, ``"/"`` when the URL has none.
        query: The query parameters, or ``None`` when the URL has no
            query string. Repeated keys keep their first value.
    """

    scheme: str
    host: str
    port: int | None = None
    path: str = "/"
    query: dict[str, str] | None = None

    def with_query(self, query: Mapping[str, Any] | None) -> ParsedUrl:
        """Return a copy with the query parameters replaced.

        Args:
            query: The new query parameters.

        Returns:
            The new parsed URL.
        """
        return replace(self, query=None if query is None else dict(query))

    def to_url(self) -> str:
        """Render the URL.

        Returns:
            The URL string.

        Example:
            ```pycon
            >>> from adeferred.url import ParsedUrl
            >>> ParsedUrl(scheme="http", host="example.com", port=8080).to_url()
            'http://example.com:8080/'

            ```
        """
        return build_url(self.scheme, self.host, self.port, self.path, self.query)


def build_url(
    scheme: str,
    host: str,
    port: int | None = None,
    path: str | None = None,
    query: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
) -> str:
    """Build a URL from its components.

    The port is omitted when it is the default port of the scheme (80
    for http, 443 for https). Query keys and values are converted to
    strings and percent-encoded, and rendered in iteration order.

    Args:
        scheme: The URL scheme, e.g. ``"https"``.
        host: The host name.
        port: The port. Omitted if ``None`` or the scheme default.
        path: The path. Defaults to ``"/"``.
        query: The query parameters, as a mapping or an iterable of
            ``(key, value)`` pairs.

    Returns:
        The URL string.

    Raises:
        UrlError: If the scheme or the host is empty.

    Example:
        ```pycon
        >>> from adeferred.url import build_url
        >>> build_url("https", "example.com", 443, "/a", {"q": "1"})
        'https://example.com/a?q=1'
        >>> build_url("http", "example.com", 8080)
        'http://example.com:8080/'
        >>> build_url("http", "example.com", path="search", query=[("q", "a b"), ("n", 2)])
        'http://example.com/search?q=a%20b&n=2'

        ```
    """
    if not scheme:
        msg = "cannot build a URL without scheme"
        raise UrlError(msg)
    if not host:
        msg = "cannot build a URL without host"
        raise UrlError(msg)
    scheme = scheme.lower()
    # IPv6 literals are bracketed in the authority
    netloc = f"[{host}]" if ":" in host and not host.startswith("[") else host
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{netloc}:{port}"
    path = path or "/"
    if not path.startswith("/"):
        path = f"/{path}"
    url = f"{scheme}://{netloc}{path}"

    query_string = encode_query(query)
    if query_string:
        url = f"{url}?{query_string}"
    return url


def encode_query(query: Mapping[str, Any] | Iterable[tuple[str, Any]] | None) -> str:
    """Render query parameters as a query string.

    Keys and values are converted to strings and percent-encoded without
    safe characters, and rendered in iteration order.

    Args:
        query: The query parameters, as a mapping or an iterable of
            ``(key, value)`` pairs.

    Returns:
        The query string, without the leading ``?``.

    Example:
        ```pycon
        >>> from adeferred.url import encode_query
        >>> encode_query({"q": "a b", "page": 2})
        'q=a%20b&page=2'

        ```
    """
    items = query.items() if isinstance(query, Mapping) else (query or ())
    return "&".join(
        f"{quote(str(key), safe='')}={quote(str(value), safe='')}" for key, value in items
    )


def merge_query(url: str, query: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> str:
    """Replace the query string of a URL, keeping all its other
    components (userinfo, host, port, path and fragment).

    Args:
        url: The URL.
        query: The query parameters.

    Returns:
        The new URL.

    Raises:
        UrlError: If the URL is malformed.

    Example:
        ```pycon
        >>> from adeferred.url import merge_query
        >>> merge_query("http://user:pw@[::1]:8080/x", {"a": "1"})
        'http://user:pw@[::1]:8080/x?a=1'

        ```
    """
    try:
        merged = httpx.URL(url).copy_with(query=encode_query(query).encode("ascii"))
    except httpx.InvalidURL as exc:
        msg = f"invalid URL {url!r}: {exc}"
        raise UrlError(msg) from exc
    return str(merged)


def parse_url(url: str) -> ParsedUrl:
    """Parse a URL into its components.

    Args:
        url: The URL to parse.

    Returns:
        The parsed URL.

    Raises:
        UrlError: If the URL is malformed, or has no scheme or no host.

    Example:
        ```pycon
        >>> from adeferred.url import parse_url
        >>> parse_url("http://host.com:8080/path?x=1")
        ParsedUrl(scheme='http', host='host.com', port=8080, path='/path', query={'x': '1'})

        ```
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        msg = f"invalid URL {url!r}: {exc}"
        raise UrlError(msg) from exc
    if not parsed.scheme:
        msg = f"invalid URL {url!r}: missing scheme"
        raise UrlError(msg)
    if not parsed.host:
        msg = f"invalid URL {url!r}: missing host"
        raise UrlError(msg)

    query = dict(parsed.params) if parsed.query else None
    # raw_path is still percent-encoded and includes the query string
    path = parsed.raw_path.split(b"?", 1)[0].decode("ascii")
    logger.debug(f"parsed {url!r} as {parsed.scheme}://{parsed.host}:{parsed.port}{path}")
    return ParsedUrl(
        scheme=parsed.scheme,
        host=parsed.host,
        port=parsed.port,
        path=path or "/",
        query=query,
    )
