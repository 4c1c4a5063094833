r"""Contains the generic deferred HTTP request function.

``request`` accepts three call shapes:

- ``request(url)``: GET request to ``url``.
- ``request(url, options)``: GET request to ``url`` with options.
- ``request(method, url, options=None)``: explicit method.

The shape is resolved from the argument types by ``resolve_call``
before any request logic runs: a string in second position is a URL,
so the first argument is the method.
"""

from __future__ import annotations

__all__ = ["MethodUrlCall", "UrlCall", "UrlOptionsCall", "request", "resolve_call"]

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union, overload

from adeferred.core.http_logic import execute_http_method
from adeferred.models import RequestOptions

if TYPE_CHECKING:
    from adeferred.deferred import Deferred
    from adeferred.scheduler import Scheduler
    from adeferred.transport import Transport

    Options = Union[RequestOptions, Mapping[str, Any]]


@dataclass(frozen=True)
class UrlCall:
    r"""``request(url)``: GET request without options."""

    url: str
    method: str = field(default="GET", init=False)
    options: None = field(default=None, init=False)


@dataclass(frozen=True)
class UrlOptionsCall:
    r"""``request(url, options)``: GET request with options."""

    url: str
    options: Options
    method: str = field(default="GET", init=False)


@dataclass(frozen=True)
class MethodUrlCall:
    r"""``request(method, url, options=None)``: explicit method."""

    method: str
    url: str
    options: Options | None = None


RequestCall = Union[UrlCall, UrlOptionsCall, MethodUrlCall]


def resolve_call(
    method_or_url: str,
    url_or_options: str | Options | None = None,
    options: Options | None = None,
) -> RequestCall:
    r"""Resolve the call shape of ``request``.

    Args:
        method_or_url: The method if ``url_or_options`` is a string,
            otherwise the URL.
        url_or_options: The URL, the options or ``None``.
        options: The options when the method is explicit.

    Returns:
        The resolved call shape.

    Raises:
        TypeError: If the arguments do not match any call shape.

    Example:
        ```pycon
        >>> from adeferred.request import resolve_call
        >>> resolve_call("https://example.com")
        UrlCall(url='https://example.com', method='GET', options=None)
        >>> resolve_call("POST", "https://example.com", {"body": "x"})
        MethodUrlCall(method='POST', url='https://example.com', options={'body': 'x'})

        ```
    """
    if not isinstance(method_or_url, str):
        msg = f"expected a method or a URL string, got {type(method_or_url).__name__}"
        raise TypeError(msg)
    if isinstance(url_or_options, str):
        return MethodUrlCall(method=method_or_url, url=url_or_options, options=options)
    if options is not None:
        msg = "options can only be passed in third position together with a method and a URL"
        raise TypeError(msg)
    if url_or_options is None:
        return UrlCall(url=method_or_url)
    if not isinstance(url_or_options, (RequestOptions, Mapping)):
        msg = f"expected a URL or request options, got {type(url_or_options).__name__}"
        raise TypeError(msg)
    return UrlOptionsCall(url=method_or_url, options=url_or_options)


@overload
def request(
    url: str, /, *, transport: Transport | None = ..., scheduler: Scheduler | None = ...
) -> Deferred: ...


@overload
def request(
    url: str,
    options: Options,
    /,
    *,
    transport: Transport | None = ...,
    scheduler: Scheduler | None = ...,
) -> Deferred: ...


@overload
def request(
    method: str,
    url: str,
    options: Options | None = ...,
    /,
    *,
    transport: Transport | None = ...,
    scheduler: Scheduler | None = ...,
) -> Deferred: ...


def request(
    method_or_url: str,
    url_or_options: str | Options | None = None,
    options: Options | None = None,
    /,
    *,
    transport: Transport | None = None,
    scheduler: Scheduler | None = None,
) -> Deferred:
    r"""Send an HTTP request and return the deferred of its response.

    The returned deferred resolves with a ``Response`` when the status
    code is not a failure status, and rejects with an
    ``HttpRequestError`` whose message is the status message for status
    codes 400 to 511. Transport errors and JSON decode errors also
    reject it.

    Args:
        method_or_url: The method, or the URL for a GET request.
        url_or_options: The URL, or the options of a GET request.
        options: The options when the method is explicit.
        transport: The transport used for the network call. If ``None``,
            a new ``HttpxTransport`` is created and closed after use.
        scheduler: The scheduler of the deferred. If ``None``, the
            default scheduler is used.

    Returns:
        The deferred response.

    Raises:
        TypeError: If the arguments do not match any call shape.

    Example:
        ```pycon
        >>> import asyncio
        >>> from adeferred import request
        >>> async def main():
        ...     response = await request(
        ...         "GET", "https://api.example.com/data", {"convert_json": True}
        ...     )
        ...     return response.body
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """
    call = resolve_call(method_or_url, url_or_options, options)
    return execute_http_method(
        call.method, call.url, call.options, transport=transport, scheduler=scheduler
    )
