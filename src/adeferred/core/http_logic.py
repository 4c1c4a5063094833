r"""Shared HTTP request logic behind the request functions.

``execute_http_method`` wraps one HTTP exchange in a ``Deferred``:

1. The method, options and URL are validated, and the query parameters
   of the options are merged into the URL.
2. Exactly one network call is made through the transport.
3. Status codes in ``[FAILURE_STATUS_MIN, FAILURE_STATUS_MAX]`` reject
   the deferred with an ``HttpRequestError`` whose message is the status
   message. Any other status resolves it with a ``Response``.
4. If requested, the body is decoded as JSON in a nested deferred whose
   rejection is forwarded to the outer one.

Query merge rule: the query string of the URL always wins. The
``query`` of the options is used only when the URL has no query string.
"""

from __future__ import annotations

__all__ = ["decode_json", "execute_http_method", "is_failure_status", "prepare_request"]

import json
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

import httpx

from adeferred.core.config import FAILURE_STATUS_MAX, FAILURE_STATUS_MIN, SUPPORTED_SCHEMES
from adeferred.core.validation import validate_method
from adeferred.deferred import Deferred
from adeferred.exceptions import HttpRequestError, ResponseDecodeError, UrlError
from adeferred.models import Request, RequestOptions, Response
from adeferred.scheduler import get_scheduler
from adeferred.transport import HttpxTransport
from adeferred.url import merge_query, parse_url

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from adeferred.scheduler import Scheduler
    from adeferred.transport import Transport

logger: logging.Logger = logging.getLogger(__name__)


def is_failure_status(status_code: int) -> bool:
    """Indicate if a status code is an application-level failure.

    Args:
        status_code: The HTTP status code.

    Returns:
        ``True`` if the status code is between 400 and 511 inclusive.

    Example:
        ```pycon
        >>> from adeferred.core.http_logic import is_failure_status
        >>> is_failure_status(404), is_failure_status(511), is_failure_status(302)
        (True, True, False)

        ```
    """
    return FAILURE_STATUS_MIN <= status_code <= FAILURE_STATUS_MAX


def prepare_request(
    method: str, url: str, options: RequestOptions | Mapping[str, Any] | None = None
) -> Request:
    """Validate the request parameters and build the final request.

    Args:
        method: The HTTP method.
        url: The URL, possibly with a query string.
        options: The request options.

    Returns:
        The request to send.

    Raises:
        UrlError: If the URL is malformed or its scheme is not supported.
        ValueError: If the method is not supported.
        TypeError: If the options cannot be converted.

    Example:
        ```pycon
        >>> from adeferred.core.http_logic import prepare_request
        >>> prepare_request("get", "https://example.com/items", {"query": {"page": 2}}).url
        'https://example.com/items?page=2'
        >>> prepare_request("GET", "https://example.com/items?page=1", {"query": {"page": 2}}).url
        'https://example.com/items?page=1'

        ```
    """
    method = validate_method(method)
    options = RequestOptions.from_value(options)
    parsed = parse_url(url)
    if parsed.scheme not in SUPPORTED_SCHEMES:
        msg = f"unsupported URL scheme {parsed.scheme!r}, expected one of {SUPPORTED_SCHEMES}"
        raise UrlError(msg)

    if options.query:
        if parsed.query is None:
            url = merge_query(url, options.query)
        else:
            logger.debug(f"{url} has its own query string, ignoring the query of the options")
    return Request(method=method, url=url, options=options)


def decode_json(
    response: Response, request: Request, scheduler: Scheduler | None = None
) -> Deferred:
    """Decode the body of a response as JSON in a new deferred.

    Args:
        response: The response whose body is decoded.
        request: The request that produced the response.
        scheduler: The scheduler of the new deferred.

    Returns:
        A deferred resolved with the response carrying the decoded body,
            or rejected with a ``ResponseDecodeError``.
    """

    def executor(resolve: Callable[..., None], reject: Callable[[Any], None]) -> None:
        try:
            body = json.loads(response.body)
        except (json.JSONDecodeError, RecursionError) as exc:
            logger.debug(f"{request.method} request to {request.url} returned invalid JSON: {exc}")
            reject(
                ResponseDecodeError(
                    method=request.method,
                    url=request.url,
                    message=f"cannot decode the response body as JSON: {exc}",
                    status_code=response.status,
                    response=response,
                    cause=exc,
                )
            )
            return
        resolve(replace(response, body=body))

    return Deferred(executor, scheduler=scheduler)


def execute_http_method(
    method: str,
    url: str,
    options: RequestOptions | Mapping[str, Any] | None = None,
    *,
    transport: Transport | None = None,
    scheduler: Scheduler | None = None,
) -> Deferred:
    """Send one HTTP request and return the deferred of its response.

    Every failure rejects the returned deferred: invalid parameters,
    transport errors, failure status codes and JSON decode errors.

    Args:
        method: The HTTP method.
        url: The URL to send the request to.
        options: The request options.
        transport: The transport used for the network call. If ``None``,
            a new ``HttpxTransport`` is created and closed after use.
        scheduler: The scheduler of the deferred. If ``None``, the
            default scheduler is used.

    Returns:
        A deferred resolved with a ``Response``, or rejected with an
            ``HttpRequestError``, a ``UrlError``, a ``ValueError`` or a
            ``TypeError``.
    """
    scheduler = scheduler if scheduler is not None else get_scheduler()

    async def executor(resolve: Callable[..., None], reject: Callable[[Any], None]) -> None:
        request = prepare_request(method, url, options)
        logger.debug(f"{request.method} request to {request.url}")

        owns_transport = transport is None
        active_transport = transport if transport is not None else HttpxTransport()
        try:
            raw = await active_transport.send(request)
        except httpx.RequestError as exc:
            logger.debug(
                f"{request.method} request to {request.url} encountered "
                f"{type(exc).__name__}: {exc}"
            )
            raise HttpRequestError(
                method=request.method,
                url=request.url,
                message=f"{request.method} request to {request.url} failed: {exc}",
                cause=exc,
            ) from exc
        finally:
            if owns_transport:
                await active_transport.aclose()

        failed = is_failure_status(raw.status_code)
        response = Response(
            success=not failed,
            status=raw.status_code,
            message=raw.reason_phrase,
            headers=dict(raw.headers),
            body=raw.text,
        )
        if failed:
            logger.debug(
                f"{request.method} request to {request.url} failed with status "
                f"{raw.status_code} {raw.reason_phrase}"
            )
            reject(
                HttpRequestError(
                    method=request.method,
                    url=request.url,
                    message=raw.reason_phrase,
                    status_code=raw.status_code,
                    response=response,
                )
            )
            return
        if not request.options.convert_json:
            resolve(response)
            return
        decode_json(response, request, scheduler=scheduler).then(resolve, reject)

    return Deferred(executor, scheduler=scheduler)
