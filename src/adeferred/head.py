r"""Contains the deferred HTTP HEAD request function."""

from __future__ import annotations

__all__ = ["head"]

from typing import TYPE_CHECKING, Any

from adeferred.core.http_logic import execute_http_method

if TYPE_CHECKING:
    from collections.abc import Mapping

    from adeferred.deferred import Deferred
    from adeferred.models import RequestOptions
    from adeferred.scheduler import Scheduler
    from adeferred.transport import Transport


def head(
    url: str,
    options: RequestOptions | Mapping[str, Any] | None = None,
    *,
    transport: Transport | None = None,
    scheduler: Scheduler | None = None,
) -> Deferred:
    r"""Send an HTTP HEAD request and return the deferred of its
    response.

    HEAD responses have an empty body, so ``convert_json`` makes the
    deferred reject with a ``ResponseDecodeError``.

    Args:
        url: The URL to send the HEAD request to.
        options: The request options, as ``RequestOptions`` or a mapping.
        transport: The transport used for the network call. If ``None``,
            a new ``HttpxTransport`` is created and closed after use.
        scheduler: The scheduler of the deferred. If ``None``, the
            default scheduler is used.

    Returns:
        A deferred resolved with a ``Response``, or rejected with an
            ``HttpRequestError`` for status codes 400 to 511 and
            transport errors.

    Example:
        ```pycon
        >>> import asyncio
        >>> from adeferred import head
        >>> async def main():
        ...     response = await head("https://api.example.com/data")
        ...     return response.status
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """
    return execute_http_method("HEAD", url, options, transport=transport, scheduler=scheduler)
