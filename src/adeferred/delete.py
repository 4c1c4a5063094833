r"""Contains the deferred HTTP DELETE request function."""

from __future__ import annotations

__all__ = ["delete"]

from typing import TYPE_CHECKING, Any

from adeferred.core.http_logic import execute_http_method

if TYPE_CHECKING:
    from collections.abc import Mapping

    from adeferred.deferred import Deferred
    from adeferred.models import RequestOptions
    from adeferred.scheduler import Scheduler
    from adeferred.transport import Transport


def delete(
    url: str,
    options: RequestOptions | Mapping[str, Any] | None = None,
    *,
    transport: Transport | None = None,
    scheduler: Scheduler | None = None,
) -> Deferred:
    r"""Send an HTTP DELETE request and return the deferred of its
    response.

    Args:
        url: The URL to send the DELETE request to.
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
        >>> from adeferred import delete
        >>> async def main():
        ...     response = await delete("https://api.example.com/data")
        ...     return response.status
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """
    return execute_http_method("DELETE", url, options, transport=transport, scheduler=scheduler)
