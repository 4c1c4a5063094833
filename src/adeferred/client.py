r"""Asynchronous context manager client for deferred HTTP requests.

``DeferredClient`` shares one ``HttpxTransport`` (and so one
``httpx.AsyncClient`` connection pool) and one scheduler across many
requests, and closes the transport when the context exits.
"""

from __future__ import annotations

__all__ = ["DeferredClient"]

from typing import TYPE_CHECKING, Any

from adeferred.core.config import DEFAULT_TIMEOUT
from adeferred.core.http_logic import execute_http_method
from adeferred.core.validation import validate_timeout
from adeferred.request import resolve_call
from adeferred.transport import HttpxTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    import httpx

    from adeferred.deferred import Deferred
    from adeferred.models import RequestOptions
    from adeferred.scheduler import Scheduler
    from adeferred.transport import Transport

    Options = RequestOptions | Mapping[str, Any]


class DeferredClient:
    r"""Asynchronous context manager for deferred HTTP requests.

    Args:
        transport: The transport used for all requests. If ``None``, an
            ``HttpxTransport`` is created when entering the context and
            closed when exiting it.
        client: An optional ``httpx.AsyncClient`` wrapped by the created
            transport. Ignored if ``transport`` is given.
        scheduler: The scheduler of the deferreds. If ``None``, the
            default scheduler is used.
        timeout: Maximum seconds to wait for server responses. Only used
            when the client creates its own ``httpx.AsyncClient``.
            Must be > 0.

    Example:
        ```pycon
        >>> import asyncio
        >>> from adeferred import DeferredClient
        >>> async def main():  # doctest: +SKIP
        ...     async with DeferredClient(timeout=30) as client:
        ...         first = client.get("https://api.example.com/data1")
        ...         second = client.post("https://api.example.com/data2", {"json": {"key": 1}})
        ...         return await first, await second
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        client: httpx.AsyncClient | None = None,
        scheduler: Scheduler | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        validate_timeout(timeout)
        self._timeout = timeout
        self._given_transport = transport
        self._given_client = client
        self._scheduler = scheduler
        self._transport: Transport | None = None

    async def __aenter__(self) -> DeferredClient:
        if self._given_transport is not None:
            self._transport = self._given_transport
        else:
            self._transport = HttpxTransport(client=self._given_client, timeout=self._timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._transport is not None and self._given_transport is None:
            await self._transport.aclose()
        self._transport = None

    def _ensure_transport(self) -> Transport:
        """Ensure the transport is available for use.

        Raises:
            RuntimeError: If the client is used outside of a context manager.
        """
        if self._transport is None:
            msg = (
                "DeferredClient must be used within an async context manager "
                "(async with statement)"
            )
            raise RuntimeError(msg)
        return self._transport

    def request(
        self,
        method_or_url: str,
        url_or_options: str | Options | None = None,
        options: Options | None = None,
    ) -> Deferred:
        r"""Send an HTTP request with the shared transport.

        Accepts the same call shapes as ``adeferred.request``.

        Returns:
            The deferred response.

        Raises:
            RuntimeError: If called outside of a context manager.
            TypeError: If the arguments do not match any call shape.
        """
        call = resolve_call(method_or_url, url_or_options, options)
        return self._send(call.method, call.url, call.options)

    def get(self, url: str, options: Options | None = None) -> Deferred:
        return self._send("GET", url, options)

    def post(self, url: str, options: Options | None = None) -> Deferred:
        return self._send("POST", url, options)

    def put(self, url: str, options: Options | None = None) -> Deferred:
        return self._send("PUT", url, options)

    def delete(self, url: str, options: Options | None = None) -> Deferred:
        return self._send("DELETE", url, options)

    def head(self, url: str, options: Options | None = None) -> Deferred:
        return self._send("HEAD", url, options)

    def options(self, url: str, options: Options | None = None) -> Deferred:
        return self._send("OPTIONS", url, options)

    def _send(self, method: str, url: str, options: Options | None) -> Deferred:
        return execute_http_method(
            method, url, options, transport=self._ensure_transport(), scheduler=self._scheduler
        )
