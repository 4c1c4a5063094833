r"""Transports performing the network call of a request.

The request functions only need one capability from the network layer:
send a request and return the HTTP response, or fail with a transport
error. ``HttpxTransport`` provides it with ``httpx.AsyncClient``.
"""

from __future__ import annotations

__all__ = ["HttpxTransport", "Transport"]

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import httpx

from adeferred.core.config import DEFAULT_TIMEOUT
from adeferred.core.validation import validate_timeout

if TYPE_CHECKING:
    from adeferred.models import Request

logger: logging.Logger = logging.getLogger(__name__)


class Transport(ABC):
    r"""Define the interface of a transport."""

    @abstractmethod
    async def send(self, request: Request) -> httpx.Response:
        r"""Send a request and return its response.

        Args:
            request: The request to send.

        Returns:
            The HTTP response, whatever its status code.

        Raises:
            httpx.RequestError: If the request could not be completed.
        """

    async def aclose(self) -> None:
        r"""Release the resources held by the transport."""


class HttpxTransport(Transport):
    r"""Implement a transport with ``httpx.AsyncClient``.

    Args:
        client: The client used to send requests. If ``None``, a client
            is created and closed by ``aclose``. A client passed by the
            caller is never closed by the transport.
        timeout: Maximum seconds to wait for the server response.
            Only used if client is None. Must be > 0.

    Example:
        ```pycon
        >>> import httpx
        >>> from adeferred.transport import HttpxTransport
        >>> transport = HttpxTransport(
        ...     client=httpx.AsyncClient(
        ...         transport=httpx.MockTransport(lambda request: httpx.Response(204))
        ...     )
        ... )

        ```
    """

    def __init__(
        self, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        validate_timeout(timeout)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(owns_client={self._owns_client})"

    async def send(self, request: Request) -> httpx.Response:
        options = request.options
        headers = httpx.Headers(options.headers or {})
        if "Accept-Encoding" not in headers:
            headers["Accept-Encoding"] = "gzip, deflate" if options.compress else "identity"
        kwargs: dict[str, Any] = {}
        if options.timeout is not None:
            kwargs["timeout"] = options.timeout
        logger.debug(f"sending {request.method} request to {request.url}")
        return await self._client.request(
            request.method,
            request.url,
            headers=headers,
            content=options.body,
            json=options.json,
            **kwargs,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
