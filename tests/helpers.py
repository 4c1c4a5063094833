r"""Shared test helpers for the request tests."""

from __future__ import annotations

__all__ = ["FailingTransport", "StaticTransport", "create_mock_transport"]

from typing import TYPE_CHECKING

import httpx

from adeferred.transport import HttpxTransport, Transport

if TYPE_CHECKING:
    from collections.abc import Callable

    from adeferred.models import Request


def create_mock_transport(handler: Callable[[httpx.Request], httpx.Response]) -> HttpxTransport:
    """Create a transport whose network calls are answered by
    ``handler``."""
    return HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class StaticTransport(Transport):
    """Transport answering every request with the same response, without
    suspending.

    It can be used with ``ManualScheduler`` since ``send`` never waits
    on the event loop.
    """

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[Request] = []
        self.closed = False

    async def send(self, request: Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    async def aclose(self) -> None:
        self.closed = True


class FailingTransport(StaticTransport):
    """Transport raising ``error`` for every request."""

    def __init__(self, error: Exception) -> None:
        super().__init__(httpx.Response(200))
        self.error = error

    async def send(self, request: Request) -> httpx.Response:
        self.requests.append(request)
        raise self.error
