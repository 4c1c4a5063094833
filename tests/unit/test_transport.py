r"""Unit tests for the transports."""

from __future__ import annotations

import json

import httpx
import pytest

from adeferred.models import Request, RequestOptions
from adeferred.transport import HttpxTransport, Transport

TEST_URL = "https://api.example.com/data"


def create_recording_client(
    calls: list[httpx.Request], status_code: int = 200
) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code, text="body")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


###############################
#     Tests for Transport     #
###############################


def test_transport_is_abstract() -> None:
    with pytest.raises(TypeError, match=r"abstract"):
        Transport()


@pytest.mark.asyncio
async def test_transport_aclose_default_is_noop() -> None:
    class EchoTransport(Transport):
        async def send(self, request: Request) -> httpx.Response:
            return httpx.Response(200, text=request.url)

    transport = EchoTransport()
    await transport.aclose()
    response = await transport.send(Request(method="GET", url=TEST_URL))
    assert response.text == TEST_URL


####################################
#     Tests for HttpxTransport     #
####################################


def test_httpx_transport_repr() -> None:
    client = httpx.AsyncClient()
    assert repr(HttpxTransport(client=client)) == "HttpxTransport(owns_client=False)"


@pytest.mark.parametrize("timeout", [0, -1.0])
def test_httpx_transport_invalid_timeout(timeout: float) -> None:
    with pytest.raises(ValueError, match=r"timeout must be > 0"):
        HttpxTransport(timeout=timeout)


@pytest.mark.asyncio
async def test_httpx_transport_send() -> None:
    calls = []
    transport = HttpxTransport(client=create_recording_client(calls, status_code=418))
    response = await transport.send(Request(method="GET", url=TEST_URL))
    assert response.status_code == 418
    assert response.text == "body"
    assert len(calls) == 1
    assert calls[0].method == "GET"
    assert str(calls[0].url) == TEST_URL


@pytest.mark.asyncio
async def test_httpx_transport_compress_by_default() -> None:
    calls = []
    transport = HttpxTransport(client=create_recording_client(calls))
    await transport.send(Request(method="GET", url=TEST_URL))
    assert calls[0].headers["Accept-Encoding"] == "gzip, deflate"


@pytest.mark.asyncio
async def test_httpx_transport_no_compress() -> None:
    calls = []
    transport = HttpxTransport(client=create_recording_client(calls))
    await transport.send(
        Request(method="GET", url=TEST_URL, options=RequestOptions(compress=False))
    )
    assert calls[0].headers["Accept-Encoding"] == "identity"


@pytest.mark.asyncio
async def test_httpx_transport_keeps_caller_accept_encoding() -> None:
    calls = []
    transport = HttpxTransport(client=create_recording_client(calls))
    await transport.send(
        Request(
            method="GET",
            url=TEST_URL,
            options=RequestOptions(headers={"accept-encoding": "br"}, compress=False),
        )
    )
    assert calls[0].headers["Accept-Encoding"] == "br"


@pytest.mark.asyncio
async def test_httpx_transport_headers() -> None:
    calls = []
    transport = HttpxTransport(client=create_recording_client(calls))
    await transport.send(
        Request(method="GET", url=TEST_URL, options=RequestOptions(headers={"X-Token": "abc"}))
    )
    assert calls[0].headers["X-Token"] == "abc"


@pytest.mark.asyncio
async def test_httpx_transport_raw_body() -> None:
    calls = []
    transport = HttpxTransport(client=create_recording_client(calls))
    await transport.send(
        Request(method="POST", url=TEST_URL, options=RequestOptions(body="payload"))
    )
    assert calls[0].content == b"payload"


@pytest.mark.asyncio
async def test_httpx_transport_json_body() -> None:
    calls = []
    transport = HttpxTransport(client=create_recording_client(calls))
    await transport.send(
        Request(method="PUT", url=TEST_URL, options=RequestOptions(json={"key": [1, 2]}))
    )
    assert json.loads(calls[0].content) == {"key": [1, 2]}
    assert calls[0].headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_httpx_transport_request_timeout() -> None:
    calls = []
    transport = HttpxTransport(client=create_recording_client(calls))
    await transport.send(Request(method="GET", url=TEST_URL, options=RequestOptions(timeout=2.5)))
    assert calls[0].extensions["timeout"]["read"] == 2.5


@pytest.mark.asyncio
async def test_httpx_transport_propagates_request_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        msg = "connection refused"
        raise httpx.ConnectError(msg, request=request)

    transport = HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    with pytest.raises(httpx.ConnectError, match=r"connection refused"):
        await transport.send(Request(method="GET", url=TEST_URL))


@pytest.mark.asyncio
async def test_httpx_transport_does_not_close_given_client() -> None:
    client = create_recording_client([])
    transport = HttpxTransport(client=client)
    await transport.aclose()
    assert not client.is_closed
    await client.aclose()


@pytest.mark.asyncio
async def test_httpx_transport_closes_owned_client() -> None:
    transport = HttpxTransport(timeout=3.0)
    assert repr(transport) == "HttpxTransport(owns_client=True)"
    await transport.aclose()
    assert transport._client.is_closed
