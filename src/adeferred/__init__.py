r"""adeferred - Deferred values with chained continuations, and deferred
HTTP requests built on top of them.

A ``Deferred`` is a single-settlement container for a future outcome.
It runs its executor on a new scheduling turn, settles exactly once, and
lets any number of continuations be chained with ``then``, ``catch`` and
``finally_``. Inside a cooperative task, ``await deferred`` suspends
only that task until the outcome is known.

The request functions wrap one HTTP exchange, performed with httpx, in a
``Deferred`` resolved with a ``Response``.

Key Features:
    - Idempotent settlement: only the first resolve/reject counts
    - Continuations run in registration order, handler errors become rejections
    - Strict ``finally_`` semantics that preserve the original outcome
    - Injectable scheduler (asyncio by default, deterministic manual scheduler)
    - HTTP methods GET, POST, PUT, DELETE, HEAD, OPTIONS returning deferreds
    - Optional JSON decoding of the response body

Example:
    ```pycon
    >>> import asyncio
    >>> from adeferred import Deferred, get
    >>> async def main():
    ...     deferred = Deferred(lambda resolve, reject: resolve(21))
    ...     return await deferred.then(lambda value: value * 2)
    ...
    >>> asyncio.run(main())
    42
    >>> async def fetch():
    ...     response = await get("https://api.example.com/data", {"convert_json": True})
    ...     return response.body
    ...
    >>> asyncio.run(fetch())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "Deferred",
    "DeferredClient",
    "DeferredState",
    "HttpRequestError",
    "RejectedError",
    "RequestOptions",
    "Response",
    "ResponseDecodeError",
    "SchedulerError",
    "UrlError",
    "__version__",
    "build_url",
    "delete",
    "get",
    "head",
    "options",
    "parse_url",
    "post",
    "put",
    "request",
]

from importlib.metadata import PackageNotFoundError, version

from adeferred.client import DeferredClient
from adeferred.deferred import Deferred, DeferredState
from adeferred.delete import delete
from adeferred.exceptions import (
    HttpRequestError,
    RejectedError,
    ResponseDecodeError,
    SchedulerError,
    UrlError,
)
from adeferred.get import get
from adeferred.head import head
from adeferred.models import RequestOptions, Response
from adeferred.options import options
from adeferred.post import post
from adeferred.put import put
from adeferred.request import request
from adeferred.url import build_url, parse_url

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
