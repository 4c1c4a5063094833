r"""Request and response descriptors exchanged with the transport."""

from __future__ import annotations

__all__ = ["Request", "RequestOptions", "Response"]

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from adeferred.core.validation import validate_timeout


@dataclass(frozen=True)
class RequestOptions:
    """Options of one HTTP request.

    Args:
        headers: Extra request headers.
        body: Raw request body.
        json: Structured request body, JSON-encoded by the transport.
            Cannot be combined with ``body``.
        query: Query parameters. Only used when the URL has no query
            string of its own.
        compress: If ``True``, the transport advertises gzip/deflate
            support. If ``False``, it asks for an identity encoding.
        convert_json: If ``True``, the response body is decoded as JSON.
        timeout: Maximum seconds to wait for the response. If ``None``,
            the transport default is used. Must be > 0 if provided.

    Example:
        ```pycon
        >>> from adeferred.models import RequestOptions
        >>> options = RequestOptions(query={"page": "2"}, convert_json=True)
        >>> options.convert_json, options.compress
        (True, True)

        ```
    """

    headers: Mapping[str, str] | None = None
    body: str | bytes | None = None
    json: Any = None
    query: Mapping[str, Any] | None = None
    compress: bool = True
    convert_json: bool = False
    timeout: float | None = None

    def __post_init__(self) -> None:
        validate_timeout(self.timeout)
        if self.body is not None and self.json is not None:
            msg = "body and json cannot be used together"
            raise ValueError(msg)

    @classmethod
    def from_value(cls, value: RequestOptions | Mapping[str, Any] | None) -> RequestOptions:
        """Build request options from options, a mapping or ``None``.

        Args:
            value: The value to convert.

        Returns:
            The request options.

        Raises:
            TypeError: If the value cannot be converted.

        Example:
            ```pycon
            >>> from adeferred.models import RequestOptions
            >>> RequestOptions.from_value({"convert_json": True}).convert_json
            True

            ```
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            names = {f.name for f in fields(cls)}
            unknown = sorted(set(value) - names)
            if unknown:
                msg = f"unknown request options: {unknown}"
                raise TypeError(msg)
            return cls(**value)
        msg = f"expected RequestOptions or a mapping, got {type(value).__name__}"
        raise TypeError(msg)


@dataclass(frozen=True)
class Request:
    """Request handed to the transport.

    Args:
        method: The upper-cased HTTP method.
        url: The final URL, query string included.
        options: The request options.
    """

    method: str
    url: str
    options: RequestOptions = field(default_factory=RequestOptions)


@dataclass(frozen=True)
class Response:
    """Outcome of one HTTP exchange.

    Args:
        success: ``True`` if the status code is not a failure status.
        status: The HTTP status code.
        message: The status message (reason phrase).
        headers: The response headers, keyed by lower-cased name.
            Repeated headers such as ``Set-Cookie`` are folded into one
            comma-separated value.
        body: The response text, or the decoded JSON value when
            ``convert_json`` was requested.
    """

    success: bool
    status: int
    message: str
    headers: dict[str, str]
    body: Any
