r"""Define the exceptions raised or used as rejection values by
adeferred."""

from __future__ import annotations

__all__ = [
    "HttpRequestError",
    "RejectedError",
    "ResponseDecodeError",
    "SchedulerError",
    "UrlError",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from adeferred.models import Response


class SchedulerError(RuntimeError):
    r"""Raised when the scheduler cannot run or suspend the current
    code.

    This happens when a deferred is created without a running event loop,
    or when it is awaited outside a task the scheduler can suspend.
    """


class RejectedError(RuntimeError):
    r"""Raised by ``await`` when a deferred was rejected with a value
    that is not an exception.

    Args:
        reason: The rejection value.

    Example:
        ```pycon
        >>> from adeferred.exceptions import RejectedError
        >>> err = RejectedError("boom")
        >>> err.reason
        'boom'

        ```
    """

    def __init__(self, reason: Any) -> None:
        super().__init__(f"deferred rejected with {reason!r}")
        self.reason = reason


class HttpRequestError(RuntimeError):
    r"""Raised (or used as rejection value) when an HTTP request fails.

    Application-level failures (status code in the failure range) carry
    a ``status_code`` and the ``response``. Transport-level failures
    have no status code and carry the original exception as ``cause``.

    Args:
        method: The HTTP method of the request.
        url: The URL of the request.
        message: The error message. For status failures this is the
            status message of the response.
        status_code: The HTTP status code, if a response was received.
        response: The response descriptor, if a response was received.
        cause: The underlying exception, if any.

    Example:
        ```pycon
        >>> from adeferred.exceptions import HttpRequestError
        >>> err = HttpRequestError(
        ...     method="GET", url="https://example.com", message="Not Found", status_code=404
        ... )
        >>> str(err)
        'Not Found'
        >>> err.status_code
        404

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        status_code: int | None = None,
        response: Response | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.message = message
        self.status_code = status_code
        self.response = response
        self.__cause__ = cause

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


class ResponseDecodeError(HttpRequestError):
    r"""Raised (or used as rejection value) when a response body cannot
    be decoded as JSON."""


class UrlError(ValueError):
    r"""Raised when a URL is malformed or cannot be used for a
    request."""
