r"""Parameter validation utilities for deferred HTTP requests."""

from __future__ import annotations

__all__ = ["validate_method", "validate_timeout"]

from adeferred.core.config import SUPPORTED_METHODS


def validate_timeout(timeout: float | None) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for server responses.
            Must be > 0 if provided.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from adeferred.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(None)
        >>> validate_timeout(0)
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if timeout is not None and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_method(method: str) -> str:
    """Validate an HTTP method name and return it upper-cased.

    Args:
        method: The HTTP method name, in any case.

    Returns:
        The upper-cased method name.

    Raises:
        ValueError: If the method is not supported.

    Example:
        ```pycon
        >>> from adeferred.core.validation import validate_method
        >>> validate_method("post")
        'POST'

        ```
    """
    normalized = method.upper()
    if normalized not in SUPPORTED_METHODS:
        msg = f"unsupported HTTP method {method!r}, expected one of {SUPPORTED_METHODS}"
        raise ValueError(msg)
    return normalized
