r"""Core configuration and validation shared by the request functions.

The request logic itself lives in ``adeferred.core.http_logic``.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_PORTS",
    "DEFAULT_TIMEOUT",
    "FAILURE_STATUS_MAX",
    "FAILURE_STATUS_MIN",
    "SUPPORTED_METHODS",
    "SUPPORTED_SCHEMES",
    "validate_method",
    "validate_timeout",
]

from adeferred.core.config import (
    DEFAULT_PORTS,
    DEFAULT_TIMEOUT,
    FAILURE_STATUS_MAX,
    FAILURE_STATUS_MIN,
    SUPPORTED_METHODS,
    SUPPORTED_SCHEMES,
)
from adeferred.core.validation import validate_method, validate_timeout
