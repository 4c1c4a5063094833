r"""Default configuration values for deferred HTTP requests."""

from __future__ import annotations

__all__ = [
    "DEFAULT_PORTS",
    "DEFAULT_TIMEOUT",
    "FAILURE_STATUS_MAX",
    "FAILURE_STATUS_MIN",
    "SUPPORTED_METHODS",
    "SUPPORTED_SCHEMES",
]

from types import MappingProxyType

# Default timeout in seconds for HTTP requests
DEFAULT_TIMEOUT = 10.0

# Ports omitted when rendering a URL with the matching scheme
DEFAULT_PORTS = MappingProxyType({"http": 80, "https": 443})

# Schemes accepted by the request functions
SUPPORTED_SCHEMES = ("http", "https")

# Status codes in [FAILURE_STATUS_MIN, FAILURE_STATUS_MAX] reject the request.
# 511 (Network Authentication Required) is the last status defined by the RFCs;
# anything above it is treated as a success like 1xx, 2xx and 3xx.
FAILURE_STATUS_MIN = 400
FAILURE_STATUS_MAX = 511

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS", "PATCH")
