r"""Unit tests for the parameter validation helpers."""

from __future__ import annotations

import pytest

from adeferred.core.validation import validate_method, validate_timeout

######################################
#     Tests for validate_timeout     #
######################################


@pytest.mark.parametrize("timeout", [None, 0.1, 1, 30.0])
def test_validate_timeout_valid(timeout: float | None) -> None:
    validate_timeout(timeout)


@pytest.mark.parametrize("timeout", [0, 0.0, -1])
def test_validate_timeout_invalid(timeout: float) -> None:
    with pytest.raises(ValueError, match=r"timeout must be > 0"):
        validate_timeout(timeout)


#####################################
#     Tests for validate_method     #
#####################################


@pytest.mark.parametrize(
    ("method", "expected"),
    [("get", "GET"), ("Post", "POST"), ("DELETE", "DELETE"), ("options", "OPTIONS")],
)
def test_validate_method_normalizes(method: str, expected: str) -> None:
    assert validate_method(method) == expected


@pytest.mark.parametrize("method", ["FETCH", "", "https://example.com"])
def test_validate_method_invalid(method: str) -> None:
    with pytest.raises(ValueError, match=r"unsupported HTTP method"):
        validate_method(method)
