from __future__ import annotations

import errno
import logging
from unittest.mock import Mock

import httpx
import pytest

from aresource.exceptions import ApiConnectionError
from aresource.utils.exceptions import build_timeout_error, handle_transport_error
from aresource.utils.timeout import ExchangeState

TEST_URL = "https://api.test/v1/charges"


#########################################
#     Tests for build_timeout_error     #
#########################################


@pytest.mark.parametrize(
    ("timeout_ms", "expected"),
    [(5000, "5000ms"), (5000.0, "5000ms"), (2.5, "2.5ms"), (10**6, "1000000ms")],
)
def test_build_timeout_error_message(timeout_ms: float, expected: str) -> None:
    error = build_timeout_error(timeout_ms)
    assert isinstance(error, ApiConnectionError)
    assert error.message == f"Request aborted due to timeout being reached ({expected})"


def test_build_timeout_error_cause() -> None:
    error = build_timeout_error(5000)
    assert isinstance(error.cause, TimeoutError)
    assert error.cause.errno == errno.ETIMEDOUT


############################################
#     Tests for handle_transport_error     #
############################################


def test_handle_transport_error_delivers_connection_error() -> None:
    exc = httpx.ConnectError("Connection refused")
    deliver = Mock()
    handle_transport_error(exc, ExchangeState(), deliver, url=TEST_URL, method="GET")

    deliver.assert_called_once()
    error = deliver.call_args.args[0]
    assert isinstance(error, ApiConnectionError)
    assert error.message == "An error occurred with the connection to the API"
    assert error.cause is exc


def test_handle_transport_error_after_abort_is_discarded(caplog: pytest.LogCaptureFixture) -> None:
    deliver = Mock()
    with caplog.at_level(logging.DEBUG, logger="aresource"):
        handle_transport_error(
            httpx.ReadError("Connection reset"),
            ExchangeState(aborted=True),
            deliver,
            url=TEST_URL,
            method="POST",
        )
    deliver.assert_not_called()
    assert "Ignoring ReadError from aborted POST request" in caplog.text
