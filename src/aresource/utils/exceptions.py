r"""Conversion of transport failures into connection errors.

This module provides the functions turning a timeout or a low-level
transport failure into the ``ApiConnectionError`` delivered to the
caller.
"""

from __future__ import annotations

__all__ = ["build_timeout_error", "handle_transport_error"]

import logging
import os
from typing import TYPE_CHECKING

from aresource.core.config import TIMEOUT_ERROR_CODE
from aresource.exceptions import ApiConnectionError

if TYPE_CHECKING:
    from collections.abc import Callable

    from aresource.utils.timeout import ExchangeState

logger: logging.Logger = logging.getLogger(__name__)


def _format_ms(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def build_timeout_error(timeout_ms: float) -> ApiConnectionError:
    """Create the error reported when an exchange times out.

    Args:
        timeout_ms: The timeout that was reached, in milliseconds.

    Returns:
        A connection error whose cause is a ``TimeoutError`` with
        ``errno`` set to ``TIMEOUT_ERROR_CODE``.

    Example:
        ```pycon
        >>> import errno
        >>> from aresource.utils.exceptions import build_timeout_error
        >>> error = build_timeout_error(5000)
        >>> error.message
        'Request aborted due to timeout being reached (5000ms)'
        >>> error.cause.errno == errno.ETIMEDOUT
        True

        ```
    """
    cause = TimeoutError(TIMEOUT_ERROR_CODE, os.strerror(TIMEOUT_ERROR_CODE))
    return ApiConnectionError(
        f"Request aborted due to timeout being reached ({_format_ms(timeout_ms)}ms)",
        cause=cause,
    )


def handle_transport_error(
    exc: Exception,
    state: ExchangeState,
    deliver: Callable[[ApiConnectionError], object],
    *,
    url: str,
    method: str,
) -> None:
    """Report a transport failure unless the exchange was aborted.

    After an abort the timeout error is the only outcome of the exchange,
    so the transport error is logged and discarded.

    Args:
        exc: The transport exception (typically ``httpx.RequestError``).
        state: The state of the failed exchange.
        deliver: Function receiving the connection error.
        url: The URL that was requested, used in log messages.
        method: The HTTP method name, used in log messages.
    """
    error_type = type(exc).__name__
    if state.aborted:
        logger.debug(f"Ignoring {error_type} from aborted {method} request to {url}: {exc}")
        return
    logger.debug(f"{method} request to {url} encountered {error_type}: {exc}")
    deliver(
        ApiConnectionError(
            "An error occurred with the connection to the API",
            cause=exc,
        )
    )
