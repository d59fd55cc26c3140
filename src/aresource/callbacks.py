r"""Lifecycle hook types for observability.

A resource accepts three optional hooks:

- on_request: Called once the exchange is about to be submitted
- on_success: Called when the request resolves
- on_failure: Called when the request is rejected

Each hook fires at most once per request, independently of the
completion callback. An error raised by a hook is logged as a warning
and never changes the outcome of the request.

Example:
    ```pycon
    >>> from aresource import ApiResource, ApiSettings
    >>> from aresource.callbacks import FailureInfo
    >>> def alert(info: FailureInfo) -> None:
    ...     print(f"{info.method} {info.url} failed: {info.error}")
    ...
    >>> charges = ApiResource(ApiSettings(api_key="sk_test"), path="charges", on_failure=alert)

    ```
"""

from __future__ import annotations

__all__ = [
    "FailureInfo",
    "HookConfig",
    "RequestInfo",
    "ResponseInfo",
    "invoke_on_failure",
    "invoke_on_request",
    "invoke_on_success",
]

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class RequestInfo:
    """Information passed to on_request hook.

    Attributes:
        url: The URL being requested.
        method: The HTTP method (e.g., "GET", "POST").
        headers: The final request headers.
        timeout_ms: The timeout of the request, if any.
    """

    url: str
    method: str
    headers: httpx.Headers
    timeout_ms: float | None


@dataclass
class ResponseInfo:
    """Information passed to on_success hook.

    Attributes:
        url: The URL that was requested.
        method: The HTTP method (e.g., "GET", "POST").
        body: The decoded response body.
        total_time: Time from the start of the request (seconds).
    """

    url: str
    method: str
    body: Any
    total_time: float


@dataclass
class FailureInfo:
    """Information passed to on_failure hook.

    Attributes:
        url: The URL that was requested.
        method: The HTTP method (e.g., "GET", "POST").
        error: The error delivered to the caller.
        status_code: The HTTP status code carried by the error, if any.
        total_time: Time from the start of the request (seconds).
    """

    url: str
    method: str
    error: BaseException
    status_code: int | None
    total_time: float


@dataclass(frozen=True)
class HookConfig:
    """Optional lifecycle hooks of a resource."""

    on_request: Callable[[RequestInfo], None] | None = None
    on_success: Callable[[ResponseInfo], None] | None = None
    on_failure: Callable[[FailureInfo], None] | None = None


def _call_hook(name: str, hook: Callable[[Any], None], info: Any) -> None:
    try:
        hook(info)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"Error in {name} hook for {info.method} request to {info.url}: {e!r}")


def invoke_on_request(
    on_request: Callable[[RequestInfo], None] | None,
    *,
    url: str,
    method: str,
    headers: httpx.Headers,
    timeout_ms: float | None,
) -> None:
    """Invoke on_request hook if provided.

    Errors raised by the hook are logged and do not affect the request.
    """
    if on_request is not None:
        _call_hook(
            "on_request",
            on_request,
            RequestInfo(url=url, method=method, headers=headers, timeout_ms=timeout_ms),
        )


def invoke_on_success(
    on_success: Callable[[ResponseInfo], None] | None,
    *,
    url: str,
    method: str,
    body: Any,
    start_time: float,
) -> None:
    """Invoke on_success hook if provided.

    Args:
        on_success: Optional hook to invoke when the request resolves.
        url: The URL that was requested.
        method: The HTTP method (e.g., "GET", "POST").
        body: The decoded response body.
        start_time: The ``time.monotonic()`` value when the request started.
    """
    if on_success is not None:
        _call_hook(
            "on_success",
            on_success,
            ResponseInfo(
                url=url,
                method=method,
                body=body,
                total_time=time.monotonic() - start_time,
            ),
        )


def invoke_on_failure(
    on_failure: Callable[[FailureInfo], None] | None,
    *,
    url: str,
    method: str,
    error: BaseException,
    start_time: float,
) -> None:
    """Invoke on_failure hook if provided.

    Args:
        on_failure: Optional hook to invoke when the request is rejected.
        url: The URL that was requested.
        method: The HTTP method (e.g., "GET", "POST").
        error: The error delivered to the caller.
        start_time: The ``time.monotonic()`` value when the request started.
    """
    if on_failure is not None:
        _call_hook(
            "on_failure",
            on_failure,
            FailureInfo(
                url=url,
                method=method,
                error=error,
                status_code=getattr(error, "status_code", None),
                total_time=time.monotonic() - start_time,
            ),
        )
