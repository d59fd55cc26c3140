r"""Parameter validation utilities for resource requests.

This module provides validation functions for request parameters to
ensure they meet the required constraints before a request is started.
"""

from __future__ import annotations

__all__ = ["SUPPORTED_METHODS", "validate_method", "validate_timeout_ms"]

# HTTP verbs accepted by the request executor
SUPPORTED_METHODS = ("DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT")


def validate_timeout_ms(timeout_ms: float | None) -> None:
    """Validate a timeout expressed in milliseconds.

    Args:
        timeout_ms: Maximum milliseconds to wait for the exchange to
            complete. ``None`` disables the timeout.

    Raises:
        ValueError: If timeout_ms is a numeric value <= 0.

    Example:
        ```pycon
        >>> from aresource.core.validation import validate_timeout_ms
        >>> validate_timeout_ms(5000)
        >>> validate_timeout_ms(None)
        >>> validate_timeout_ms(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: timeout_ms must be > 0, got 0

        ```
    """
    if timeout_ms is not None and timeout_ms <= 0:
        msg = f"timeout_ms must be > 0, got {timeout_ms}"
        raise ValueError(msg)


def validate_method(method: str) -> str:
    """Validate and normalize an HTTP method name.

    Args:
        method: The HTTP method name, in any case.

    Returns:
        The upper-cased method name.

    Raises:
        ValueError: If the method is not one of ``SUPPORTED_METHODS``.

    Example:
        ```pycon
        >>> from aresource.core.validation import validate_method
        >>> validate_method("post")
        'POST'

        ```
    """
    normalized = method.upper()
    if normalized not in SUPPORTED_METHODS:
        msg = f"method must be one of {SUPPORTED_METHODS}, got {method!r}"
        raise ValueError(msg)
    return normalized
