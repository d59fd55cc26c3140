r"""aresource - Request-execution core for REST API resources.

This package turns a resource path, an HTTP verb, a payload and a
credential into one HTTP exchange and reports exactly one typed outcome.
Built on top of httpx and asyncio.

Key Features:
    - Path templates with bound parameters and per-call command paths
    - Form-encoded request bodies with an overridable serializer
    - Authorization, API version and client identifier headers
    - Per-request timeout that aborts the in-flight exchange
    - Typed errors: connection, authentication, malformed response and
      business errors dispatched on the server error type
    - Deferred results usable with ``await`` or an ``(error, value)``
      completion callback

Example:
    ```pycon
    >>> import asyncio
    >>> from aresource import ApiResource, ApiSettings, RequestOptions
    >>> charges = ApiResource(ApiSettings(api_key="sk_test_123"), path="charges")
    >>> async def main():  # doctest: +SKIP
    ...     charge = await charges.request(
    ...         "POST", data={"amount": 100}, options=RequestOptions(timeout_ms=5000)
    ...     )
    ...
    >>> asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "ApiConnectionError",
    "ApiError",
    "ApiResource",
    "ApiSettings",
    "AuthenticationError",
    "BusinessError",
    "MalformedResponseError",
    "RequestExecutor",
    "RequestOptions",
    "ResourceConfig",
    "ResourceOperation",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from aresource.core.config import ApiSettings, RequestOptions, ResourceConfig
from aresource.exceptions import (
    ApiConnectionError,
    ApiError,
    AuthenticationError,
    BusinessError,
    MalformedResponseError,
)
from aresource.executor import RequestExecutor
from aresource.resource import ApiResource, ResourceOperation

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
