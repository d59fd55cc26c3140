r"""Configuration dataclasses and defaults for resource requests.

This module provides the configuration constants, the settings object
that supplies credentials and API-wide values, the per-resource
configuration shared by every request issued through a resource, and
the per-call request options.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_PATH",
    "DEFAULT_CLIENT_IDENTIFIER_HEADER",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_HOST",
    "DEFAULT_PROTOCOL",
    "DEFAULT_VERSION_HEADER",
    "TIMEOUT_ERROR_CODE",
    "ApiSettings",
    "RequestOptions",
    "ResourceConfig",
    "collect_client_identifier",
]

import asyncio
import errno
import json
import platform
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import httpx

from aresource.core.validation import validate_timeout_ms
from aresource.utils.paths import compose_path, interpolate_path

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, MutableMapping

    from aresource.utils.paths import CommandPath

    DataSerializer = Callable[[str, Any, MutableMapping[str, str]], str | bytes]


# Host that receives requests unless a resource overrides it
DEFAULT_HOST = "api.example.com"

DEFAULT_PROTOCOL = "https"

# Base path template prepended to every resource path
DEFAULT_BASE_PATH = "/v1/"

# Content type of the default form-encoded request body
DEFAULT_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Header carrying the configured API version
DEFAULT_VERSION_HEADER = "Api-Version"

# Header carrying the JSON client identifier
DEFAULT_CLIENT_IDENTIFIER_HEADER = "X-Client-User-Agent"

# errno attached to the cause of a timeout error
TIMEOUT_ERROR_CODE = errno.ETIMEDOUT


def collect_client_identifier() -> str:
    """Describe the running client as a JSON document.

    This probes the platform and may block, so callers on the event loop
    should run it in a worker thread.

    Returns:
        A JSON object with the bindings version, the language, the
        interpreter version, the platform, the HTTP library and uname.
    """
    try:
        bindings_version = version("aresource")
    except PackageNotFoundError:  # pragma: no cover
        bindings_version = "0.0.0"
    return json.dumps(
        {
            "bindings_version": bindings_version,
            "lang": "python",
            "lang_version": platform.python_version(),
            "platform": platform.platform(),
            "httplib": f"httpx {httpx.__version__}",
            "publisher": "aresource",
            "uname": " ".join(platform.uname()),
        }
    )


@dataclass
class ApiSettings:
    """Credentials and API-wide values used by every resource.

    Args:
        api_key: The secret used for the ``Bearer`` authorization header.
        host: The API host name.
        protocol: The URL scheme.
        port: Optional port. The scheme default is used when ``None``.
        base_path: Base path template shared by every resource.
        api_version: Optional API version sent in ``version_header``.
        timeout_ms: Default timeout in milliseconds for requests that do
            not set one. ``None`` disables the timeout.
        version_header: Name of the API version header.
        client_identifier_header: Name of the client identifier header.
        client_identifier: Optional precomputed client identifier. When
            ``None`` it is collected on first use and cached.

    Example:
        ```pycon
        >>> from aresource.core.config import ApiSettings
        >>> settings = ApiSettings(api_key="sk_test_123", api_version="2024-01-01")
        >>> settings.build_url("/v1/charges")
        'https://api.example.com/v1/charges'

        ```
    """

    api_key: str | None = None
    host: str = DEFAULT_HOST
    protocol: str = DEFAULT_PROTOCOL
    port: int | None = None
    base_path: str = DEFAULT_BASE_PATH
    api_version: str | None = None
    timeout_ms: float | None = None
    version_header: str = DEFAULT_VERSION_HEADER
    client_identifier_header: str = DEFAULT_CLIENT_IDENTIFIER_HEADER
    client_identifier: str | None = None

    def __post_init__(self) -> None:
        validate_timeout_ms(self.timeout_ms)

    def get_base_path_template(self) -> str:
        return self.base_path

    def get_api_version(self) -> str | None:
        return self.api_version

    def get_auth_token(self) -> str | None:
        return self.api_key

    async def get_client_identifier(self) -> str:
        """Return the client identifier, collecting it on first use."""
        if self.client_identifier is None:
            self.client_identifier = await asyncio.to_thread(collect_client_identifier)
        return self.client_identifier

    def build_url(self, path: str, host: str | None = None) -> str:
        """Build the absolute URL of a request path.

        Args:
            path: The absolute URL path.
            host: Optional host replacing the configured one.

        Returns:
            The absolute URL.
        """
        netloc = host or self.host
        if self.port is not None:
            netloc = f"{netloc}:{self.port}"
        return f"{self.protocol}://{netloc}{path}"


@dataclass(frozen=True)
class ResourceConfig:
    """Configuration shared by every request issued through a resource.

    The bound URL parameters are stored read-only, so a configuration can
    be reused by any number of concurrent requests.

    Args:
        base_path_template: The API base path template.
        path_template: The resource path template.
        url_params: Placeholder values fixed for the resource.
        override_host: Optional host receiving the requests of this
            resource instead of the settings host.
        data_serializer: Optional function replacing the default request
            body encoding. It is called with the method, the payload and
            the mutable header overrides, and returns the wire body.

    Example:
        ```pycon
        >>> from aresource.core.config import ResourceConfig
        >>> config = ResourceConfig(
        ...     path_template="customers/{customer}/cards", url_params={"customer": "cus_1"}
        ... )
        >>> config.create_full_path("card_1")
        '/v1/customers/cus_1/cards/card_1'

        ```
    """

    base_path_template: str = DEFAULT_BASE_PATH
    path_template: str = ""
    url_params: Mapping[str, str] = field(default_factory=dict)
    override_host: str | None = None
    data_serializer: DataSerializer | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "url_params", MappingProxyType(dict(self.url_params)))

    def create_url_data(self) -> dict[str, str]:
        """Return a fresh copy of the bound URL parameters."""
        return dict(self.url_params)

    def create_full_path(
        self, command_path: CommandPath = "", url_data: Mapping[str, str] | None = None
    ) -> str:
        """Compose the absolute path of a request.

        Args:
            command_path: The per-call path or a function of the URL data.
            url_data: The URL parameters. Defaults to the bound ones.

        Returns:
            The normalized absolute path.

        Raises:
            ValueError: If a template placeholder has no parameter.
        """
        if url_data is None:
            url_data = self.create_url_data()
        return compose_path(
            interpolate_path(self.base_path_template, url_data),
            interpolate_path(self.path_template, url_data),
            command_path,
            url_data,
        )


@dataclass(frozen=True)
class RequestOptions:
    """Per-call request options.

    Args:
        headers: Header overrides. They take precedence over every
            computed header.
        timeout_ms: Optional timeout in milliseconds.
    """

    headers: Mapping[str, str] | None = None
    timeout_ms: float | None = None

    def __post_init__(self) -> None:
        validate_timeout_ms(self.timeout_ms)
