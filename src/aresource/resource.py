r"""API resources.

A resource groups related API operations that share a path and a
configuration. Operations are described by ``ResourceOperation`` values
given to the resource at construction and invoked by name.

Example:
    ```pycon
    >>> import asyncio
    >>> import httpx
    >>> from aresource import ApiResource, ApiSettings, ResourceOperation
    >>> def handler(request):
    ...     return httpx.Response(200, json={"id": "re_1", "charge": "ch_1"})
    ...
    >>> async def main():
    ...     async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
    ...         refunds = ApiResource(
    ...             ApiSettings(api_key="sk_test", client_identifier="{}"),
    ...             path="charges/{charge}/refunds",
    ...             url_params={"charge": "ch_1"},
    ...             operations={"create": ResourceOperation("POST")},
    ...             client=client,
    ...         )
    ...         return await refunds.call("create", {"amount": 100})
    ...
    >>> asyncio.run(main())
    {'id': 're_1', 'charge': 'ch_1'}

    ```
"""

from __future__ import annotations

__all__ = ["ApiResource", "ResourceOperation"]

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from aresource.callbacks import HookConfig
from aresource.core.config import ResourceConfig
from aresource.executor import RequestExecutor

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable, Mapping

    import httpx

    from aresource.callbacks import FailureInfo, RequestInfo, ResponseInfo
    from aresource.core.config import ApiSettings, DataSerializer, RequestOptions
    from aresource.utils.completion import CompletionCallback
    from aresource.utils.paths import CommandPath

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceOperation:
    """Description of one operation of a resource.

    Args:
        method: The HTTP method of the operation.
        path: The command path, or a function receiving a copy of the
            bound URL parameters and returning it.
    """

    method: str
    path: CommandPath = ""


class ApiResource:
    r"""A group of API operations sharing a path and a configuration.

    The resource configuration is read-only after construction, so a
    resource can issue any number of concurrent requests.

    Args:
        settings: The credential and API-wide configuration.
        path: The resource path template, e.g. ``"customers/{customer}/cards"``.
        url_params: Placeholder values fixed for this resource.
        override_host: Optional host receiving the requests of this
            resource instead of the settings host.
        data_serializer: Optional function replacing the default body
            encoding. It receives the method, the payload and the mutable
            header overrides and returns the wire body.
        operations: Named operations available through ``call``.
        client: Optional ``httpx.AsyncClient`` used as transport.
        on_request: Optional hook called before each exchange.
        on_success: Optional hook called when a request resolves.
        on_failure: Optional hook called when a request is rejected.
    """

    def __init__(
        self,
        settings: ApiSettings,
        *,
        path: str = "",
        url_params: Mapping[str, str] | None = None,
        override_host: str | None = None,
        data_serializer: DataSerializer | None = None,
        operations: Mapping[str, ResourceOperation] | None = None,
        client: httpx.AsyncClient | None = None,
        on_request: Callable[[RequestInfo], None] | None = None,
        on_success: Callable[[ResponseInfo], None] | None = None,
        on_failure: Callable[[FailureInfo], None] | None = None,
    ) -> None:
        self.settings = settings
        self.config = ResourceConfig(
            base_path_template=settings.get_base_path_template(),
            path_template=path,
            url_params=url_params or {},
            override_host=override_host,
            data_serializer=data_serializer,
        )
        self.operations: Mapping[str, ResourceOperation] = MappingProxyType(
            dict(operations or {})
        )
        self._executor = RequestExecutor(
            settings,
            self.config,
            client=client,
            hooks=HookConfig(on_request=on_request, on_success=on_success, on_failure=on_failure),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.config.path_template!r})"

    def create_url_data(self) -> dict[str, str]:
        """Return a fresh copy of the bound URL parameters."""
        return self.config.create_url_data()

    def create_full_path(
        self, command_path: CommandPath = "", url_data: Mapping[str, str] | None = None
    ) -> str:
        """Compose the absolute path of a request of this resource."""
        return self.config.create_full_path(command_path, url_data)

    def request(
        self,
        method: str,
        command_path: CommandPath = "",
        data: Any = None,
        *,
        auth: str | None = None,
        options: RequestOptions | None = None,
        callback: CompletionCallback | None = None,
    ) -> asyncio.Future[Any]:
        """Send a request and return its deferred result.

        See ``RequestExecutor.execute`` for the arguments and errors.

        Returns:
            A future resolved with the decoded body or rejected with an
            ``ApiError``.
        """
        return self._executor.execute(method, command_path, data, auth, options, callback)

    def call(
        self,
        name: str,
        data: Any = None,
        *,
        auth: str | None = None,
        options: RequestOptions | None = None,
        callback: CompletionCallback | None = None,
    ) -> asyncio.Future[Any]:
        """Invoke a named operation of this resource.

        Args:
            name: The name of the operation.
            data: The payload.
            auth: Optional credential replacing the settings one.
            options: Optional header overrides and timeout.
            callback: Optional ``(error, value)`` completion callback.

        Returns:
            The deferred result of the request.

        Raises:
            KeyError: If the resource has no operation with this name.
        """
        try:
            operation = self.operations[name]
        except KeyError:
            msg = f"{self!r} has no operation named {name!r}"
            raise KeyError(msg) from None
        return self.request(
            operation.method,
            operation.path,
            data,
            auth=auth,
            options=options,
            callback=callback,
        )
