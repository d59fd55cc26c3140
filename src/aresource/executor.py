r"""Request executor for resource requests.

This module provides the RequestExecutor class that runs one request
through its whole cycle: path composition, body serialization, header
assembly, timeout enforcement, the HTTP exchange and the classification
of the outcome.
"""

from __future__ import annotations

__all__ = ["RequestExecutor"]

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from aresource.callbacks import (
    HookConfig,
    invoke_on_failure,
    invoke_on_request,
    invoke_on_success,
)
from aresource.core.config import RequestOptions
from aresource.core.validation import validate_method
from aresource.exceptions import ApiError
from aresource.utils.completion import (
    create_deferred,
    reject_deferred,
    resolve_deferred,
)
from aresource.utils.exceptions import handle_transport_error
from aresource.utils.headers import build_headers
from aresource.utils.response import read_response
from aresource.utils.serialization import serialize_request_data
from aresource.utils.structured_logging import log_structured
from aresource.utils.timeout import ExchangeState, TimeoutGuard

if TYPE_CHECKING:
    from aresource.core.config import ApiSettings, ResourceConfig
    from aresource.utils.completion import CompletionCallback
    from aresource.utils.paths import CommandPath

logger: logging.Logger = logging.getLogger(__name__)

# Methods whose default form-encoded payload is sent as the query string
QUERY_STRING_METHODS = ("DELETE", "GET", "HEAD")


class RequestExecutor:
    """Executes resource requests and reports exactly one outcome each.

    The executor orchestrates the following steps:
    - compose the URL from the base path, resource path and command path
    - serialize the payload with the default or the resource serializer
    - assemble the headers (this awaits the client identifier)
    - arm a TimeoutGuard when a timeout is configured
    - submit the exchange to the transport and decode the response

    Exactly one of the decoder outcome, the transport error and the
    timeout error reaches the deferred result.

    Args:
        settings: The credential and API-wide configuration.
        config: The configuration of the resource issuing the requests.
        client: Optional ``httpx.AsyncClient`` used as transport. When
            ``None``, a client is opened and closed for each exchange.
        hooks: Optional lifecycle hooks.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from aresource.core.config import ApiSettings, ResourceConfig
        >>> from aresource.executor import RequestExecutor
        >>> transport = httpx.MockTransport(
        ...     lambda request: httpx.Response(200, json={"id": "ch_1"})
        ... )
        >>> async def main():
        ...     async with httpx.AsyncClient(transport=transport) as client:
        ...         executor = RequestExecutor(
        ...             ApiSettings(api_key="sk_test", client_identifier="{}"),
        ...             ResourceConfig(path_template="charges"),
        ...             client=client,
        ...         )
        ...         return await executor.execute("GET", "ch_1")
        ...
        >>> asyncio.run(main())
        {'id': 'ch_1'}

        ```
    """

    def __init__(
        self,
        settings: ApiSettings,
        config: ResourceConfig,
        *,
        client: httpx.AsyncClient | None = None,
        hooks: HookConfig | None = None,
    ) -> None:
        self.settings = settings
        self.config = config
        self.client = client
        self.hooks = hooks if hooks is not None else HookConfig()
        # Strong references to running exchanges
        self._tasks: set[asyncio.Task[None]] = set()

    def execute(
        self,
        method: str,
        command_path: CommandPath = "",
        data: Any = None,
        auth: str | None = None,
        options: RequestOptions | None = None,
        callback: CompletionCallback | None = None,
    ) -> asyncio.Future[Any]:
        """Start a request and return its deferred result.

        The URL and the body are computed before this method returns, so
        programming errors (unknown verb, missing URL parameter, failing
        custom serializer) are raised immediately. Every other failure is
        delivered through the returned future and the callback.

        Args:
            method: The HTTP method.
            command_path: The per-call path, or a function receiving a
                copy of the bound URL parameters and returning it.
            data: The payload.
            auth: Optional credential replacing the settings one.
            options: Optional header overrides and timeout.
            callback: Optional function called once, on a later loop
                turn, with ``(None, body)`` or ``(error, None)``.

        Returns:
            A future resolved with the decoded body or rejected with an
            ``ApiError``.

        Raises:
            RuntimeError: If no event loop is running.
            ValueError: If the method is not supported or a path
                placeholder has no parameter.
        """
        method = validate_method(method)
        options = options if options is not None else RequestOptions()
        url_data = self.config.create_url_data()
        path = self.config.create_full_path(command_path, url_data)
        url = self.settings.build_url(path, host=self.config.override_host)

        overrides = dict(options.headers or {})
        body = serialize_request_data(method, data, overrides, self.config.data_serializer)
        if (
            method in QUERY_STRING_METHODS
            and self.config.data_serializer is None
            and body
        ):
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{body}"
            body = b""

        timeout_ms = (
            options.timeout_ms if options.timeout_ms is not None else self.settings.timeout_ms
        )
        future = create_deferred(callback)
        task = asyncio.ensure_future(
            self._run(
                future,
                method=method,
                url=url,
                body=body,
                auth=auth,
                overrides=overrides,
                timeout_ms=timeout_ms,
            )
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return future

    async def _run(
        self,
        future: asyncio.Future[Any],
        *,
        method: str,
        url: str,
        body: str | bytes,
        auth: str | None,
        overrides: dict[str, str],
        timeout_ms: float | None,
    ) -> None:
        start_time = time.monotonic()

        def resolve(value: Any) -> None:
            if resolve_deferred(future, value):
                self._log_outcome(method, url, "success", start_time)
                invoke_on_success(
                    self.hooks.on_success,
                    url=url,
                    method=method,
                    body=value,
                    start_time=start_time,
                )

        def reject(error: BaseException) -> None:
            if reject_deferred(future, error):
                self._log_outcome(method, url, type(error).__name__, start_time)
                invoke_on_failure(
                    self.hooks.on_failure,
                    url=url,
                    method=method,
                    error=error,
                    start_time=start_time,
                )

        try:
            headers = await build_headers(self.settings, auth=auth, overrides=overrides)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            logger.debug(f"Could not build headers for {method} request to {url}: {exc}")
            reject(exc)
            return

        invoke_on_request(
            self.hooks.on_request, url=url, method=method, headers=headers, timeout_ms=timeout_ms
        )
        logger.debug(f"Sending {method} request to {url}")
        state = ExchangeState()
        exchange = asyncio.ensure_future(self._send(method, url, headers, body))
        guard = None
        if timeout_ms is not None:
            guard = TimeoutGuard(timeout_ms, state, abort=exchange.cancel, on_timeout=reject)
            guard.arm()

        try:
            value = await exchange
        except asyncio.CancelledError:
            if not state.aborted:
                exchange.cancel()
                future.cancel()
                raise
        except ApiError as err:
            if not state.aborted:
                reject(err)
        except Exception as exc:
            # httpx.RequestError and any other failure of the exchange
            # (invalid URL, protocol errors) become a connection error.
            handle_transport_error(exc, state, reject, url=url, method=method)
        else:
            if not state.aborted:
                resolve(value)
        finally:
            if guard is not None:
                guard.disarm()

    async def _send(
        self, method: str, url: str, headers: httpx.Headers, body: str | bytes
    ) -> Any:
        if self.client is not None:
            return await self._exchange(self.client, method, url, headers, body)
        async with httpx.AsyncClient() as client:
            return await self._exchange(client, method, url, headers, body)

    async def _exchange(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        headers: httpx.Headers,
        body: str | bytes,
    ) -> Any:
        request = client.build_request(method, url, headers=headers, content=body or None)
        response = await client.send(request, stream=True)
        try:
            logger.debug(f"{method} request to {url} received status {response.status_code}")
            return await read_response(response)
        finally:
            await response.aclose()

    def _log_outcome(self, method: str, url: str, outcome: str, start_time: float) -> None:
        log_structured(
            logger,
            logging.DEBUG,
            f"{method} request to {url} completed with {outcome}",
            method=method,
            url=url,
            outcome=outcome,
            elapsed_ms=round((time.monotonic() - start_time) * 1000, 3),
        )
