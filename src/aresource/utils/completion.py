r"""Bridge between the deferred result of a request and an optional
``(error, value)`` completion callback.

The deferred is an ``asyncio.Future``. Callbacks are attached with
``Future.add_done_callback``, so they always run on a later turn of the
event loop and never inside the stack frame that settled the future.
"""

from __future__ import annotations

__all__ = ["create_deferred", "reject_deferred", "resolve_deferred"]

import asyncio
import logging
from functools import partial
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    CompletionCallback = Callable[[BaseException | None, Any], None]

logger: logging.Logger = logging.getLogger(__name__)


def _deliver(callback: CompletionCallback, future: asyncio.Future[Any]) -> None:
    if future.cancelled():
        callback(asyncio.CancelledError(), None)
        return
    error = future.exception()
    if error is not None:
        callback(error, None)
    else:
        callback(None, future.result())


def create_deferred(
    callback: CompletionCallback | None = None,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> asyncio.Future[Any]:
    """Create the deferred result of a request.

    Args:
        callback: Optional function called exactly once with
            ``(None, value)`` on success or ``(error, None)`` on failure.
        loop: The event loop owning the future. Defaults to the running
            loop.

    Returns:
        A pending future.

    Raises:
        RuntimeError: If no loop is given and none is running.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresource.utils.completion import create_deferred, resolve_deferred
        >>> async def main():
        ...     deferred = create_deferred(lambda error, value: print(error, value))
        ...     resolve_deferred(deferred, {"id": "ch_1"})
        ...     await asyncio.sleep(0)
        ...
        >>> asyncio.run(main())
        None {'id': 'ch_1'}

        ```
    """
    if loop is None:
        loop = asyncio.get_running_loop()
    future = loop.create_future()
    if callback is not None:
        future.add_done_callback(partial(_deliver, callback))
    return future


def resolve_deferred(future: asyncio.Future[Any], value: Any) -> bool:
    """Resolve a deferred unless it is already settled.

    Returns:
        ``True`` if the value was delivered, ``False`` if it was dropped.
    """
    if future.done():
        logger.debug("Dropping value for an already settled request")
        return False
    future.set_result(value)
    return True


def reject_deferred(future: asyncio.Future[Any], error: BaseException) -> bool:
    """Reject a deferred unless it is already settled.

    Returns:
        ``True`` if the error was delivered, ``False`` if it was dropped.
    """
    if future.done():
        logger.debug(f"Dropping {type(error).__name__} for an already settled request")
        return False
    future.set_exception(error)
    return True
