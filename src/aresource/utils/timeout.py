r"""Timeout enforcement for a single exchange.

The guard arms a loop timer. When it fires before the exchange
completes, it marks the exchange as aborted, asks the transport to abort
and reports an ``ApiConnectionError``. Once the abort flag is set, no
other outcome may be reported for the exchange.
"""

from __future__ import annotations

__all__ = ["ExchangeState", "TimeoutGuard"]

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from aresource.utils.exceptions import build_timeout_error

if TYPE_CHECKING:
    from collections.abc import Callable

    from aresource.exceptions import ApiConnectionError

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class ExchangeState:
    """Mutable state private to one in-flight exchange.

    Attributes:
        aborted: Set when the timeout fired and the exchange was aborted.
    """

    aborted: bool = False


class TimeoutGuard:
    """Abort an exchange that does not complete in time.

    Args:
        timeout_ms: The timeout in milliseconds.
        state: The state of the guarded exchange.
        abort: Function asking the transport to abort the exchange.
        on_timeout: Function receiving the timeout error.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresource.utils.timeout import ExchangeState, TimeoutGuard
        >>> async def main():
        ...     state = ExchangeState()
        ...     guard = TimeoutGuard(10, state, abort=lambda: None, on_timeout=print)
        ...     guard.arm()
        ...     await asyncio.sleep(0.05)
        ...     return state.aborted
        ...
        >>> asyncio.run(main())
        Request aborted due to timeout being reached (10ms)
        True

        ```
    """

    def __init__(
        self,
        timeout_ms: float,
        state: ExchangeState,
        *,
        abort: Callable[[], object],
        on_timeout: Callable[[ApiConnectionError], object],
    ) -> None:
        self.timeout_ms = timeout_ms
        self.state = state
        self._abort = abort
        self._on_timeout = on_timeout
        self._handle: asyncio.TimerHandle | None = None

    @property
    def armed(self) -> bool:
        """Indicate if the timer is pending."""
        return self._handle is not None

    def arm(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Start the timer.

        Args:
            loop: The event loop running the exchange. Defaults to the
                running loop.

        Raises:
            RuntimeError: If the guard is already armed.
        """
        if self._handle is not None:
            msg = "TimeoutGuard is already armed"
            raise RuntimeError(msg)
        if loop is None:
            loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout_ms / 1000, self._expire)

    def disarm(self) -> None:
        """Cancel the timer if it is still pending."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _expire(self) -> None:
        self._handle = None
        logger.debug(f"Exchange timed out after {self.timeout_ms}ms, aborting")
        self.state.aborted = True
        self._abort()
        self._on_timeout(build_timeout_error(self.timeout_ms))
