r"""Request body serialization.

The default encoding is ``application/x-www-form-urlencoded`` with
bracket notation for nested values. A resource may install its own
serializer to send any other body, e.g. a multipart upload.
"""

from __future__ import annotations

__all__ = ["serialize_request_data", "stringify_request_data"]

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

if TYPE_CHECKING:
    from collections.abc import Iterator, MutableMapping

    from aresource.core.config import DataSerializer

logger: logging.Logger = logging.getLogger(__name__)


def _flatten(value: Any, key: str) -> Iterator[tuple[str, str]]:
    if isinstance(value, Mapping):
        for name, item in value.items():
            yield from _flatten(item, f"{key}[{name}]")
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            yield from _flatten(item, f"{key}[{index}]")
    elif value is None:
        yield key, ""
    elif isinstance(value, bool):
        yield key, "true" if value else "false"
    else:
        yield key, str(value)


def stringify_request_data(data: Mapping[str, Any] | None) -> str:
    """Encode a payload as a form-encoded string.

    Nested mappings and sequences use bracket notation, booleans are
    written ``true``/``false`` and ``None`` becomes the empty string.

    Args:
        data: The payload to encode.

    Returns:
        The form-encoded body. Empty if ``data`` is empty or ``None``.

    Example:
        ```pycon
        >>> from aresource.utils.serialization import stringify_request_data
        >>> stringify_request_data({"amount": 100, "metadata": {"order": "6735"}})
        'amount=100&metadata%5Border%5D=6735'

        ```
    """
    pairs = [pair for name, value in (data or {}).items() for pair in _flatten(value, str(name))]
    return urlencode(pairs)


def serialize_request_data(
    method: str,
    data: Any,
    headers: MutableMapping[str, str],
    serializer: DataSerializer | None = None,
) -> str | bytes:
    """Convert a payload into the wire body of a request.

    Args:
        method: The HTTP method of the request.
        data: The payload.
        headers: The mutable header overrides of the request. A custom
            serializer may change them, e.g. to set ``Content-Type``.
        serializer: Optional custom serializer. When given, it fully
            replaces the default encoding.

    Returns:
        The wire body.
    """
    if serializer is not None:
        logger.debug(f"Serializing {method} request data with {serializer!r}")
        return serializer(method, data, headers)
    return stringify_request_data(data)
