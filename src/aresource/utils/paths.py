r"""URL path templating and composition.

Path templates use ``{name}`` placeholders that are substituted with the
URL-encoded value of the matching parameter. Composed paths always use
forward slashes and never contain empty segments.
"""

from __future__ import annotations

__all__ = ["compose_path", "interpolate_path", "make_url_interpolator"]

import re
from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    CommandPath = str | Callable[[dict[str, str]], str]

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def interpolate_path(template: str, params: Mapping[str, str]) -> str:
    """Substitute the placeholders of a path template.

    Args:
        template: The path template, e.g. ``"customers/{customer}/cards"``.
        params: The value of each placeholder.

    Returns:
        The path with every placeholder replaced by its URL-encoded value.
            A value of ``.`` or ``..`` is encoded as ``%2E`` / ``%2E%2E`` so
            it stays a literal segment.

    Raises:
        ValueError: If a placeholder has no entry in ``params``. This is a
            programming error in the resource definition.

    Example:
        ```pycon
        >>> from aresource.utils.paths import interpolate_path
        >>> interpolate_path("customers/{customer}/cards", {"customer": "cus_1"})
        'customers/cus_1/cards'

        ```
    """

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in params:
            msg = f"missing URL parameter {name!r} for path template {template!r}"
            raise ValueError(msg)
        value = quote(str(params[name]), safe="")
        if value in (".", ".."):
            # dot segments must not reach compose_path as navigation
            value = value.replace(".", "%2E")
        return value

    return _PLACEHOLDER.sub(replace, template)


def make_url_interpolator(template: str) -> Callable[[Mapping[str, str]], str]:
    """Return a function that interpolates ``template`` with its
    argument.

    Example:
        ```pycon
        >>> from aresource.utils.paths import make_url_interpolator
        >>> base_path = make_url_interpolator("/v1/accounts/{account}")
        >>> base_path({"account": "acct_1"})
        '/v1/accounts/acct_1'

        ```
    """

    def interpolator(params: Mapping[str, str]) -> str:
        return interpolate_path(template, params)

    return interpolator


def compose_path(
    base_path: str,
    resource_path: str,
    command_path: CommandPath = "",
    url_data: Mapping[str, str] | None = None,
) -> str:
    """Join a base path, a resource path and a command path.

    ``command_path`` may be a function; it is then called with a copy of
    ``url_data`` and its result is used as the segment. Backslashes are
    treated as separators, ``.`` segments are dropped and ``..`` segments
    remove the previous segment.

    Args:
        base_path: The API base path, e.g. ``"/v1/"``.
        resource_path: The resource path, e.g. ``"charges"``.
        command_path: The per-call path or a function returning it.
        url_data: The parameters handed to a callable ``command_path``.

    Returns:
        The normalized absolute path. ``"/"`` if every segment is empty.

    Example:
        ```pycon
        >>> from aresource.utils.paths import compose_path
        >>> compose_path("/v1/", "charges", "ch_1/refund")
        '/v1/charges/ch_1/refund'
        >>> compose_path("/v1/", "customers", lambda data: data["id"], {"id": "cus_1"})
        '/v1/customers/cus_1'

        ```
    """
    if callable(command_path):
        command_path = command_path(dict(url_data or {}))
    parts: list[str] = []
    for segment in (base_path, resource_path, command_path):
        for part in segment.replace("\\", "/").split("/"):
            if part in ("", "."):
                continue
            if part == "..":
                if parts:
                    parts.pop()
                continue
            parts.append(part)
    return "/" + "/".join(parts)
