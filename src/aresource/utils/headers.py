r"""Outgoing header assembly."""

from __future__ import annotations

__all__ = ["build_headers"]

from typing import TYPE_CHECKING

import httpx

from aresource.core.config import DEFAULT_CONTENT_TYPE

if TYPE_CHECKING:
    from collections.abc import Mapping

    from aresource.core.config import ApiSettings


async def build_headers(
    settings: ApiSettings,
    *,
    auth: str | None = None,
    overrides: Mapping[str, str] | None = None,
) -> httpx.Headers:
    """Build the headers of a request.

    The defaults are ``Accept``, ``Content-Type`` and a ``Bearer``
    authorization built from ``auth`` (or the settings credential when
    ``auth`` is ``None``). The API version header is added when a version
    is configured and the client identifier header is always added.
    ``overrides`` are applied last and win over every computed value,
    whatever their case.

    Args:
        settings: The settings supplying the credential, the API version
            and the client identifier.
        auth: Optional credential for this request.
        overrides: Optional header overrides.

    Returns:
        The final headers.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresource.core.config import ApiSettings
        >>> from aresource.utils.headers import build_headers
        >>> settings = ApiSettings(api_key="sk_test_123", client_identifier="{}")
        >>> headers = asyncio.run(build_headers(settings))
        >>> headers["Authorization"]
        'Bearer sk_test_123'

        ```
    """
    headers = httpx.Headers(
        {
            "Accept": "application/json",
            "Content-Type": DEFAULT_CONTENT_TYPE,
        }
    )
    token = auth if auth is not None else settings.get_auth_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    api_version = settings.get_api_version()
    if api_version:
        headers[settings.version_header] = api_version
    headers[settings.client_identifier_header] = await settings.get_client_identifier()
    if overrides:
        headers.update(overrides)
    return headers
