r"""Configuration and validation shared by resources and the request
executor."""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_PATH",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_HOST",
    "SUPPORTED_METHODS",
    "TIMEOUT_ERROR_CODE",
    "ApiSettings",
    "RequestOptions",
    "ResourceConfig",
    "validate_method",
    "validate_timeout_ms",
]

from aresource.core.config import (
    DEFAULT_BASE_PATH,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_HOST,
    TIMEOUT_ERROR_CODE,
    ApiSettings,
    RequestOptions,
    ResourceConfig,
)
from aresource.core.validation import (
    SUPPORTED_METHODS,
    validate_method,
    validate_timeout_ms,
)
