r"""Exception hierarchy for errors reported by a resource request.

Every request produces exactly one outcome. Failures are delivered as
instances of the classes below:

- ApiConnectionError: the exchange timed out or the transport failed
- AuthenticationError: the credential was rejected (HTTP 401)
- MalformedResponseError: the response body is not valid JSON
- BusinessError: the API understood the request but reports a failure

Business errors are dispatched on the ``type`` tag of the server error
descriptor. Known tags map to dedicated subclasses and unknown tags fall
back to ``BusinessError`` itself.

Example:
    ```pycon
    >>> from aresource.exceptions import CardError, generate_error
    >>> error = generate_error({"type": "card_error", "message": "Card declined"})
    >>> isinstance(error, CardError)
    True
    >>> error.message
    'Card declined'

    ```
"""

from __future__ import annotations

__all__ = [
    "ApiConnectionError",
    "ApiError",
    "ApiServerError",
    "AuthenticationError",
    "BusinessError",
    "CardError",
    "InvalidRequestError",
    "MalformedResponseError",
    "generate_error",
    "register_error_kind",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from typing import Self


class ApiError(Exception):
    """Base class for every error delivered by a resource request.

    Args:
        message: A descriptive error message.
        status_code: The HTTP status code of the response, if any.
        raw: The error descriptor returned by the API, if any.
        cause: The underlying exception, if any.

    Attributes:
        message: The error message.
        status_code: The HTTP status code of the response, if any.
        raw: The error descriptor returned by the API (empty if none).
        cause: The underlying exception, if any.
        type: The ``type`` field of the error descriptor.
        code: The ``code`` field of the error descriptor.
        param: The ``param`` field of the error descriptor.
        detail: The ``detail`` field of the error descriptor.

    Example:
        ```pycon
        >>> from aresource.exceptions import ApiError
        >>> error = ApiError("Something went wrong", status_code=500)
        >>> error.status_code
        500

        ```
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        raw: Mapping[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.raw: dict[str, Any] = dict(raw) if raw else {}
        self.cause = cause
        self.type: str | None = self.raw.get("type")
        self.code: str | None = self.raw.get("code")
        self.param: str | None = self.raw.get("param")
        self.detail: Any = self.raw.get("detail")

    @classmethod
    def from_descriptor(
        cls, descriptor: Mapping[str, Any], status_code: int | None = None
    ) -> Self:
        """Create an error from an API error descriptor.

        Args:
            descriptor: The ``error`` object of a decoded response.
            status_code: The HTTP status code of the response.

        Returns:
            The error instance.
        """
        message = descriptor.get("message") or f"{cls.__name__} returned by the API"
        return cls(str(message), status_code=status_code, raw=descriptor)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code})"


class AuthenticationError(ApiError):
    """Raised when the API rejects the credential (HTTP 401)."""


class ApiConnectionError(ApiError):
    """Raised when the exchange times out or the transport fails.

    The underlying exception is available as ``cause``. For timeouts it
    is a ``TimeoutError`` whose ``errno`` is ``errno.ETIMEDOUT``.
    """


class MalformedResponseError(ApiError):
    """Raised when the response body cannot be decoded as JSON.

    Args:
        message: A descriptive error message.
        body: The raw response text.
        exception: The exception raised by the JSON decoder.
        status_code: The HTTP status code of the response.
    """

    def __init__(
        self,
        message: str,
        *,
        body: str,
        exception: Exception,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, cause=exception)
        self.body = body
        self.exception = exception


class BusinessError(ApiError):
    """Raised when the API reports a semantic failure.

    Subclasses registered with ``register_error_kind`` are selected by
    the ``type`` tag of the error descriptor.
    """

    kind: str | None = None

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        raw: Mapping[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, raw=raw, cause=cause)
        if self.kind is None:
            self.kind = self.type


_ERROR_KINDS: dict[str, type[BusinessError]] = {}


def register_error_kind(
    type_tag: str,
) -> Callable[[type[BusinessError]], type[BusinessError]]:
    """Register a business error class for a server type tag.

    Args:
        type_tag: The value of the ``type`` field of the error descriptor.

    Returns:
        A class decorator that registers the decorated class.

    Raises:
        TypeError: If the decorated class is not a ``BusinessError``.

    Example:
        ```pycon
        >>> from aresource.exceptions import BusinessError, generate_error, register_error_kind
        >>> @register_error_kind("rate_limit_error")
        ... class RateLimitError(BusinessError):
        ...     pass
        ...
        >>> type(generate_error({"type": "rate_limit_error"})).__name__
        'RateLimitError'

        ```
    """

    def decorator(cls: type[BusinessError]) -> type[BusinessError]:
        if not issubclass(cls, BusinessError):
            msg = f"error kinds must subclass BusinessError, got {cls!r}"
            raise TypeError(msg)
        cls.kind = type_tag
        _ERROR_KINDS[type_tag] = cls
        return cls

    return decorator


@register_error_kind("card_error")
class CardError(BusinessError):
    """Raised when a card cannot be charged."""


@register_error_kind("invalid_request_error")
class InvalidRequestError(BusinessError):
    """Raised when the request has invalid parameters."""


@register_error_kind("api_error")
class ApiServerError(BusinessError):
    """Raised when the API reports an internal problem."""


def generate_error(descriptor: Any, status_code: int | None = None) -> BusinessError:
    """Build the business error matching an error descriptor.

    Args:
        descriptor: The ``error`` value of a decoded response. A value
            that is not a mapping is used as the message.
        status_code: The HTTP status code of the response.

    Returns:
        An instance of the class registered for the descriptor type, or
        ``BusinessError`` if the type is unknown.
    """
    if not isinstance(descriptor, dict):
        descriptor = {"message": str(descriptor)}
    cls = _ERROR_KINDS.get(descriptor.get("type"), BusinessError)
    return cls.from_descriptor(descriptor, status_code=status_code)
