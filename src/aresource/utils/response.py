r"""HTTP response decoding and classification.

This module provides the decoder that accumulates the body chunks of a
response, parses them as JSON and classifies the result as a success,
an authentication error, a business error or a malformed response.
"""

from __future__ import annotations

__all__ = ["DecoderState", "ResponseDecoder", "read_response"]

import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from aresource.exceptions import (
    AuthenticationError,
    MalformedResponseError,
    generate_error,
)

if TYPE_CHECKING:
    import httpx

logger: logging.Logger = logging.getLogger(__name__)

# Error field values that do not mark the body as an error. Empty
# mappings and lists still do.
_NO_ERROR_VALUES = (None, False, "", 0)


def _is_error_descriptor(value: Any) -> bool:
    return not any(value is empty or value == empty for empty in _NO_ERROR_VALUES)


class DecoderState(Enum):
    """Response decoder states.

    Attributes:
        STREAMING: Body chunks are being accumulated.
        DECODING: The body is complete and being parsed.
        SUCCESS: The body was decoded and carries no error.
        MALFORMED_RESPONSE: The body is not valid JSON.
        BUSINESS_ERROR: The body carries an error descriptor.
        AUTHENTICATION_ERROR: The body carries an error descriptor and
            the status is 401.
    """

    STREAMING = "streaming"
    DECODING = "decoding"
    SUCCESS = "success"
    MALFORMED_RESPONSE = "malformed_response"
    BUSINESS_ERROR = "business_error"
    AUTHENTICATION_ERROR = "authentication_error"


class ResponseDecoder:
    """Accumulate and classify the body of one response.

    A decoded body with an ``error`` field is always an error, whatever
    the HTTP status. Status 401 always yields ``AuthenticationError``;
    any other status yields the business error matching the descriptor
    type.

    Args:
        status_code: The HTTP status code of the response.

    Example:
        ```pycon
        >>> from aresource.utils.response import ResponseDecoder
        >>> decoder = ResponseDecoder(status_code=200)
        >>> decoder.feed('{"id": ')
        >>> decoder.feed('"ch_1"}')
        >>> decoder.finish()
        {'id': 'ch_1'}
        >>> decoder.state
        <DecoderState.SUCCESS: 'success'>

        ```
    """

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        self.state = DecoderState.STREAMING
        self._chunks: list[str] = []

    def feed(self, chunk: str) -> None:
        """Append a body chunk.

        Raises:
            RuntimeError: If the body was already finished.
        """
        if self.state is not DecoderState.STREAMING:
            msg = f"cannot feed a decoder in state {self.state.value}"
            raise RuntimeError(msg)
        self._chunks.append(chunk)

    def finish(self) -> Any:
        """Decode the accumulated body.

        Returns:
            The decoded body.

        Raises:
            RuntimeError: If the body was already finished.
            MalformedResponseError: If the body is not valid JSON.
            AuthenticationError: If the body carries an error and the
                status is 401.
            BusinessError: If the body carries an error descriptor.
        """
        if self.state is not DecoderState.STREAMING:
            msg = f"cannot finish a decoder in state {self.state.value}"
            raise RuntimeError(msg)
        self.state = DecoderState.DECODING
        text = "".join(self._chunks)
        try:
            body = json.loads(text)
        except ValueError as exc:
            self.state = DecoderState.MALFORMED_RESPONSE
            logger.debug(f"Invalid JSON received with status {self.status_code}: {exc}")
            raise MalformedResponseError(
                "Invalid JSON received from the API",
                body=text,
                exception=exc,
                status_code=self.status_code,
            ) from exc

        descriptor = body.get("error") if isinstance(body, dict) else None
        if _is_error_descriptor(descriptor):
            if self.status_code == 401:
                self.state = DecoderState.AUTHENTICATION_ERROR
                if not isinstance(descriptor, dict):
                    descriptor = {"message": str(descriptor)}
                raise AuthenticationError.from_descriptor(descriptor, status_code=401)
            self.state = DecoderState.BUSINESS_ERROR
            raise generate_error(descriptor, status_code=self.status_code)

        self.state = DecoderState.SUCCESS
        return body


async def read_response(response: httpx.Response) -> Any:
    """Stream the body of a response into a decoder.

    Args:
        response: A streamed response.

    Returns:
        The decoded body.

    Raises:
        ApiError: If the body is malformed or carries an error.
        httpx.RequestError: If the transport fails while streaming.
    """
    decoder = ResponseDecoder(response.status_code)
    async for chunk in response.aiter_text():
        decoder.feed(chunk)
    return decoder.finish()
