from __future__ import annotations

import json

import httpx
import pytest

from aresource.exceptions import (
    AuthenticationError,
    BusinessError,
    CardError,
    InvalidRequestError,
    MalformedResponseError,
)
from aresource.utils.response import DecoderState, ResponseDecoder, read_response

#####################################
#     Tests for ResponseDecoder     #
#####################################


def test_response_decoder_success() -> None:
    decoder = ResponseDecoder(status_code=200)
    assert decoder.state is DecoderState.STREAMING
    decoder.feed('{"id":"x"}')
    assert decoder.finish() == {"id": "x"}
    assert decoder.state is DecoderState.SUCCESS


def test_response_decoder_accumulates_chunks() -> None:
    decoder = ResponseDecoder(status_code=200)
    for chunk in ('{"object": "list", ', '"data": [1, ', "2]}"):
        decoder.feed(chunk)
    assert decoder.finish() == {"object": "list", "data": [1, 2]}


def test_response_decoder_success_non_object_body() -> None:
    decoder = ResponseDecoder(status_code=200)
    decoder.feed("[1, 2]")
    assert decoder.finish() == [1, 2]


def test_response_decoder_malformed_body() -> None:
    decoder = ResponseDecoder(status_code=502)
    decoder.feed("<html>Bad Gateway</html>")
    with pytest.raises(
        MalformedResponseError, match="Invalid JSON received from the API"
    ) as exc_info:
        decoder.finish()
    assert exc_info.value.body == "<html>Bad Gateway</html>"
    assert isinstance(exc_info.value.exception, json.JSONDecodeError)
    assert exc_info.value.status_code == 502
    assert decoder.state is DecoderState.MALFORMED_RESPONSE


def test_response_decoder_empty_body_is_malformed() -> None:
    decoder = ResponseDecoder(status_code=200)
    with pytest.raises(MalformedResponseError) as exc_info:
        decoder.finish()
    assert exc_info.value.body == ""


@pytest.mark.parametrize(
    ("type_tag", "cls"), [("card_error", CardError), ("invalid_request_error", InvalidRequestError)]
)
def test_response_decoder_business_error(type_tag: str, cls: type[BusinessError]) -> None:
    decoder = ResponseDecoder(status_code=402)
    decoder.feed(json.dumps({"error": {"type": type_tag, "message": "Declined"}}))
    with pytest.raises(cls, match="Declined") as exc_info:
        decoder.finish()
    assert exc_info.value.status_code == 402
    assert decoder.state is DecoderState.BUSINESS_ERROR


def test_response_decoder_error_field_wins_over_success_status() -> None:
    decoder = ResponseDecoder(status_code=200)
    decoder.feed(json.dumps({"error": {"type": "api_error", "message": "Oops"}}))
    with pytest.raises(BusinessError, match="Oops"):
        decoder.finish()


@pytest.mark.parametrize("type_tag", ["card_error", "invalid_request_error", "unknown"])
def test_response_decoder_401_is_authentication_error(type_tag: str) -> None:
    decoder = ResponseDecoder(status_code=401)
    decoder.feed(json.dumps({"error": {"type": type_tag, "message": "Invalid API Key"}}))
    with pytest.raises(AuthenticationError, match="Invalid API Key") as exc_info:
        decoder.finish()
    assert not isinstance(exc_info.value, BusinessError)
    assert exc_info.value.status_code == 401
    assert exc_info.value.type == type_tag
    assert decoder.state is DecoderState.AUTHENTICATION_ERROR


def test_response_decoder_401_with_string_descriptor() -> None:
    decoder = ResponseDecoder(status_code=401)
    decoder.feed('{"error": "unauthorized"}')
    with pytest.raises(AuthenticationError, match="unauthorized"):
        decoder.finish()


def test_response_decoder_401_without_error_is_success() -> None:
    decoder = ResponseDecoder(status_code=401)
    decoder.feed('{"id": "x"}')
    assert decoder.finish() == {"id": "x"}


@pytest.mark.parametrize("error", ["null", "false", '""', "0"])
def test_response_decoder_falsy_error_is_success(error: str) -> None:
    decoder = ResponseDecoder(status_code=200)
    decoder.feed(f'{{"id": "x", "error": {error}}}')
    assert decoder.finish() == {"id": "x", "error": json.loads(error)}
    assert decoder.state is DecoderState.SUCCESS


@pytest.mark.parametrize("error", ["{}", "[]"])
def test_response_decoder_empty_error_401_is_authentication_error(error: str) -> None:
    decoder = ResponseDecoder(status_code=401)
    decoder.feed(f'{{"error": {error}}}')
    with pytest.raises(AuthenticationError) as exc_info:
        decoder.finish()
    assert exc_info.value.status_code == 401
    assert decoder.state is DecoderState.AUTHENTICATION_ERROR


@pytest.mark.parametrize("error", ["{}", "[]"])
def test_response_decoder_empty_error_is_business_error(error: str) -> None:
    decoder = ResponseDecoder(status_code=400)
    decoder.feed(f'{{"error": {error}}}')
    with pytest.raises(BusinessError) as exc_info:
        decoder.finish()
    assert exc_info.value.status_code == 400
    assert decoder.state is DecoderState.BUSINESS_ERROR


def test_response_decoder_feed_after_finish_raises() -> None:
    decoder = ResponseDecoder(status_code=200)
    decoder.feed("{}")
    decoder.finish()
    with pytest.raises(RuntimeError, match="cannot feed a decoder in state success"):
        decoder.feed("{}")


def test_response_decoder_finish_twice_raises() -> None:
    decoder = ResponseDecoder(status_code=200)
    decoder.feed("{}")
    decoder.finish()
    with pytest.raises(RuntimeError, match="cannot finish a decoder in state success"):
        decoder.finish()


###################################
#     Tests for read_response     #
###################################


@pytest.mark.asyncio
async def test_read_response() -> None:
    response = httpx.Response(200, content=b'{"id": "x"}')
    assert await read_response(response) == {"id": "x"}


@pytest.mark.asyncio
async def test_read_response_streamed_chunks() -> None:
    async def chunks():
        for chunk in (b'{"id"', b': "x"', b"}"):
            yield chunk

    response = httpx.Response(200, content=chunks())
    assert await read_response(response) == {"id": "x"}


@pytest.mark.asyncio
async def test_read_response_authentication_error() -> None:
    response = httpx.Response(401, json={"error": {"message": "Invalid API Key"}})
    with pytest.raises(AuthenticationError):
        await read_response(response)
