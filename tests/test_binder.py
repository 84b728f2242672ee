"""Tests for ResponseBinder decoding and concurrency surfaces."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable
from typing import Any

import pytest

from graphbind import (
    ConfigurationError,
    GraphQLResponse,
    MethodDescriptor,
    RequestError,
    ResponseError,
    ResponseField,
)
from graphbind.runtime.binder import ResponseBinder
from graphbind.runtime.shape import ResponseShapeResolver

from .conftest import Book

METHOD_KEY = "tests.BookClient#getBookById"


def _binder(return_type: Any) -> ResponseBinder:
    method = MethodDescriptor(name="getBookById", method_key=METHOD_KEY)
    return ResponseBinder(method, ResponseShapeResolver().resolve(return_type))


async def _resolved(value):
    return value


async def _failing(error):
    raise error


async def _stream(*items):
    for item in items:
        if isinstance(item, Exception):
            raise item
        yield item


# =============================================================================
# Decoding
# =============================================================================


def test_decodes_retrieved_field():
    field = ResponseField(path="bookById", value={"id": "book-1", "name": "The Art of war"})

    book = _binder(Book).decode(field)

    assert book == Book(id="book-1", name="The Art of war")


def test_null_field_decodes_to_none_or_empty_list():
    field = ResponseField(path="bookById", value=None)

    assert _binder(Book).decode(field) is None
    assert _binder(list[Book]).decode(field) == []


def test_full_response_decodes_single_root_field_in_order():
    response = GraphQLResponse(data={"books": [{"id": "2", "name": "b"}, {"id": "1", "name": "a"}]})

    books = _binder(list[Book]).decode(response)

    assert [book.id for book in books] == ["2", "1"]


def test_full_response_with_several_root_fields_decodes_data():
    response = GraphQLResponse(data={"book": {"id": "1"}, "total": 3})

    assert _binder(dict[str, Any]).decode(response) == {"book": {"id": "1"}, "total": 3}


def test_raw_response_type_returns_response():
    response = GraphQLResponse(data={"book": {"id": "1"}})

    assert _binder(GraphQLResponse).decode(response) is response


@pytest.mark.parametrize("data", [None, {"bookById": {"id": "book-1", "name": "x"}}])
def test_any_error_fails_the_call(data, caplog):
    response = GraphQLResponse.model_validate({
        "data": data,
        "errors": [
            {"message": "not found", "path": ["bookById"]},
            {"message": "second", "path": ["bookById", "name"]},
        ],
    })

    with caplog.at_level(logging.ERROR, logger="graphbind.runtime.binder"):
        with pytest.raises(ResponseError) as exc_info:
            _binder(Book).decode(response)

    assert exc_info.value.message == "not found"
    assert exc_info.value.method_key == METHOD_KEY
    assert len(exc_info.value.errors) == 2
    assert str(exc_info.value) == f"Error while calling Graph API [method: {METHOD_KEY}]: not found"
    assert "not found" in caplog.text and "second" in caplog.text


def test_decode_failure_is_request_error():
    field = ResponseField(path="bookById", value={"id": "book-1"})

    with pytest.raises(RequestError, match="Failed to decode response") as exc_info:
        _binder(Book).decode(field)

    assert exc_info.value.method_key == METHOD_KEY


# =============================================================================
# Concurrency surfaces
# =============================================================================


def test_blocking_resolves_before_returning():
    field = ResponseField(path="bookById", value={"id": "1", "name": "a"})

    assert _binder(Book).bind(_resolved(field)) == Book(id="1", name="a")


def test_blocking_raises_synchronously():
    with pytest.raises(RequestError) as exc_info:
        _binder(Book).bind(_failing(OSError("network down")))

    assert exc_info.value.method_key == METHOD_KEY
    assert isinstance(exc_info.value.__cause__, OSError)


def test_blocking_awaits_release_on_its_loop():
    released = []

    async def release():
        released.append(asyncio.get_running_loop())

    field = ResponseField(path="bookById", value={"id": "1", "name": "a"})

    _binder(Book).bind(_resolved(field), release=release)
    with pytest.raises(RequestError):
        _binder(Book).bind(_failing(OSError("network down")), release=release)

    assert len(released) == 2
    assert all(loop.is_closed() for loop in released)


async def test_async_surface_does_not_release():
    released = []

    async def release():
        released.append(True)

    field = ResponseField(path="bookById", value={"id": "1", "name": "a"})

    assert await _binder(Awaitable[Book]).bind(_resolved(field), release=release) == Book(id="1", name="a")
    assert released == []


async def test_blocking_inside_running_loop_is_rejected():
    with pytest.raises(ConfigurationError, match="running event loop"):
        _binder(Book).bind(_resolved(None))


async def test_single_async_returns_awaitable():
    field = ResponseField(path="bookById", value={"id": "1", "name": "a"})

    pending = _binder(Awaitable[Book]).bind(_resolved(field))

    assert asyncio.iscoroutine(pending)
    assert await pending == Book(id="1", name="a")


async def test_single_async_failure_surfaces_on_await():
    pending = _binder(Awaitable[Book]).bind(_failing(ResponseError("boom", method_key=METHOD_KEY)))

    with pytest.raises(ResponseError, match="boom"):
        await pending


async def test_stream_decodes_items_in_arrival_order():
    items = _stream(*(ResponseField(path="bookAdded", value={"id": str(i), "name": "n"}) for i in range(3)))

    stream = _binder(AsyncIterator[Book]).bind(items)

    assert [book.id async for book in stream] == ["0", "1", "2"]


async def test_stream_failure_surfaces_on_affected_element():
    items = _stream(
        GraphQLResponse(data={"bookAdded": {"id": "1", "name": "a"}}),
        GraphQLResponse.model_validate({"data": None, "errors": [{"message": "denied"}]}),
    )

    stream = _binder(AsyncIterator[Book]).bind(items)

    assert (await stream.__anext__()).id == "1"
    with pytest.raises(ResponseError, match="denied"):
        await stream.__anext__()


async def test_stream_of_single_request_yields_list_elements():
    response = GraphQLResponse(data={"books": [{"id": "1", "name": "a"}, {"id": "2", "name": "b"}]})

    stream = _binder(AsyncIterator[list[Book]]).bind(_resolved(response))

    assert [book.id async for book in stream] == ["1", "2"]


def test_subscription_requires_stream_shape():
    with pytest.raises(ConfigurationError, match="AsyncIterator"):
        _binder(Book).bind(_stream())
