"""
Response binder - decodes dispatched responses into a method's declared shape.

Handles:
- Decoding retrieved fields and full responses with pydantic TypeAdapters
- Failing on any GraphQL error in a full response, even with data present
- Handing the result over as a value, an awaitable or an async iterator
"""

from __future__ import annotations

import asyncio
import collections.abc
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..core.descriptors import Concurrency, MethodDescriptor, ResponseShape
from ..core.errors import ConfigurationError, GraphBindError, RequestError, ResponseError
from ..core.wire_types import GraphQLResponse, ResponseField

logger = logging.getLogger(__name__)

Dispatched = Union[Awaitable[Any], AsyncIterator[Any]]
Release = Callable[[], Awaitable[None]]


class ResponseBinder:
    """
    Binds the responses of one method to its ResponseShape.

    Usage:
        binder = ResponseBinder(method, shape)
        result = binder.bind(executor.dispatch(method, request))
    """

    def __init__(self, method: MethodDescriptor, shape: ResponseShape):
        """
        Initialize binder.

        Args:
            method: Descriptor of the bound method
            shape: Resolved shape of the method's return type
        """
        self.method = method
        self.shape = shape

    @property
    def method_key(self) -> str:
        return self.method.method_key

    def bind(self, dispatched: Dispatched, release: Optional[Release] = None) -> Any:
        """
        Hand the dispatched request over according to the method's concurrency.

        Args:
            dispatched: Awaitable (single request) or async iterator (subscription)
                of GraphQLResponse / ResponseField items
            release: Awaited before a blocking call returns, on the loop the call ran on

        Returns:
            The decoded value (blocking), an awaitable of it (single async) or
            an async iterator of decoded values (stream async)
        """
        concurrency = self.shape.concurrency

        if concurrency == Concurrency.STREAM_ASYNC:
            if isinstance(dispatched, collections.abc.AsyncIterator):
                return self._decode_stream(dispatched)
            return self._single_as_stream(dispatched)

        if isinstance(dispatched, collections.abc.AsyncIterator):
            # Subscriptions are only bound to stream shapes at client construction
            raise ConfigurationError(
                "Subscriptions require an AsyncIterator return type",
                method_key=self.method_key,
            )

        if concurrency == Concurrency.SINGLE_ASYNC:
            return self._decode_single(dispatched)
        return self.run_blocking(dispatched, release)

    def run_blocking(self, dispatched: Awaitable[Any], release: Optional[Release] = None) -> Any:
        """
        Resolve a dispatched request on a private event loop and decode it.

        release is awaited on that loop before it closes.

        Raises:
            ConfigurationError: If called from a running event loop
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self._decode_blocking(dispatched, release))

        if isinstance(dispatched, collections.abc.Coroutine):
            dispatched.close()
        raise ConfigurationError(
            "Blocking client method called from a running event loop; "
            "declare it with an Awaitable return type or as async def",
            method_key=self.method_key,
        )

    def decode(self, item: Union[GraphQLResponse, ResponseField]) -> Any:
        """
        Decode one response item into the shape's element type (or list of it).

        Raises:
            ResponseError: If a full response carries errors
            RequestError: If the data does not match the declared type
        """
        if isinstance(item, ResponseField):
            return self._decode_value(item.value)

        if item.errors:
            for error in item.errors:
                logger.error(
                    f"Error while calling Graph API [method: {self.method_key}]: "
                    f"Errors [path: {error.parsed_path}, message: {error.message}]"
                )
            raise ResponseError(item.errors[0].message, method_key=self.method_key, errors=item.errors)

        if self.shape.element_type is GraphQLResponse:
            return item

        data = item.data
        if isinstance(data, dict) and len(data) == 1:
            # Single root field: decode its value
            data = next(iter(data.values()))
        return self._decode_value(data)

    def _decode_value(self, value: Any) -> Any:
        if value is None:
            return [] if self.shape.is_list else None
        try:
            return self.shape.adapter.validate_python(value)
        except PydanticValidationError as e:
            raise RequestError(f"Failed to decode response: {e}", method_key=self.method_key) from e

    async def _decode_single(self, dispatched: Awaitable[Any]) -> Any:
        try:
            item = await dispatched
        except GraphBindError:
            raise
        except Exception as e:
            raise RequestError(str(e), method_key=self.method_key) from e
        return self.decode(item)

    async def _decode_blocking(self, dispatched: Awaitable[Any], release: Optional[Release]) -> Any:
        try:
            return await self._decode_single(dispatched)
        finally:
            if release is not None:
                await release()

    async def _decode_stream(self, dispatched: AsyncIterator[Any]) -> AsyncIterator[Any]:
        try:
            async for item in dispatched:
                yield self.decode(item)
        finally:
            aclose = getattr(dispatched, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _single_as_stream(self, dispatched: Awaitable[Any]) -> AsyncIterator[Any]:
        """Stream a single response: the value once, or list elements one by one."""
        value = await self._decode_single(dispatched)
        if self.shape.is_list:
            for element in value:
                yield element
        else:
            yield value
