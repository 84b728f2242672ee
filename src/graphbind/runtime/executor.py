"""
Request executor - dispatches RequestDescriptors through the transport.

Handles:
- Single requests vs. subscriptions (transport execute / subscribe)
- Full responses vs. retrieval scoped to a field path
- The interceptor chain around the transport
- Wrapping transport failures into RequestError
"""

from __future__ import annotations

import functools
import logging
from typing import Any, AsyncIterator, Awaitable, Union

from pydantic import ValidationError as PydanticValidationError

from ..core.descriptors import MethodDescriptor, RequestDescriptor
from ..core.errors import FieldAccessError, GraphBindError, RequestError
from ..core.wire_types import GraphQLResponse, ResponseField
from ..transport.base import Transport

logger = logging.getLogger(__name__)

SingleResult = Awaitable[Union[GraphQLResponse, ResponseField]]
StreamResult = AsyncIterator[Union[GraphQLResponse, ResponseField]]


class RequestExecutor:
    """
    Executes requests against a transport.

    Usage:
        executor = RequestExecutor(transport)
        response = await executor.execute(request)
        field = await executor.retrieve(request, "bookById")
        async for response in executor.execute_subscription(request):
            ...
    """

    def __init__(self, transport: Transport):
        """
        Initialize executor.

        Args:
            transport: Transport used to reach the GraphQL endpoint
        """
        self.transport = transport

    def dispatch(
        self,
        method: MethodDescriptor,
        request: RequestDescriptor,
    ) -> Union[SingleResult, StreamResult]:
        """
        Pick the dispatch variant declared by the method.

        Returns:
            An awaitable for single requests, an async iterator for subscriptions;
            items are ResponseField when a retrieve path is declared, else GraphQLResponse
        """
        path = method.retrieve_path
        if path:
            logger.debug(f"Using retrievePath declared on {method.method_key}: [{path}]")
            if method.is_subscription:
                return self.retrieve_subscription(request, path)
            return self.retrieve(request, path)

        if method.is_subscription:
            logger.debug(f"No retrievePath declared on {method.method_key}, executing subscription")
            return self.execute_subscription(request)
        logger.debug(f"No retrievePath declared on {method.method_key}, executing request")
        return self.execute(request)

    async def execute(self, request: RequestDescriptor) -> GraphQLResponse:
        """Execute a single request and return the full response."""
        call = self._execute_transport
        for interceptor in reversed(request.interceptors):
            call = functools.partial(interceptor.intercept, call_next=call)
        try:
            return await call(request)
        except GraphBindError:
            raise
        except Exception as e:
            raise RequestError(str(e), method_key=request.method_key) from e

    async def execute_subscription(self, request: RequestDescriptor) -> AsyncIterator[GraphQLResponse]:
        """Execute a subscription and yield every response."""
        call = self._subscribe_transport
        for interceptor in reversed(request.interceptors):
            call = functools.partial(interceptor.intercept_subscription, call_next=call)

        try:
            stream = call(request)
        except GraphBindError:
            raise
        except Exception as e:
            raise RequestError(str(e), method_key=request.method_key) from e

        try:
            while True:
                try:
                    response = await stream.__anext__()
                except StopAsyncIteration:
                    break
                except GraphBindError:
                    raise
                except Exception as e:
                    raise RequestError(str(e), method_key=request.method_key) from e
                yield response
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    async def retrieve(self, request: RequestDescriptor, path: str) -> ResponseField:
        """Execute a single request and return the field at path."""
        response = await self.execute(request)
        return self._access_field(request, response, path)

    async def retrieve_subscription(self, request: RequestDescriptor, path: str) -> AsyncIterator[ResponseField]:
        """Execute a subscription and yield the field at path of every response."""
        responses = self.execute_subscription(request)
        try:
            async for response in responses:
                yield self._access_field(request, response, path)
        finally:
            await responses.aclose()

    async def _execute_transport(self, request: RequestDescriptor) -> GraphQLResponse:
        payload = await self.transport.execute(request)
        return self._parse(request, payload)

    async def _subscribe_transport(self, request: RequestDescriptor) -> AsyncIterator[GraphQLResponse]:
        payloads = self.transport.subscribe(request)
        try:
            async for payload in payloads:
                yield self._parse(request, payload)
        finally:
            aclose = getattr(payloads, "aclose", None)
            if aclose is not None:
                await aclose()

    @staticmethod
    def _parse(request: RequestDescriptor, payload: Any) -> GraphQLResponse:
        if isinstance(payload, GraphQLResponse):
            return payload
        try:
            return GraphQLResponse.model_validate(payload)
        except PydanticValidationError as e:
            raise RequestError(f"Invalid GraphQL response: {e}", method_key=request.method_key) from e

    @staticmethod
    def _access_field(request: RequestDescriptor, response: GraphQLResponse, path: str) -> ResponseField:
        """
        Navigate to path, failing if the response is invalid or the field has errors.

        Raises:
            FieldAccessError: If the response has no data or errors touch the field
        """
        field = response.field(path)
        if response.is_valid and not field.errors:
            return field

        errors = field.errors or response.errors
        for error in errors:
            logger.error(
                f"Error while calling Graph API [method: {request.method_key}]: "
                f"Errors [path: {error.parsed_path}, message: {error.message}]"
            )
        message = errors[0].message if errors else f"Invalid field '{path}'"
        raise FieldAccessError(message, path=path, method_key=request.method_key, errors=errors)
