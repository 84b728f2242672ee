"""
Per-client configuration hooks and request interceptors.

Usage:
    class BookClientConfiguration(ClientConfiguration):

        def headers(self, method):
            def apply(headers):
                headers["Content-Type"] = "application/json"
            return apply

    @graph_client(name="books", url="...", configuration=BookClientConfiguration)
    class BookClient:
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncIterator, Awaitable, Callable, Optional

if TYPE_CHECKING:
    from .core.descriptors import MethodDescriptor, RequestDescriptor
    from .core.wire_types import GraphQLResponse
    from .documents import DocumentSource

HeaderMutator = Callable[[dict[str, str]], None]
InterceptorMutator = Callable[[list["Interceptor"]], None]

CallNext = Callable[["RequestDescriptor"], Awaitable["GraphQLResponse"]]
SubscriptionCallNext = Callable[["RequestDescriptor"], AsyncIterator["GraphQLResponse"]]


class Interceptor:
    """
    Intercepts requests before they reach the transport.

    Interceptors run in list order; each one decides whether and with which
    request to call the next one. Override only the entrypoints you need.
    """

    async def intercept(self, request: RequestDescriptor, call_next: CallNext) -> GraphQLResponse:
        return await call_next(request)

    def intercept_subscription(
        self,
        request: RequestDescriptor,
        call_next: SubscriptionCallNext,
    ) -> AsyncIterator[GraphQLResponse]:
        return call_next(request)


class ClientConfiguration:
    """
    Per-client hook consulted before every call.

    Each method receives the descriptor of the invoked method and returns
    None to leave the defaults untouched.
    """

    def headers(self, method: MethodDescriptor) -> Optional[HeaderMutator]:
        """Return a function that mutates the request headers."""
        return None

    def interceptors(self, method: MethodDescriptor) -> Optional[InterceptorMutator]:
        """Return a function that mutates the interceptor list."""
        return None

    def document_source(self, method: MethodDescriptor) -> Optional[DocumentSource]:
        """Return a document source replacing the client's one for this call."""
        return None
