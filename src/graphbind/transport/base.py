"""
Transport protocol - how requests reach a GraphQL endpoint.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, AsyncIterator, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..core.descriptors import RequestDescriptor


@runtime_checkable
class Transport(Protocol):
    """
    Sends requests and returns raw GraphQL response payloads.

    Payloads are {"data": ..., "errors": [...]} dicts. Failures to obtain one
    are raised as TransportError or the underlying client's exceptions.
    """

    async def execute(self, request: RequestDescriptor) -> dict[str, Any]:
        """Send a single request and return its response payload."""
        ...

    def subscribe(self, request: RequestDescriptor) -> AsyncIterator[dict[str, Any]]:
        """Start a subscription and yield each response payload as it arrives."""
        ...

    async def aclose(self) -> None:
        """Release connections held by the transport."""
        ...
