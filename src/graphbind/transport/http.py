"""
HTTP transport for GraphQL endpoints.

Single requests are POSTed as JSON. Subscriptions use the GraphQL over
Server-Sent Events protocol (distinct connections mode): the request is
POSTed with "Accept: text/event-stream" and every "next" event carries one
response payload until a "complete" event ends the stream.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping, Optional

import httpx

from ..core.errors import TransportError
from .http_logging import HttpLogger

if TYPE_CHECKING:
    from ..core.descriptors import RequestDescriptor

logger = logging.getLogger(__name__)

GRAPHQL_CONTENT_TYPES = ("application/json", "application/graphql-response+json")


class HttpTransport:
    """
    httpx-based transport.

    Usage:
        transport = HttpTransport("http://localhost:8080/graphql")
        payload = await transport.execute(request)
        async for payload in transport.subscribe(request):
            ...
        await transport.close()
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        headers: Optional[Mapping[str, str]] = None,
        verify: bool = True,
        http_logger: Optional[HttpLogger] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize transport.

        Args:
            url: Absolute URL of the GraphQL endpoint
            timeout: HTTP request timeout in seconds
            headers: Headers sent with every request
            verify: Verify TLS certificates; False accepts self-signed certificates
            http_logger: Logger for request/response exchanges
            client: Preconfigured client to use instead of creating one
        """
        self.url = url
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.verify = verify
        self.http_logger = http_logger or HttpLogger()
        self._client = client
        self._owns_client = client is None
        self._client_loop: Optional[asyncio.AbstractEventLoop] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client for the running event loop."""
        if not self._owns_client:
            return self._client

        loop = asyncio.get_running_loop()
        if self._client is None or self._client_loop is not loop:
            if self._client is not None:
                # Connections of a client created on a finished loop cannot be reused
                logger.debug(f"Event loop changed, creating a new HTTP client for {self.url}")
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.headers,
                verify=self.verify,
                event_hooks=self.http_logger.event_hooks(),
            )
            self._client_loop = loop
        return self._client

    async def close(self):
        """Close the HTTP client if this transport created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
            self._client_loop = None

    async def aclose(self) -> None:
        await self.close()

    async def execute(self, request: RequestDescriptor) -> dict[str, Any]:
        """
        POST a request and return the GraphQL response payload.

        Raises:
            TransportError: If the endpoint is unreachable or answers without a GraphQL payload
        """
        client = await self._get_client()

        try:
            response = await client.post(
                self.url,
                json=request.to_request().to_payload(),
                headers={"Accept": ", ".join(GRAPHQL_CONTENT_TYPES), **request.headers},
            )
        except httpx.RequestError as e:
            raise TransportError(url=self.url, status_code=0, message=str(e)) from e

        payload = self._graphql_payload(response)
        if payload is None:
            raise TransportError(url=self.url, status_code=response.status_code, message=response.text)
        return payload

    async def subscribe(self, request: RequestDescriptor) -> AsyncIterator[dict[str, Any]]:
        """
        Start a subscription and yield each payload as it arrives.

        Raises:
            TransportError: If the stream cannot be opened or carries invalid data
        """
        client = await self._get_client()
        headers = {"Accept": "text/event-stream", **request.headers}

        try:
            async with client.stream(
                "POST",
                self.url,
                json=request.to_request().to_payload(),
                headers=headers,
                timeout=httpx.Timeout(self.timeout, read=None),
            ) as response:
                content_type = response.headers.get("content-type", "")
                if not content_type.startswith("text/event-stream"):
                    # Servers answer request errors with a plain GraphQL response
                    await response.aread()
                    payload = self._graphql_payload(response)
                    if payload is None:
                        raise TransportError(url=self.url, status_code=response.status_code, message=response.text)
                    yield payload
                    return

                async for event, data in _iter_sse_events(response):
                    if event == "complete":
                        logger.debug(f"Subscription to {self.url} completed")
                        return
                    if event in ("next", "message") and data:
                        try:
                            yield json.loads(data)
                        except ValueError as e:
                            raise TransportError(url=self.url, status_code=response.status_code,
                                                 message=f"Invalid event data: {data[:100]}") from e
        except httpx.RequestError as e:
            raise TransportError(url=self.url, status_code=0, message=str(e)) from e

    @staticmethod
    def _graphql_payload(response: httpx.Response) -> Optional[dict[str, Any]]:
        """Response body if it is a GraphQL response, whatever the status code."""
        content_type = response.headers.get("content-type", "")
        if not content_type.startswith(GRAPHQL_CONTENT_TYPES):
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict) or ("data" not in body and "errors" not in body):
            return None
        if response.status_code != 200:
            logger.debug(f"GraphQL response with status {response.status_code} from {response.url}")
        return body


async def _iter_sse_events(response: httpx.Response) -> AsyncIterator[tuple[str, str]]:
    """Parse a Server-Sent Events stream into (event, data) pairs."""
    event = "message"
    data_lines: list[str] = []
    async for line in response.aiter_lines():
        if not line:
            if data_lines or event != "message":
                yield event, "\n".join(data_lines)
            event = "message"
            data_lines = []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        value = value[1:] if value.startswith(" ") else value
        if name == "event":
            event = value
        elif name == "data":
            data_lines.append(value)
    if data_lines:
        yield event, "\n".join(data_lines)
