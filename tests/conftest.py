"""Shared fixtures: an in-memory transport and sample client declarations."""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Optional

import pytest
from pydantic import BaseModel

from graphbind import MappingDocumentSource


class Book(BaseModel):
    id: str
    name: str
    page_count: Optional[int] = None


class FakeTransport:
    """Transport serving canned payloads and recording every request."""

    def __init__(
        self,
        responses: Optional[list[Any]] = None,
        stream: Optional[list[Any]] = None,
        delay: float = 0.0,
    ):
        self.responses = list(responses or [])
        self.stream = list(stream or [])
        self.delay = delay
        self.requests = []
        self.closed = False
        self.stream_closed = False

    async def execute(self, request):
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def subscribe(self, request) -> AsyncIterator[Any]:
        self.requests.append(request)
        try:
            for item in self.stream:
                await asyncio.sleep(0)
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self.stream_closed = True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def documents():
    return MappingDocumentSource({
        "bookQuery": "query bookDetails($bookId: ID) { bookById(id: $bookId) { id name } }",
        "booksQuery": "query { books { id name } }",
        "bookAdded": "subscription { bookAdded { id name } }",
    })


@pytest.fixture
def book_payload():
    return {"data": {"bookById": {"id": "book-1", "name": "The Art of war"}}, "errors": []}
