"""
Declarations for graphbind clients.

A client is a plain class whose methods are stubs decorated with graph_request.
Parameter roles are attached with typing.Annotated markers:

    @graph_client(name="books", url="http://localhost:8080/graphql")
    class BookClient:

        @graph_request(document_name="bookQuery", retrieve_path="bookById")
        def get_book_by_id(self, book_id: Annotated[str, Variable("bookId")]) -> Book:
            ...

        @graph_request(retrieve_path="books")
        async def find_books(
            self,
            document: Annotated[str, Document()],
            tenant: Annotated[str, Header("X-Tenant")],
        ) -> list[Book]:
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

# Effective name given to a Document parameter that carries a document name
DOCUMENT_NAME = "documentName"

REQUEST_ATTR = "__graph_request__"
CLIENT_ATTR = "__graph_client__"

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)


# =============================================================================
# Parameter role markers
# =============================================================================


@dataclass(frozen=True)
class Variable:
    """
    Bind a parameter as a GraphQL variable.

    Unmarked parameters are variables too; use the marker to rename them.
    A mapping-typed variable is merged entry by entry into the variables.
    """
    name: str = ""


@dataclass(frozen=True)
class Header:
    """Bind a string parameter as an HTTP header of the request."""
    name: str = ""


@dataclass(frozen=True)
class Document:
    """
    Bind a string parameter as the request document.

    With is_document_name=True the value is a document name looked up in the
    client's document source instead of literal document text.
    """
    is_document_name: bool = False


# =============================================================================
# Method and client declarations
# =============================================================================


@dataclass(frozen=True)
class RequestDef:
    """Request metadata declared on a client method."""
    document_name: str = ""  # named document, takes priority over a Document parameter
    retrieve_path: str = ""  # field path to decode from, e.g. "bookById" or "books[0].author"
    operation_name: str = ""  # operation to run when the document has several
    is_subscription: bool = False


@dataclass(frozen=True)
class ClientDef:
    """Client metadata declared on a client class."""
    name: str
    url: str = ""
    configuration: Optional[type] = None  # ClientConfiguration subclass


def graph_request(
    document_name: str = "",
    retrieve_path: str = "",
    operation_name: str = "",
    is_subscription: bool = False,
) -> Callable[[F], F]:
    """
    Mark a method as a GraphQL request.

    Args:
        document_name: Name of the document to load from the document source
        retrieve_path: Field path of the response to decode from; empty decodes
            the whole response and fails on any GraphQL error
        operation_name: Operation to execute if the document has several
        is_subscription: Execute as a subscription (requires an AsyncIterator return type)
    """
    definition = RequestDef(
        document_name=document_name or "",
        retrieve_path=retrieve_path or "",
        operation_name=operation_name or "",
        is_subscription=is_subscription,
    )

    def decorator(func: F) -> F:
        setattr(func, REQUEST_ATTR, definition)
        return func

    return decorator


def graph_client(
    name: str,
    url: str = "",
    configuration: Optional[type] = None,
) -> Callable[[C], C]:
    """
    Mark a class as a GraphQL client declaration.

    Args:
        name: Client name, used to look up settings for the client
        url: Absolute URL of the GraphQL endpoint
        configuration: ClientConfiguration subclass applied to every call
    """
    definition = ClientDef(name=name, url=url, configuration=configuration)

    def decorator(cls: C) -> C:
        setattr(cls, CLIENT_ATTR, definition)
        return cls

    return decorator


def get_request_def(func: Any) -> Optional[RequestDef]:
    """Get the RequestDef declared on a function, if any."""
    return getattr(func, REQUEST_ATTR, None)


def get_client_def(cls: type) -> Optional[ClientDef]:
    """Get the ClientDef declared on a class, if any."""
    return cls.__dict__.get(CLIENT_ATTR)
