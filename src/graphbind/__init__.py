"""
graphbind - declarative GraphQL clients.

Declare a class whose methods describe GraphQL operations and get a callable
implementation that builds the request, sends it and decodes the response
into the declared return type.

Usage:
    from typing import Annotated, AsyncIterator
    from graphbind import Variable, create_client, graph_client, graph_request

    @graph_client(name="books", url="http://localhost:8080/graphql")
    class BookClient:

        @graph_request(document_name="bookQuery", retrieve_path="bookById")
        def get_book_by_id(self, book_id: Annotated[str, Variable("bookId")]) -> Book:
            ...

        @graph_request(document_name="bookAdded", is_subscription=True)
        def book_added(self) -> AsyncIterator[Book]:
            ...

    client = create_client(BookClient)
    book = client.get_book_by_id("book-1")
"""

from __future__ import annotations

from .client import ClientEngine, GraphClientBase, GraphClientBuilder, create_client
from .config import ClientConfig, ClientSettings, ClientsConfig, load_clients_config
from .configuration import ClientConfiguration, Interceptor
from .core import (
    DOCUMENT_NAME,
    ClientDef,
    Concurrency,
    ConfigurationError,
    Document,
    FieldAccessError,
    GraphBindError,
    GraphQLError,
    GraphQLRequest,
    GraphQLResponse,
    Header,
    MethodDescriptor,
    ParameterDef,
    ParameterRole,
    RequestDef,
    RequestDescriptor,
    RequestError,
    ResponseError,
    ResponseField,
    ResponseShape,
    TransportError,
    Variable,
    graph_client,
    graph_request,
)
from .documents import DocumentSource, FileDocumentSource, MappingDocumentSource
from .transport import HttpLogger, HttpTransport, LoggerLevel, Transport

__version__ = "0.1.0"

__all__ = [
    # Declarations
    "graph_client",
    "graph_request",
    "ClientDef",
    "RequestDef",
    "Variable",
    "Header",
    "Document",
    "DOCUMENT_NAME",
    # Client construction
    "create_client",
    "GraphClientBuilder",
    "GraphClientBase",
    "ClientEngine",
    "ClientConfiguration",
    "Interceptor",
    # Descriptors
    "MethodDescriptor",
    "ParameterDef",
    "ParameterRole",
    "RequestDescriptor",
    "ResponseShape",
    "Concurrency",
    # Wire types
    "GraphQLRequest",
    "GraphQLResponse",
    "GraphQLError",
    "ResponseField",
    # Errors
    "GraphBindError",
    "ConfigurationError",
    "RequestError",
    "ResponseError",
    "FieldAccessError",
    "TransportError",
    # Documents
    "DocumentSource",
    "FileDocumentSource",
    "MappingDocumentSource",
    # Transport
    "Transport",
    "HttpTransport",
    "HttpLogger",
    "LoggerLevel",
    # Configuration
    "ClientSettings",
    "ClientConfig",
    "ClientsConfig",
    "load_clients_config",
]
