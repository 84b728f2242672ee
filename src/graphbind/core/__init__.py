"""
Core module - declarations, descriptors, wire types and errors.
"""

from __future__ import annotations

from .defs import (
    DOCUMENT_NAME,
    ClientDef,
    Document,
    Header,
    RequestDef,
    Variable,
    get_client_def,
    get_request_def,
    graph_client,
    graph_request,
)
from .descriptors import (
    Concurrency,
    MethodDescriptor,
    ParameterBinding,
    ParameterDef,
    ParameterRole,
    RequestDescriptor,
    ResponseShape,
)
from .errors import (
    ConfigurationError,
    FieldAccessError,
    GraphBindError,
    RequestError,
    ResponseError,
    TransportError,
)
from .wire_types import (
    ErrorLocation,
    GraphQLError,
    GraphQLRequest,
    GraphQLResponse,
    ResponseField,
    format_field_path,
    parse_field_path,
)

__all__ = [
    # Declarations
    "DOCUMENT_NAME",
    "ClientDef",
    "RequestDef",
    "Variable",
    "Header",
    "Document",
    "graph_client",
    "graph_request",
    "get_client_def",
    "get_request_def",
    # Descriptors
    "Concurrency",
    "MethodDescriptor",
    "ParameterBinding",
    "ParameterDef",
    "ParameterRole",
    "RequestDescriptor",
    "ResponseShape",
    # Errors
    "GraphBindError",
    "ConfigurationError",
    "RequestError",
    "ResponseError",
    "FieldAccessError",
    "TransportError",
    # Wire types
    "GraphQLRequest",
    "GraphQLResponse",
    "GraphQLError",
    "ErrorLocation",
    "ResponseField",
    "parse_field_path",
    "format_field_path",
]
