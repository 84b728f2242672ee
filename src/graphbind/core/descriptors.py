"""
Immutable descriptors flowing through the request/response pipeline.

MethodDescriptor and ResponseShape are built once per client method and are
safe to share between concurrent calls. ParameterBinding and
RequestDescriptor are built per call and never shared.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import TypeAdapter

from .wire_types import GraphQLRequest


class ParameterRole(str, Enum):
    """Role of a method parameter in the request."""
    VARIABLE = "variable"
    DOCUMENT = "document"
    HEADER = "header"


class Concurrency(str, Enum):
    """How a method hands its result to the caller."""
    BLOCKING = "blocking"  # returns the decoded value
    SINGLE_ASYNC = "single_async"  # returns an awaitable
    STREAM_ASYNC = "stream_async"  # returns an async iterator


@dataclass(frozen=True)
class ParameterDef:
    """Declared parameter of a client method."""
    name: str
    role: ParameterRole = ParameterRole.VARIABLE
    explicit_name: str = ""
    annotation: Any = Any
    is_document_name: bool = False


@dataclass(frozen=True)
class MethodDescriptor:
    """
    Per-method request metadata, derived once at client construction.

    Attributes:
        name: Python method name
        method_key: Stable diagnostic identifier ("module.Class#method")
        parameters: Declared parameters in declaration order (self excluded)
        signature: Signature used to bind call arguments
    """
    name: str
    method_key: str
    parameters: tuple[ParameterDef, ...] = ()
    document_name: str = ""
    retrieve_path: str = ""
    operation_name: str = ""
    is_subscription: bool = False
    signature: Optional[inspect.Signature] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ParameterBinding:
    """A parameter's role, effective name and value for one call."""
    role: ParameterRole
    name: str
    value: Any
    declared_type: Any = Any


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Fully resolved request for one call.

    document holds the document text; document_name is kept when the text
    came from a named lookup.
    """
    method_key: str
    document: str
    document_name: Optional[str] = None
    operation_name: Optional[str] = None
    variables: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    interceptors: tuple[Any, ...] = ()

    def to_request(self) -> GraphQLRequest:
        """Build the GraphQL-over-HTTP request body."""
        return GraphQLRequest(
            query=self.document,
            operation_name=self.operation_name,
            variables=dict(self.variables),
        )


@dataclass(frozen=True)
class ResponseShape:
    """Cardinality and concurrency of a method's result."""
    element_type: Any
    is_list: bool = False
    concurrency: Concurrency = Concurrency.BLOCKING

    @cached_property
    def adapter(self) -> TypeAdapter:
        """Pydantic adapter decoding one result (an element, or the whole list)."""
        if self.is_list:
            return TypeAdapter(list[self.element_type])
        return TypeAdapter(self.element_type)

    @cached_property
    def element_adapter(self) -> TypeAdapter:
        """Pydantic adapter decoding a single element."""
        return TypeAdapter(self.element_type)
