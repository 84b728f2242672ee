"""
Custom exceptions for the graphbind system.

Every failure a generated client method can raise belongs to this hierarchy,
whatever its origin (declaration, transport or GraphQL protocol).
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class GraphBindError(Exception):
    """
    Base exception for all graphbind errors.

    Attributes:
        message: Bare error message (for protocol errors, the first error's message)
        method_key: Identifier of the client method that failed ("module.Class#method")
        errors: Originating GraphQL errors, if any
    """

    def __init__(
        self,
        message: str,
        method_key: Optional[str] = None,
        errors: Sequence[Any] = (),
    ):
        self.message = message
        self.method_key = method_key
        self.errors = list(errors)
        if method_key:
            super().__init__(f"Error while calling Graph API [method: {method_key}]: {message}")
        else:
            super().__init__(message)


class ConfigurationError(GraphBindError):
    """Raised when a client declaration or a call's arguments cannot form a request."""
    pass


class RequestError(GraphBindError):
    """Raised when dispatching a request fails (network, status, serialization, decoding)."""
    pass


class ResponseError(GraphBindError):
    """Raised when the GraphQL response carries errors."""
    pass


class FieldAccessError(ResponseError):
    """Raised when a retrieve path is missing from the response or carries errors."""

    def __init__(
        self,
        message: str,
        path: str,
        method_key: Optional[str] = None,
        errors: Sequence[Any] = (),
    ):
        self.path = path
        super().__init__(message, method_key=method_key, errors=errors)


class TransportError(Exception):
    """
    Raised by transports when the server cannot be reached or answers without
    a GraphQL payload.

    The engine re-raises it as RequestError with the calling method's key.
    """

    def __init__(self, url: str, status_code: int, message: str):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Endpoint '{url}' returned {status_code}: {message}")
