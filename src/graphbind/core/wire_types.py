"""
Pydantic models for the GraphQL-over-HTTP wire format.

These define the request body sent to the endpoint and the response
envelope ({"data": ..., "errors": [...]}) received from it.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

_PATH_TOKEN_PATTERN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def parse_field_path(path: str) -> list[Union[str, int]]:
    """
    Parse a field path into its segments.

    Examples:
        bookById -> ["bookById"]
        books[0].author -> ["books", 0, "author"]
    """
    segments: list[Union[str, int]] = []
    for name, index in _PATH_TOKEN_PATTERN.findall(path or ""):
        segments.append(int(index) if index else name)
    return segments


def format_field_path(segments: list[Union[str, int]]) -> str:
    """Format path segments back to "a.b[0].c" notation."""
    result = ""
    for segment in segments:
        if isinstance(segment, int):
            result += f"[{segment}]"
        else:
            result += f".{segment}" if result else segment
    return result


# --- Request ---

class GraphQLRequest(BaseModel):
    """
    Request body for a GraphQL endpoint.

    POST {"query": ..., "operationName": ..., "variables": {...}}
    """
    model_config = ConfigDict(populate_by_name=True)

    query: str
    operation_name: Optional[str] = Field(default=None, alias="operationName")
    variables: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """JSON payload with wire field names, omitting an unset operation name."""
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Response ---

class ErrorLocation(BaseModel):
    """Location of an error in the request document."""
    line: int
    column: int


class GraphQLError(BaseModel):
    """Single entry of a response's "errors" list."""
    message: str
    path: Optional[list[Union[str, int]]] = None
    locations: list[ErrorLocation] = Field(default_factory=list)
    extensions: dict[str, Any] = Field(default_factory=dict)

    @property
    def parsed_path(self) -> list[Union[str, int]]:
        return list(self.path or [])

    def __str__(self) -> str:
        return f"{self.message} (path: {format_field_path(self.parsed_path) or '-'})"


class GraphQLResponse(BaseModel):
    """
    Response envelope from a GraphQL endpoint.

    A response is valid when it carries data; a response without data failed
    before execution (parse or validation errors, for example).
    """
    data: Optional[Any] = None
    errors: list[GraphQLError] = Field(default_factory=list)
    extensions: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.data is not None

    def field(self, path: str) -> ResponseField:
        """
        Navigate to a field of the data by path.

        Collects the errors at, above or below the field path.
        """
        segments = parse_field_path(path)
        value: Any = self.data
        for segment in segments:
            if isinstance(segment, int):
                value = value[segment] if isinstance(value, list) and segment < len(value) else None
            else:
                value = value.get(segment) if isinstance(value, dict) else None
            if value is None:
                break

        field_errors = []
        for error in self.errors:
            error_path = error.parsed_path
            if not error_path:
                continue
            common = min(len(error_path), len(segments))
            if error_path[:common] == segments[:common]:
                field_errors.append(error)

        return ResponseField(path=path, value=value, errors=field_errors, response=self)


class ResponseField(BaseModel):
    """Value and errors of one field of a response."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str
    value: Optional[Any] = None
    errors: list[GraphQLError] = Field(default_factory=list)
    response: Optional[GraphQLResponse] = Field(default=None, repr=False)
