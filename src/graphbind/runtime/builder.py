"""
Request descriptor builder - turns classified arguments into a RequestDescriptor.

Resolution rules:
- Document: the method's document_name wins; otherwise exactly one Document
  parameter is required (literal text, or a name when declared as such)
- Operation name: attached only when declared
- Variables: declaration order, mapping parameters merged, later keys win
- Headers: client defaults, then the configuration hook, then Header parameters

Every call starts from a copy of the client defaults, so the configuration
hook never mutates state shared with concurrent calls.
"""

from __future__ import annotations

import collections.abc
import logging
import types
import typing
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..configuration import ClientConfiguration, Interceptor
from ..core.defs import DOCUMENT_NAME
from ..core.descriptors import MethodDescriptor, ParameterBinding, ParameterRole, RequestDescriptor
from ..core.errors import ConfigurationError
from ..documents import DocumentSource
from .shape import strip_optional

logger = logging.getLogger(__name__)

_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


@dataclass(frozen=True)
class ClientDefaults:
    """Immutable per-client request defaults."""
    document_source: Optional[DocumentSource] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    interceptors: tuple[Interceptor, ...] = ()
    configuration: Optional[ClientConfiguration] = None


class RequestDescriptorBuilder:
    """
    Builds one RequestDescriptor per call.

    Usage:
        builder = RequestDescriptorBuilder(ClientDefaults(document_source=source))
        request = builder.build(method, classifier.classify(method, args, kwargs))
    """

    def __init__(self, defaults: ClientDefaults):
        self.defaults = defaults

    def build(
        self,
        method: MethodDescriptor,
        params: dict[ParameterRole, list[ParameterBinding]],
    ) -> RequestDescriptor:
        """
        Build the request for one call.

        Args:
            method: Descriptor of the invoked method
            params: Bindings grouped by role

        Returns:
            Immutable RequestDescriptor

        Raises:
            ConfigurationError: If the document cannot be resolved or a variable map is invalid
        """
        headers, interceptors, document_source = self._apply_configuration(method, params)
        document, document_name = self._resolve_document(method, params, document_source)
        operation_name = method.operation_name or None
        if operation_name:
            logger.debug(f"Using operationName declared on {method.method_key}: [{operation_name}]")
        variables = self._resolve_variables(method, params)

        return RequestDescriptor(
            method_key=method.method_key,
            document=document,
            document_name=document_name,
            operation_name=operation_name,
            variables=MappingProxyType(variables),
            headers=MappingProxyType(headers),
            interceptors=tuple(interceptors),
        )

    def _apply_configuration(
        self,
        method: MethodDescriptor,
        params: dict[ParameterRole, list[ParameterBinding]],
    ) -> tuple[dict[str, str], list[Interceptor], Optional[DocumentSource]]:
        """Apply the configuration hook and Header parameters to per-call copies of the defaults."""
        configuration = self.defaults.configuration
        headers = dict(self.defaults.headers)
        interceptors = list(self.defaults.interceptors)
        document_source = self.defaults.document_source

        logger.debug(f"Applying configuration for method: [{method.method_key}]")
        if configuration is not None:
            mutate_headers = configuration.headers(method)
            if mutate_headers is not None:
                mutate_headers(headers)

        for param in params.get(ParameterRole.HEADER, []):
            # Only string-typed parameters with string values become headers
            if _is_string_type(param.declared_type) and isinstance(param.value, str):
                headers[param.name] = param.value

        if configuration is not None:
            mutate_interceptors = configuration.interceptors(method)
            if mutate_interceptors is not None:
                mutate_interceptors(interceptors)

            override = configuration.document_source(method)
            if override is not None:
                document_source = override

        return headers, interceptors, document_source

    def _resolve_document(
        self,
        method: MethodDescriptor,
        params: dict[ParameterRole, list[ParameterBinding]],
        document_source: Optional[DocumentSource],
    ) -> tuple[str, Optional[str]]:
        """Resolve the document text, and the document name if it was looked up."""
        if method.document_name:
            logger.debug(f"Using documentName declared on {method.method_key}: [{method.document_name}]")
            return self._load_document(method, method.document_name, document_source), method.document_name

        documents = params.get(ParameterRole.DOCUMENT, [])
        if len(documents) != 1:
            raise ConfigurationError(
                "Ambiguous or missing document source: either document_name in graph_request "
                "or exactly one Document parameter is required",
                method_key=method.method_key,
            )

        param = documents[0]
        if not _is_string_type(param.declared_type) or not isinstance(param.value, str):
            raise ConfigurationError("Document parameter must be a string", method_key=method.method_key)

        if param.name == DOCUMENT_NAME:
            logger.debug(f"Using documentName passed to {method.method_key}: [{param.value}]")
            return self._load_document(method, param.value, document_source), param.value

        logger.debug(f"Using document passed to {method.method_key}")
        return param.value, None

    @staticmethod
    def _load_document(
        method: MethodDescriptor,
        name: str,
        document_source: Optional[DocumentSource],
    ) -> str:
        if document_source is None:
            raise ConfigurationError(
                f"No document source configured to load document '{name}'",
                method_key=method.method_key,
            )
        try:
            return document_source.get_document(name)
        except ConfigurationError as e:
            raise ConfigurationError(e.message, method_key=method.method_key) from e

    @staticmethod
    def _resolve_variables(
        method: MethodDescriptor,
        params: dict[ParameterRole, list[ParameterBinding]],
    ) -> dict[str, Any]:
        """Collect variables in declaration order; later keys override earlier ones."""
        variables: dict[str, Any] = {}
        for param in params.get(ParameterRole.VARIABLE, []):
            if _is_mapping_type(param.declared_type) and isinstance(param.value, collections.abc.Mapping):
                for key, value in param.value.items():
                    if not isinstance(key, str):
                        raise ConfigurationError(
                            f"Map key must be a string, got {type(key).__name__} in parameter '{param.name}'",
                            method_key=method.method_key,
                        )
                    variables[key] = value
            elif _is_mapping_type(param.declared_type) and param.value is None:
                continue
            else:
                variables[param.name] = param.value

        if variables:
            logger.debug(f"Applying variables: [{variables}]")
        else:
            logger.debug(f"No variables found in parameters of {method.method_key}")
        return variables


def _is_mapping_type(tp: Any) -> bool:
    tp = strip_optional(tp)
    if tp in _MAPPING_ORIGINS or tp is typing.Dict:
        return True
    return typing.get_origin(tp) in _MAPPING_ORIGINS


def _is_string_type(tp: Any) -> bool:
    """Whether a str value may be assigned to the declared type."""
    if tp in (str, Any, object):
        return True
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        return str in typing.get_args(tp)
    return False
