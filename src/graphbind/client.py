"""
Client factory - builds callable implementations of declared clients.

At construction every request method is described once (MethodDescriptor,
ResponseShape, ResponseBinder) and stored in a dispatch table keyed by method
name. Calls go straight through the table:

    classify arguments -> build RequestDescriptor -> dispatch -> bind response

Usage:
    client = create_client(BookClient)
    book = client.get_book_by_id("book-1")

    # or without decorators
    client = (
        GraphClientBuilder(name="books", url="http://localhost:8080/graphql")
        .method("get_book_by_id", RequestDef(document_name="bookQuery", retrieve_path="bookById"),
                parameters=[ParameterDef("bookId")], returns=Book)
        .build()
    )
"""

from __future__ import annotations

import inspect
import logging
import typing
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from .config import ClientSettings, ClientsConfig
from .configuration import ClientConfiguration, Interceptor
from .core.defs import ClientDef, Document, Header, RequestDef, Variable, get_client_def, get_request_def
from .core.descriptors import Concurrency, MethodDescriptor, ParameterDef, ParameterRole, ResponseShape
from .core.errors import ConfigurationError
from .documents import DocumentSource, FileDocumentSource
from .runtime.binder import ResponseBinder
from .runtime.builder import ClientDefaults, RequestDescriptorBuilder
from .runtime.classifier import ParameterClassifier
from .runtime.executor import RequestExecutor
from .runtime.shape import ResponseShapeResolver
from .transport.base import Transport
from .transport.http import HttpTransport
from .transport.http_logging import HttpLogger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundMethod:
    """Dispatch table entry of one client method."""
    descriptor: MethodDescriptor
    shape: ResponseShape
    binder: ResponseBinder


class ClientEngine:
    """
    Runs calls of one client instance through the request/response pipeline.

    The dispatch table and defaults are read-only after construction, so a
    single engine serves concurrent calls without locking.
    """

    def __init__(
        self,
        name: str,
        methods: Mapping[str, BoundMethod],
        transport: Transport,
        defaults: ClientDefaults,
    ):
        self.name = name
        self.methods = MappingProxyType(dict(methods))
        self.transport = transport
        self.classifier = ParameterClassifier()
        self.builder = RequestDescriptorBuilder(defaults)
        self.executor = RequestExecutor(transport)

    def invoke(self, method_name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """
        Invoke a client method.

        Raises:
            ConfigurationError: Synchronously, before any network activity
        """
        bound = self.methods[method_name]
        params = self.classifier.classify(bound.descriptor, args, kwargs)
        request = self.builder.build(bound.descriptor, params)
        dispatched = self.executor.dispatch(bound.descriptor, request)
        # Blocking calls run on a loop of their own; the transport releases
        # its connections before that loop closes
        return bound.binder.bind(dispatched, release=self.transport.aclose)

    async def aclose(self) -> None:
        await self.transport.aclose()


class GraphClientBase:
    """Base of generated client implementations."""

    _graphbind_engine: ClientEngine

    async def aclose(self) -> None:
        """Close the client's transport."""
        await self._graphbind_engine.aclose()

    def __repr__(self) -> str:
        engine = self._graphbind_engine
        return f"<{type(self).__name__} client={engine.name!r} methods={sorted(engine.methods)}>"


@dataclass(frozen=True)
class MethodSpec:
    """Declaration of one client method, before resolution."""
    name: str
    definition: RequestDef
    parameters: tuple[ParameterDef, ...] = ()
    returns: Any = Any
    is_coroutine: bool = False
    signature: Optional[inspect.Signature] = None
    doc: Optional[str] = None


class GraphClientBuilder:
    """
    Builds a client from explicit registrations or a decorated interface.

    Construction resolves every method once; invalid declarations raise
    ConfigurationError here rather than at call time.
    """

    def __init__(
        self,
        name: str = "",
        url: str = "",
        interface: Optional[type] = None,
    ):
        self._name = name
        self._url = url
        self._declared_url = ""
        self._interface: Optional[type] = None
        self._specs: dict[str, MethodSpec] = {}
        self._transport: Optional[Transport] = None
        self._configuration: Optional[ClientConfiguration] = None
        self._document_source: Optional[DocumentSource] = None
        self._headers: dict[str, str] = {}
        self._interceptors: list[Interceptor] = []
        self._settings: Optional[ClientSettings] = None
        self._clients_config: Optional[ClientsConfig] = None
        if interface is not None:
            self.interface(interface)

    def interface(self, cls: type) -> GraphClientBuilder:
        """Register every graph_request method of a declared client class."""
        client_def = get_client_def(cls) or ClientDef(name=cls.__name__)
        self._interface = cls
        self._name = self._name or client_def.name
        self._declared_url = client_def.url
        if client_def.configuration is not None and self._configuration is None:
            self._configuration = client_def.configuration()

        for attr_name, func in inspect.getmembers(cls, inspect.isfunction):
            definition = get_request_def(func)
            if definition is None or attr_name.startswith("__"):
                continue
            self._specs[attr_name] = describe_function(attr_name, func, definition)
        return self

    def method(
        self,
        name: str,
        definition: RequestDef,
        parameters: Sequence[Union[ParameterDef, str]] = (),
        returns: Any = Any,
        is_coroutine: bool = False,
    ) -> GraphClientBuilder:
        """
        Register a method explicitly.

        Args:
            name: Method name on the built client
            definition: Request metadata
            parameters: Parameters in call order; plain strings are variables
            returns: Declared return type
            is_coroutine: Whether the method behaves like "async def" (returns an awaitable)
        """
        params = tuple(
            ParameterDef(name=param) if isinstance(param, str) else param
            for param in parameters
        )
        self._specs[name] = MethodSpec(
            name=name,
            definition=definition,
            parameters=params,
            returns=returns,
            is_coroutine=is_coroutine,
        )
        return self

    def transport(self, transport: Transport) -> GraphClientBuilder:
        self._transport = transport
        return self

    def configuration(self, configuration: ClientConfiguration) -> GraphClientBuilder:
        self._configuration = configuration
        return self

    def document_source(self, document_source: DocumentSource) -> GraphClientBuilder:
        self._document_source = document_source
        return self

    def headers(self, headers: Mapping[str, str]) -> GraphClientBuilder:
        self._headers.update(headers)
        return self

    def interceptor(self, interceptor: Interceptor) -> GraphClientBuilder:
        self._interceptors.append(interceptor)
        return self

    def settings(self, settings: ClientSettings) -> GraphClientBuilder:
        self._settings = settings
        return self

    def clients_config(self, clients_config: ClientsConfig) -> GraphClientBuilder:
        self._clients_config = clients_config
        return self

    def build(self) -> Any:
        """
        Build the client instance.

        Raises:
            ConfigurationError: If a method declaration is invalid or no endpoint is known
        """
        settings = self._settings or ClientSettings()
        client_config = self._clients_config.get(self._name) if self._clients_config else None
        owner = self._owner_name()

        resolver = ResponseShapeResolver()
        methods: dict[str, BoundMethod] = {}
        for spec in self._specs.values():
            descriptor = MethodDescriptor(
                name=spec.name,
                method_key=f"{owner}#{spec.name}",
                parameters=spec.parameters,
                document_name=spec.definition.document_name,
                retrieve_path=spec.definition.retrieve_path,
                operation_name=spec.definition.operation_name,
                is_subscription=spec.definition.is_subscription,
                signature=spec.signature,
            )
            shape = resolver.resolve(spec.returns, spec.is_coroutine, method_key=descriptor.method_key)
            if descriptor.is_subscription and shape.concurrency != Concurrency.STREAM_ASYNC:
                raise ConfigurationError(
                    "Subscription methods must declare an AsyncIterator return type",
                    method_key=descriptor.method_key,
                )
            methods[spec.name] = BoundMethod(
                descriptor=descriptor,
                shape=shape,
                binder=ResponseBinder(descriptor, shape),
            )
            logger.debug(
                f"Bound {descriptor.method_key}: element={shape.element_type!r}, "
                f"list={shape.is_list}, concurrency={shape.concurrency.value}"
            )

        headers = dict(client_config.headers) if client_config else {}
        headers.update(self._headers)
        defaults = ClientDefaults(
            document_source=self._document_source or FileDocumentSource(settings.document_locations),
            headers=MappingProxyType(headers),
            interceptors=tuple(self._interceptors),
            configuration=self._configuration,
        )
        transport = self._transport or self._create_transport(settings, client_config)
        engine = ClientEngine(self._name or owner, methods, transport, defaults)

        cls = self._implementation_class(methods)
        instance = cls.__new__(cls)
        instance._graphbind_engine = engine
        logger.info(f"Created GraphQL client '{engine.name}' with {len(methods)} methods")
        return instance

    def _owner_name(self) -> str:
        if self._interface is not None:
            return f"{self._interface.__module__}.{self._interface.__qualname__}"
        return self._name or "GraphClient"

    def _create_transport(self, settings: ClientSettings, client_config: Any) -> Transport:
        # Explicit URL, then the clients file, then the declared URL
        url = self._url or (client_config.url if client_config else "") or self._declared_url
        if not url:
            raise ConfigurationError(f"No URL configured for client '{self._name or self._owner_name()}'")

        timeout = client_config.timeout if client_config and client_config.timeout else settings.timeout
        return HttpTransport(
            url,
            timeout=timeout,
            verify=not settings.disable_ssl_validation,
            http_logger=HttpLogger(settings.logger_level, settings.sensitive_headers),
        )

    def _implementation_class(self, methods: Mapping[str, BoundMethod]) -> type:
        """Generate a class whose request methods call the engine."""
        namespace: dict[str, Any] = {"__module__": __name__}
        for name in methods:
            spec = self._specs[name]
            namespace[name] = _make_method(name, spec.doc)

        if self._interface is not None:
            bases: tuple[type, ...] = (self._interface, GraphClientBase)
            class_name = f"{self._interface.__name__}Impl"
        else:
            bases = (GraphClientBase,)
            class_name = f"{_class_name(self._name)}Client"
        metaclass = type(self._interface) if self._interface is not None else type
        cls = metaclass(class_name, bases, namespace)
        # Declared stubs are implemented by the namespace
        cls.__abstractmethods__ = frozenset()
        return cls


def _make_method(name: str, doc: Optional[str]):
    def method(self, *args, **kwargs):
        return self._graphbind_engine.invoke(name, args, kwargs)

    method.__name__ = name
    method.__qualname__ = name
    method.__doc__ = doc
    return method


def _class_name(name: str) -> str:
    parts = [part for part in name.replace("-", "_").split("_") if part]
    return "".join(part[0].upper() + part[1:] for part in parts) or "Graph"


def describe_function(name: str, func: Any, definition: RequestDef) -> MethodSpec:
    """
    Read parameter roles and the return type of a declared method stub.

    Raises:
        ConfigurationError: If annotations cannot be evaluated or a parameter cannot be bound
    """
    try:
        hints = typing.get_type_hints(func, include_extras=True)
    except Exception as e:
        raise ConfigurationError(f"Cannot evaluate annotations of '{name}': {e}") from e

    signature = inspect.signature(func)
    parameters = []
    for index, param in enumerate(signature.parameters.values()):
        if index == 0:
            continue  # self
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            raise ConfigurationError(f"'*{param.name}' parameters are not supported in '{name}'")

        role, explicit_name, is_document_name, annotation = parameter_role(hints.get(param.name, Any))
        if param.kind == inspect.Parameter.VAR_KEYWORD:
            annotation = dict[str, annotation]
        parameters.append(
            ParameterDef(
                name=param.name,
                role=role,
                explicit_name=explicit_name,
                annotation=annotation,
                is_document_name=is_document_name,
            )
        )

    return MethodSpec(
        name=name,
        definition=definition,
        parameters=tuple(parameters),
        returns=hints.get("return", Any),
        is_coroutine=inspect.iscoroutinefunction(func),
        signature=signature,
        doc=func.__doc__,
    )


def parameter_role(annotation: Any) -> tuple[ParameterRole, str, bool, Any]:
    """
    Split an annotation into (role, explicit name, is document name, base type).

    Annotated[str, Header("X-Tenant")] -> (HEADER, "X-Tenant", False, str)
    """
    if typing.get_origin(annotation) is not typing.Annotated:
        return ParameterRole.VARIABLE, "", False, annotation

    base, *metadata = typing.get_args(annotation)
    for marker in metadata:
        if isinstance(marker, Document):
            return ParameterRole.DOCUMENT, "", marker.is_document_name, base
        if isinstance(marker, Header):
            return ParameterRole.HEADER, marker.name, False, base
        if isinstance(marker, Variable):
            return ParameterRole.VARIABLE, marker.name, False, base
    return ParameterRole.VARIABLE, "", False, base


def create_client(
    interface: type,
    transport: Optional[Transport] = None,
    *,
    url: str = "",
    configuration: Optional[ClientConfiguration] = None,
    document_source: Optional[DocumentSource] = None,
    headers: Optional[Mapping[str, str]] = None,
    interceptors: Iterable[Interceptor] = (),
    settings: Optional[ClientSettings] = None,
    clients_config: Optional[ClientsConfig] = None,
) -> Any:
    """
    Create an implementation of a declared client class.

    Args:
        interface: Class decorated with graph_client (decorator optional)
        transport: Transport to use; defaults to an HttpTransport on the client URL
        url: Endpoint URL overriding the declared one
        configuration: Configuration hook overriding the declared one
        document_source: Source of named documents; defaults to FileDocumentSource
        headers: Headers sent with every call
        interceptors: Request interceptors, applied in order
        settings: Settings; defaults to ClientSettings() from the environment
        clients_config: Per-client YAML configuration

    Returns:
        Instance of a generated subclass of interface
    """
    builder = GraphClientBuilder(url=url)
    if configuration is not None:
        builder.configuration(configuration)
    builder.interface(interface)
    if transport is not None:
        builder.transport(transport)
    if document_source is not None:
        builder.document_source(document_source)
    if headers:
        builder.headers(headers)
    for interceptor in interceptors:
        builder.interceptor(interceptor)
    if settings is not None:
        builder.settings(settings)
    if clients_config is not None:
        builder.clients_config(clients_config)
    return builder.build()
