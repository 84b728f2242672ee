"""
Response shape resolver - infers cardinality and concurrency from a return type.

    Book                         -> blocking, single
    list[Book]                   -> blocking, list
    Awaitable[Book]              -> single async, single
    Awaitable[list[Book]]        -> single async, list
    AsyncIterator[Book]          -> stream async, single
    AsyncIterator[list[Book]]    -> stream async, list
    AsyncIterator[list[list[Book]]] -> ConfigurationError
"""

from __future__ import annotations

import asyncio
import collections.abc
import inspect
import types
import typing
from typing import Any, Optional, Union

from ..core.descriptors import Concurrency, ResponseShape
from ..core.errors import ConfigurationError

_SINGLE_ASYNC_ORIGINS = (
    collections.abc.Awaitable,
    collections.abc.Coroutine,
    asyncio.Future,
    asyncio.Task,
)

_STREAM_ASYNC_ORIGINS = (
    collections.abc.AsyncIterator,
    collections.abc.AsyncIterable,
    collections.abc.AsyncGenerator,
)

_SEQUENCE_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)


class ResponseShapeResolver:
    """
    Resolves the ResponseShape of a declared return type.

    The result depends only on the return type, so resolve() is memoized.
    """

    def __init__(self):
        self._cache: dict[Any, ResponseShape] = {}

    def resolve(
        self,
        return_type: Any,
        is_coroutine: bool = False,
        method_key: Optional[str] = None,
    ) -> ResponseShape:
        """
        Resolve a return type into a ResponseShape.

        Args:
            return_type: Declared return annotation (already evaluated)
            is_coroutine: True when the declaring stub is "async def"; the
                annotation then describes the awaited value
            method_key: Method identifier for error messages

        Raises:
            ConfigurationError: If the type nests sequences
        """
        if return_type is None or return_type is type(None) or return_type is inspect.Signature.empty:
            return_type = Any
        if is_coroutine:
            return_type = collections.abc.Awaitable[return_type]

        try:
            cached = self._cache.get(return_type)
        except TypeError:
            cached = None  # unhashable annotation
        if cached is not None:
            return cached

        shape = self._resolve(return_type, method_key)
        try:
            self._cache[return_type] = shape
        except TypeError:
            pass
        return shape

    def _resolve(self, return_type: Any, method_key: Optional[str]) -> ResponseShape:
        working = return_type
        concurrency = Concurrency.BLOCKING

        origin = typing.get_origin(working)
        if origin in _SINGLE_ASYNC_ORIGINS:
            concurrency = Concurrency.SINGLE_ASYNC
            working = self._type_argument(working, last=origin is collections.abc.Coroutine)
        elif origin in _STREAM_ASYNC_ORIGINS:
            concurrency = Concurrency.STREAM_ASYNC
            working = self._type_argument(working)
        elif working in _SINGLE_ASYNC_ORIGINS:
            concurrency = Concurrency.SINGLE_ASYNC
            working = Any
        elif working in _STREAM_ASYNC_ORIGINS:
            concurrency = Concurrency.STREAM_ASYNC
            working = Any

        is_list = False
        sequence_type = self._sequence_element(working)
        if sequence_type is not _NOT_A_SEQUENCE:
            is_list = True
            working = sequence_type
            if self._sequence_element(working) is not _NOT_A_SEQUENCE:
                raise ConfigurationError(
                    f"Unsupported nested return type: {return_type!r}",
                    method_key=method_key,
                )

        return ResponseShape(element_type=working, is_list=is_list, concurrency=concurrency)

    @staticmethod
    def _type_argument(tp: Any, last: bool = False) -> Any:
        args = typing.get_args(tp)
        if not args:
            return Any
        return args[-1] if last else args[0]

    def _sequence_element(self, tp: Any) -> Any:
        """Element type if tp is an ordered sequence, else _NOT_A_SEQUENCE."""
        tp = strip_optional(tp)
        if tp in (list, collections.abc.Sequence, collections.abc.MutableSequence, typing.List):
            return Any
        if typing.get_origin(tp) in _SEQUENCE_ORIGINS:
            return self._type_argument(tp)
        return _NOT_A_SEQUENCE


def strip_optional(tp: Any) -> Any:
    """Optional[X] -> X; anything else unchanged."""
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


class _NotASequence:
    def __repr__(self) -> str:
        return "<not a sequence>"


_NOT_A_SEQUENCE = _NotASequence()
