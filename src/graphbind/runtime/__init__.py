"""
Runtime module - request/response binding pipeline.
"""

from __future__ import annotations

from .binder import ResponseBinder
from .builder import ClientDefaults, RequestDescriptorBuilder
from .classifier import ParameterClassifier
from .executor import RequestExecutor
from .shape import ResponseShapeResolver

__all__ = [
    "ParameterClassifier",
    "ResponseShapeResolver",
    "ClientDefaults",
    "RequestDescriptorBuilder",
    "RequestExecutor",
    "ResponseBinder",
]
