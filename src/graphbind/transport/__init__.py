"""
Transport module - reaching GraphQL endpoints.
"""

from __future__ import annotations

from .base import Transport
from .http import HttpTransport
from .http_logging import HttpLogger, LoggerLevel

__all__ = [
    "Transport",
    "HttpTransport",
    "HttpLogger",
    "LoggerLevel",
]
