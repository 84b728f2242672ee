"""
HTTP exchange logging for HttpTransport, attached as httpx event hooks.

Levels:
- NONE: no logging
- BASIC: request method and URL, response status and elapsed time
- HEADERS: BASIC plus request and response headers
- FULL: HEADERS plus request and response bodies
"""

from __future__ import annotations

import json
import logging
import math
from enum import Enum
from typing import Iterable

import httpx

logger = logging.getLogger(__name__)


class LoggerLevel(str, Enum):
    NONE = "NONE"
    BASIC = "BASIC"
    HEADERS = "HEADERS"
    FULL = "FULL"


class HttpLogger:
    """
    Logs requests and responses of an httpx.AsyncClient.

    Values of sensitive headers are masked before logging.

    Usage:
        http_logger = HttpLogger(LoggerLevel.HEADERS, sensitive_headers=["Authorization"])
        client = httpx.AsyncClient(event_hooks=http_logger.event_hooks())
    """

    def __init__(
        self,
        level: LoggerLevel | str = LoggerLevel.NONE,
        sensitive_headers: Iterable[str] = (),
    ):
        self.level = LoggerLevel(level)
        self.sensitive_headers = {name.lower() for name in sensitive_headers}

    def event_hooks(self) -> dict[str, list]:
        """Event hooks for httpx.AsyncClient; empty when logging is disabled."""
        if self.level == LoggerLevel.NONE:
            return {"request": [], "response": []}
        return {"request": [self.log_request], "response": [self.log_response]}

    async def log_request(self, request: httpx.Request) -> None:
        if self.level == LoggerLevel.BASIC:
            logger.info(f"Request: {request.method} {request.url}")
        elif self.level == LoggerLevel.HEADERS:
            logger.info(f"Request: {request.method} {request.url}\nHeaders: {self.mask_headers(request.headers)}")
        elif self.level == LoggerLevel.FULL:
            logger.info(
                f"Request: {request.method} {request.url}\n"
                f"Headers: {self.mask_headers(request.headers)}\n"
                f"Body: {self._format_body(request.content)}"
            )

    async def log_response(self, response: httpx.Response) -> None:
        elapsed = self._elapsed_ms(response)
        if self.level == LoggerLevel.BASIC:
            logger.info(f"Response: {response.status_code} ({elapsed})")
        elif self.level == LoggerLevel.HEADERS:
            logger.info(f"Response: {response.status_code} ({elapsed})\nHeaders: {dict(response.headers)}")
        elif self.level == LoggerLevel.FULL:
            # Subscription streams are consumed by the transport, not here
            if response.headers.get("content-type", "").startswith("text/event-stream"):
                body = "<event stream>"
            else:
                body = self._format_body(await response.aread())
            logger.info(
                f"Response: {response.status_code} ({elapsed})\n"
                f"Headers: {dict(response.headers)}\n"
                f"Body: {body}"
            )

    def mask_headers(self, headers: httpx.Headers) -> dict[str, str]:
        """Copy headers with sensitive values masked."""
        masked = {}
        for name, value in headers.items():
            if name.lower() in self.sensitive_headers and value:
                masked[name] = self.mask_value(name, value)
            else:
                masked[name] = value
        return masked

    @staticmethod
    def mask_value(name: str, value: str) -> str:
        """
        Mask a header value.

        Bearer JWTs keep their header and payload segments, Basic credentials
        are replaced, other Authorization values are fully masked, other
        headers have their first 70% masked.
        """
        if name.lower() == "authorization":
            if "Bearer" in value and "." in value:
                segments = value.split(".")
                return f"{segments[0]}{segments[1]}.TRUNCATED"
            if "Basic" in value:
                return "[Basic xxxxxxxxxxxxxxxxxxxxxxxxx]"
            return _mask_chars(value, 1.0)
        return _mask_chars(value, 0.7)

    @staticmethod
    def _format_body(content: bytes) -> str:
        if not content:
            return ""
        try:
            return json.dumps(json.loads(content), indent=2)
        except ValueError:
            return content.decode("utf-8", errors="replace")

    @staticmethod
    def _elapsed_ms(response: httpx.Response) -> str:
        try:
            return f"{response.elapsed.total_seconds() * 1000:.0f}ms"
        except RuntimeError:
            # elapsed is only set once the response is closed
            return "streaming"


def _mask_chars(value: str, percent: float) -> str:
    count = min(len(value), math.ceil(len(value) * percent))
    return "x" * count + value[count:]
