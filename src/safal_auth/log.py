"""
Logging setup and httpx event hooks for request/response tracing.
"""

import json
import logging
import sys
from typing import Any

import httpx

_logger = logging.getLogger("safal_auth")
_http_logger = logging.getLogger("safal_auth.http")

REDACTED = "<redacted>"
SENSITIVE_HEADERS = {"cookie", "set-cookie", "authorization"}
SENSITIVE_FIELDS = {"password", "newPassword", "confirmPassword", "otp"}


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a console handler to the package logger (once)."""
    if not _logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - [Safal] %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        _logger.addHandler(handler)
    _logger.setLevel(level)
    return _logger


def _redact_headers(headers: httpx.Headers) -> dict[str, str]:
    return {
        key: REDACTED if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.multi_items()
    }


def _redact_body(content: bytes) -> str:
    if not content:
        return ""
    try:
        data: Any = json.loads(content)
    except ValueError:
        return content[:500].decode("utf-8", errors="replace")
    if isinstance(data, dict):
        data = {k: REDACTED if k in SENSITIVE_FIELDS else v for k, v in data.items()}
    return json.dumps(data)[:500]


async def log_request(request: httpx.Request) -> None:
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return
    _http_logger.debug(
        "REQUEST %s %s headers=%s body=%s",
        request.method,
        request.url,
        _redact_headers(request.headers),
        _redact_body(request.content),
    )


async def log_response(response: httpx.Response) -> None:
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return
    # Response hooks fire before the body is read
    await response.aread()
    _http_logger.debug(
        "RESPONSE %s %s status=%s headers=%s body=%s",
        response.request.method,
        response.request.url,
        response.status_code,
        _redact_headers(response.headers),
        _redact_body(response.content),
    )
