"""HTTP utilities public API (barrel module).

This package provides:
- Default transport construction
- Request building and single-attempt dispatch
- Throttle-aware retry state machine
- Response classification
- Retry metrics

Recommended import pattern for consumers:
    from tenantdesk.utils.http import ThrottleRetry, classify_response
"""

from .client_manager import create_http_client
from .metrics import RetryMetrics
from .request import (
    SUCCESS_CODES,
    basic_auth_for,
    build_request,
    encode_body,
    send_request,
)
from .response import classify_response
from .retry import (
    DEFAULT_MAX_RETRY,
    DEFAULT_MAX_SLEEP,
    RetryState,
    ThrottleRetry,
    parse_retry_after,
)

__all__ = [
    "create_http_client",
    "RetryMetrics",
    "SUCCESS_CODES",
    "encode_body",
    "build_request",
    "basic_auth_for",
    "send_request",
    "classify_response",
    "DEFAULT_MAX_RETRY",
    "DEFAULT_MAX_SLEEP",
    "RetryState",
    "ThrottleRetry",
    "parse_retry_after",
]
