"""Structured exception classes for the tenantdesk client core.

Every failure the client surfaces derives from :class:`TenantDeskError`,
so callers can catch the whole family or a single branch of it:

- :class:`ConfigError` and its subclasses are raised synchronously while
  configuring a client, never retried
- :class:`EncodingError` is raised before any network I/O
- :class:`TransportError` and :class:`RequestTimeoutError` wrap low-level
  httpx failures
- :class:`APIError` carries the final non-success response

Task cancellation is not wrapped: ``asyncio.CancelledError`` propagates
unchanged.
"""

import json
from typing import Any, Dict, Optional

import httpx


class TenantDeskError(Exception):
    """Base exception for all tenantdesk errors.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class ConfigError(TenantDeskError):
    """Raised for client configuration errors.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIG_ERROR", details=details)


class InvalidSubdomainError(ConfigError):
    """Raised when a subdomain does not match the tenant naming rules.

    :param subdomain: The rejected subdomain value
    """

    def __init__(self, subdomain: Any):
        """Initialize with the rejected subdomain."""
        super().__init__(f"{subdomain!r} is invalid subdomain", setting="subdomain")
        self.code = "INVALID_SUBDOMAIN"
        self.subdomain = subdomain


class AddressParseError(ConfigError):
    """Raised when an endpoint address cannot be parsed.

    :param address: The address that failed to parse
    :param reason: Optional explanation of the failure
    """

    def __init__(self, address: Any, reason: Optional[str] = None):
        """Initialize with the offending address and optional reason."""
        message = f"cannot parse endpoint address {address!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, setting="endpoint_url")
        self.code = "ADDRESS_PARSE_ERROR"
        self.address = address


class EndpointNotConfiguredError(ConfigError):
    """Raised when a request is issued before a base address is set."""

    def __init__(self):
        """Initialize endpoint-not-configured error."""
        super().__init__(
            "endpoint is not configured; call set_subdomain() or set_endpoint_url()",
            setting="endpoint_url",
        )
        self.code = "ENDPOINT_NOT_CONFIGURED"


class EncodingError(TenantDeskError):
    """Raised when a request body cannot be serialized.

    :param message: Description of the encoding failure
    :param type_name: Optional name of the type that failed to encode
    """

    def __init__(self, message: str, type_name: Optional[str] = None):
        """Initialize encoding error with message and optional type name."""
        details = {}
        if type_name:
            details["type"] = type_name
        super().__init__(message=message, code="ENCODING_ERROR", details=details)


class TransportError(TenantDeskError):
    """Raised for connection or I/O failures below the HTTP status level.

    :param message: Description of the transport failure
    :param method: Optional HTTP method of the failed request
    :param url: Optional URL of the failed request
    """

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        """Initialize transport error with message and request context."""
        details = {}
        if method:
            details["method"] = method
        if url:
            details["url"] = url
        super().__init__(message=message, code="TRANSPORT_ERROR", details=details)
        self.method = method
        self.url = url


class RequestTimeoutError(TenantDeskError):
    """Raised when a request or its overall deadline times out.

    :param message: Description of the timeout
    :param timeout: Optional deadline in seconds that was exceeded
    """

    def __init__(self, message: str, timeout: Optional[float] = None):
        """Initialize timeout error with message and optional deadline."""
        details = {}
        if timeout is not None:
            details["timeout"] = timeout
        super().__init__(message=message, code="TIMEOUT_ERROR", details=details)
        self.timeout = timeout


class APIError(TenantDeskError):
    """Raised when the final response status is outside the success set.

    The body is kept raw; callers parse it for the service's error
    payload.

    :param status_code: HTTP status code of the final response
    :param body: Raw response body
    :param headers: Response headers
    :param method: Optional HTTP method of the request
    :param url: Optional URL of the request
    """

    def __init__(
        self,
        status_code: int,
        body: bytes = b"",
        headers: Optional[httpx.Headers] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        """Initialize API error from the final response data."""
        self.status_code = status_code
        self.body = body
        self.headers = httpx.Headers(headers or {})
        self.method = method
        self.url = url
        details: Dict[str, Any] = {"status_code": status_code}
        if method:
            details["method"] = method
        if url:
            details["url"] = url
        if body:
            details["response_body"] = body.decode("utf-8", errors="replace")
        super().__init__(
            message=f"{status_code}: {self.reason_phrase}",
            code="API_ERROR",
            details=details,
        )

    @property
    def reason_phrase(self) -> str:
        """Standard reason phrase for the status code."""
        return httpx.codes.get_reason_phrase(self.status_code) or "Unknown Status"

    @property
    def retry_after(self) -> Optional[int]:
        """Seconds from the ``Retry-After`` header, if it holds an integer."""
        # Imported here; the http utilities import this module
        from .utils.http.retry import parse_retry_after_value

        return parse_retry_after_value(self.headers.get("retry-after"))

    def is_rate_limited(self) -> bool:
        """Check whether the final response was a 429."""
        return self.status_code == httpx.codes.TOO_MANY_REQUESTS

    def json(self) -> Any:
        """Decode the response body as JSON.

        :raises ValueError: If the body is not valid JSON
        """
        return json.loads(self.body)
