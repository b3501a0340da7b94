"""Redaction helpers and secure logging setup.

Request headers and URLs are logged at DEBUG level while dispatching.
These helpers make sure credentials never reach a log handler:

- Header redaction for ``Authorization`` and friends
- URL redaction for token-like query parameters
- A logging formatter that scrubs bearer/basic credentials from messages
"""

import logging
import re
import sys
from typing import Any, Dict, Mapping

# Patterns for sensitive data detection
SENSITIVE_PATTERNS = {
    "bearer_token": re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE),
    "basic_auth": re.compile(r"(Basic\s+)[A-Za-z0-9+/=]+", re.IGNORECASE),
}

# Headers that should never be logged
SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "x-api-key",
    "cookie",
    "set-cookie",
}

SENSITIVE_QUERY_PARAMS = ("token", "access_token", "api_key", "password", "secret")


def sanitize_string(value: str) -> str:
    """Redact bearer and basic credentials embedded in a string.

    :param value: String to sanitize
    :type value: str
    :return: String with credential material replaced by ``<REDACTED>``
    :rtype: str
    """
    if not value:
        return value
    for pattern in SENSITIVE_PATTERNS.values():
        value = pattern.sub(r"\1<REDACTED>", value)
    return value


def sanitize_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    """Sanitize HTTP headers for logging.

    :param headers: HTTP headers (a dict or ``httpx.Headers``)
    :type headers: Mapping[str, Any]
    :return: New dictionary with sensitive headers redacted
    :rtype: Dict[str, Any]
    """
    sanitized: Dict[str, Any] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and value:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitize_url(url: str) -> str:
    """Redact token-like query parameters from a URL.

    :param url: URL to sanitize
    :type url: str
    :return: URL with sensitive parameter values redacted
    :rtype: str
    """
    if not url:
        return url
    for param in SENSITIVE_QUERY_PARAMS:
        url = re.sub(rf"([?&]{param}=)[^&#\s]+", r"\1<REDACTED>", url, flags=re.IGNORECASE)
    return url


class SanitizingFormatter(logging.Formatter):
    """Formatter that scrubs credentials from the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with credential redaction.

        :param record: Log record to format
        :type record: logging.LogRecord
        :return: Sanitized log line
        :rtype: str
        """
        try:
            record.msg = sanitize_string(record.getMessage())
            record.args = None
        except (TypeError, ValueError) as e:
            print(f"Warning: Failed to sanitize log record: {e}", file=sys.stderr)
        return super().format(record)


# Global flag to track if logging has been set up
_LOGGING_CONFIGURED = False


def setup_secure_logging(level: str = "INFO") -> None:
    """Set up root logging with automatic credential redaction.

    Repeated calls only adjust the level.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    """
    global _LOGGING_CONFIGURED

    numeric_level = getattr(logging, level.upper())
    if _LOGGING_CONFIGURED:
        logging.getLogger().setLevel(numeric_level)
        logging.getLogger(__name__).debug("Logging already configured, level set to %s", level)
        return

    formatter = SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)

    # httpx logs every request at INFO with the full URL
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    _LOGGING_CONFIGURED = True
