"""Async client core for a multi-tenant REST service API.

This package provides the request-execution engine used by resource
endpoints: tenant endpoint resolution, credential handling, throttle
aware retries and status classification.

:var __version__: Current package version
:type __version__: str
"""

__version__ = "0.1.0"

from .auth import (  # noqa: E402
    APITokenCredential,
    BasicAuthCredential,
    BearerCredential,
    Credential,
)
from .client import BaseAPI, Client  # noqa: E402
from .config.settings import ClientSettings  # noqa: E402
from .exceptions import (  # noqa: E402
    AddressParseError,
    APIError,
    ConfigError,
    EncodingError,
    EndpointNotConfiguredError,
    InvalidSubdomainError,
    RequestTimeoutError,
    TenantDeskError,
    TransportError,
)
from .models import CursorPagination, CursorPaginationMeta  # noqa: E402
from .utils.query import add_options  # noqa: E402

__all__ = [
    "__version__",
    "BaseAPI",
    "Client",
    "ClientSettings",
    "Credential",
    "BasicAuthCredential",
    "APITokenCredential",
    "BearerCredential",
    "CursorPagination",
    "CursorPaginationMeta",
    "add_options",
    "TenantDeskError",
    "ConfigError",
    "InvalidSubdomainError",
    "AddressParseError",
    "EndpointNotConfiguredError",
    "EncodingError",
    "TransportError",
    "RequestTimeoutError",
    "APIError",
]
