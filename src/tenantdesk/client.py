"""Request execution core for the multi-tenant service API.

The client holds per-tenant configuration (base address, credential,
headers, retry limits) and exposes the four verb operations consumed by
resource-specific endpoint code:

1. Build a fully-addressed request with configured headers and credential
2. Dispatch it, retrying while the server throttles with a usable
   ``Retry-After``
3. Classify the final status against the verb's success set

Configuration is meant to be finished before requests run; setters are
not synchronised against in-flight requests.

Examples:
    >>> async with Client() as client:
    ...     client.set_subdomain("acme")
    ...     client.set_credential(APITokenCredential("agent@acme.com", "tok"))
    ...     body = await client.get("/tickets.json")
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Dict, Optional, Union

import httpx

from . import __version__
from .auth.credentials import Credential
from .config.settings import ClientSettings
from .exceptions import EndpointNotConfiguredError, RequestTimeoutError
from .utils.endpoint_config import EndpointConfig
from .utils.http import (
    DEFAULT_MAX_RETRY,
    DEFAULT_MAX_SLEEP,
    SUCCESS_CODES,
    RetryMetrics,
    ThrottleRetry,
    basic_auth_for,
    build_request,
    classify_response,
    create_http_client,
    encode_body,
    send_request,
)
from .utils.security import sanitize_url

logger = logging.getLogger(__name__)

# Parent of every module logger in the package
PACKAGE_LOGGER = "tenantdesk"

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": f"tenantdesk/{__version__}",
    "Content-Type": "application/json",
}


class BaseAPI(ABC):
    """Verb operations shared by all endpoint collaborators."""

    @abstractmethod
    async def get(self, path: str, timeout: Optional[float] = None) -> bytes:
        """Fetch ``path`` and return the raw response body."""
        pass

    @abstractmethod
    async def post(self, path: str, data: Any, timeout: Optional[float] = None) -> bytes:
        """Send ``data`` to ``path`` and return the raw response body."""
        pass

    @abstractmethod
    async def put(self, path: str, data: Any, timeout: Optional[float] = None) -> bytes:
        """Replace ``path`` with ``data`` and return the raw response body."""
        pass

    @abstractmethod
    async def delete(self, path: str, timeout: Optional[float] = None) -> None:
        """Delete ``path``."""
        pass


class Client(BaseAPI):
    """Client of the multi-tenant service API.

    :param http_client: Transport to use; a default one is created (and
        closed by :meth:`aclose`) when omitted
    :type http_client: Optional[httpx.AsyncClient]
    :param timeout: Read timeout in seconds, or a full timeout object,
        for the default transport
    :type timeout: Union[float, httpx.Timeout, None]
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Union[float, httpx.Timeout, None] = None,
    ):
        self._owns_http_client = http_client is None
        self._http_client = http_client or create_http_client(timeout=timeout)
        self._base_url: Optional[httpx.URL] = None
        self._credential: Optional[Credential] = None
        self._headers: Dict[str, str] = dict(DEFAULT_HEADERS)
        self._max_sleep: float = DEFAULT_MAX_SLEEP
        self._max_retry: int = DEFAULT_MAX_RETRY
        self.metrics = RetryMetrics()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "Client":
        """Create a client configured from settings.

        The endpoint override wins over the subdomain when both are set.

        :param settings: Settings to apply; loaded from the environment
            when omitted
        :type settings: Optional[ClientSettings]
        :param http_client: Optional transport
        :type http_client: Optional[httpx.AsyncClient]
        :return: Configured client
        :rtype: Client
        :raises ConfigError: If the settings describe an invalid endpoint
            or incomplete credential
        """
        settings = settings or ClientSettings()
        logging.getLogger(PACKAGE_LOGGER).setLevel(settings.log_level)
        client = cls(http_client=http_client, timeout=settings.timeout)
        if settings.endpoint_url:
            client.set_endpoint_url(settings.endpoint_url)
        elif settings.subdomain:
            client.set_subdomain(settings.subdomain)
        if settings.user_agent:
            client.set_header("User-Agent", settings.user_agent)
        client.set_credential(settings.build_credential())
        client.set_max_retry(settings.max_retry)
        client.set_max_retry_sleep_delay(settings.max_retry_sleep)
        return client

    @property
    def base_url(self) -> Optional[str]:
        """Configured base address without a trailing slash."""
        if self._base_url is None:
            return None
        return str(self._base_url).rstrip("/")

    @property
    def headers(self) -> Dict[str, str]:
        """Copy of the headers applied to every request."""
        return dict(self._headers)

    @property
    def max_retry(self) -> int:
        return self._max_retry

    @property
    def max_retry_sleep(self) -> float:
        return self._max_sleep

    def set_header(self, key: str, value: str) -> None:
        """Save a header included in every request.

        :param key: Header name
        :type key: str
        :param value: Header value
        :type value: str
        """
        self._headers[key] = value

    def set_subdomain(self, subdomain: str) -> None:
        """Validate a tenant subdomain and use its base address.

        The previous base address is kept if validation fails.

        :param subdomain: Tenant subdomain
        :type subdomain: str
        :raises InvalidSubdomainError: If the subdomain is malformed
        :raises AddressParseError: If the composed address cannot be parsed
        """
        self._base_url = EndpointConfig.build_base_url(subdomain)
        logger.debug(f"Base address set to {self._base_url}")

    def set_endpoint_url(self, endpoint_url: str) -> None:
        """Replace the base address without subdomain validation.

        Mainly used to point the client at a test server.

        :param endpoint_url: Absolute http(s) address
        :type endpoint_url: str
        :raises AddressParseError: If the address cannot be parsed
        """
        self._base_url = EndpointConfig.parse_endpoint_url(endpoint_url)
        logger.debug(f"Base address overridden to {sanitize_url(str(self._base_url))}")

    def set_credential(self, credential: Optional[Credential]) -> None:
        """Save the credential attached to every request.

        :param credential: Credential, or None for anonymous requests
        :type credential: Optional[Credential]
        """
        self._credential = credential

    def set_max_retry_sleep_delay(self, delay: Union[float, timedelta]) -> None:
        """Set the longest ``Retry-After`` delay the client will sleep.

        Defaults to 5 seconds.

        :param delay: Ceiling in seconds, or as a timedelta
        :type delay: Union[float, timedelta]
        """
        if isinstance(delay, timedelta):
            delay = delay.total_seconds()
        self._max_sleep = float(delay)

    def set_max_retry(self, retries: int) -> None:
        """Set the maximum number of attempts for throttled requests.

        Defaults to 3. Values of zero or less are ignored.

        :param retries: Maximum attempts in total
        :type retries: int
        """
        if retries > 0:
            self._max_retry = retries

    async def get(self, path: str, timeout: Optional[float] = None) -> bytes:
        """Fetch ``path`` and return the raw response body.

        :param path: Path relative to the base address
        :type path: str
        :param timeout: Optional deadline for the whole operation, in seconds
        :type timeout: Optional[float]
        :return: Response body
        :rtype: bytes
        :raises APIError: If the final status is not 200
        """
        return await self._exec_request("GET", path, None, timeout)

    async def post(self, path: str, data: Any, timeout: Optional[float] = None) -> bytes:
        """Send ``data`` as JSON to ``path`` and return the raw response body.

        :raises EncodingError: If ``data`` cannot be serialized
        :raises APIError: If the final status is not 200 or 201
        """
        return await self._exec_request("POST", path, encode_body(data), timeout)

    async def put(self, path: str, data: Any, timeout: Optional[float] = None) -> bytes:
        """Send ``data`` as JSON to ``path`` and return the raw response body.

        :raises EncodingError: If ``data`` cannot be serialized
        :raises APIError: If the final status is not 200 or 204
        """
        return await self._exec_request("PUT", path, encode_body(data), timeout)

    async def delete(self, path: str, timeout: Optional[float] = None) -> None:
        """Delete ``path``.

        :raises APIError: If the final status is not 204
        """
        await self._exec_request("DELETE", path, None, timeout)

    async def _exec_request(
        self,
        method: str,
        path: str,
        body: Optional[bytes],
        timeout: Optional[float],
    ) -> bytes:
        if timeout is None:
            return await self._dispatch(method, path, body)
        try:
            return await asyncio.wait_for(self._dispatch(method, path, body), timeout)
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"{method} {path} did not complete within {timeout}s", timeout=timeout
            ) from e

    async def _dispatch(self, method: str, path: str, body: Optional[bytes]) -> bytes:
        base_url = self.base_url
        if base_url is None:
            raise EndpointNotConfiguredError()

        url = base_url + path
        headers = dict(self._headers)
        credential = self._credential
        auth = basic_auth_for(credential)
        retry = ThrottleRetry(
            max_retry=self._max_retry, max_sleep=self._max_sleep, metrics=self.metrics
        )

        async def send_once() -> httpx.Response:
            request = build_request(self._http_client, method, url, body, headers, credential)
            return await send_request(self._http_client, request, auth=auth)

        response, attempts = await retry.run(send_once, method=method)
        logger.debug(
            f"{method} {sanitize_url(url)} -> {response.status_code} after {attempts} attempt(s)"
        )
        body = classify_response(response, SUCCESS_CODES[method])
        if attempts > 1:
            self.metrics.record_success_after_retry(method, attempts)
        return body

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
