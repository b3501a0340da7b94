"""Default transport construction.

The client core does not pool or tune connections itself; it hands a
timeout and pool limits to ``httpx.AsyncClient`` and lets the transport
manage its own connections.
"""

import logging
from typing import Any, Optional, Union

import httpx

logger = logging.getLogger(__name__)

# Seconds; the read timeout is the one settings may override
CONNECT_TIMEOUT = 5.0
READ_TIMEOUT = 30.0
WRITE_TIMEOUT = 10.0
POOL_TIMEOUT = 5.0

DEFAULT_LIMITS = httpx.Limits(
    max_keepalive_connections=10, max_connections=20, keepalive_expiry=30.0
)


def create_http_client(
    timeout: Union[float, httpx.Timeout, None] = None,
    limits: Optional[httpx.Limits] = None,
    **kwargs: Any,
) -> httpx.AsyncClient:
    """Create the default transport used when a caller supplies none.

    A number is taken as the read timeout; connect, write and pool
    timeouts keep their defaults. Redirects are not followed so the
    final status is the server's own.

    :param timeout: Read timeout in seconds, or a full timeout object
    :type timeout: Union[float, httpx.Timeout, None]
    :param limits: Optional connection pool limits
    :type limits: Optional[httpx.Limits]
    :param kwargs: Additional ``httpx.AsyncClient`` options
    :return: New HTTP client instance
    :rtype: httpx.AsyncClient
    """
    if not isinstance(timeout, httpx.Timeout):
        timeout = httpx.Timeout(
            CONNECT_TIMEOUT,
            read=READ_TIMEOUT if timeout is None else timeout,
            write=WRITE_TIMEOUT,
            pool=POOL_TIMEOUT,
        )
    logger.debug(f"Creating default HTTP client (read timeout {timeout.read}s)")
    return httpx.AsyncClient(
        timeout=timeout,
        limits=limits or DEFAULT_LIMITS,
        follow_redirects=False,
        **kwargs,
    )
