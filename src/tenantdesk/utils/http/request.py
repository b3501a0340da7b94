"""Request building and single-attempt dispatch.

This module turns a verb, a path and an optional body into an
``httpx.Request`` carrying the client's headers and credential, and
sends exactly one attempt of it. Retrying is handled by
:mod:`tenantdesk.utils.http.retry`.
"""

import json
import logging
from typing import Any, Dict, FrozenSet, Mapping, Optional

import httpx
from pydantic import BaseModel

from ...auth.credentials import Credential
from ...exceptions import EncodingError, RequestTimeoutError, TransportError
from ..security import sanitize_headers, sanitize_url

logger = logging.getLogger(__name__)

# Declared success status codes per verb
SUCCESS_CODES: Dict[str, FrozenSet[int]] = {
    "GET": frozenset({httpx.codes.OK}),
    "POST": frozenset({httpx.codes.OK, httpx.codes.CREATED}),
    "PUT": frozenset({httpx.codes.OK, httpx.codes.NO_CONTENT}),
    "DELETE": frozenset({httpx.codes.NO_CONTENT}),
}


def encode_body(data: Any) -> bytes:
    """Serialize a request body to JSON bytes.

    Pydantic models are dumped by alias without unset optional fields.
    ``bytes`` are treated as already encoded and passed through.

    :param data: Value to serialize
    :type data: Any
    :return: UTF-8 encoded JSON payload
    :rtype: bytes
    :raises EncodingError: If the value cannot be serialized
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    try:
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps(data, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(
            f"cannot encode request body: {e}", type_name=type(data).__name__
        ) from e


def build_request(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    body: Optional[bytes],
    headers: Mapping[str, str],
    credential: Optional[Credential],
) -> httpx.Request:
    """Build one attempt of a request.

    Headers are applied in order, so a later key wins. A bearer
    credential adds ``Authorization: Bearer <secret>``; any other
    credential is applied as HTTP Basic auth when the request is sent.

    :param http_client: Transport used to build the request
    :type http_client: httpx.AsyncClient
    :param method: HTTP verb
    :type method: str
    :param url: Fully-addressed URL
    :type url: str
    :param body: Encoded payload, or None
    :type body: Optional[bytes]
    :param headers: Configured headers
    :type headers: Mapping[str, str]
    :param credential: Optional credential
    :type credential: Optional[Credential]
    :return: Request ready to send
    :rtype: httpx.Request
    :raises TransportError: If the address is malformed
    """
    try:
        request = http_client.build_request(method, url, content=body)
    except httpx.InvalidURL as e:
        safe_url = sanitize_url(url)
        raise TransportError(
            f"{method} {safe_url!r} has a malformed address: {e}", method=method, url=safe_url
        ) from e
    for key, value in headers.items():
        request.headers[key] = value
    if credential is not None and credential.bearer:
        request.headers["Authorization"] = f"Bearer {credential.secret}"
    return request


def basic_auth_for(credential: Optional[Credential]) -> Optional[httpx.BasicAuth]:
    """Return HTTP Basic auth for a non-bearer credential, if any."""
    if credential is None or credential.bearer:
        return None
    return httpx.BasicAuth(credential.email, credential.secret)


async def send_request(
    http_client: httpx.AsyncClient,
    request: httpx.Request,
    auth: Optional[httpx.BasicAuth] = None,
) -> httpx.Response:
    """Send one request and read its whole body.

    The response is closed before returning, so the connection is
    released whatever the caller decides to do with the status.

    :param http_client: Transport
    :type http_client: httpx.AsyncClient
    :param request: Request to send
    :type request: httpx.Request
    :param auth: Optional HTTP Basic auth
    :type auth: Optional[httpx.BasicAuth]
    :return: Response with its content loaded
    :rtype: httpx.Response
    :raises RequestTimeoutError: If the transport times out
    :raises TransportError: For any other transport-level failure
    """
    url = sanitize_url(str(request.url))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"=== SEND: {request.method} {url}")
        logger.debug(f"    Headers: {sanitize_headers(request.headers)}")

    try:
        response = await http_client.send(request, auth=auth, stream=True)
        try:
            await response.aread()
        finally:
            await response.aclose()
    except httpx.TimeoutException as e:
        raise RequestTimeoutError(f"{request.method} {url} timed out: {e}") from e
    except httpx.HTTPError as e:
        raise TransportError(
            f"{request.method} {url} failed: {e}", method=request.method, url=url
        ) from e

    logger.debug(f"    Response: {response.status_code} ({len(response.content)} bytes)")
    return response
