"""Classification of the final response against a verb's success set."""

import logging
from typing import Iterable

import httpx

from ...exceptions import APIError
from ..security import sanitize_url

logger = logging.getLogger(__name__)


def classify_response(response: httpx.Response, success_codes: Iterable[int]) -> bytes:
    """Return the raw body on success, raise ``APIError`` otherwise.

    :param response: Final response, with its content already read
    :type response: httpx.Response
    :param success_codes: Status codes that count as success
    :type success_codes: Iterable[int]
    :return: Raw response body
    :rtype: bytes
    :raises APIError: If the status is not a success code
    """
    if response.status_code in success_codes:
        return response.content

    method = response.request.method
    url = sanitize_url(str(response.request.url))
    logger.debug(f"{method} {url} failed with status {response.status_code}")
    raise APIError(
        status_code=response.status_code,
        body=response.content,
        headers=response.headers,
        method=method,
        url=url,
    )
