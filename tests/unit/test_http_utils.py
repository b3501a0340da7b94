"""Unit tests for transport helpers, metrics and response classification."""

import httpx
import pytest

from tenantdesk.exceptions import APIError
from tenantdesk.utils.http import RetryMetrics, classify_response, create_http_client


@pytest.mark.asyncio
async def test_create_http_client_defaults():
    client = create_http_client()
    try:
        assert client.timeout.connect == 5.0
        assert client.timeout.read == 30.0
        assert client.timeout.write == 10.0
        assert client.timeout.pool == 5.0
        assert client.follow_redirects is False
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_create_http_client_number_sets_read_timeout():
    client = create_http_client(timeout=12.0)
    try:
        assert client.timeout.read == 12.0
        assert client.timeout.connect == 5.0
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_create_http_client_accepts_timeout_object():
    client = create_http_client(timeout=httpx.Timeout(3.0))
    try:
        assert client.timeout.read == 3.0
        assert client.timeout.connect == 3.0
    finally:
        await client.aclose()


def test_metrics_reset():
    metrics = RetryMetrics()
    metrics.record_throttle("GET")
    assert metrics.get_metrics()["counters"]["throttles_total.GET"] == 1
    metrics.reset()
    assert metrics.get_metrics() == {}


def _response(status, content=b"", headers=None, method="GET"):
    request = httpx.Request(method, "https://acme.example-service.com/api/v2/x?token=secret")
    return httpx.Response(status, content=content, headers=headers, request=request)


class TestClassifyResponse:
    """Status classification."""

    def test_success_returns_body(self):
        assert classify_response(_response(200, b"payload"), {200}) == b"payload"

    def test_no_content_success_returns_empty_body(self):
        assert classify_response(_response(204, method="PUT"), {200, 204}) == b""

    def test_mismatch_raises_api_error(self):
        response = _response(404, b'{"error": "RecordNotFound"}', {"X-Request-Id": "r1"})
        with pytest.raises(APIError) as exc_info:
            classify_response(response, {200})
        err = exc_info.value
        assert err.status_code == 404
        assert err.body == b'{"error": "RecordNotFound"}'
        assert err.headers["x-request-id"] == "r1"
        assert err.method == "GET"
        assert "secret" not in err.url
        assert str(err) == "404: Not Found"
        assert err.json() == {"error": "RecordNotFound"}

    def test_success_code_of_other_verb_is_failure(self):
        with pytest.raises(APIError):
            classify_response(_response(200, method="DELETE"), {204})
