import sys
from pathlib import Path
from typing import List, Optional, Union

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tenantdesk.client import Client  # noqa: E402

TEST_ENDPOINT = "https://acme.example-service.com/api/v2"


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer TENANTDESK_* variables out of the tests."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("TENANTDESK_"):
            monkeypatch.delenv(key, raising=False)
    yield


class ScriptedTransport:
    """Mock transport handler replaying scripted responses.

    Each entry is either a ``(status, headers, content)`` tuple or an
    exception to raise. The last entry repeats once the script runs out.
    """

    def __init__(self, script: List[Union[tuple, Exception]]):
        self.script = list(script)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(step, Exception):
            if isinstance(step, httpx.RequestError):
                step.request = request
            raise step
        status, headers, content = step
        return httpx.Response(status, headers=headers, content=content)


@pytest.fixture
def make_client():
    """Factory for a client wired to a scripted mock transport."""

    def _make(*script, endpoint: Optional[str] = TEST_ENDPOINT):
        transport = ScriptedTransport(list(script))
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        client = Client(http_client=http_client)
        if endpoint:
            client.set_endpoint_url(endpoint)
        return client, transport

    return _make


# Rely on pytest-asyncio for async test handling; no custom hook needed.
