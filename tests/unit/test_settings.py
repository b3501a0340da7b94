"""Unit tests for environment-driven client settings."""

import logging

import httpx
import pytest
from pydantic import ValidationError

from tenantdesk.auth import APITokenCredential, BasicAuthCredential, BearerCredential
from tenantdesk.client import Client
from tenantdesk.config.settings import ClientSettings
from tenantdesk.exceptions import ConfigError


def test_defaults():
    settings = ClientSettings(_env_file=None)
    assert settings.subdomain is None
    assert settings.max_retry == 3
    assert settings.max_retry_sleep == 5.0
    assert settings.log_level == "INFO"
    assert settings.build_credential() is None


def test_loaded_from_prefixed_env(monkeypatch):
    monkeypatch.setenv("TENANTDESK_SUBDOMAIN", "acme")
    monkeypatch.setenv("TENANTDESK_MAX_RETRY", "5")
    monkeypatch.setenv("TENANTDESK_LOG_LEVEL", "debug")
    settings = ClientSettings(_env_file=None)
    assert settings.subdomain == "acme"
    assert settings.max_retry == 5
    assert settings.log_level == "DEBUG"


def test_invalid_subdomain_rejected():
    with pytest.raises(ValidationError):
        ClientSettings(_env_file=None, subdomain="-acme")


def test_bearer_token_wins():
    settings = ClientSettings(
        _env_file=None, email="a@acme.com", api_token="tok", bearer_token="oauth"
    )
    assert isinstance(settings.build_credential(), BearerCredential)


def test_api_token_credential():
    cred = ClientSettings(_env_file=None, email="a@acme.com", api_token="tok").build_credential()
    assert isinstance(cred, APITokenCredential)
    assert cred.email == "a@acme.com/token"


def test_password_credential():
    cred = ClientSettings(_env_file=None, email="a@acme.com", password="pw").build_credential()
    assert isinstance(cred, BasicAuthCredential)


@pytest.mark.parametrize("field", ["api_token", "password"])
def test_secret_without_email_rejected(field):
    settings = ClientSettings(_env_file=None, **{field: "secret"})
    with pytest.raises(ConfigError):
        settings.build_credential()


class TestFromSettings:
    """Client construction from settings."""

    def test_applies_everything(self):
        settings = ClientSettings(
            _env_file=None,
            subdomain="acme",
            bearer_token="oauth",
            max_retry=5,
            max_retry_sleep=2.5,
            user_agent="my-app/1.0",
        )
        client = Client.from_settings(settings, http_client=httpx.AsyncClient())
        assert client.base_url == "https://acme.example-service.com/api/v2"
        assert client.max_retry == 5
        assert client.max_retry_sleep == 2.5
        assert client.headers["User-Agent"] == "my-app/1.0"

    def test_endpoint_url_wins_over_subdomain(self):
        settings = ClientSettings(
            _env_file=None, subdomain="acme", endpoint_url="http://localhost:8080/api/v2"
        )
        client = Client.from_settings(settings, http_client=httpx.AsyncClient())
        assert client.base_url == "http://localhost:8080/api/v2"

    def test_non_positive_max_retry_ignored(self):
        settings = ClientSettings(_env_file=None, max_retry=0)
        client = Client.from_settings(settings, http_client=httpx.AsyncClient())
        assert client.max_retry == 3

    @pytest.mark.asyncio
    async def test_default_transport_uses_configured_timeout(self):
        client = Client.from_settings(ClientSettings(_env_file=None, timeout=7.0))
        try:
            assert client._http_client.timeout.read == 7.0
        finally:
            await client.aclose()

    def test_log_level_applied_to_package_logger(self):
        package_logger = logging.getLogger("tenantdesk")
        previous = package_logger.level
        try:
            settings = ClientSettings(_env_file=None, log_level="debug")
            Client.from_settings(settings, http_client=httpx.AsyncClient())
            assert package_logger.level == logging.DEBUG
            assert logging.getLogger("tenantdesk.client").isEnabledFor(logging.DEBUG)

            Client.from_settings(
                ClientSettings(_env_file=None, log_level="ERROR"),
                http_client=httpx.AsyncClient(),
            )
            assert not logging.getLogger("tenantdesk.utils.http.retry").isEnabledFor(
                logging.WARNING
            )
        finally:
            package_logger.setLevel(previous)
