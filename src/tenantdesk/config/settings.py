"""Configuration settings for the tenantdesk client.

Settings are loaded from ``TENANTDESK_``-prefixed environment variables
and ``.env`` files, and applied to a client with
:meth:`tenantdesk.client.Client.from_settings`.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..auth.credentials import (
    APITokenCredential,
    BasicAuthCredential,
    BearerCredential,
    Credential,
)
from ..exceptions import ConfigError
from ..utils.endpoint_config import EndpointConfig


class ClientSettings(BaseSettings):
    """Client settings loaded from environment variables.

    :param subdomain: Tenant subdomain used to build the base address
    :type subdomain: Optional[str]
    :param endpoint_url: Raw base address overriding the subdomain
    :type endpoint_url: Optional[str]
    :param email: Account email for basic or API token auth
    :type email: Optional[str]
    :param api_token: API token (sent as ``email/token`` basic auth)
    :type api_token: Optional[str]
    :param password: Account password (basic auth)
    :type password: Optional[str]
    :param bearer_token: OAuth access token
    :type bearer_token: Optional[str]
    :param max_retry: Maximum attempts for throttled requests
    :type max_retry: int
    :param max_retry_sleep: Longest Retry-After delay honoured, in seconds
    :type max_retry_sleep: float
    :param user_agent: Optional User-Agent override
    :type user_agent: Optional[str]
    :param timeout: Transport read timeout in seconds
    :type timeout: float
    :param log_level: Level applied to the ``tenantdesk`` logger by
        ``Client.from_settings``
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Endpoint
    subdomain: Optional[str] = Field(None, description="Tenant subdomain")
    endpoint_url: Optional[str] = Field(
        None, description="Base address override, mainly for test servers"
    )

    # Credentials
    email: Optional[str] = Field(None, description="Account email")
    api_token: Optional[str] = Field(None, description="API token")
    password: Optional[str] = Field(None, description="Account password")
    bearer_token: Optional[str] = Field(None, description="OAuth access token")

    # Retry behaviour
    max_retry: int = Field(3, description="Maximum attempts for throttled requests")
    max_retry_sleep: float = Field(
        5.0, ge=0, description="Longest Retry-After delay honoured, in seconds"
    )

    # Transport
    user_agent: Optional[str] = Field(None, description="User-Agent override")
    timeout: float = Field(30.0, gt=0, description="Transport read timeout in seconds")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept log levels in any case."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("subdomain")
    @classmethod
    def validate_subdomain(cls, v: Optional[str]) -> Optional[str]:
        """Reject malformed subdomains at load time.

        :param v: Configured subdomain
        :type v: Optional[str]
        :return: The subdomain unchanged
        :rtype: Optional[str]
        """
        if v is not None and not EndpointConfig.is_valid_subdomain(v):
            raise ValueError(f"{v!r} is invalid subdomain")
        return v

    def build_credential(self) -> Optional[Credential]:
        """Select the credential described by the settings.

        Precedence: bearer token, API token, password. API token and
        password both need an email.

        :return: Credential, or None for anonymous access
        :rtype: Optional[Credential]
        :raises ConfigError: If a token or password is set without email
        """
        if self.bearer_token:
            return BearerCredential(self.bearer_token)
        if self.api_token:
            if not self.email:
                raise ConfigError("api_token requires email", setting="email")
            return APITokenCredential(self.email, self.api_token)
        if self.password:
            if not self.email:
                raise ConfigError("password requires email", setting="email")
            return BasicAuthCredential(self.email, self.password)
        return None
