"""Tenant endpoint resolution for the service API.

This module is the single source of truth for how a tenant's base
address is built from its subdomain, and for how a raw override address
(usually pointing at a test double) is validated.
"""

import re
from typing import Any

import httpx

from ..exceptions import AddressParseError, InvalidSubdomainError


class EndpointConfig:
    """Centralized configuration for tenant API endpoints."""

    # Tenant host template
    BASE_URL_FORMAT = "https://{subdomain}.example-service.com/api/v2"

    # Alphanumeric, optional internal hyphens, at least three characters
    SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]+[a-z0-9]$")

    ALLOWED_SCHEMES = ("http", "https")

    @classmethod
    def is_valid_subdomain(cls, subdomain: Any) -> bool:
        """Check a subdomain against the tenant naming rules.

        :param subdomain: Candidate subdomain
        :type subdomain: Any
        :return: True if the value is a string matching the pattern
        :rtype: bool

        Example:
            >>> EndpointConfig.is_valid_subdomain("acme-support")
            True
            >>> EndpointConfig.is_valid_subdomain("-acme")
            False
        """
        if not isinstance(subdomain, str):
            return False
        return cls.SUBDOMAIN_PATTERN.fullmatch(subdomain) is not None

    @classmethod
    def build_base_url(cls, subdomain: Any) -> httpx.URL:
        """Compose the base address for a tenant subdomain.

        :param subdomain: Tenant subdomain
        :type subdomain: Any
        :return: Parsed base address
        :rtype: httpx.URL
        :raises InvalidSubdomainError: If the subdomain is malformed
        :raises AddressParseError: If the composed address cannot be parsed

        Example:
            >>> str(EndpointConfig.build_base_url("acme"))
            'https://acme.example-service.com/api/v2'
        """
        if not cls.is_valid_subdomain(subdomain):
            raise InvalidSubdomainError(subdomain)
        return cls.parse_endpoint_url(cls.BASE_URL_FORMAT.format(subdomain=subdomain))

    @classmethod
    def parse_endpoint_url(cls, raw_url: Any) -> httpx.URL:
        """Parse an arbitrary base address without subdomain validation.

        :param raw_url: Absolute http(s) address
        :type raw_url: Any
        :return: Parsed base address
        :rtype: httpx.URL
        :raises AddressParseError: If the address is not an absolute
            http(s) URL with a host
        """
        if not isinstance(raw_url, str) or not raw_url.strip():
            raise AddressParseError(raw_url, "expected a non-empty string")
        try:
            url = httpx.URL(raw_url.strip())
        except httpx.InvalidURL as e:
            raise AddressParseError(raw_url, str(e)) from e

        if url.scheme not in cls.ALLOWED_SCHEMES:
            raise AddressParseError(raw_url, f"unsupported scheme {url.scheme!r}")
        if not url.host:
            raise AddressParseError(raw_url, "missing host")

        return url
