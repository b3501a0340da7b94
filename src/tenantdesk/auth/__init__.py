"""Authentication credentials for the tenantdesk client."""

from .credentials import (
    APITokenCredential,
    BasicAuthCredential,
    BearerCredential,
    Credential,
)

__all__ = [
    "Credential",
    "BasicAuthCredential",
    "APITokenCredential",
    "BearerCredential",
]
