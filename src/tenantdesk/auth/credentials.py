"""Credential types attached to outgoing API requests.

A credential answers three questions: whether it is a bearer token,
which identity it belongs to, and what its secret is. The client uses
the answers to choose between an ``Authorization: Bearer`` header and
HTTP Basic authentication.

Examples
--------
>>> cred = APITokenCredential("agent@example.com", "abc123")
>>> cred.bearer
False
>>> cred.email
'agent@example.com/token'
"""

from abc import ABC, abstractmethod


class Credential(ABC):
    """Provide the credential interface consumed by the client."""

    @property
    @abstractmethod
    def bearer(self) -> bool:
        """Return True when the secret is sent as a bearer token."""
        pass

    @property
    @abstractmethod
    def email(self) -> str:
        """Return the identity used as the Basic auth username."""
        pass

    @property
    @abstractmethod
    def secret(self) -> str:
        """Return the token or password."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(email={self.email!r}, secret='***')"


class BasicAuthCredential(Credential):
    """Email and password sent with HTTP Basic authentication.

    :param email: Account email address
    :type email: str
    :param password: Account password
    :type password: str
    """

    def __init__(self, email: str, password: str):
        self._email = email
        self._password = password

    @property
    def bearer(self) -> bool:
        return False

    @property
    def email(self) -> str:
        return self._email

    @property
    def secret(self) -> str:
        return self._password


class APITokenCredential(Credential):
    """Email and API token sent with HTTP Basic authentication.

    The service expects the username in the form ``{email}/token``.

    :param email: Account email address
    :type email: str
    :param api_token: API token issued by the service
    :type api_token: str
    """

    def __init__(self, email: str, api_token: str):
        self._email = email
        self._api_token = api_token

    @property
    def bearer(self) -> bool:
        return False

    @property
    def email(self) -> str:
        return f"{self._email}/token"

    @property
    def secret(self) -> str:
        return self._api_token


class BearerCredential(Credential):
    """OAuth access token sent as ``Authorization: Bearer <token>``.

    :param access_token: OAuth access token
    :type access_token: str
    """

    def __init__(self, access_token: str):
        self._access_token = access_token

    @property
    def bearer(self) -> bool:
        return True

    @property
    def email(self) -> str:
        return ""

    @property
    def secret(self) -> str:
        return self._access_token
