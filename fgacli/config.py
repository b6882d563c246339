"""Client configuration and the credentials derived from it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

VERSION = "dev"
USER_AGENT = "openfga-cli/" + VERSION


class CredentialsMethod(str, Enum):
    """How the client authenticates."""

    NONE = "none"
    API_TOKEN = "api_token"
    CLIENT_CREDENTIALS = "client_credentials"


@dataclass(frozen=True)
class Credentials:
    """Credentials used to reach the API."""

    method: CredentialsMethod = CredentialsMethod.NONE
    api_token: str = ""
    client_id: str = ""
    client_secret: str = ""
    api_audience: str = ""
    api_token_issuer: str = ""
    scopes: str = ""


@dataclass
class ClientConfig:
    """Settings for connecting to a store."""

    api_url: str = ""
    store_id: str = ""
    authorization_model_id: str = ""
    api_token: str = ""
    api_token_issuer: str = ""
    api_audience: str = ""
    api_scopes: list[str] = field(default_factory=list)
    client_id: str = ""
    client_secret: str = ""

    def credentials(self) -> Credentials:
        """Choose an API token first, then client credentials, else none."""
        if self.api_token:
            return Credentials(method=CredentialsMethod.API_TOKEN, api_token=self.api_token)
        if self.client_id:
            return Credentials(
                method=CredentialsMethod.CLIENT_CREDENTIALS,
                client_id=self.client_id,
                client_secret=self.client_secret,
                api_audience=self.api_audience,
                api_token_issuer=self.api_token_issuer,
                scopes=" ".join(self.api_scopes),
            )
        return Credentials(method=CredentialsMethod.NONE)

    def client_configuration(self) -> dict[str, Any]:
        """Return the settings a client is built from."""
        return {
            "api_url": self.api_url,
            "store_id": self.store_id,
            "authorization_model_id": self.authorization_model_id,
            "credentials": self.credentials(),
            "user_agent": USER_AGENT,
        }