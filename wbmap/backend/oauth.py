"""Transport for the MediaWiki action API on top of WikibaseIntegrator logins."""

from __future__ import annotations

import logging
from pathlib import Path

import requests
from pydantic import BaseModel, Field
from wikibaseintegrator.wbi_login import Login, OAuth1

from ..errors import PreconditionError, TransportError
from .interface import NetworkClient

logger = logging.getLogger(__name__)


class ConsumerInformation(BaseModel):
    key: str = Field(..., description="OAuth consumer key")
    secret: str = Field(..., description="OAuth consumer secret")


class AccessToken(BaseModel):
    token: str = Field(..., description="OAuth access token")
    secret: str = Field(..., description="OAuth access secret")


class OAuthInformation(BaseModel):
    """Consumer and access tokens, in the layout they are saved to disk."""

    consumer: ConsumerInformation
    access: AccessToken | None = None


def load_oauth_information(path: str | Path) -> OAuthInformation:
    """Load OAuth tokens from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file doesn't match the expected layout
    """
    oauth_file = Path(path)
    if not oauth_file.exists():
        raise FileNotFoundError(f"OAuth information file not found: {path}")
    return OAuthInformation.model_validate_json(oauth_file.read_text(encoding="utf-8"))


def api_url_for(urlbase: str) -> str:
    return f"{urlbase.rstrip('/')}/w/api.php"


class OAuthNetworkClient(NetworkClient):
    """Sends API requests through the authenticated session of a login.

    Args:
        login: WikibaseIntegrator login whose session carries the credentials;
            ``None`` for anonymous access
        api_url: Full URL of ``api.php``
        timeout: Seconds to wait for the server, passed to requests
    """

    def __init__(self, login: Login | OAuth1 | None, api_url: str, timeout: float | None = 60) -> None:
        self.api_url = api_url
        self.timeout = timeout
        self.session: requests.Session = login.get_session() if login is not None else requests.Session()

    @classmethod
    def from_oauth_information(
        cls, oauth_info: OAuthInformation, api_url: str, user_agent: str | None = None
    ) -> OAuthNetworkClient:
        """Create a client for an owner-only OAuth consumer."""
        if oauth_info.access is None:
            raise PreconditionError("OAuth information must include an access token")
        login = OAuth1(
            consumer_token=oauth_info.consumer.key,
            consumer_secret=oauth_info.consumer.secret,
            access_token=oauth_info.access.token,
            access_secret=oauth_info.access.secret,
            mediawiki_api_url=api_url,
            user_agent=user_agent,
        )
        return cls(login, api_url)

    @classmethod
    def from_bot_password(
        cls, user: str, password: str, api_url: str, user_agent: str | None = None
    ) -> OAuthNetworkClient:
        """Create a client logged in with a bot password."""
        login = Login(user=user, password=password, mediawiki_api_url=api_url, user_agent=user_agent)
        return cls(login, api_url)

    def get(self, args: dict[str, str]) -> bytes:
        return self._request("GET", args)

    def post(self, args: dict[str, str]) -> bytes:
        return self._request("POST", args)

    def _request(self, method: str, args: dict[str, str]) -> bytes:
        # We always deal in JSON here
        params = {**args, "format": "json"}
        logger.debug("%s %s action=%s", method, self.api_url, params.get("action"))
        try:
            if method == "GET":
                response = self.session.get(self.api_url, params=params, timeout=self.timeout)
            else:
                response = self.session.post(self.api_url, data=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"{method} {self.api_url} failed: {exc}") from exc

        if response.status_code != 200:
            raise TransportError(
                f"Got a {response.status_code} response: {response.reason}",
                status_code=response.status_code,
            )
        return response.content
