"""Project configuration: YAML file first, then .env and environment settings."""

import yaml
from pathlib import Path
from typing import Any
from wikibaseintegrator.wbi_config import config as wbi_config

from ..backend.oauth import (
    AccessToken,
    ConsumerInformation,
    OAuthInformation,
    OAuthNetworkClient,
    api_url_for,
    load_oauth_information,
)
from ..client import Client
from ..errors import PreconditionError
from .models import ProjectConfig
from .settings import settings


class ConfigManager:
    """Builds a logged-in Client from a wbmap project file."""

    def __init__(self, config_path: str) -> None:
        self.config_path = Path(config_path)
        self._config: ProjectConfig | None = None
        self._client: Client | None = None

    def load_config(self) -> ProjectConfig:
        """Read the project YAML.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValidationError: If the wikibase section or a property entry is malformed
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        self._config = ProjectConfig(**config_data)
        return self._config

    @property
    def config(self) -> ProjectConfig:
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Look up ``key`` in the free-form ``settings`` section.

        Dotted keys walk nested mappings, so ``upload.allow_refresh`` reads
        ``settings: {upload: {allow_refresh: ...}}``.
        """
        value = self.config.settings
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_wikibase_url(self) -> str:
        """Wikibase base URL from the project file, else ``WIKIBASE_URL``."""
        url = self.config.wikibase.url or settings.wikibase_url
        if not url:
            raise PreconditionError("No Wikibase URL in the project config or WIKIBASE_URL")
        return url

    def get_api_url(self) -> str:
        """Get the MediaWiki api.php URL."""
        return (
            self.config.wikibase.api_url
            or settings.mediawiki_api_url
            or api_url_for(self.get_wikibase_url())
        )

    def get_sparql_endpoint(self) -> str | None:
        """Get SPARQL endpoint URL."""
        return self.config.wikibase.sparql_endpoint or settings.sparql_endpoint_url

    def get_user_agent(self) -> str | None:
        return self.config.wikibase.user_agent or settings.user_agent

    def get_oauth_information(self) -> OAuthInformation | None:
        """OAuth tokens from the config, the tokens file, or the environment."""
        wikibase = self.config.wikibase
        if wikibase.oauth:
            oauth = wikibase.oauth
            return OAuthInformation(
                consumer=ConsumerInformation(key=oauth.consumer_key, secret=oauth.consumer_secret),
                access=AccessToken(token=oauth.access_token, secret=oauth.access_secret),
            )
        if wikibase.oauth_file:
            return load_oauth_information(self.config_path.parent / wikibase.oauth_file)
        if settings.oauth_consumer_key and settings.oauth_consumer_secret:
            access = None
            if settings.oauth_access_token and settings.oauth_access_secret:
                access = AccessToken(token=settings.oauth_access_token, secret=settings.oauth_access_secret)
            return OAuthInformation(
                consumer=ConsumerInformation(key=settings.oauth_consumer_key, secret=settings.oauth_consumer_secret),
                access=access,
            )
        return None

    def get_network_client(self) -> OAuthNetworkClient:
        """Get a network client logged in with the configured credentials.

        OAuth is preferred over a bot password; with neither, requests are
        anonymous.
        """
        wikibase = self.config.wikibase
        api_url = self.get_api_url()
        user_agent = self.get_user_agent()

        # Configure Wikibase Integrator
        wbi_config['MEDIAWIKI_API_URL'] = api_url
        wbi_config['WIKIBASE_URL'] = self.get_wikibase_url()
        if self.get_sparql_endpoint():
            wbi_config['SPARQL_ENDPOINT_URL'] = self.get_sparql_endpoint()
        if user_agent:
            wbi_config['USER_AGENT'] = user_agent

        oauth_info = self.get_oauth_information()
        if oauth_info is not None:
            return OAuthNetworkClient.from_oauth_information(oauth_info, api_url, user_agent)

        username = wikibase.username or settings.wikibase_username
        password = wikibase.password or settings.wikibase_password
        if username and password:
            return OAuthNetworkClient.from_bot_password(username, password, api_url, user_agent)

        return OAuthNetworkClient(None, api_url)

    def get_client(self) -> Client:
        """Get the Wikibase client for this project.

        Returns:
            Client sharing one session and one set of label maps
        """
        if self._client is None:
            self._client = Client(self.get_network_client())
        return self._client
