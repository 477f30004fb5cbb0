from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Project-wide settings sourced from .env and environment variables."""

    wikibase_url: str | None = None
    mediawiki_api_url: str | None = None
    sparql_endpoint_url: str | None = None

    wikibase_username: str | None = None
    wikibase_password: str | None = None

    oauth_consumer_key: str | None = None
    oauth_consumer_secret: str | None = None
    oauth_access_token: str | None = None
    oauth_access_secret: str | None = None

    user_agent: str | None = None

    class Config:
        env_file = ".env", ".env.local"
        env_file_encoding = "utf-8"

settings = Settings()
