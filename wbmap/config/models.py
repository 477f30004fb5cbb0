"""Pydantic models for configuration validation."""

from typing import Any, Literal
from pydantic import BaseModel, Field


class OAuthConfig(BaseModel):
    """Owner-only OAuth consumer credentials."""

    consumer_key: str = Field(..., description="OAuth consumer key")
    consumer_secret: str = Field(..., description="OAuth consumer secret")
    access_token: str = Field(..., description="OAuth access token")
    access_secret: str = Field(..., description="OAuth access secret")


class WikibaseConfig(BaseModel):
    """Wikibase instance configuration."""
    
    url: str | None = Field(None, description="Wikibase instance URL, defaults to WIKIBASE_URL")
    api_url: str | None = Field(None, description="MediaWiki api.php URL, defaults to <url>/w/api.php")
    username: str | None = Field(None, description="Username for authentication")
    password: str | None = Field(None, description="Password for authentication")
    oauth: OAuthConfig | None = Field(None, description="OAuth credentials")
    oauth_file: str | None = Field(None, description="JSON file holding OAuth consumer and access tokens")
    sparql_endpoint: str | None = Field(None, description="SPARQL endpoint URL")
    user_agent: str | None = Field(None, description="User agent sent with every request")


class PropertyConfig(BaseModel):
    """A property the project expects to exist."""

    label: str = Field(..., description="Property label")
    datatype: Literal["string", "quantity", "time", "wikibase-item"] = Field(
        "string", description="Datatype used if the property has to be created"
    )


class ProjectConfig(BaseModel):
    """Main project configuration."""
    
    name: str = Field(..., description="Project name")
    version: str = Field("1.0.0", description="Project version")
    description: str | None = Field(None, description="Project description")
    
    wikibase: WikibaseConfig = Field(..., description="Wikibase configuration")

    properties: list[PropertyConfig] = Field(default_factory=list, description="Properties to map")
    items: list[str] = Field(default_factory=list, description="Item labels to map")
    
    # Additional settings
    settings: dict[str, Any] = Field(default_factory=dict, description="Additional settings")
