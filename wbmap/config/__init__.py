"""Configuration management for wbmap."""

from .manager import ConfigManager
from .models import OAuthConfig, ProjectConfig, PropertyConfig, WikibaseConfig

__all__ = ["ConfigManager", "OAuthConfig", "ProjectConfig", "PropertyConfig", "WikibaseConfig"]
