"""Wikibase client: label resolution, item creation and claim upload."""

from .client import Client, decode_response
from .resolver import IdentifierResolver
from .session import EditTokenCache
from .sync import EntitySync

__all__ = ["Client", "decode_response", "EditTokenCache", "EntitySync", "IdentifierResolver"]
