"""wbmap - declare Wikibase items as pydantic models and keep them in sync."""

from .client import Client
from .errors import (
    AmbiguousLabelError,
    APIError,
    ClaimUploadError,
    EncodingError,
    InvalidEntityReferenceError,
    LabelNotFoundError,
    PreconditionError,
    ResolutionError,
    ResponseShapeError,
    TransportError,
    UnmappedPropertyError,
    UnsupportedTypeError,
    WikibaseError,
)
from .mapping import OMIT_ON_CREATE, ItemHeader, ItemRef, wikibase_item, wikibase_property

__version__ = "0.1.0"

__all__ = [
    "Client",
    "ItemHeader",
    "ItemRef",
    "OMIT_ON_CREATE",
    "wikibase_item",
    "wikibase_property",
    "AmbiguousLabelError",
    "APIError",
    "ClaimUploadError",
    "EncodingError",
    "InvalidEntityReferenceError",
    "LabelNotFoundError",
    "PreconditionError",
    "ResolutionError",
    "ResponseShapeError",
    "TransportError",
    "UnmappedPropertyError",
    "UnsupportedTypeError",
    "WikibaseError",
]
