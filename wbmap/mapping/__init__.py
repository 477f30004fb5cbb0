"""Mapping layer turning annotated pydantic models into Wikibase claims.

This module provides functionality to:
- Declare records with tagged fields (``wikibase_property``/``wikibase_item``)
- Discover the tagged fields of a record type
- Encode field values into Wikibase datavalues
"""

from .models import (
    ITEM_TAG,
    OMIT_ON_CREATE,
    PROPERTY_TAG,
    ItemHeader,
    ItemRef,
    wikibase_item,
    wikibase_property,
)
from .introspection import ItemField, PropertyField, check_record, item_fields, property_fields
from .codec import DataValue, datatype_for, encode

__all__ = [
    # Models
    "ITEM_TAG",
    "OMIT_ON_CREATE",
    "PROPERTY_TAG",
    "ItemHeader",
    "ItemRef",
    "wikibase_item",
    "wikibase_property",
    # Introspection
    "ItemField",
    "PropertyField",
    "check_record",
    "item_fields",
    "property_fields",
    # Codec
    "DataValue",
    "datatype_for",
    "encode",
]
