"""Pydantic building blocks for records that are synchronised to Wikibase."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema

PROPERTY_TAG = "property"
ITEM_TAG = "item"

# Modifier for a property tag: leave the field out of the initial create call
# and only add it during a later claim upload.
OMIT_ON_CREATE = "omitoncreate"


class ItemRef(str):
    """A reference to another item by its Q id, e.g. ``ItemRef("Q42")``.

    Fields annotated with this type are uploaded as ``wikibase-item`` claims.
    The value is only checked when it is encoded.
    """

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(cls, core_schema.str_schema())


class ItemHeader(BaseModel):
    """Base class for every record that is uploaded to Wikibase.

    Subclass it and tag the fields that should become claims with
    :func:`wikibase_property`. Fields name properties by label; P numbers
    differ from one Wikibase instance to the next. Dump the model with
    ``by_alias=True`` to persist the Wikibase state alongside the record.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", alias="wikibase_id", description="Item ID (Q123), empty until created")
    property_ids: dict[str, str] | None = Field(
        None,
        alias="wikibase_property_ids",
        description="Claim GUIDs keyed by property ID",
    )

    @property
    def is_created(self) -> bool:
        return bool(self.id)


def wikibase_property(label: str, *modifiers: str, default: Any = None, **kwargs: Any) -> Any:
    """Declare a model field that maps to the property with ``label``.

    Example:
        class Paper(ItemHeader):
            title: str = wikibase_property("Title", default="")
            published: datetime | None = wikibase_property("Published", OMIT_ON_CREATE)
    """
    tag = ",".join((label, *modifiers))
    return Field(default, json_schema_extra={PROPERTY_TAG: tag}, **kwargs)


def wikibase_item(label: str, default: Any = None, **kwargs: Any) -> Any:
    """Declare a model field whose tag names an item to resolve up front."""
    return Field(default, json_schema_extra={ITEM_TAG: label}, **kwargs)
