"""Discovery of tagged fields on ItemHeader models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..errors import PreconditionError
from .models import ITEM_TAG, OMIT_ON_CREATE, PROPERTY_TAG, ItemHeader


@dataclass(frozen=True)
class PropertyField:
    """A model field that is uploaded as a claim."""

    name: str
    label: str
    modifiers: frozenset[str]
    field_type: Any

    @property
    def omit_on_create(self) -> bool:
        return OMIT_ON_CREATE in self.modifiers

    def value_of(self, record: BaseModel) -> Any:
        return getattr(record, self.name)


@dataclass(frozen=True)
class ItemField:
    """A model field whose tag names an item to resolve before uploading."""

    name: str
    label: str
    modifiers: frozenset[str]


def parse_tag(tag: str) -> tuple[str, frozenset[str]]:
    """Split ``"label,modifier,..."`` into the label and its modifiers."""
    parts = [part.strip() for part in tag.split(",")]
    return parts[0], frozenset(part for part in parts[1:] if part)


def _tag(field_info: FieldInfo, key: str) -> str | None:
    extra = field_info.json_schema_extra
    if not isinstance(extra, dict):
        return None
    tag = extra.get(key)
    if not isinstance(tag, str) or not tag:
        return None
    return tag


def _model_class(model: type[BaseModel] | BaseModel) -> type[BaseModel]:
    cls = model if isinstance(model, type) else type(model)
    if not issubclass(cls, BaseModel):
        raise PreconditionError(f"Expected a pydantic model, got {cls.__name__}")
    return cls


def property_fields(model: type[BaseModel] | BaseModel) -> list[PropertyField]:
    """Fields carrying a ``property`` tag, in declaration order."""
    fields = []
    for name, field_info in _model_class(model).model_fields.items():
        tag = _tag(field_info, PROPERTY_TAG)
        if tag is None:
            continue
        label, modifiers = parse_tag(tag)
        fields.append(PropertyField(name, label, modifiers, field_info.annotation))
    return fields


def item_fields(model: type[BaseModel] | BaseModel) -> list[ItemField]:
    """Fields carrying an ``item`` tag, in declaration order."""
    fields = []
    for name, field_info in _model_class(model).model_fields.items():
        tag = _tag(field_info, ITEM_TAG)
        if tag is None:
            continue
        label, modifiers = parse_tag(tag)
        fields.append(ItemField(name, label, modifiers))
    return fields


def check_record(record: Any) -> ItemHeader:
    """Make sure ``record`` is a mutable ItemHeader instance and return it."""
    if isinstance(record, type):
        raise PreconditionError(f"Expected an instance of the item to upload, not the class {record.__name__}")
    if not isinstance(record, BaseModel):
        raise PreconditionError(f"Expected a pydantic model for item to upload, got {type(record).__name__}")
    if not isinstance(record, ItemHeader):
        raise PreconditionError(f"Expected {type(record).__name__} to have the item header")
    if record.model_config.get("frozen"):
        raise PreconditionError(f"Expected item header of {type(record).__name__} to be mutable")
    return record
