"""Conversion of typed field values into Wikibase datavalues.

The supported field types are ``str`` (string), ``int`` (unitless quantity),
``datetime``/``date`` (day precision time) and :class:`ItemRef` (item).
Optional fields encode ``None`` as "no value", which is returned as ``None``
rather than as a payload.
"""

from __future__ import annotations

import json
import types
from datetime import date, datetime, timezone
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field

from ..errors import EncodingError, InvalidEntityReferenceError, UnsupportedTypeError
from .models import ItemRef

DAY_PRECISION = 11
GREGORIAN_CALENDAR = "http://www.wikidata.org/entity/Q1985727"
UNITLESS = "1"

ENTITY_PREFIXES = {"item": "Q", "property": "P"}


class StringValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["string"] = "string"
    value: str


class Quantity(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: str
    unit: str = UNITLESS


class QuantityValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["quantity"] = "quantity"
    value: Quantity


class TimeData(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: str
    timezone: int = 0
    before: int = 0
    after: int = 0
    precision: int = DAY_PRECISION
    calendarmodel: str = GREGORIAN_CALENDAR


class TimeValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["time"] = "time"
    value: TimeData


class EntityId(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    entity_type: str = Field("item", alias="entity-type")
    numeric_id: int = Field(..., alias="numeric-id")


class ItemRefValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["wikibase-entityid"] = "wikibase-entityid"
    value: EntityId


DataValue = Annotated[
    Union[StringValue, QuantityValue, TimeValue, ItemRefValue],
    Field(discriminator="type"),
]


def unwrap_optional(field_type: Any) -> tuple[Any, bool]:
    """Return the inner type of ``X | None`` and whether it was optional."""
    origin = get_origin(field_type)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(field_type) if arg is not type(None)]
        if len(args) == 1 and len(args) != len(get_args(field_type)):
            return args[0], True
    return field_type, False


def _type_name(field_type: Any) -> str:
    return getattr(field_type, "__name__", None) or repr(field_type)


def datatype_for(field_type: Any) -> str:
    """Wikibase property datatype used for fields of ``field_type``."""
    inner, _ = unwrap_optional(field_type)
    if get_origin(inner) is not None or not isinstance(inner, type):
        raise UnsupportedTypeError(_type_name(inner))
    # order matters: ItemRef is a str, bool is an int and datetime is a date
    if issubclass(inner, ItemRef):
        return "wikibase-item"
    if issubclass(inner, str):
        return "string"
    if issubclass(inner, bool):
        raise UnsupportedTypeError(_type_name(inner))
    if issubclass(inner, int):
        return "quantity"
    if issubclass(inner, date):
        return "time"
    raise UnsupportedTypeError(_type_name(inner))


def normalize_string(value: str) -> str:
    """Collapse internal whitespace runs to one space and trim the ends."""
    return " ".join(value.split())


def encode_string(value: str) -> StringValue | None:
    # wikibase does not accept empty strings, so they become "no value"
    value = normalize_string(value)
    if not value:
        return None
    return StringValue(value=value)


def encode_quantity(value: int) -> QuantityValue:
    return QuantityValue(value=Quantity(amount=str(value)))


def format_time(value: date) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        clock = f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    else:
        clock = "00:00:00"
    return f"+0000000{value.year:04d}-{value.month:02d}-{value.day:02d}T{clock}Z"


def encode_time(value: date) -> TimeValue:
    return TimeValue(value=TimeData(time=format_time(value)))


def parse_entity_ref(value: Any, kind: str = "item") -> int:
    """Validate an entity reference of the given kind and return its number."""
    prefix = ENTITY_PREFIXES[kind]
    if not isinstance(value, str) or not value:
        raise InvalidEntityReferenceError(value, f"expected a {prefix} number")
    if value[0] != prefix:
        raise InvalidEntityReferenceError(value, f"expected a {prefix} number, not {value[0]!r}")
    digits = value[1:]
    if not digits.isascii() or not digits.isdigit():
        raise InvalidEntityReferenceError(value, f"expected digits after {prefix}")
    return int(digits)


def encode_item_ref(value: str) -> ItemRefValue:
    return ItemRefValue(value=EntityId(entity_type="item", numeric_id=parse_entity_ref(value)))


def encode(field_type: Any, value: Any) -> StringValue | QuantityValue | TimeValue | ItemRefValue | None:
    """Encode ``value`` of a field declared as ``field_type``.

    Returns ``None`` when the field should be sent as "no value".

    Raises:
        UnsupportedTypeError: the field type has no Wikibase counterpart
        InvalidEntityReferenceError: an item reference is not a Q number
        EncodingError: the value does not match the declared type
    """
    datatype = datatype_for(field_type)
    if value is None:
        return None

    match datatype:
        case "wikibase-item":
            return encode_item_ref(value)
        case "string":
            if not isinstance(value, str):
                raise EncodingError(f"Expected a string, got {type(value).__name__}", value=value)
            return encode_string(value)
        case "quantity":
            if isinstance(value, bool) or not isinstance(value, int):
                raise EncodingError(f"Expected an integer, got {type(value).__name__}", value=value)
            return encode_quantity(value)
        case "time":
            if not isinstance(value, date):
                raise EncodingError(f"Expected a date or datetime, got {type(value).__name__}", value=value)
            return encode_time(value)
    raise UnsupportedTypeError(datatype)


def datavalue_dict(datavalue: BaseModel | None) -> dict | None:
    if datavalue is None:
        return None
    return datavalue.model_dump(by_alias=True)


def claim_value_json(datavalue: BaseModel | None) -> str | None:
    """JSON text of the payload body, as sent in the ``value`` argument."""
    if datavalue is None:
        return None
    return json.dumps(datavalue_dict(datavalue)["value"])
