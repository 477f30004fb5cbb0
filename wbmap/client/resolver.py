"""Resolution of property and item labels to Wikibase IDs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import (
    AmbiguousLabelError,
    InvalidEntityReferenceError,
    LabelNotFoundError,
    PreconditionError,
    ResponseShapeError,
)
from ..mapping.codec import ENTITY_PREFIXES, datatype_for, parse_entity_ref
from ..mapping.introspection import item_fields, property_fields
from ..mapping.models import ItemHeader
from .responses import LANGUAGE, SearchResponse

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger(__name__)


class IdentifierResolver:
    """Finds the single entity with an exact label, creating it if asked to."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def fetch_ids_for_label(self, kind: str, label: str) -> list[str]:
        """IDs of every ``kind`` entity whose label is exactly ``label``."""
        if kind not in ENTITY_PREFIXES:
            raise PreconditionError(f"Unknown entity kind {kind!r}")

        response = self.client.request(
            "GET",
            {
                "action": "query",
                "list": "wbsearch",
                "wbssearch": label,
                "wbstype": kind,
                "wbslanguage": LANGUAGE,
            },
            SearchResponse,
        )

        # the search also returns close matches, so keep exact matches only
        return [
            self._id_from_title(kind, result.title)
            for result in response.query.wbsearch
            if result.displaytext == label
        ]

    @staticmethod
    def _id_from_title(kind: str, title: str) -> str:
        parts = title.split(":")
        if len(parts) > 2:
            raise ResponseShapeError(f"Expected type:value in search result, but got {title!r}")
        entity_id = parts[-1]
        try:
            parse_entity_ref(entity_id, kind)
        except InvalidEntityReferenceError as exc:
            raise ResponseShapeError(f"Search for a {kind} returned {title!r}") from exc
        return entity_id

    def _label_map(self, kind: str) -> dict[str, str]:
        return self.client.property_map if kind == "property" else self.client.item_map

    def resolve_label(
        self,
        label: str,
        kind: str,
        create_if_missing: bool = False,
        datatype: str | None = None,
    ) -> str:
        """Resolve ``label`` to exactly one ID and record it in the label map.

        Args:
            label: Exact label to look for
            kind: ``"item"`` or ``"property"``
            create_if_missing: Create the entity when nothing matches
            datatype: Datatype of a property created by this call

        Raises:
            LabelNotFoundError: nothing matched and creation was not allowed
            AmbiguousLabelError: more than one entity has this label
        """
        if not label:
            raise PreconditionError(f"A {kind} label must not be an empty string")

        ids = self.fetch_ids_for_label(kind, label)
        match len(ids):
            case 0:
                if not create_if_missing:
                    raise LabelNotFoundError(kind, label)
                entity_id = self._create(kind, label, datatype)
            case 1:
                entity_id = ids[0]
            case _:
                raise AmbiguousLabelError(kind, label, ids)

        self._label_map(kind)[label] = entity_id
        return entity_id

    def _create(self, kind: str, label: str, datatype: str | None) -> str:
        logger.info("Creating %s '%s'", kind, label)
        if kind == "property":
            if datatype is None:
                raise PreconditionError(f"A datatype is needed to create property '{label}'")
            return self.client.sync.create_property(label, datatype)

        header = ItemHeader()
        self.client.sync.create_item_instance(label, header)
        return header.id

    def resolve_property(self, label: str, field_type: Any = None, create_if_missing: bool = False) -> str:
        """Resolve a property label; ``field_type`` decides the datatype of a new property."""
        datatype = None
        if create_if_missing and field_type is not None:
            datatype = datatype_for(field_type)
        return self.resolve_label(label, "property", create_if_missing, datatype)

    def map_configuration(self, model: Any, create_if_missing: bool = False) -> None:
        """Resolve every ``property`` and ``item`` tag of a model."""
        for field in property_fields(model):
            self.resolve_property(field.label, field.field_type, create_if_missing)
        for field in item_fields(model):
            self.resolve_label(field.label, "item", create_if_missing)
