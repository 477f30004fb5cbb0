"""Creation of items and upload of their claims from ItemHeader records."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import (
    ClaimUploadError,
    EncodingError,
    InvalidEntityReferenceError,
    PreconditionError,
    ResponseShapeError,
    UnmappedPropertyError,
    WikibaseError,
)
from ..mapping.codec import claim_value_json, encode, parse_entity_ref
from ..mapping.introspection import PropertyField, check_record, property_fields
from ..mapping.models import ItemHeader
from .responses import (
    ClaimCreate,
    ClaimResponse,
    EntityEditResponse,
    EntityInfo,
    ItemCreate,
    PropertyCreate,
    SnakCreate,
    labels_for,
)

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger(__name__)


def _snak_args(datavalue: Any) -> dict[str, str]:
    value = claim_value_json(datavalue)
    if value is None:
        return {"snaktype": "novalue"}
    return {"snaktype": "value", "value": value}


class EntitySync:
    """Keeps Wikibase items in step with the records that describe them."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def _property_id(self, label: str) -> str:
        property_id = self.client.property_map.get(label)
        if not property_id:
            raise UnmappedPropertyError(label)
        return property_id

    @staticmethod
    def _encode(field: PropertyField, record: ItemHeader) -> Any:
        try:
            return encode(field.field_type, field.value_of(record))
        except EncodingError as exc:
            exc.with_label(field.label)
            raise

    def build_create_claims(self, record: ItemHeader) -> list[ClaimCreate]:
        """Claims sent with a new item: every tagged field not marked omitoncreate."""
        claims = []
        for field in property_fields(record):
            if field.omit_on_create:
                continue
            property_id = self._property_id(field.label)
            datavalue = self._encode(field, record)
            # an empty field is still recorded, as a novalue claim
            snak = SnakCreate(
                snaktype="novalue" if datavalue is None else "value",
                property=property_id,
                datavalue=datavalue,
            )
            claims.append(ClaimCreate(mainsnak=snak))
        return claims

    def _edit_entity(self, kind: str, data: str, bot: bool = False) -> EntityInfo:
        args = {
            "action": "wbeditentity",
            "token": self.client.get_editing_token(),
            "new": kind,
            "data": data,
        }
        if bot:
            args["bot"] = "1"

        response = self.client.request("POST", args, EntityEditResponse)
        if response.success != 1:
            raise ResponseShapeError(f"Unexpected success value creating {kind}", response.model_dump())
        if response.entity is None:
            raise ResponseShapeError(f"No entity in response creating {kind}", response.model_dump())
        try:
            parse_entity_ref(response.entity.id, kind)
        except InvalidEntityReferenceError as exc:
            raise ResponseShapeError(f"Unexpected {kind} ID from server", response.model_dump()) from exc
        return response.entity

    def create_property(self, label: str, datatype: str) -> str:
        """Create a property with an English label and return its P id."""
        if not label:
            raise PreconditionError("Property label must not be an empty string")

        data = PropertyCreate(labels=labels_for(label), datatype=datatype)
        entity = self._edit_entity("property", data.model_dump_json(), bot=True)
        return entity.id

    def create_item_instance(self, label: str, record: Any) -> None:
        """Create a new item labelled ``label`` from ``record``.

        Every tagged field without ``omitoncreate`` is sent as a claim in the
        same request. The new ID and the GUIDs of the claims the server made
        are written back into the record's header.
        """
        if not label:
            raise PreconditionError("Item label must not be an empty string")
        header = check_record(record)
        if header.id:
            raise PreconditionError(f"Item '{label}' has already been created as {header.id}")

        data = ItemCreate(labels=labels_for(label), claims=self.build_create_claims(header))
        logger.debug("Creating item '%s' with %d claims", label, len(data.claims))
        entity = self._edit_entity("item", data.model_dump_json(by_alias=True, exclude_none=True))

        header.id = entity.id
        if header.property_ids is None:
            header.property_ids = {}

        for property_id, claims in entity.claims.items():
            # we only ever create one claim per property
            if len(claims) > 1:
                raise ResponseShapeError(
                    f"Unexpected list of claims for {property_id} after we created just one",
                    [claim.model_dump() for claim in claims],
                )
            if claims:
                header.property_ids[property_id] = claims[0].id

    def create_claim(self, entity_id: str, property_id: str, datavalue: Any) -> str:
        """Add a claim to an entity and return the new claim's GUID."""
        if not entity_id:
            raise PreconditionError("Item ID must not be an empty string")
        if not property_id:
            raise PreconditionError("Property ID must not be an empty string")

        logger.debug("Creating claim %s on %s", property_id, entity_id)
        response = self.client.request(
            "POST",
            {
                "action": "wbcreateclaim",
                "token": self.client.get_editing_token(),
                "entity": entity_id,
                "property": property_id,
                "bot": "1",
                **_snak_args(datavalue),
            },
            ClaimResponse,
        )
        if response.success != 1 or response.claim is None:
            raise ResponseShapeError(
                f"Unexpected response adding claim {property_id} on {entity_id}", response.model_dump()
            )
        return response.claim.id

    def update_claim(self, claim_id: str, datavalue: Any) -> None:
        """Replace the value of an existing claim."""
        if not claim_id:
            raise PreconditionError("Claim ID must not be an empty string")

        logger.debug("Updating claim %s", claim_id)
        response = self.client.request(
            "POST",
            {
                "action": "wbsetclaimvalue",
                "token": self.client.get_editing_token(),
                "claim": claim_id,
                "bot": "1",
                **_snak_args(datavalue),
            },
            ClaimResponse,
        )
        if response.success != 1:
            raise ResponseShapeError(f"Unexpected response updating claim {claim_id}", response.model_dump())

    def upload_claims_for_item(self, record: Any, allow_refresh: bool = False) -> None:
        """Create the claims of an existing item that have not been uploaded yet.

        With ``allow_refresh`` the value of every claim already recorded in
        the header is written again as well. Stops at the first failure;
        claims uploaded before it stay recorded, so running again resumes.
        """
        header = check_record(record)
        if not header.id:
            raise PreconditionError(f"{type(record).__name__} has no item ID; create the item first")
        if header.property_ids is None:
            header.property_ids = {}

        for field in property_fields(header):
            property_id = self._property_id(field.label)
            claim_id = header.property_ids.get(property_id)
            if claim_id and not allow_refresh:
                continue

            datavalue = self._encode(field, header)
            try:
                if claim_id:
                    self.update_claim(claim_id, datavalue)
                else:
                    header.property_ids[property_id] = self.create_claim(header.id, property_id, datavalue)
            except WikibaseError as exc:
                raise ClaimUploadError(field.label, property_id, header.id, exc) from exc
