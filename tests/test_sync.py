import json
from datetime import datetime, timezone
from typing import Optional

import pytest

from conftest import TOKEN, claim_response, entity_response, error_response, search_response
from wbmap.client import Client
from wbmap.errors import (
    APIError,
    ClaimUploadError,
    EncodingError,
    InvalidEntityReferenceError,
    PreconditionError,
    ResponseShapeError,
    TransportError,
    UnmappedPropertyError,
)
from wbmap.mapping import OMIT_ON_CREATE, ItemHeader, ItemRef, wikibase_property


class Greeting(ItemHeader):
    message: str = wikibase_property("Message", default="")


class Person(ItemHeader):
    name: str = wikibase_property("Name", default="")
    age: Optional[int] = wikibase_property("Age")
    employer: ItemRef | None = wikibase_property("Employer")
    born: Optional[datetime] = wikibase_property("Born", OMIT_ON_CREATE)


def snak_claim(claim_id: str, property_id: str) -> dict:
    return {
        "mainsnak": {"snaktype": "value", "property": property_id, "hash": "abc", "datatype": "string"},
        "type": "statement",
        "id": claim_id,
        "rank": "normal",
    }


@pytest.fixture
def mapped_client(client):
    client.property_map.update({"Name": "P1", "Age": "P2", "Employer": "P3", "Born": "P4", "Message": "P14"})
    return client


def create_data(network) -> dict:
    return json.loads(network.most_recent_args["data"])


class TestCreateItemInstance:
    def test_create_simple_item(self, client, network):
        network.add_response(entity_response("Q23"))
        record = ItemHeader()

        client.create_item_instance("hello", record)

        assert record.id == "Q23"
        assert record.property_ids == {}
        method, args = network.calls[0]
        assert method == "POST"
        assert args["action"] == "wbeditentity"
        assert args["token"] == TOKEN
        assert args["new"] == "item"
        assert "bot" not in args
        assert json.loads(args["data"]) == {
            "labels": {"en": {"language": "en", "value": "hello"}},
            "claims": [],
        }

    def test_token_is_fetched_first(self, network):
        network.add_response({"query": {"tokens": {"csrftoken": TOKEN}}})
        network.add_response(entity_response("Q23"))
        wikibase = Client(network)

        wikibase.create_item_instance("hello", ItemHeader())
        assert network.actions == ["query", "wbeditentity"]

    def test_claims_are_sent_with_the_item(self, mapped_client, network):
        network.add_response(
            entity_response("Q7", "Alice", {"P1": [snak_claim("Q7$1", "P1")], "P3": [snak_claim("Q7$3", "P3")]})
        )
        record = Person(name="  Alice\n", employer=ItemRef("Q10"))

        mapped_client.create_item_instance("Alice", record)

        data = create_data(network)
        assert data["labels"] == {"en": {"language": "en", "value": "Alice"}}
        assert data["claims"] == [
            {
                "mainsnak": {
                    "snaktype": "value",
                    "property": "P1",
                    "datavalue": {"type": "string", "value": "Alice"},
                },
                "type": "statement",
                "rank": "normal",
            },
            {
                "mainsnak": {"snaktype": "novalue", "property": "P2"},
                "type": "statement",
                "rank": "normal",
            },
            {
                "mainsnak": {
                    "snaktype": "value",
                    "property": "P3",
                    "datavalue": {
                        "type": "wikibase-entityid",
                        "value": {"entity-type": "item", "numeric-id": 10},
                    },
                },
                "type": "statement",
                "rank": "normal",
            },
        ]
        assert record.id == "Q7"
        assert record.property_ids == {"P1": "Q7$1", "P3": "Q7$3"}

    def test_omit_on_create_field_is_not_sent(self, mapped_client, network):
        network.add_response(entity_response("Q7"))
        record = Person(name="Alice", born=datetime(1990, 1, 1, tzinfo=timezone.utc))

        mapped_client.create_item_instance("Alice", record)

        properties = [claim["mainsnak"]["property"] for claim in create_data(network)["claims"]]
        assert properties == ["P1", "P2", "P3"]
        assert "1990-01-01" not in network.most_recent_args["data"]
        assert record.id == "Q7"
        assert record.property_ids == {}

    def test_map_then_create(self, client, network):
        class Named(ItemHeader):
            name: str = wikibase_property("Name", default="")

        network.add_response(search_response(("Property:P7", "Name")))
        network.add_response({"entity": {"id": "Q10"}, "success": 1})
        record = Named(name="Alice")

        client.map_property_and_item_configuration(Named)
        client.create_item_instance("Alice", record)

        assert client.property_map == {"Name": "P7"}
        assert network.actions == ["query", "wbeditentity"]
        assert create_data(network)["claims"] == [
            {
                "mainsnak": {
                    "snaktype": "value",
                    "property": "P7",
                    "datavalue": {"type": "string", "value": "Alice"},
                },
                "type": "statement",
                "rank": "normal",
            }
        ]
        assert record.id == "Q10"
        assert record.property_ids == {}

    def test_quantity_claim(self, mapped_client, network):
        network.add_response(entity_response("Q7"))

        mapped_client.create_item_instance("Alice", Person(name="Alice", age=42))

        age = create_data(network)["claims"][1]["mainsnak"]
        assert age["datavalue"] == {"type": "quantity", "value": {"amount": "42", "unit": "1"}}

    def test_php_empty_claims(self, mapped_client, network):
        response = entity_response("Q7")
        response["entity"]["claims"] = []
        network.add_response(response)
        record = Greeting(message="hi")

        mapped_client.create_item_instance("hello", record)
        assert record.id == "Q7"
        assert record.property_ids == {}

    def test_existing_property_ids_are_kept(self, mapped_client, network):
        network.add_response(entity_response("Q7", claims={"P14": [snak_claim("Q7$new", "P14")]}))
        record = Greeting(message="hi", wikibase_property_ids={"P99": "Q1$old"})

        mapped_client.create_item_instance("hello", record)
        assert record.property_ids == {"P99": "Q1$old", "P14": "Q7$new"}

    def test_more_than_one_claim_per_property(self, mapped_client, network):
        network.add_response(
            entity_response("Q7", claims={"P14": [snak_claim("Q7$1", "P14"), snak_claim("Q7$2", "P14")]})
        )
        record = Greeting(message="hi")

        with pytest.raises(ResponseShapeError, match="P14"):
            mapped_client.create_item_instance("hello", record)
        # the item exists on the server, so its ID is still recorded
        assert record.id == "Q7"

    def test_unmapped_property(self, client, network):
        client.property_map["Name"] = "P1"

        with pytest.raises(UnmappedPropertyError) as excinfo:
            client.create_item_instance("Alice", Person(name="Alice"))
        assert excinfo.value.label == "Age"
        assert network.calls == []

    def test_encoding_failure_names_the_property(self, mapped_client, network):
        record = Person.model_construct(name="Alice", employer="P10")

        with pytest.raises(InvalidEntityReferenceError) as excinfo:
            mapped_client.create_item_instance("Alice", record)
        assert excinfo.value.label == "Employer"
        assert "Employer" in str(excinfo.value)
        assert network.calls == []
        assert record.id == ""

    def test_unsupported_field_type(self, client, network):
        class Measured(ItemHeader):
            height: float = wikibase_property("Height", default=0.0)

        client.property_map["Height"] = "P5"

        with pytest.raises(EncodingError, match="Height"):
            client.create_item_instance("tall", Measured(height=1.8))
        assert network.calls == []

    def test_empty_label(self, client, network):
        with pytest.raises(PreconditionError):
            client.create_item_instance("", ItemHeader())
        assert network.calls == []

    def test_record_must_be_an_instance(self, client, network):
        with pytest.raises(PreconditionError):
            client.create_item_instance("hello", ItemHeader)
        with pytest.raises(PreconditionError):
            client.create_item_instance("hello", {"id": ""})
        assert network.calls == []

    def test_already_created(self, client, network):
        with pytest.raises(PreconditionError, match="Q3"):
            client.create_item_instance("hello", ItemHeader(wikibase_id="Q3"))
        assert network.calls == []

    def test_api_error(self, client, network):
        network.add_response(error_response("permissiondenied", "You may not create items"))
        record = ItemHeader()

        with pytest.raises(APIError, match="permissiondenied"):
            client.create_item_instance("hello", record)
        assert record.id == ""

    def test_unexpected_success(self, client, network):
        response = entity_response("Q7")
        response["success"] = 0
        network.add_response(response)

        with pytest.raises(ResponseShapeError):
            client.create_item_instance("hello", ItemHeader())

    def test_server_returns_a_property(self, client, network):
        network.add_response(entity_response("P7"))

        with pytest.raises(ResponseShapeError):
            client.create_item_instance("hello", ItemHeader())


class TestUploadClaimsForItem:
    def test_upload_new_claim(self, mapped_client, network):
        network.add_response(claim_response("Q23$5FF2B0D8-BEC1-4D30-B88E-347E08AFD659"))
        record = Greeting(message="foo", wikibase_id="Q23")

        mapped_client.upload_claims_for_item(record)

        assert network.calls == [
            (
                "POST",
                {
                    "action": "wbcreateclaim",
                    "token": TOKEN,
                    "entity": "Q23",
                    "property": "P14",
                    "bot": "1",
                    "snaktype": "value",
                    "value": '"foo"',
                },
            )
        ]
        assert record.property_ids == {"P14": "Q23$5FF2B0D8-BEC1-4D30-B88E-347E08AFD659"}

    def test_second_upload_makes_no_requests(self, mapped_client, network):
        network.add_response(claim_response("Q23$1"))
        record = Greeting(message="foo", wikibase_id="Q23")

        mapped_client.upload_claims_for_item(record)
        mapped_client.upload_claims_for_item(record)

        assert network.actions == ["wbcreateclaim"]

    def test_refresh_updates_existing_claim(self, mapped_client, network):
        network.add_response(claim_response("Q23$1"))
        record = Greeting(message="bar", wikibase_id="Q23", wikibase_property_ids={"P14": "Q23$1"})

        mapped_client.upload_claims_for_item(record, allow_refresh=True)

        assert network.calls == [
            (
                "POST",
                {
                    "action": "wbsetclaimvalue",
                    "token": TOKEN,
                    "claim": "Q23$1",
                    "bot": "1",
                    "snaktype": "value",
                    "value": '"bar"',
                },
            )
        ]
        assert record.property_ids == {"P14": "Q23$1"}

    def test_existing_claim_is_not_encoded_without_refresh(self, mapped_client, network):
        record = Person.model_construct(
            name="Alice",
            employer="not an item",
            wikibase_id="Q7",
            wikibase_property_ids={"P1": "Q7$1", "P2": "Q7$2", "P3": "Q7$3", "P4": "Q7$4"},
        )

        mapped_client.upload_claims_for_item(record)
        assert network.calls == []

    def test_missing_value_is_no_value_claim(self, mapped_client, network):
        network.add_response(claim_response("Q7$2", "P2"))
        record = Person(
            name="Alice",
            wikibase_id="Q7",
            wikibase_property_ids={"P1": "Q7$1", "P3": "Q7$3", "P4": "Q7$4"},
        )

        mapped_client.upload_claims_for_item(record)

        args = network.most_recent_args
        assert args["snaktype"] == "novalue"
        assert "value" not in args
        assert record.property_ids["P2"] == "Q7$2"

    def test_omit_on_create_field_is_uploaded(self, mapped_client, network):
        network.add_response(claim_response("Q7$4", "P4"))
        record = Person(
            name="Alice",
            born=datetime(1976, 6, 6, tzinfo=timezone.utc),
            wikibase_id="Q7",
            wikibase_property_ids={"P1": "Q7$1", "P2": "Q7$2", "P3": "Q7$3"},
        )

        mapped_client.upload_claims_for_item(record)

        args = network.most_recent_args
        assert args["property"] == "P4"
        assert json.loads(args["value"])["time"] == "+00000001976-06-06T00:00:00Z"

    def test_first_failure_stops_upload(self, mapped_client, network):
        network.add_response(claim_response("Q7$1", "P1"))
        network.add_error(TransportError("connection reset"))
        record = Person(name="Alice", age=3, wikibase_id="Q7")

        with pytest.raises(ClaimUploadError) as excinfo:
            mapped_client.upload_claims_for_item(record)

        error = excinfo.value
        assert error.label == "Age"
        assert error.property_id == "P2"
        assert error.entity_id == "Q7"
        assert isinstance(error.__cause__, TransportError)
        assert network.actions == ["wbcreateclaim", "wbcreateclaim"]
        assert record.property_ids == {"P1": "Q7$1"}

    def test_upload_resumes_after_failure(self, mapped_client, network):
        network.add_response(claim_response("Q7$1", "P1"))
        network.add_response(error_response("failed-save", "Edit conflict"))
        record = Person(name="Alice", age=3, wikibase_id="Q7")

        with pytest.raises(ClaimUploadError) as excinfo:
            mapped_client.upload_claims_for_item(record)
        assert isinstance(excinfo.value.__cause__, APIError)

        for claim_id, property_id in [("Q7$2", "P2"), ("Q7$3", "P3"), ("Q7$4", "P4")]:
            network.add_response(claim_response(claim_id, property_id))
        mapped_client.upload_claims_for_item(record)

        assert [args.get("property") for _, args in network.calls[2:]] == ["P2", "P3", "P4"]
        assert record.property_ids == {"P1": "Q7$1", "P2": "Q7$2", "P3": "Q7$3", "P4": "Q7$4"}

    def test_unexpected_claim_response(self, mapped_client, network):
        network.add_response({"success": 1})
        record = Greeting(message="foo", wikibase_id="Q23")

        with pytest.raises(ClaimUploadError) as excinfo:
            mapped_client.upload_claims_for_item(record)
        assert isinstance(excinfo.value.__cause__, ResponseShapeError)
        assert record.property_ids == {}

    def test_encoding_failure_is_not_wrapped(self, mapped_client, network):
        record = Greeting.model_construct(message=5, wikibase_id="Q23")

        with pytest.raises(EncodingError) as excinfo:
            mapped_client.upload_claims_for_item(record)
        assert not isinstance(excinfo.value, ClaimUploadError)
        assert excinfo.value.label == "Message"
        assert network.calls == []

    def test_item_must_exist(self, mapped_client, network):
        with pytest.raises(PreconditionError):
            mapped_client.upload_claims_for_item(Greeting(message="foo"))
        assert network.calls == []

    def test_unmapped_property(self, client, network):
        with pytest.raises(UnmappedPropertyError):
            client.upload_claims_for_item(Greeting(message="foo", wikibase_id="Q23"))
        assert network.calls == []


def test_create_claim_requires_ids(client, network):
    with pytest.raises(PreconditionError):
        client.sync.create_claim("", "P1", None)
    with pytest.raises(PreconditionError):
        client.sync.create_claim("Q1", "", None)
    with pytest.raises(PreconditionError):
        client.sync.update_claim("", None)
    assert network.calls == []
