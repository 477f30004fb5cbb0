"""Wikibase client: label maps, request plumbing and MediaWiki page helpers."""

from __future__ import annotations

import json
import logging
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ValidationError

from ..backend.interface import NetworkClient
from ..errors import APIError, PreconditionError, ResponseShapeError
from .resolver import IdentifierResolver
from .responses import APIErrorInfo, ArticleEditResponse, ProtectResponse, TokenResponse
from .session import EditTokenCache
from .sync import EntitySync

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def decode_response(raw: bytes, response_model: type[ResponseT]) -> ResponseT:
    """Decode an API response body, raising the API error it carries if any."""
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ResponseShapeError(f"Response is not valid JSON ({exc})", raw[:200]) from exc
    if not isinstance(data, dict):
        raise ResponseShapeError("Expected a JSON object in response", data)

    error = data.get("error")
    if error is not None:
        try:
            info = APIErrorInfo.model_validate(error)
        except ValidationError as exc:
            raise ResponseShapeError("Malformed error in response", data) from exc
        raise APIError(info.code, info.info)

    try:
        return response_model.model_validate(data)
    except ValidationError as exc:
        raise ResponseShapeError(f"Unexpected response from server for {response_model.__name__}", data) from exc


class Client:
    """Client for one Wikibase session.

    Create it with a network client, map the labels used by your models with
    :meth:`map_property_and_item_configuration`, then create items with
    :meth:`create_item_instance` and keep their claims in step with
    :meth:`upload_claims_for_item`.

    Attributes:
        property_map: Property label to P id
        item_map: Item label to Q id
    """

    def __init__(self, network: NetworkClient) -> None:
        self.network = network
        self.property_map: dict[str, str] = {}
        self.item_map: dict[str, str] = {}
        self.tokens = EditTokenCache(self._fetch_editing_token)
        self.sync = EntitySync(self)
        self.resolver = IdentifierResolver(self)

    def request(
        self,
        method: Literal["GET", "POST"],
        args: dict[str, str],
        response_model: type[ResponseT],
    ) -> ResponseT:
        if method == "GET":
            raw = self.network.get(args)
        else:
            raw = self.network.post(args)
        return decode_response(raw, response_model)

    # Session

    def get_editing_token(self) -> str:
        """Return the session's edit token, fetching it on first use. Thread safe."""
        return self.tokens.get()

    def _fetch_editing_token(self) -> str:
        response = self.request("GET", {"action": "query", "meta": "tokens"}, TokenResponse)
        token = response.query.tokens.csrftoken
        if token is None:
            raise ResponseShapeError("Failed to get token in response from server", response.model_dump())
        return token

    # Labels

    def fetch_property_ids_for_label(self, label: str) -> list[str]:
        return self.resolver.fetch_ids_for_label("property", label)

    def fetch_item_ids_for_label(self, label: str) -> list[str]:
        return self.resolver.fetch_ids_for_label("item", label)

    def map_item_configuration_by_label(self, label: str, create_if_missing: bool = False) -> str:
        """Resolve an item label into :attr:`item_map`, optionally creating the item."""
        return self.resolver.resolve_label(label, "item", create_if_missing)

    def map_property_and_item_configuration(self, model: Any, create_if_missing: bool = False) -> None:
        """Resolve every property and item label tagged on ``model``."""
        self.resolver.map_configuration(model, create_if_missing)

    # Items

    def create_item_instance(self, label: str, record: Any) -> None:
        self.sync.create_item_instance(label, record)

    def upload_claims_for_item(self, record: Any, allow_refresh: bool = False) -> None:
        self.sync.upload_claims_for_item(record, allow_refresh)

    # MediaWiki pages

    def create_or_update_article(self, title: str, body: str) -> int:
        """Create the page if necessary and set its content. Returns the page ID."""
        if not title:
            raise PreconditionError("Article title must not be an empty string")

        response = self.request(
            "POST",
            {
                "action": "edit",
                "token": self.get_editing_token(),
                "title": f"article:{title}",
                "text": body,
            },
            ArticleEditResponse,
        )
        if response.edit is None:
            raise ResponseShapeError("Unexpected response from server", response.model_dump())
        return response.edit.pageid

    def _protect_page(self, key: str, value: str) -> None:
        logger.debug("Protecting page %s=%s", key, value)
        self.request(
            "POST",
            {
                "action": "protect",
                "token": self.get_editing_token(),
                key: value,
                "protections": "edit=sysop",
                "expiry": "never",
            },
            ProtectResponse,
        )

    def protect_page_by_title(self, title: str) -> None:
        """Restrict editing of an existing page to sysops."""
        self._protect_page("title", title)

    def protect_page_by_id(self, page_id: int) -> None:
        """Restrict editing of an existing page to sysops."""
        self._protect_page("pageid", str(page_id))
