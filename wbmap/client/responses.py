"""Pydantic models for MediaWiki and Wikibase API requests and responses."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..mapping.codec import DataValue

LANGUAGE = "en"


def _empty_list_as_dict(value: Any) -> Any:
    # PHP serialises an empty map as []
    if isinstance(value, list) and not value:
        return {}
    return value


class APIErrorInfo(BaseModel):
    code: str
    info: str = ""


class TokenSet(BaseModel):
    csrftoken: str | None = None


class TokensQuery(BaseModel):
    tokens: TokenSet = Field(default_factory=TokenSet)


class TokenResponse(BaseModel):
    query: TokensQuery = Field(default_factory=TokensQuery)


class SearchItem(BaseModel):
    ns: int | None = None
    title: str
    pageid: int | None = None
    displaytext: str = ""


class SearchQuery(BaseModel):
    wbsearch: list[SearchItem] = Field(default_factory=list)


class SearchResponse(BaseModel):
    query: SearchQuery = Field(default_factory=SearchQuery)


class Label(BaseModel):
    language: str = LANGUAGE
    value: str


class SnakInfo(BaseModel):
    snaktype: str
    property: str
    hash: str | None = None
    datatype: str | None = None


class ClaimInfo(BaseModel):
    mainsnak: SnakInfo
    type: str = "statement"
    id: str
    rank: str = "normal"


class EntityInfo(BaseModel):
    id: str
    type: str | None = None
    labels: dict[str, Label] = Field(default_factory=dict)
    claims: dict[str, list[ClaimInfo]] = Field(default_factory=dict)
    lastrevid: int | None = None

    @field_validator("labels", "claims", mode="before")
    @classmethod
    def normalize_php_maps(cls, value: Any) -> Any:
        return _empty_list_as_dict(value)


class EntityEditResponse(BaseModel):
    entity: EntityInfo | None = None
    success: int = 0


class PageInfo(BaseModel):
    lastrevid: int | None = None


class ClaimResponse(BaseModel):
    pageinfo: PageInfo | None = None
    success: int = 0
    claim: ClaimInfo | None = None


class ArticleEdit(BaseModel):
    contentmodel: str | None = None
    new: str | None = None
    newrevid: int | None = None
    oldrevid: int | None = None
    newtimestamp: str | None = None
    pageid: int
    result: str | None = None
    title: str | None = None


class ArticleEditResponse(BaseModel):
    edit: ArticleEdit | None = None


class Protection(BaseModel):
    edit: str | None = None
    move: str | None = None
    expiry: str | None = None


class ProtectDetail(BaseModel):
    title: str | None = None
    reason: str | None = None
    protections: list[Protection] = Field(default_factory=list)


class ProtectResponse(BaseModel):
    protect: ProtectDetail | None = None


# Request payloads for the ``data`` argument of wbeditentity


class SnakCreate(BaseModel):
    snaktype: Literal["value", "novalue"]
    property: str
    datavalue: DataValue | None = None


class ClaimCreate(BaseModel):
    mainsnak: SnakCreate
    type: str = "statement"
    rank: str = "normal"


class ItemCreate(BaseModel):
    labels: dict[str, Label]
    claims: list[ClaimCreate] = Field(default_factory=list)


class PropertyCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    labels: dict[str, Label]
    datatype: str


def labels_for(value: str) -> dict[str, Label]:
    return {LANGUAGE: Label(language=LANGUAGE, value=value)}
