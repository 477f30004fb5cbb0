"""SPARQL query helper for the query service next to a Wikibase."""

from __future__ import annotations

from pydantic import BaseModel, Field
from wikibaseintegrator import wbi_helpers

from ..errors import ResponseShapeError


class SparqlHead(BaseModel):
    vars: list[str] = Field(default_factory=list)


class SparqlValue(BaseModel):
    type: str
    value: str
    datatype: str | None = None


class SparqlResults(BaseModel):
    bindings: list[dict[str, SparqlValue]] = Field(default_factory=list)


class SparqlResponse(BaseModel):
    head: SparqlHead = Field(default_factory=SparqlHead)
    results: SparqlResults = Field(default_factory=SparqlResults)

    def rows(self) -> list[dict[str, str]]:
        """Bindings flattened to plain values, one dict per result row."""
        return [{name: binding.value for name, binding in row.items()} for row in self.results.bindings]


def make_sparql_query(service_url: str, sparql: str, user_agent: str | None = None) -> SparqlResponse:
    """Run ``sparql`` against ``service_url`` and parse the JSON results."""
    data = wbi_helpers.execute_sparql_query(
        query=sparql,
        endpoint=service_url,
        user_agent=user_agent,
        max_retries=1,
    )
    if not data:
        raise ResponseShapeError(f"No results returned by {service_url}", data)
    return SparqlResponse.model_validate(data)
