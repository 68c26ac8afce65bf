"""Query-time models: search request, filters, hits and response envelope.

The response envelope serializes to the JSON printed by ``search``::

    {query, results_requested, results_found, filters_applied, hits: [...]}
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from weave_chunker.models.chunk import ContentType
from weave_chunker.models.store import KnnHit


class SearchFilters(BaseModel):
    """Optional metadata filters; unset fields do not filter."""

    model_config = ConfigDict(frozen=True)

    universe: str | None = None
    species: str | None = None
    subspecies: str | None = None
    content_type: ContentType | None = None
    min_importance: float | None = Field(default=None, ge=0.0, le=1.0)

    def is_empty(self) -> bool:
        return not any(
            value is not None for value in self.model_dump().values()
        )


class SearchRequest(BaseModel):
    """A search request.  Query and ``k`` are validated by the search service."""

    model_config = ConfigDict(frozen=True)

    query: str
    k: int = 5
    filters: SearchFilters | None = None
    rerank: bool = True
    include_context: bool = True


class SearchHit(BaseModel):
    """One formatted search result."""

    model_config = ConfigDict(frozen=True)

    id: str
    relevance_score: float
    distance: float
    path: str
    section: str
    title: str | None = None
    content_type: str | None = None
    importance: float | None = None
    entities: list[str] = Field(default_factory=list)
    concepts: list[str] = Field(default_factory=list)
    chunk: str = Field(description="Preview of the chunk text (first 200 characters).")
    full_chunk: str | None = Field(
        default=None, description="Whole chunk text when context is requested."
    )


class SearchResponse(BaseModel):
    """Search response envelope."""

    model_config = ConfigDict(frozen=True)

    query: str
    results_requested: int
    results_found: int
    filters_applied: SearchFilters | None = None
    hits: list[SearchHit] = Field(default_factory=list)

    def to_json(self) -> str:
        """Render the envelope, dropping ``full_chunk`` keys that are unset."""
        payload = self.model_dump(mode="json")
        for hit in payload["hits"]:
            if hit.get("full_chunk") is None:
                hit.pop("full_chunk", None)
        if self.filters_applied is not None:
            payload["filters_applied"] = self.filters_applied.model_dump(
                mode="json", exclude_none=True
            )
        return json.dumps(payload, indent=2, ensure_ascii=False)


class RankedHit(BaseModel):
    """A nearest-neighbour hit with its parsed metadata and composite score."""

    model_config = ConfigDict(frozen=True)

    hit: KnnHit
    metadata: dict[str, Any] | None = Field(
        default=None, description="Parsed metadata; None when missing or unparsable."
    )
    relevance_score: float
