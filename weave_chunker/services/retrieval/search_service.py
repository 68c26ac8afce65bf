"""Query-time pipeline: **validate -> embed -> knn -> rank -> format**.

:class:`SearchService` embeds the query with the same provider used at
index time, over-fetches nearest neighbours so metadata filtering still
leaves enough candidates, re-ranks them with :class:`RelevanceRanker`, and
formats the survivors into a :class:`SearchResponse` envelope.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from weave_chunker.models.search import RankedHit, SearchHit, SearchRequest, SearchResponse
from weave_chunker.services.retrieval.relevance_ranker import RelevanceRanker, over_fetch_size
from weave_chunker.utils.errors import QueryValidationError

if TYPE_CHECKING:
    from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
    from weave_chunker.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_PREVIEW_CHARS = 200


def preview(text: str, limit: int = DEFAULT_PREVIEW_CHARS) -> str:
    """First *limit* characters of *text*, with ``...`` appended when cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class SearchService:
    """Answers natural-language queries against the vector store."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        ranker: RelevanceRanker | None = None,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._ranker = ranker or RelevanceRanker()
        self._preview_chars = preview_chars

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Run *request* and return the formatted response envelope.

        Raises
        ------
        QueryValidationError
            If the query is blank or ``k`` is not positive.  Raised before
            any embedding or store call.
        """
        query = request.query.strip()
        if not query:
            raise QueryValidationError(message="query must not be empty")
        if request.k <= 0:
            raise QueryValidationError(message=f"k must be positive, got {request.k}")

        query_vector = await self._embedding_provider.embed_single(query)
        fetch = over_fetch_size(request.k)
        candidates = await self._vector_store.knn(query_vector, fetch)

        ranked = self._ranker.rank(
            query,
            candidates,
            request.k,
            filters=request.filters,
            rerank=request.rerank,
        )
        hits = [self._format_hit(r, request.include_context) for r in ranked]

        filters = request.filters
        if filters is not None and filters.is_empty():
            filters = None

        logger.info(
            "search_complete",
            query_length=len(query),
            requested=request.k,
            candidates=len(candidates),
            found=len(hits),
            rerank=request.rerank,
        )
        return SearchResponse(
            query=query,
            results_requested=request.k,
            results_found=len(hits),
            filters_applied=filters,
            hits=hits,
        )

    def _format_hit(self, ranked: RankedHit, include_context: bool) -> SearchHit:
        hit = ranked.hit
        meta: dict[str, Any] = ranked.metadata or {}
        importance = meta.get("importance_score")
        return SearchHit(
            id=hit.chunk_id,
            relevance_score=round(ranked.relevance_score, 3),
            distance=round(hit.distance, 3),
            path=hit.path,
            section=meta.get("section_path") or "unknown",
            title=meta.get("section_title"),
            content_type=meta.get("content_type"),
            importance=round(importance, 2) if isinstance(importance, (int, float)) else None,
            entities=[str(e) for e in meta.get("entities") or []],
            concepts=[str(c) for c in meta.get("concepts") or []],
            chunk=preview(hit.text, self._preview_chars),
            full_chunk=hit.text if include_context else None,
        )
