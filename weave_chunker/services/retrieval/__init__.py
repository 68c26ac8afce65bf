"""Query-time retrieval: search orchestration and relevance ranking."""

from weave_chunker.services.retrieval.relevance_ranker import RelevanceRanker, over_fetch_size
from weave_chunker.services.retrieval.search_service import SearchService

__all__ = ["RelevanceRanker", "SearchService", "over_fetch_size"]
