"""Metadata-aware filtering and re-ranking of nearest-neighbour hits.

The vector store returns hits ordered purely by L2 distance.  The ranker
narrows them with exact-match metadata filters and re-scores the survivors:

    score = 1 / (1 + distance)
          + per query term:  entity exact +0.40 / substring +0.20
                             concept exact +0.35 / substring +0.15
                             title exact +0.50 / substring +0.30
                             section path substring +0.25
                             source file substring +0.20
                             chunk text substring +0.10
          + whole phrase:    in title +0.40, in an entity +0.30,
                             in a concept +0.25, in chunk text +0.15
          + importance_score * 0.1
          + content type:    quote +0.10, list +0.05, mixed +0.03
          - 0.10 for text under 100 chars unless importance >= 0.7

clamped to [0.001, 2.0].  Query terms are the lowercase whitespace-separated
words longer than two characters.

Hits whose metadata is missing or cannot be parsed are never filtered out
and keep their base similarity as their score.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from weave_chunker.models.search import RankedHit, SearchFilters
from weave_chunker.models.store import KnnHit

logger = structlog.get_logger(logger_name=__name__)

MIN_OVER_FETCH = 20
SCORE_FLOOR = 0.001
SCORE_CEILING = 2.0

_CONTENT_TYPE_BONUS: dict[str, float] = {
    "quote": 0.1,
    "list": 0.05,
    "mixed": 0.03,
}


def over_fetch_size(k: int) -> int:
    """Number of neighbours to fetch so filtering still leaves *k* results."""
    return max(k * 2, MIN_OVER_FETCH)


def parse_metadata(hit: KnnHit) -> dict[str, Any] | None:
    """Return the hit's metadata as a dict, or ``None`` if absent or malformed."""
    if not hit.metadata_json:
        return None
    try:
        metadata = json.loads(hit.metadata_json)
    except json.JSONDecodeError as exc:
        logger.debug("metadata_parse_error", chunk_id=hit.chunk_id, error=str(exc))
        return None
    if not isinstance(metadata, dict):
        logger.debug("metadata_not_object", chunk_id=hit.chunk_id)
        return None
    return metadata


def passes_filters(metadata: dict[str, Any] | None, filters: SearchFilters | None) -> bool:
    """Return ``True`` if *metadata* satisfies every active filter."""
    if filters is None or metadata is None:
        return True
    for key in ("universe", "species", "subspecies", "content_type"):
        wanted = getattr(filters, key)
        if wanted is not None and metadata.get(key) != wanted:
            return False
    if filters.min_importance is not None:
        importance = metadata.get("importance_score") or 0
        if importance < filters.min_importance:
            return False
    return True


def _lower_list(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    return [str(v).lower() for v in values]


def relevance_score(hit: KnnHit, metadata: dict[str, Any] | None, query: str) -> float:
    """Composite relevance of *hit* for *query* (see module docstring)."""
    score = hit.score
    if metadata is None:
        return max(SCORE_FLOOR, min(SCORE_CEILING, score))

    phrase = query.lower()
    terms = [t for t in phrase.split() if len(t) > 2]
    entities = _lower_list(metadata.get("entities"))
    concepts = _lower_list(metadata.get("concepts"))
    title = str(metadata.get("section_title") or "").lower()
    section_path = str(metadata.get("section_path") or "").lower()
    source_file = str(metadata.get("source_file") or "").lower()
    text = hit.text.lower()
    importance = metadata.get("importance_score") or 0.5

    term_boost = 0.0
    text_boost = 0.0
    for term in terms:
        if term in entities:
            term_boost += 0.4
        elif any(term in e for e in entities):
            term_boost += 0.2

        if term in concepts:
            term_boost += 0.35
        elif any(term in c for c in concepts):
            term_boost += 0.15

        if title and title == term:
            term_boost += 0.5
        elif title and term in title:
            term_boost += 0.3

        if term in section_path:
            term_boost += 0.25
        if term in source_file:
            term_boost += 0.2
        if term in text:
            text_boost += 0.1

    if title and phrase in title:
        term_boost += 0.4
    if any(phrase in e for e in entities):
        term_boost += 0.3
    if any(phrase in c for c in concepts):
        term_boost += 0.25
    if phrase in text:
        text_boost += 0.15

    importance_boost = importance * 0.1
    type_boost = _CONTENT_TYPE_BONUS.get(str(metadata.get("content_type")), 0.0)
    length_penalty = -0.1 if len(hit.text) < 100 and importance < 0.7 else 0.0

    score += term_boost + importance_boost + type_boost + text_boost + length_penalty
    return max(SCORE_FLOOR, min(SCORE_CEILING, score))


class RelevanceRanker:
    """Filters, re-scores and truncates nearest-neighbour hits."""

    def rank(
        self,
        query: str,
        hits: list[KnnHit],
        k: int,
        filters: SearchFilters | None = None,
        rerank: bool = True,
    ) -> list[RankedHit]:
        """Return at most *k* hits sorted by non-increasing relevance.

        With ``rerank=False`` hits keep their vector order and base
        similarity score; filters still apply.
        """
        ranked: list[RankedHit] = []
        for hit in hits:
            metadata = parse_metadata(hit)
            if not passes_filters(metadata, filters):
                continue
            score = relevance_score(hit, metadata, query) if rerank else hit.score
            ranked.append(RankedHit(hit=hit, metadata=metadata, relevance_score=score))

        filtered_out = len(hits) - len(ranked)
        ranked.sort(key=lambda r: r.relevance_score, reverse=True)
        logger.debug(
            "hits_ranked",
            candidates=len(hits),
            filtered_out=filtered_out,
            returned=min(k, len(ranked)),
        )
        return ranked[:k]
