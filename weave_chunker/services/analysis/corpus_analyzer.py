"""Aggregate statistics over a baked vector store (the ``analyze`` command)."""

from __future__ import annotations

import json
import statistics
from collections import Counter, defaultdict
from typing import TYPE_CHECKING, Any

import structlog

from weave_chunker.models.corpus import (
    CorpusStats,
    FileBreakdown,
    ImportanceSummary,
    SectionBreakdown,
)

if TYPE_CHECKING:
    from weave_chunker.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

TOP_TERMS = 10
TOP_SECTIONS = 20


class CorpusAnalyzer:
    """Computes :class:`CorpusStats` from every stored chunk record."""

    def __init__(self, top_terms: int = TOP_TERMS, top_sections: int = TOP_SECTIONS) -> None:
        self._top_terms = top_terms
        self._top_sections = top_sections

    async def analyze(self, store: IVectorStoreProvider) -> CorpusStats:
        rows = await store.list_rows()
        if not rows:
            return CorpusStats()

        lengths = [len(r.text) for r in rows]
        file_lengths: dict[str, list[int]] = defaultdict(list)
        for row in rows:
            file_lengths[row.path].append(len(row.text))

        content_types: Counter[str] = Counter()
        universes: Counter[str] = Counter()
        species: Counter[str] = Counter()
        subspecies: Counter[str] = Counter()
        entities: Counter[str] = Counter()
        concepts: Counter[str] = Counter()
        sections: Counter[str] = Counter()
        section_titles: dict[str, str | None] = {}
        importances: list[float] = []

        for row in rows:
            meta = self._parse(row.chunk_id, row.metadata_json)
            if meta is None:
                continue
            for counter, key in (
                (content_types, "content_type"),
                (universes, "universe"),
                (species, "species"),
                (subspecies, "subspecies"),
            ):
                value = meta.get(key)
                if value:
                    counter[str(value)] += 1
            entities.update(str(e) for e in meta.get("entities") or [])
            concepts.update(str(c) for c in meta.get("concepts") or [])

            section_path = meta.get("section_path")
            if section_path:
                sections[section_path] += 1
                section_titles.setdefault(section_path, meta.get("section_title"))

            importance = meta.get("importance_score")
            if isinstance(importance, (int, float)):
                importances.append(float(importance))

        stats = CorpusStats(
            total_chunks=len(rows),
            avg_chunk_length=round(statistics.fmean(lengths), 1),
            min_chunk_length=min(lengths),
            max_chunk_length=max(lengths),
            files=[
                FileBreakdown(
                    path=path,
                    chunk_count=len(lens),
                    avg_length=round(statistics.fmean(lens), 1),
                )
                for path, lens in sorted(file_lengths.items())
            ],
            content_types=dict(content_types.most_common()),
            universes=dict(universes.most_common()),
            species=dict(species.most_common()),
            subspecies=dict(subspecies.most_common()),
            importance=_summarize(importances),
            top_entities=entities.most_common(self._top_terms),
            top_concepts=concepts.most_common(self._top_terms),
            top_sections=[
                SectionBreakdown(
                    section_path=path,
                    section_title=section_titles.get(path),
                    chunk_count=count,
                )
                for path, count in sections.most_common(self._top_sections)
            ],
        )
        logger.info("corpus_analyzed", total_chunks=stats.total_chunks, files=len(stats.files))
        return stats

    @staticmethod
    def _parse(chunk_id: str, metadata_json: str | None) -> dict[str, Any] | None:
        if not metadata_json:
            return None
        try:
            meta = json.loads(metadata_json)
        except json.JSONDecodeError:
            logger.debug("metadata_parse_error", chunk_id=chunk_id)
            return None
        return meta if isinstance(meta, dict) else None


def _summarize(values: list[float]) -> ImportanceSummary | None:
    if not values:
        return None
    return ImportanceSummary(
        average=round(statistics.fmean(values), 2),
        median=round(statistics.median(values), 2),
        minimum=round(min(values), 2),
        maximum=round(max(values), 2),
    )
