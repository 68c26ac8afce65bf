"""Orchestrator for the index-time pipeline ("bake").

Pipeline stages: **read -> chunk -> embed -> store**.

:class:`IndexingService` coordinates the chunk assembler, an embedding
provider and the vector store without any of them knowing about each other.
Documents are processed one at a time in sorted path order, and each
document's chunks are embedded and upserted in batches of 16.  Every batch
is one atomic store write, so a failure part-way through leaves earlier
batches intact and a rerun simply overwrites them (chunk ids are
deterministic).
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from weave_chunker.models.chunk import BaseMetadata, Chunk
from weave_chunker.models.corpus import IngestionResult
from weave_chunker.models.store import VectorRecord
from weave_chunker.providers.embedding.validation import ensure_usable_vectors
from weave_chunker.services.ingestion.chunk_assembler import ChunkAssembler
from weave_chunker.utils.hashing import content_hash_for

if TYPE_CHECKING:
    from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
    from weave_chunker.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_EMBED_BATCH = 16


def walk_markdown(root: Path) -> list[Path]:
    """Return every ``.md`` file under *root* (case-insensitive), sorted."""
    return sorted(
        p for p in root.rglob("*") if p.is_file() and p.suffix.lower() == ".md"
    )


class IndexingService:
    """Indexes Markdown documents into the vector store.

    Parameters
    ----------
    assembler:
        Produces chunk records for one document.
    embedding_provider:
        Generates embedding vectors for chunk text.
    vector_store:
        Persists chunks and vectors.
    batch_size:
        Chunks per embed + upsert round trip (default 16).
    """

    def __init__(
        self,
        assembler: ChunkAssembler,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        batch_size: int = DEFAULT_EMBED_BATCH,
    ) -> None:
        self._assembler = assembler
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._batch_size = max(1, batch_size)
        self._dimension_set = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def index_directory(
        self,
        dir_path: str | Path,
        base_meta: BaseMetadata | None = None,
    ) -> list[IngestionResult]:
        """Index every Markdown file under *dir_path*.

        Unreadable files are skipped with a warning.  Embedding and store
        errors propagate and stop the run.

        Returns
        -------
        list[IngestionResult]
            One result per document indexed (skipped files are excluded).
        """
        root = Path(dir_path)
        if not root.is_dir():
            logger.error("index_directory_not_found", dir_path=str(root))
            return []

        await self._vector_store.initialize()
        results: list[IngestionResult] = []

        for file_path in walk_markdown(root):
            source_file = file_path.relative_to(root).as_posix()
            try:
                markdown = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("document_unreadable", source_file=source_file, error=str(exc))
                continue

            results.append(await self.index_document(markdown, source_file, base_meta))

        logger.info(
            "directory_indexing_complete",
            dir_path=str(root),
            files_processed=len(results),
            chunks=sum(r.chunks_created for r in results),
        )
        return results

    async def index_document(
        self,
        markdown: str,
        source_file: str,
        base_meta: BaseMetadata | None = None,
    ) -> IngestionResult:
        """Chunk, embed and store one document's text."""
        start = time.monotonic()
        chunks = self._assembler.assemble(markdown, source_file, base_meta)
        if not chunks:
            logger.info("document_empty", source_file=source_file)
            return IngestionResult(source_file=source_file)

        stored = 0
        for offset in range(0, len(chunks), self._batch_size):
            batch = chunks[offset : offset + self._batch_size]
            stored += await self._embed_and_store(batch, source_file)

        result = IngestionResult(
            source_file=source_file,
            chunks_created=stored,
            total_tokens=sum(c.token_estimate for c in chunks),
            ingestion_time=round(time.monotonic() - start, 2),
        )
        logger.info(
            "ingestion_complete",
            source_file=source_file,
            chunks=stored,
            tokens=result.total_tokens,
            time_s=result.ingestion_time,
        )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _embed_and_store(self, batch: list[Chunk], source_file: str) -> int:
        vectors = ensure_usable_vectors(
            await self._embedding_provider.embed([c.text for c in batch]),
            len(batch),
            self._embedding_provider.get_provider_name(),
        )

        if not self._dimension_set:
            await self._vector_store.set_dimension(len(vectors[0]))
            self._dimension_set = True

        records = [
            VectorRecord(
                chunk_id=chunk.id,
                path=source_file,
                text=chunk.text,
                embedding=vector,
                content_hash=content_hash_for(source_file, chunk.text),
                metadata_json=chunk.metadata.model_dump_json(),
            )
            for chunk, vector in zip(batch, vectors)
        ]
        stored = await self._vector_store.upsert(records)
        logger.debug(
            "batch_upserted",
            source_file=source_file,
            rows=stored,
            dim=len(vectors[0]),
        )
        return stored
