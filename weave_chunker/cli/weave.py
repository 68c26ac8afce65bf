# =============================================================================
# weave_chunker/cli/weave.py - Command-Line Interface
# =============================================================================
#
# Subcommands:
#
#   bake     - Chunk, embed and store every Markdown file under --dir
#   rebake   - Delete the database, then bake from scratch
#   search   - Query the store and print the JSON response envelope
#   analyze  - Print corpus statistics for an existing database
#
# Provider selection:
#   - Embedding: native Ollama /api/embeddings first, OpenAI-compatible
#     /v1/embeddings second (swapped when OLLAMA_NATIVE=false)
#   - Vector store: SQLite file at --db
#
# Usage examples:
#   python -m weave_chunker.cli bake --dir ./data --universe weave
#   python -m weave_chunker.cli search -q "sync days" -k 3 --content-type list
#   python -m weave_chunker.cli analyze --db ./db/vec.db
#
# Command results go to stdout; logs and progress lines go to stderr.
# =============================================================================

"""Command-line entry point for weave-chunker.

Usage::

    python -m weave_chunker.cli bake --dir ./data
    python -m weave_chunker.cli search -q "who keeps the archive" -k 5
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from weave_chunker.config.loader import load_config
from weave_chunker.config.settings import Settings
from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
from weave_chunker.models.chunk import BaseMetadata
from weave_chunker.models.corpus import CorpusStats
from weave_chunker.models.search import SearchFilters, SearchRequest
from weave_chunker.providers.embedding import (
    FallbackEmbeddingProvider,
    OllamaEmbeddingProvider,
    OpenAIEmbeddingProvider,
)
from weave_chunker.providers.vector_store import SQLiteVectorStore
from weave_chunker.services.analysis import CorpusAnalyzer
from weave_chunker.services.ingestion import ChunkAssembler, IndexingService, SizeSplitter
from weave_chunker.services.retrieval import RelevanceRanker, SearchService
from weave_chunker.utils.errors import WeaveChunkerError
from weave_chunker.utils.logging import configure_logging

logger = structlog.get_logger(logger_name=__name__)

CONTENT_TYPES = ("narrative", "list", "quote", "mixed")


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _resolve_settings(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Apply command-line overrides on top of environment settings."""
    app_settings = base or Settings()
    overrides: dict[str, object] = {}
    if getattr(args, "dir", None):
        overrides["lore_dir"] = args.dir
    if getattr(args, "db", None):
        overrides["vector_db_path"] = args.db
    if getattr(args, "model", None):
        overrides["embedding_model"] = args.model
    return app_settings.model_copy(update=overrides) if overrides else app_settings


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """Native Ollama and OpenAI-compatible routes, ordered by ``ollama_native``."""
    native = OllamaEmbeddingProvider(settings=app_settings)
    compatible = OpenAIEmbeddingProvider(settings=app_settings)
    if app_settings.ollama_native:
        return FallbackEmbeddingProvider(primary=native, alternate=compatible)
    return FallbackEmbeddingProvider(primary=compatible, alternate=native)


def _build_indexing_service(
    app_settings: Settings,
    embedding_provider: IEmbeddingProvider,
    vector_store: SQLiteVectorStore,
) -> IndexingService:
    splitter = SizeSplitter(
        max_tokens=app_settings.chunk_max_tokens,
        overlap_ratio=app_settings.chunk_overlap_ratio,
    )
    return IndexingService(
        assembler=ChunkAssembler(splitter=splitter),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        batch_size=app_settings.embed_batch_size,
    )


def _base_meta(args: argparse.Namespace) -> BaseMetadata:
    return BaseMetadata(
        universe=args.universe,
        species=args.species,
        subspecies=args.subspecies,
    )


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_bake(args: argparse.Namespace, app_settings: Settings) -> int:
    """Index every Markdown file under the lore directory."""
    lore_dir = Path(app_settings.lore_dir)
    if not lore_dir.is_dir():
        print(f"Error: directory not found: {lore_dir}", file=sys.stderr)
        return 1

    vector_store = SQLiteVectorStore(db_path=app_settings.vector_db_path)
    embedding_provider = _build_embedding_provider(app_settings)
    service = _build_indexing_service(app_settings, embedding_provider, vector_store)

    print(f"Baking {lore_dir} -> {vector_store.db_path}", file=sys.stderr)
    print(f"  Embedding: {embedding_provider.get_provider_name()}", file=sys.stderr)

    results = await service.index_directory(lore_dir, _base_meta(args))
    chunks, vectors = await vector_store.count()

    print("\nBake complete:")
    print(f"  Files processed: {len(results)}")
    print(f"  Chunks created:  {sum(r.chunks_created for r in results)}")
    print(f"  Total tokens:    {sum(r.total_tokens for r in results)}")
    print(f"  Total time:      {sum(r.ingestion_time for r in results):.2f}s")
    print(f"  Stored rows:     {chunks} chunks / {vectors} vectors")
    return 0


async def _handle_rebake(args: argparse.Namespace, app_settings: Settings) -> int:
    """Delete the database files, then bake from scratch."""
    if not Path(app_settings.lore_dir).is_dir():
        print(f"Error: directory not found: {app_settings.lore_dir}", file=sys.stderr)
        return 1
    await SQLiteVectorStore(db_path=app_settings.vector_db_path).reset()
    return await _handle_bake(args, app_settings)


async def _handle_search(
    args: argparse.Namespace, app_settings: Settings, preview_chars: int
) -> int:
    """Run one query and print the response envelope as JSON on stdout."""
    db_path = Path(app_settings.vector_db_path)
    if not db_path.exists():
        print(f"Error: database not found: {db_path}", file=sys.stderr)
        return 1

    filters = SearchFilters(
        universe=args.universe,
        species=args.species,
        subspecies=args.subspecies,
        content_type=args.content_type,
        min_importance=args.min_importance,
    )
    request = SearchRequest(
        query=args.q,
        k=args.k if args.k is not None else app_settings.search_default_k,
        filters=filters,
        rerank=not args.no_rerank,
        include_context=not args.no_context,
    )
    service = SearchService(
        embedding_provider=_build_embedding_provider(app_settings),
        vector_store=SQLiteVectorStore(db_path=app_settings.vector_db_path),
        ranker=RelevanceRanker(),
        preview_chars=preview_chars,
    )
    response = await service.search(request)
    print(response.to_json())
    return 0


async def _handle_analyze(app_settings: Settings) -> int:
    """Print corpus statistics for the database."""
    db_path = Path(app_settings.vector_db_path)
    if not db_path.exists():
        print(f"Error: database not found: {db_path}", file=sys.stderr)
        return 1

    stats = await CorpusAnalyzer().analyze(SQLiteVectorStore(db_path=db_path))
    _print_stats(stats)
    return 0


def _print_stats(stats: CorpusStats) -> None:
    print("Corpus Statistics")
    print("=" * 40)
    print(f"  Total chunks:     {stats.total_chunks}")
    if stats.total_chunks == 0:
        return
    print(f"  Avg length:       {stats.avg_chunk_length}")
    print(f"  Min / max length: {stats.min_chunk_length} / {stats.max_chunk_length}")
    if stats.importance is not None:
        imp = stats.importance
        print(
            f"  Importance:       avg {imp.average}  median {imp.median}"
            f"  range {imp.minimum}-{imp.maximum}"
        )

    print("\n  Files:")
    for item in stats.files:
        print(f"    {item.path:<40} {item.chunk_count:>5}  avg {item.avg_length}")

    for label, histogram in (
        ("Content types", stats.content_types),
        ("Universes", stats.universes),
        ("Species", stats.species),
        ("Subspecies", stats.subspecies),
    ):
        if histogram:
            print(f"\n  {label}:")
            for name, count in histogram.items():
                print(f"    {name:<20} {count}")

    for label, pairs in (("Top entities", stats.top_entities), ("Top concepts", stats.top_concepts)):
        if pairs:
            print(f"\n  {label}:")
            for name, count in pairs:
                print(f"    {name:<30} {count}")

    if stats.top_sections:
        print("\n  Top sections:")
        for section in stats.top_sections:
            print(f"    {section.section_path:<40} {section.chunk_count}")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_store_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--db", help="SQLite database path (default: ./db/vec.db)")
    parser.add_argument("--model", help="Embedding model (default: nomic-embed-text)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def _add_classification_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--universe", help="Universe label")
    parser.add_argument("--species", help="Species label")
    parser.add_argument("--subspecies", help="Subspecies label")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="weave-chunker",
        description="Chunk Markdown lore into a vector store and search it.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- bake / rebake --
    for name, help_text in (
        ("bake", "Chunk, embed and store every Markdown file"),
        ("rebake", "Delete the database, then bake from scratch"),
    ):
        bake_parser = subparsers.add_parser(name, help=help_text)
        bake_parser.add_argument("--dir", help="Lore directory (default: ./data)")
        _add_store_args(bake_parser)
        _add_classification_args(bake_parser)

    # -- search --
    search_parser = subparsers.add_parser("search", help="Search the store")
    search_parser.add_argument("-q", "--q", required=True, help="Query text")
    search_parser.add_argument("-k", "--k", type=int, default=None, help="Results (default: 5)")
    _add_store_args(search_parser)
    _add_classification_args(search_parser)
    search_parser.add_argument(
        "--content-type", dest="content_type", choices=CONTENT_TYPES, help="Content type filter"
    )
    search_parser.add_argument(
        "--min-importance", dest="min_importance", type=float, help="Minimum importance (0-1)"
    )
    search_parser.add_argument(
        "--no-rerank", dest="no_rerank", action="store_true", help="Keep vector order"
    )
    search_parser.add_argument(
        "--no-context", dest="no_context", action="store_true", help="Omit full chunk text"
    )

    # -- analyze --
    analyze_parser = subparsers.add_parser("analyze", help="Show corpus statistics")
    _add_store_args(analyze_parser)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, configure logging and dispatch to a handler."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        app_settings = _resolve_settings(args)
    except ValidationError as exc:
        print(f"Error: invalid settings: {exc}", file=sys.stderr)
        sys.exit(1)

    config = load_config(settings=app_settings)
    configure_logging(log_level="DEBUG" if args.debug else app_settings.log_level)
    preview_chars = int(config.get("search", {}).get("preview_chars", 200))

    try:
        if args.command == "bake":
            exit_code = asyncio.run(_handle_bake(args, app_settings))
        elif args.command == "rebake":
            exit_code = asyncio.run(_handle_rebake(args, app_settings))
        elif args.command == "search":
            exit_code = asyncio.run(_handle_search(args, app_settings, preview_chars))
        elif args.command == "analyze":
            exit_code = asyncio.run(_handle_analyze(app_settings))
        else:
            parser.print_help()
            exit_code = 1
    except (WeaveChunkerError, ValidationError) as exc:
        logger.error("command_failed", command=args.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
