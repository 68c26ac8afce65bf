"""Shared pytest fixtures for the weave-chunker test suite."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
from weave_chunker.interfaces.vector_store_provider import IVectorStoreProvider
from weave_chunker.providers.vector_store.sqlite_vector_store import SQLiteVectorStore

_WORD_RE = re.compile(r"[a-z]+")


class HashingEmbeddingProvider(IEmbeddingProvider):
    """Deterministic bag-of-words embedder for tests.

    Each lowercase word increments one of ``dim - 1`` hashed buckets; the
    last component is a constant so no vector is ever all zeros.
    """

    def __init__(self, dim: int = 16) -> None:
        self._dim = dim
        self.calls: list[list[str]] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [self._vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    def get_provider_name(self) -> str:
        return "hashing_test"

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self._dim
        for word in _WORD_RE.findall(text.lower()):
            bucket = int(hashlib.md5(word.encode()).hexdigest(), 16) % (self._dim - 1)
            vector[bucket] += 1.0
        vector[-1] = 1.0
        return vector


@pytest.fixture
def hashing_embedder() -> HashingEmbeddingProvider:
    return HashingEmbeddingProvider()


@pytest.fixture
def mock_embedding_provider() -> MagicMock:
    """Mock IEmbeddingProvider returning 4-dim vectors, one per input text."""
    provider = MagicMock(spec=IEmbeddingProvider)

    async def _embed(texts: list[str]) -> list[list[float]]:
        return [[float(i), 1.0, 0.0, 0.5] for i, _ in enumerate(texts)]

    provider.embed = AsyncMock(side_effect=_embed)
    provider.embed_single = AsyncMock(return_value=[0.0, 1.0, 0.0, 0.5])
    provider.get_provider_name.return_value = "mock_embedding"
    return provider


@pytest.fixture
def mock_vector_store() -> MagicMock:
    """Mock IVectorStoreProvider with async methods."""
    store = MagicMock(spec=IVectorStoreProvider)
    store.initialize = AsyncMock(return_value=None)
    store.set_dimension = AsyncMock(return_value=None)
    store.get_dimension = AsyncMock(return_value=4)
    store.upsert = AsyncMock(side_effect=lambda records: len(records))
    store.knn = AsyncMock(return_value=[])
    store.get_row = AsyncMock(return_value=None)
    store.count = AsyncMock(return_value=(0, 0))
    store.list_rows = AsyncMock(return_value=[])
    store.get_provider_name.return_value = "mock_store"
    return store


@pytest.fixture
def vector_store(tmp_path: Path) -> SQLiteVectorStore:
    """SQLite store in a temporary directory (schema created lazily)."""
    return SQLiteVectorStore(db_path=tmp_path / "db" / "vec.db")


@pytest.fixture
def sample_markdown() -> str:
    """A small lore document with nested headings, a list and a quote."""
    return (
        "A preface before any heading.\n"
        "\n"
        "# Kaelari Lore\n"
        "\n"
        "The Kaelari are a river people of the Aurelian Basin.\n"
        "\n"
        "## Major Rites\n"
        "\n"
        "Every season the Council of Artisans gathers at the Loom.\n"
        "\n"
        "### Sync Days\n"
        "\n"
        "- Dawn chant at the Loom\n"
        "- Exchange of woven tokens\n"
        "- Night of **Silent Threads**\n"
        "\n"
        "## Sayings\n"
        "\n"
        "> The thread remembers what the hand forgets.\n"
        "> Weave slowly, unravel never.\n"
    )


@pytest.fixture
def lore_dir(tmp_path: Path, sample_markdown: str) -> Path:
    """A lore directory with two Markdown files and one ignored text file."""
    root = tmp_path / "data"
    (root / "kaelari").mkdir(parents=True)
    (root / "kaelari" / "rites.md").write_text(sample_markdown, encoding="utf-8")
    (root / "archive.MD").write_text(
        "## The Archive\n\nKeepers of the Archive record every Sync Day in knotted cord.\n",
        encoding="utf-8",
    )
    (root / "notes.txt").write_text("not markdown", encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def _silent_structlog():
    """Discard log output and keep loggers uncached between tests."""
    structlog.configure(
        processors=[structlog.processors.add_log_level],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()
