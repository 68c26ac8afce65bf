"""SQLite-backed chunk + vector store.

Persists chunk records and their embeddings in one SQLite file using
``aiosqlite`` for async I/O and the ``sqlite-vec`` extension for the
nearest-neighbour index:

- ``meta``       -- key/value pairs; ``dim`` holds the fixed vector width.
- ``chunks``     -- one row per chunk id with an integer ``rid`` assigned by
  SQLite and stable for the lifetime of the row.
- ``vec_chunks`` -- a ``vec0`` virtual table keyed by ``rowid = rid``.
  Created by :meth:`SQLiteVectorStore.set_dimension` as ``float[dim]``, so
  a vector of the wrong width can never be stored.

Both tables are written inside one transaction per ``upsert`` batch.
``vec0`` has no upsert, so an existing vector is updated in place and a
new one inserted.  kNN uses ``MATCH ... AND k = ?`` (L2 distance).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite
import numpy as np
import sqlite_vec
import structlog

from weave_chunker.interfaces.vector_store_provider import IVectorStoreProvider
from weave_chunker.models.store import KnnHit, StoredRow, VectorRecord
from weave_chunker.utils.errors import DimensionMismatchError, RAGError, WeaveChunkerError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("db/vec.db")
_PROVIDER_NAME = "sqlite_vec"
_FLOAT32_LE = np.dtype("<f4")

_CREATE_META_SQL = """\
CREATE TABLE IF NOT EXISTS meta (
    key    TEXT PRIMARY KEY,
    value  TEXT NOT NULL
);
"""

_CREATE_CHUNKS_SQL = """\
CREATE TABLE IF NOT EXISTS chunks (
    rid         INTEGER PRIMARY KEY,
    id          TEXT    UNIQUE NOT NULL,
    path        TEXT    NOT NULL,
    chunk       TEXT    NOT NULL,
    sha         TEXT    NOT NULL,
    metadata    TEXT,
    created_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_chunks_path ON chunks(path);",
]

# Width is interpolated as an int.
_CREATE_VECTORS_SQL = """\
CREATE VIRTUAL TABLE IF NOT EXISTS vec_chunks USING vec0(
    embedding float[{dim}]
);
"""

_SELECT_DIM_SQL = "SELECT value FROM meta WHERE key = 'dim';"
_INSERT_DIM_SQL = "INSERT INTO meta (key, value) VALUES ('dim', ?);"

_UPSERT_CHUNK_SQL = """\
INSERT INTO chunks (id, path, chunk, sha, metadata)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT(id)
DO UPDATE SET path     = excluded.path,
              chunk    = excluded.chunk,
              sha      = excluded.sha,
              metadata = excluded.metadata;
"""

_SELECT_RID_SQL = "SELECT rid FROM chunks WHERE id = ?;"
_SELECT_VECTOR_SQL = "SELECT rowid FROM vec_chunks WHERE rowid = ?;"
_UPDATE_VECTOR_SQL = "UPDATE vec_chunks SET embedding = ? WHERE rowid = ?;"
_INSERT_VECTOR_SQL = "INSERT INTO vec_chunks (rowid, embedding) VALUES (?, ?);"

_SELECT_KNN_SQL = """\
SELECT c.id, c.path, c.chunk, c.metadata, knn.distance
FROM (
    SELECT rowid, distance
    FROM vec_chunks
    WHERE embedding MATCH ? AND k = ?
) AS knn
JOIN chunks c ON c.rid = knn.rowid
ORDER BY knn.distance, knn.rowid;
"""

_SELECT_ROWS_SQL = """\
SELECT rid, id, path, chunk, sha, metadata, created_at
FROM chunks
"""


class SQLiteVectorStore(IVectorStoreProvider):
    """Chunk and vector persistence in a single SQLite database file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)
        self._dim: int | None = None
        self._schema_ready = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the database file, meta and chunk tables if they don't exist.

        Every other method calls this lazily on first use.
        """
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute("PRAGMA journal_mode = WAL;")
            await db.execute(_CREATE_META_SQL)
            await db.execute(_CREATE_CHUNKS_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        self._schema_ready = True
        logger.info("vector_store_initialized", path=str(self._db_path))

    async def reset(self) -> None:
        """Delete the database file (and its WAL side files) entirely."""
        for suffix in ("", "-wal", "-shm"):
            Path(f"{self._db_path}{suffix}").unlink(missing_ok=True)
        self._dim = None
        self._schema_ready = False
        logger.info("vector_store_reset", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Dimension
    # ------------------------------------------------------------------

    async def set_dimension(self, dim: int) -> None:
        if dim <= 0:
            raise RAGError(
                message=f"embedding dimension must be positive, got {dim}",
                provider_name=_PROVIDER_NAME,
            )
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_DIM_SQL)
            row = await cursor.fetchone()
            if row is None:
                await db.execute(_INSERT_DIM_SQL, (str(dim),))
                await db.execute(_CREATE_VECTORS_SQL.format(dim=dim))
                await db.commit()
                logger.info("vector_dimension_set", dim=dim, created_vectors=True)
            elif int(row["value"]) != dim:
                raise DimensionMismatchError(
                    message=f"DB dim={row['value']} vs new dim={dim}",
                    provider_name=_PROVIDER_NAME,
                )
            else:
                logger.debug("vector_dimension_confirmed", dim=dim)
        self._dim = dim

    async def get_dimension(self) -> int:
        if self._dim:
            return self._dim
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_DIM_SQL)
            row = await cursor.fetchone()
        if row is None:
            raise RAGError(
                message="dimension not set; bake first",
                provider_name=_PROVIDER_NAME,
            )
        self._dim = int(row["value"])
        return self._dim

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert(self, records: list[VectorRecord]) -> int:
        """Write *records* and their vectors in a single transaction.

        All widths are checked before the transaction opens; any failure
        inside it rolls the whole batch back.
        """
        if not records:
            return 0

        dim = await self.get_dimension()
        for record in records:
            if len(record.embedding) != dim:
                raise DimensionMismatchError(
                    message=(
                        f"bad dim for chunk {record.chunk_id}: "
                        f"got {len(record.embedding)}, expected {dim}"
                    ),
                    provider_name=_PROVIDER_NAME,
                )

        async with self._connect() as db:
            try:
                for record in records:
                    await self._write_record(db, record)
                await db.commit()
            except aiosqlite.Error as exc:
                await db.rollback()
                raise RAGError(
                    message=f"upsert failed: {exc}",
                    provider_name=_PROVIDER_NAME,
                ) from exc
            except WeaveChunkerError:
                await db.rollback()
                raise

        logger.debug("vector_store_upsert", rows=len(records), dim=dim)
        return len(records)

    async def _write_record(self, db: aiosqlite.Connection, record: VectorRecord) -> None:
        await db.execute(
            _UPSERT_CHUNK_SQL,
            (
                record.chunk_id,
                record.path,
                record.text,
                record.content_hash,
                record.metadata_json,
            ),
        )
        cursor = await db.execute(_SELECT_RID_SQL, (record.chunk_id,))
        row = await cursor.fetchone()
        rid = row["rid"] if row is not None else None
        if not isinstance(rid, int):
            logger.error("row_id_binding_failed", chunk_id=record.chunk_id, rid=rid)
            raise RAGError(
                message=f"rid is not an integer for id={record.chunk_id}",
                provider_name=_PROVIDER_NAME,
            )

        blob = np.asarray(record.embedding, dtype=_FLOAT32_LE).tobytes()
        cursor = await db.execute(_SELECT_VECTOR_SQL, (rid,))
        if await cursor.fetchone() is not None:
            await db.execute(_UPDATE_VECTOR_SQL, (blob, rid))
        else:
            await db.execute(_INSERT_VECTOR_SQL, (rid, blob))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def knn(self, query_vector: list[float], k: int) -> list[KnnHit]:
        if k <= 0:
            return []
        dim = await self.get_dimension()
        if len(query_vector) != dim:
            raise DimensionMismatchError(
                message=f"query dim={len(query_vector)} vs DB dim={dim}",
                provider_name=_PROVIDER_NAME,
            )

        query = np.asarray(query_vector, dtype=_FLOAT32_LE).tobytes()
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_KNN_SQL, (query, k))
            rows = await cursor.fetchall()

        hits = []
        for row in rows:
            distance = float(row["distance"])
            hits.append(
                KnnHit(
                    chunk_id=row["id"],
                    path=row["path"],
                    text=row["chunk"],
                    metadata_json=row["metadata"],
                    distance=distance,
                    score=1.0 / (1.0 + distance),
                )
            )
        logger.debug("vector_store_knn", k=k, returned=len(hits))
        return hits

    async def get_row(self, chunk_id: str) -> StoredRow | None:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_ROWS_SQL + "WHERE id = ?;", (chunk_id,))
            row = await cursor.fetchone()
        return self._to_stored_row(row) if row is not None else None

    async def list_rows(self) -> list[StoredRow]:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_ROWS_SQL + "ORDER BY rid;")
            rows = await cursor.fetchall()
        return [self._to_stored_row(r) for r in rows]

    async def count(self) -> tuple[int, int]:
        async with self._connect() as db:
            cursor = await db.execute("SELECT COUNT(*) AS n FROM chunks;")
            chunks = (await cursor.fetchone())["n"]
            cursor = await db.execute(
                "SELECT COUNT(*) AS n FROM sqlite_master WHERE type = 'table' AND name = 'vec_chunks';"
            )
            if (await cursor.fetchone())["n"] == 0:
                return chunks, 0
            cursor = await db.execute("SELECT COUNT(*) AS n FROM vec_chunks;")
            vectors = (await cursor.fetchone())["n"]
        return chunks, vectors

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        if not self._schema_ready:
            await self.initialize()
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.enable_load_extension(True)
            await db.load_extension(sqlite_vec.loadable_path())
            await db.enable_load_extension(False)
            db.row_factory = aiosqlite.Row
            yield db

    @staticmethod
    def _to_stored_row(row: aiosqlite.Row) -> StoredRow:
        return StoredRow(
            row_id=row["rid"],
            chunk_id=row["id"],
            path=row["path"],
            text=row["chunk"],
            content_hash=row["sha"],
            metadata_json=row["metadata"],
            created_at=row["created_at"],
        )
