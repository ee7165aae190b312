"""
Campfire - ProductVectorStore
==============================
Adapter around a LanceDB table holding one vector per catalog product.

  • **Get-or-create**: the table is opened if present; otherwise it is
    created on the first upsert, once the embedding dimension is known.
  • **Upsert by id**: ``merge_insert("id")`` replaces rows for known ids
    and inserts new ones, so rebuilding never duplicates a product.
  • **Cosine search**: LanceDB reports ``_distance = 1 - cosine``.  This
    module converts it to ``score = 1 - _distance`` so callers only ever
    see a similarity where higher means closer.
  • **Async facade**: LanceDB's sync API runs in worker threads under
    ``REMOTE_CALL_TIMEOUT_SECONDS`` so the event loop is never blocked.

Rows for products removed from the catalog are not purged by an upsert;
``drop()`` is the way to start from an empty table.

Usage:
    from campfire.src.database.vector_store import ProductVectorStore

    store = ProductVectorStore()
    await store.upsert(ids, vectors, metadatas)
    hits = await store.query(query_vector, limit=2)
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from pathlib import Path

import lancedb
import pyarrow as pa

from campfire.config.settings import settings
from campfire.src.core.models import RecordMetadata, Vector, VectorHit
from campfire.src.utils.async_utils import run_blocking
from campfire.src.utils.logger import get_logger

logger = get_logger(__name__)

# ── Constants ──────────────────────────────────────────────────────────
_ID_COLUMN = "id"
_VECTOR_COLUMN = "vector"
_METADATA_COLUMNS = ("name", "description", "price", "image_url")
_DISTANCE_TYPE = "cosine"

_DB_LOCK = threading.Lock()
_db_connection_cache: dict[str, lancedb.DBConnection] = {}


def product_schema(dimension: int) -> pa.Schema:
    """Arrow schema of the product table for vectors of *dimension* floats."""
    return pa.schema([
        pa.field(_ID_COLUMN, pa.utf8(), nullable=False),
        pa.field(_VECTOR_COLUMN, pa.list_(pa.float32(), dimension)),
        pa.field("name", pa.utf8()),
        pa.field("description", pa.utf8()),
        pa.field("price", pa.float64()),
        pa.field("image_url", pa.utf8()),
    ])


def _get_connection(uri: str, api_key: str | None = None) -> lancedb.DBConnection:
    """
    Return a **singleton** ``lancedb.DBConnection`` for *uri*.

    Thread-safe via ``_DB_LOCK``.  Local directories are created on demand;
    ``db://`` URIs go to LanceDB Cloud and need *api_key*.
    """
    if uri not in _db_connection_cache:
        with _DB_LOCK:
            if uri not in _db_connection_cache:
                logger.info("Opening new LanceDB connection: %s", uri)
                if uri.startswith("db://"):
                    _db_connection_cache[uri] = lancedb.connect(uri, api_key=api_key)
                else:
                    Path(uri).mkdir(parents=True, exist_ok=True)
                    _db_connection_cache[uri] = lancedb.connect(uri)
    return _db_connection_cache[uri]


class ProductVectorStore:
    """
    Named LanceDB table of ``(id, vector, metadata)`` product records.

    Parameters
    ----------
    uri
        LanceDB directory or ``db://`` URI.  Defaults to ``settings.LANCEDB_URI``.
    table_name
        Defaults to ``settings.LANCEDB_TABLE_NAME``.
    timeout
        Per-call bound in seconds.  Defaults to ``settings.REMOTE_CALL_TIMEOUT_SECONDS``.
    """

    __slots__ = ("_uri", "_table_name", "_timeout", "_write_lock", "db", "table")

    def __init__(self, uri: str | None = None, table_name: str | None = None, timeout: float | None = None) -> None:
        self._uri: str = str(uri or settings.LANCEDB_URI)
        self._table_name: str = table_name or settings.LANCEDB_TABLE_NAME
        self._timeout: float = timeout or settings.REMOTE_CALL_TIMEOUT_SECONDS
        # A timed-out upsert keeps running in its thread; later writes wait for it
        self._write_lock = threading.Lock()
        api_key = settings.LANCEDB_API_KEY.get_secret_value() if settings.LANCEDB_API_KEY else None
        self.db: lancedb.DBConnection = _get_connection(self._uri, api_key)
        self.table: lancedb.table.Table | None = None
        self.open_or_create()

    @property
    def table_name(self) -> str:
        return self._table_name

    # ------------------------------------------------------------------
    # Collection lifecycle
    # ------------------------------------------------------------------

    def open_or_create(self, dimension: int | None = None) -> lancedb.table.Table | None:
        """
        Return the product table, opening it if it exists.

        A missing table is created only when *dimension* is given; until
        then ``None`` is returned.
        """
        if self.table is not None:
            return self.table

        with _DB_LOCK:
            if self.table is not None:
                return self.table
            if self._table_name in self.db.table_names():
                self.table = self.db.open_table(self._table_name)
                logger.info("Opened existing table '%s' (%d rows).", self._table_name, self.table.count_rows())
            elif dimension is not None:
                self.table = self.db.create_table(self._table_name, schema=product_schema(dimension), exist_ok=True)
                logger.info("Created new table '%s' (dimension=%d).", self._table_name, dimension)
        return self.table

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def upsert(self, ids: Sequence[str], vectors: Sequence[Vector], metadatas: Sequence[RecordMetadata]) -> int:
        """
        Insert-or-replace one record per id in a single batch.

        Returns
        -------
        int
            Number of records written.

        Raises
        ------
        ValueError
            If the three sequences differ in length or vectors differ in size.
        """
        return await run_blocking(self._upsert_sync, list(ids), list(vectors), list(metadatas), timeout=self._timeout, operation="vector store upsert")


    async def query(self, vector: Vector, limit: int, include_metadata: bool = True, include_distance: bool = True) -> list[VectorHit]:
        """
        Nearest-neighbour search ordered from most to least similar.

        With ``include_distance=False`` hits carry ``score=None``; with
        ``include_metadata=False`` they carry ``metadata=None``.

        Raises
        ------
        ValueError
            If the table has not been created yet (nothing indexed).
        """
        return await run_blocking(self._query_sync, list(vector), limit, include_metadata, include_distance, timeout=self._timeout, operation="vector store query")


    async def count(self) -> int:
        """Return the number of indexed records (0 if the table does not exist)."""
        return await run_blocking(self.count_sync, timeout=self._timeout, operation="vector store count")


    async def drop(self) -> None:
        """Drop the product table so the next upsert starts from empty."""
        await run_blocking(self.drop_sync, timeout=self._timeout, operation="vector store drop")

    # ------------------------------------------------------------------
    # Sync internals (run in worker threads)
    # ------------------------------------------------------------------

    def _upsert_sync(self, ids: list[str], vectors: list[Vector], metadatas: list[RecordMetadata]) -> int:
        if not len(ids) == len(vectors) == len(metadatas):
            raise ValueError(f"Length mismatch: {len(ids)} ids, {len(vectors)} vectors, {len(metadatas)} metadatas.")
        if not ids:
            return 0

        dimension = len(vectors[0])
        if any(len(v) != dimension for v in vectors):
            raise ValueError("All vectors in one upsert must have the same dimension.")

        table = self.open_or_create(dimension)
        records = [
            {_ID_COLUMN: pid, _VECTOR_COLUMN: [float(x) for x in vec], **{col: meta.get(col) for col in _METADATA_COLUMNS}}
            for pid, vec, meta in zip(ids, vectors, metadatas)
        ]
        data = pa.Table.from_pylist(records, schema=table.schema)

        with self._write_lock:
            (
                table.merge_insert(_ID_COLUMN)
                .when_matched_update_all()
                .when_not_matched_insert_all()
                .execute(data)
            )
        logger.info("Upserted %d record(s). Table '%s' now has %d rows.", len(records), self._table_name, table.count_rows())
        return len(records)


    def _query_sync(self, vector: Vector, limit: int, include_metadata: bool, include_distance: bool) -> list[VectorHit]:
        table = self.open_or_create()
        if table is None:
            raise ValueError(f"Table '{self._table_name}' does not exist. Build the product index first.")

        columns = [_ID_COLUMN, *_METADATA_COLUMNS] if include_metadata else [_ID_COLUMN]
        rows = (
            table.search(vector, vector_column_name=_VECTOR_COLUMN)
            .distance_type(_DISTANCE_TYPE)
            .select(columns)
            .limit(limit)
            .to_list()
        )

        hits: list[VectorHit] = []
        for row in rows:
            score = 1.0 - float(row["_distance"]) if include_distance else None
            metadata = {col: row.get(col) for col in _METADATA_COLUMNS} if include_metadata else None
            hits.append(VectorHit(id=str(row[_ID_COLUMN]), score=score, metadata=metadata))

        logger.debug("Vector query returned %d hit(s) (limit=%d).", len(hits), limit)
        return hits


    def count_sync(self) -> int:
        table = self.open_or_create()
        return table.count_rows() if table is not None else 0


    def drop_sync(self) -> None:
        try:
            self.db.drop_table(self._table_name)
            logger.info("Dropped table '%s'.", self._table_name)
        except (ValueError, FileNotFoundError):
            logger.warning("Table '%s' does not exist: nothing to drop.", self._table_name)
        self.table = None


    def __repr__(self) -> str:
        return f"ProductVectorStore(uri='{self._uri}', table='{self._table_name}', rows={self.count_sync()})"
