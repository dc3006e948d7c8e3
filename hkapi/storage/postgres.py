"""PostgreSQL-backed document store (JSONB documents in one table)."""

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import asyncpg
from loguru import logger

from hkapi.constants import Database as DbConstants
from hkapi.core.exceptions import StoreNotConnectedError, StoreUnavailableError
from hkapi.storage.base import SERVER_TIMESTAMP, Document, DocumentStore, Filter
from hkapi.utils.clock import ensure_aware
from hkapi.utils.masking import mask_database_url

DATE_TAG = "$date"
# Wraps user mappings that would otherwise read back as a tagged value
LITERAL_TAG = "$literal"
TABLE = DbConstants.TABLE

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)
_RESERVED_TAGS = frozenset({DATE_TAG, LITERAL_TAG})


def encode_value(value: Any) -> Any:
    """Convert Python values to JSON-safe values, tagging datetimes."""
    if isinstance(value, datetime):
        return {DATE_TAG: ensure_aware(value).isoformat()}
    if isinstance(value, dict):
        encoded = {str(k): encode_value(v) for k, v in value.items()}
        if len(encoded) == 1 and next(iter(encoded)) in _RESERVED_TAGS:
            return {LITERAL_TAG: encoded}
        return encoded
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    return value


def decode_value(value: Any) -> Any:
    """Inverse of encode_value()."""
    if isinstance(value, dict):
        if len(value) == 1 and DATE_TAG in value and isinstance(value[DATE_TAG], str):
            return datetime.fromisoformat(value[DATE_TAG])
        if len(value) == 1 and isinstance(value.get(LITERAL_TAG), dict):
            return {k: decode_value(v) for k, v in value[LITERAL_TAG].items()}
        return {k: decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    return value


def encode_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Encode a document's top-level field map."""
    return {str(k): encode_value(v) for k, v in data.items()}


def decode_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Inverse of encode_fields()."""
    return {k: decode_value(v) for k, v in data.items()}


def _rows_affected(status: str) -> int:
    """Parse the row count from a command tag such as 'DELETE 3'."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, IndexError):
        return 0


async def _init_connection(conn: asyncpg.Connection) -> None:
    await conn.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


class PostgresDocumentStore(DocumentStore):
    """
    DocumentStore over a single ``documents`` table.

    Schema (see alembic/versions/001_baseline.py)::

        documents(collection TEXT, id TEXT, data JSONB,
                  created_at TIMESTAMPTZ, updated_at TIMESTAMPTZ,
                  PRIMARY KEY (collection, id))

    Conditional writes are single UPDATE/DELETE statements guarded by
    ``data @> expected``, so compare-and-set is atomic in the database.
    """

    def __init__(self, database_url: str, pool_size: int = 10):
        """
        Initialize PostgreSQL document store.

        Args:
            database_url: PostgreSQL connection URL
            pool_size: Maximum number of pooled connections
        """
        self.database_url = database_url
        self.pool_size = pool_size
        self.pool: Optional[asyncpg.Pool] = None
        self._pool_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self.pool is not None

    async def connect(self) -> None:
        """Establish database connection pool."""
        async with self._pool_lock:
            if self.pool is not None:
                return
            min_pool = max(2, (self.pool_size + 1) // 2)
            try:
                self.pool = await asyncpg.create_pool(
                    self.database_url,
                    min_size=min(min_pool, self.pool_size),
                    max_size=self.pool_size,
                    timeout=DbConstants.POOL_TIMEOUT_SECONDS,
                    command_timeout=DbConstants.COMMAND_TIMEOUT_SECONDS,
                    init=_init_connection,
                )
            except _DRIVER_ERRORS as e:
                raise StoreUnavailableError(
                    f"Failed to connect to document store: {e}", operation="connect"
                ) from e
            logger.info(
                f"Document store connected (pool {min_pool}-{self.pool_size}): "
                f"{mask_database_url(self.database_url)}"
            )

    async def close(self) -> None:
        """Close database connection pool."""
        async with self._pool_lock:
            if self.pool:
                await self.pool.close()
                self.pool = None
            logger.info("Document store connection pool closed")

    @asynccontextmanager
    async def _connection(self, operation: str) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection, translating driver failures."""
        if self.pool is None:
            raise StoreNotConnectedError()
        try:
            async with self.pool.acquire() as conn:
                yield conn
        except _DRIVER_ERRORS as e:
            logger.error(f"Document store {operation} failed: {e}")
            raise StoreUnavailableError(str(e), operation=operation) from e

    @staticmethod
    async def _resolve(conn: asyncpg.Connection, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Replace SERVER_TIMESTAMP sentinels with the database clock."""
        if any(value is SERVER_TIMESTAMP for value in data.values()):
            now = await conn.fetchval("SELECT clock_timestamp()")
            data = {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}
        return encode_fields(data)

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        async with self._connection("get") as conn:
            row = await conn.fetchrow(
                f"SELECT id, data FROM {TABLE} WHERE collection = $1 AND id = $2",
                collection,
                doc_id,
            )
        if row is None:
            return None
        return Document(id=row["id"], data=decode_fields(row["data"]))

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        async with self._connection("set") as conn:
            payload = await self._resolve(conn, data)
            await conn.execute(
                f"""
                INSERT INTO {TABLE} (collection, id, data)
                VALUES ($1, $2, $3::jsonb)
                ON CONFLICT (collection, id)
                DO UPDATE SET data = EXCLUDED.data, updated_at = NOW()
                """,
                collection,
                doc_id,
                payload,
            )

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        async with self._connection("add") as conn:
            payload = await self._resolve(conn, data)
            await conn.execute(
                f"INSERT INTO {TABLE} (collection, id, data) VALUES ($1, $2, $3::jsonb)",
                collection,
                doc_id,
                payload,
            )
        return doc_id

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        async with self._connection("update") as conn:
            payload = await self._resolve(conn, fields)
            args: List[Any] = [collection, doc_id, payload]
            guard = ""
            if expected:
                args.append(encode_fields(expected))
                guard = " AND data @> $4::jsonb"
            row = await conn.fetchrow(
                f"""
                UPDATE {TABLE} SET data = data || $3::jsonb, updated_at = NOW()
                WHERE collection = $1 AND id = $2{guard}
                RETURNING id
                """,
                *args,
            )
        return row is not None

    async def delete(
        self, collection: str, doc_id: str, expected: Optional[Mapping[str, Any]] = None
    ) -> bool:
        async with self._connection("delete") as conn:
            args: List[Any] = [collection, doc_id]
            guard = ""
            if expected:
                args.append(encode_fields(expected))
                guard = " AND data @> $3::jsonb"
            status = await conn.execute(
                f"DELETE FROM {TABLE} WHERE collection = $1 AND id = $2{guard}", *args
            )
        return _rows_affected(status) > 0

    @staticmethod
    def _filter_clause(flt: Filter, key_param: int, value_param: int) -> Tuple[str, Any]:
        """Build one WHERE fragment and the bound value for a filter."""
        key = f"${key_param}::text"
        val = f"${value_param}"
        if isinstance(flt.value, datetime):
            expr = f"(data -> {key} ->> '{DATE_TAG}')::timestamptz"
            op = "=" if flt.op == "==" else flt.op
            return f"{expr} {op} {val}::timestamptz", ensure_aware(flt.value)
        if flt.op == "==":
            return f"data -> {key} = {val}::jsonb", encode_value(flt.value)
        if isinstance(flt.value, (int, float)) and not isinstance(flt.value, bool):
            return f"(data ->> {key})::numeric {flt.op} {val}::numeric", flt.value
        return f"data ->> {key} {flt.op} {val}::text", str(flt.value)

    def _where(self, collection: str, filters: Sequence[Filter]) -> Tuple[List[str], List[Any]]:
        """WHERE fragments and bound values for a collection plus filters."""
        args: List[Any] = [collection]
        clauses = ["collection = $1"]
        for flt in filters:
            args.append(flt.field)
            key_param = len(args)
            clause, value = self._filter_clause(flt, key_param, key_param + 1)
            args.append(value)
            clauses.append(clause)
        return clauses, args

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        clauses, args = self._where(collection, filters)

        order_sql = ""
        if order_by is not None:
            args.append(order_by)
            key = f"${len(args)}::text"
            direction = "DESC" if descending else "ASC"
            clauses.append(f"data ? {key} AND data -> {key} <> 'null'::jsonb")
            order_sql = (
                f" ORDER BY (data -> {key} ->> '{DATE_TAG}')::timestamptz {direction},"
                f" data -> {key} {direction}"
            )

        limit_sql = ""
        if limit is not None:
            args.append(limit)
            limit_sql = f" LIMIT ${len(args)}"

        sql = f"SELECT id, data FROM {TABLE} WHERE {' AND '.join(clauses)}{order_sql}{limit_sql}"
        async with self._connection("query") as conn:
            rows = await conn.fetch(sql, *args)
        return [Document(id=row["id"], data=decode_fields(row["data"])) for row in rows]

    async def query_ids(self, collection: str, filters: Sequence[Filter] = ()) -> List[str]:
        clauses, args = self._where(collection, filters)
        sql = f"SELECT id FROM {TABLE} WHERE {' AND '.join(clauses)}"
        async with self._connection("query_ids") as conn:
            rows = await conn.fetch(sql, *args)
        return [row["id"] for row in rows]

    async def list_ids(self, collection: str) -> List[str]:
        async with self._connection("list_ids") as conn:
            rows = await conn.fetch(
                f"SELECT id FROM {TABLE} WHERE collection = $1 ORDER BY id", collection
            )
        return [row["id"] for row in rows]

    async def delete_many(self, collection: str, doc_ids: Iterable[str]) -> int:
        ids = list(dict.fromkeys(doc_ids))
        if not ids:
            return 0
        async with self._connection("delete_many") as conn:
            async with conn.transaction():
                status = await conn.execute(
                    f"DELETE FROM {TABLE} WHERE collection = $1 AND id = ANY($2::text[])",
                    collection,
                    ids,
                )
        return _rows_affected(status)
