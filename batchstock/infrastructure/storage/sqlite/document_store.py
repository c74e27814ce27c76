"""SQLite implementation of the document store."""

import json
from collections.abc import Sequence
from typing import Any

import aiosqlite

from batchstock.config import get_logger
from batchstock.core.exceptions import ConflictError, DatabaseError
from batchstock.core.interfaces import DocRef, Document, IDocumentStore, Mutator
from batchstock.infrastructure.storage.sqlite.connection import ConnectionPool

logger = get_logger(__name__)


class SQLiteDocumentStore(IDocumentStore):
    """
    Documents as JSON rows with a version column.

    Commits re-check every read version under the write lock and bump it on
    write; a mismatch raises ConflictError and rolls the whole commit back.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    async def get(self, ref: DocRef) -> Document | None:
        try:
            async with self._pool.acquire() as conn:
                row = await self._fetch_row(conn, ref)
        except aiosqlite.Error as e:
            logger.error("sqlite_get_failed", ref=str(ref), error=str(e))
            raise DatabaseError("get", str(e)) from e
        return json.loads(row["body"]) if row is not None else None

    async def set(self, ref: DocRef, doc: Document) -> None:
        try:
            async with self._pool.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO documents (collection, doc_id, version, body)
                    VALUES (?, ?, 1, ?)
                    ON CONFLICT (collection, doc_id) DO UPDATE SET
                        body = excluded.body,
                        version = documents.version + 1,
                        updated_at = datetime('now')
                    """,
                    (ref.collection, ref.doc_id, json.dumps(doc)),
                )
        except aiosqlite.Error as e:
            logger.error("sqlite_set_failed", ref=str(ref), error=str(e))
            raise DatabaseError("set", str(e)) from e

    async def list(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
    ) -> list[Document]:
        sql = "SELECT body FROM documents WHERE collection = ?"
        params: list[Any] = [collection]
        for field, value in (where or {}).items():
            sql += " AND json_extract(body, ?) = ?"
            params.extend([f"$.{field}", value])
        sql += " ORDER BY rowid"

        try:
            async with self._pool.acquire() as conn:
                cursor = await conn.execute(sql, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("sqlite_list_failed", collection=collection, error=str(e))
            raise DatabaseError("list", str(e)) from e
        return [json.loads(row["body"]) for row in rows]

    async def transaction(
        self,
        refs: Sequence[DocRef],
        mutator: Mutator,
    ) -> dict[DocRef, Document]:
        try:
            read_versions: dict[DocRef, int] = {}
            snapshot: dict[DocRef, Document | None] = {}
            async with self._pool.acquire() as conn:
                for ref in refs:
                    row = await self._fetch_row(conn, ref)
                    read_versions[ref] = row["version"] if row is not None else 0
                    snapshot[ref] = json.loads(row["body"]) if row is not None else None

            writes = mutator(snapshot)
            stray = set(writes) - set(refs)
            if stray:
                raise ValueError(f"mutator wrote unread documents: {sorted(map(str, stray))}")

            async with self._pool.transaction() as conn:
                for ref, version in read_versions.items():
                    row = await self._fetch_row(conn, ref)
                    current = row["version"] if row is not None else 0
                    if current != version:
                        logger.debug("sqlite_store_conflict", ref=str(ref))
                        raise ConflictError(str(ref))
                for ref, doc in writes.items():
                    await self._write(conn, ref, doc, read_versions[ref])
        except aiosqlite.Error as e:
            logger.error("sqlite_transaction_failed", refs=[str(r) for r in refs], error=str(e))
            raise DatabaseError("transaction", str(e)) from e

        return writes

    @staticmethod
    async def _fetch_row(conn: aiosqlite.Connection, ref: DocRef) -> aiosqlite.Row | None:
        cursor = await conn.execute(
            "SELECT version, body FROM documents WHERE collection = ? AND doc_id = ?",
            (ref.collection, ref.doc_id),
        )
        return await cursor.fetchone()

    @staticmethod
    async def _write(
        conn: aiosqlite.Connection, ref: DocRef, doc: Document, read_version: int
    ) -> None:
        body = json.dumps(doc)
        if read_version == 0:
            await conn.execute(
                "INSERT INTO documents (collection, doc_id, version, body) VALUES (?, ?, 1, ?)",
                (ref.collection, ref.doc_id, body),
            )
            return
        cursor = await conn.execute(
            """
            UPDATE documents SET body = ?, version = version + 1, updated_at = datetime('now')
            WHERE collection = ? AND doc_id = ? AND version = ?
            """,
            (body, ref.collection, ref.doc_id, read_version),
        )
        if cursor.rowcount != 1:
            raise ConflictError(str(ref))

    async def close(self) -> None:
        await self._pool.close()
