# ============================================================================
# LOCAL DATABASE CLIENT
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Runtime - Embedded SQLite client
# PURPOSE: run/batch over a file-based SQLite database, atomic batches
# CREATED: 19 OCT 2026
# ============================================================================
"""
Local Database Client

Wraps a sqlite3 connection behind the async ``run``/``batch`` contract
shared with the remote client. Blocking calls are pushed to a worker
thread with asyncio.to_thread; a lock serializes access to the single
connection.

Batches are atomic: every statement runs inside one transaction, and any
failure (including a deferred foreign key violation at COMMIT) rolls the
whole batch back.

Usage:
    db = create_local_database_client(db_url="file:///project/.quarry/content.db")
    await db.batch(["DROP TABLE IF EXISTS t", "CREATE TABLE t (id integer)"])
"""

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Protocol, Sequence
from urllib.parse import urlparse
from urllib.request import url2pathname

from runtime.statement import QueryResult, Statement, StatementLike, as_statement

logger = logging.getLogger(__name__)


MEMORY_DATABASE = ":memory:"


class DatabaseClient(Protocol):
    """The contract consumed by schema sync, seeding and generated code."""

    async def run(self, statement: StatementLike) -> QueryResult: ...

    async def batch(self, statements: Sequence[StatementLike]) -> List[QueryResult]: ...


# ============================================================================
# URL HANDLING
# ============================================================================

def normalize_database_url(env_db_url: Optional[str], default_db_url: str) -> str:
    """
    Pick the database URL for the local client.

    An environment override wins. A relative override path is resolved
    against the current working directory and turned into a file:// URL;
    a value that is already a file: URL is used as-is.
    """
    if env_db_url:
        if env_db_url.startswith("file:") or env_db_url == MEMORY_DATABASE:
            return env_db_url
        return (Path.cwd() / env_db_url).resolve().as_uri()
    return default_db_url


def database_path_from_url(db_url: str) -> str:
    """Filesystem path (or :memory:) for a file:// database URL."""
    if db_url == MEMORY_DATABASE:
        return db_url
    parsed = urlparse(db_url)
    if parsed.scheme != "file":
        raise ValueError(f"Local database URL must use the file: scheme, got {db_url!r}")
    return url2pathname(parsed.path)


# ============================================================================
# CLIENT
# ============================================================================

class LocalDatabaseClient:
    """SQLite-backed implementation of DatabaseClient."""

    def __init__(self, path: str):
        self.path = path
        if path != MEMORY_DATABASE:
            Path(path).parent.mkdir(parents=True, exist_ok=True)

        # Autocommit mode; batches manage their own transaction
        self._conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._lock = threading.Lock()
        self._closed = False

    def _execute(self, statement: Statement) -> QueryResult:
        cursor = self._conn.execute(statement.sql, statement.args)
        if cursor.description:
            columns = [d[0] for d in cursor.description]
            rows = [tuple(r) for r in cursor.fetchall()]
        else:
            columns, rows = [], []
        return QueryResult(
            columns=columns,
            rows=rows,
            rows_affected=max(cursor.rowcount, 0),
            last_insert_rowid=cursor.lastrowid,
        )

    def run_sync(self, statement: StatementLike) -> QueryResult:
        with self._lock:
            return self._execute(as_statement(statement))

    def batch_sync(self, statements: Sequence[StatementLike]) -> List[QueryResult]:
        prepared = [as_statement(s) for s in statements]
        with self._lock:
            self._conn.execute("BEGIN")
            try:
                results = [self._execute(s) for s in prepared]
                self._conn.execute("COMMIT")
            except Exception:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                raise
        return results

    async def run(self, statement: StatementLike) -> QueryResult:
        return await asyncio.to_thread(self.run_sync, statement)

    async def batch(self, statements: Sequence[StatementLike]) -> List[QueryResult]:
        return await asyncio.to_thread(self.batch_sync, list(statements))

    def close(self) -> None:
        if not self._closed:
            with self._lock:
                self._conn.close()
            self._closed = True

    def __repr__(self) -> str:
        return f"LocalDatabaseClient(path={self.path!r})"


def create_local_database_client(db_url: str) -> LocalDatabaseClient:
    """Factory used by generated module source."""
    path = database_path_from_url(db_url)
    logger.debug(f"Opening local database at {path}")
    return LocalDatabaseClient(path)


__all__ = [
    "DatabaseClient",
    "MEMORY_DATABASE",
    "normalize_database_url",
    "database_path_from_url",
    "LocalDatabaseClient",
    "create_local_database_client",
]
