# ============================================================================
# RUNTIME TESTS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Tests - Database clients and table helpers
# PURPOSE: Verify the local and remote DatabaseClient implementations
# CREATED: 19 OCT 2026
# ============================================================================
"""
Runtime Tests

Tests:
1. Database URL normalization and file:// path handling
2. Local client statements, results and batch rollback
3. Table insert conversion per column type
4. Remote client request shape and error mapping (httpx.MockTransport)

Run with:
    pytest tests/test_runtime.py -v
"""

import asyncio
import json
import sqlite3
from datetime import date

import httpx
import pytest

from core.errors import MissingAppTokenError, RemoteDatabaseError
from core.models.table import ColumnDef, ColumnType, TableSchema
from runtime import (
    LocalDatabaseClient,
    RemoteDatabaseClient,
    as_table,
    create_local_database_client,
    create_remote_database_client,
    normalize_database_url,
    sql,
)
from runtime.db_client import MEMORY_DATABASE, database_path_from_url
from runtime.statement import QueryResult, as_statement


# ============================================================================
# URLS
# ============================================================================

class TestDatabaseUrl:

    def test_default_when_no_override(self):
        assert normalize_database_url(None, "file:///p/.quarry/content.db") == "file:///p/.quarry/content.db"
        assert normalize_database_url("", "file:///p/db") == "file:///p/db"

    def test_relative_override_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        url = normalize_database_url("data/dev.db", "file:///ignored")
        assert url == (tmp_path.resolve() / "data" / "dev.db").as_uri()

    def test_file_url_override_kept(self):
        assert normalize_database_url("file:///tmp/x.db", "file:///ignored") == "file:///tmp/x.db"

    def test_path_from_url(self, tmp_path):
        path = tmp_path / "content.db"
        assert database_path_from_url(path.as_uri()) == str(path)
        assert database_path_from_url(MEMORY_DATABASE) == MEMORY_DATABASE

    def test_rejects_other_schemes(self):
        with pytest.raises(ValueError, match="file: scheme"):
            database_path_from_url("https://db.example.test")


# ============================================================================
# LOCAL CLIENT
# ============================================================================

@pytest.fixture
def client():
    db = LocalDatabaseClient(MEMORY_DATABASE)
    db.run_sync("CREATE TABLE posts (id integer PRIMARY KEY, title text NOT NULL)")
    yield db
    db.close()


class TestLocalClient:

    def test_run_and_select(self, client):
        async def scenario():
            inserted = await client.run(sql("INSERT INTO posts (id, title) VALUES (?, ?)", 1, "Hello"))
            selected = await client.run("SELECT id, title FROM posts")
            return inserted, selected

        inserted, selected = asyncio.run(scenario())

        assert inserted.rows_affected == 1
        assert inserted.last_insert_rowid == 1
        assert selected.columns == ["id", "title"]
        assert selected.as_dicts() == [{"id": 1, "title": "Hello"}]

    def test_batch_results_in_order(self, client):
        results = asyncio.run(client.batch([
            sql("INSERT INTO posts (title) VALUES (?)", "a"),
            sql("INSERT INTO posts (title) VALUES (?)", "b"),
            "SELECT COUNT(*) AS n FROM posts",
        ]))

        assert len(results) == 3
        assert results[2].as_dicts() == [{"n": 2}]

    def test_batch_rolls_back(self, client):
        with pytest.raises(sqlite3.IntegrityError):
            asyncio.run(client.batch([
                sql("INSERT INTO posts (title) VALUES (?)", "kept?"),
                sql("INSERT INTO posts (title) VALUES (?)", None),
            ]))

        assert client.run_sync("SELECT COUNT(*) FROM posts").rows == [(0,)]

    def test_file_database_created(self, tmp_path):
        url = (tmp_path / ".quarry" / "content.db").as_uri()
        db = create_local_database_client(url)
        try:
            db.run_sync("CREATE TABLE t (x integer)")
        finally:
            db.close()
        assert (tmp_path / ".quarry" / "content.db").exists()

    def test_statement_coercion(self):
        assert as_statement("SELECT 1").args == ()
        with pytest.raises(TypeError):
            as_statement(42)


# ============================================================================
# TABLES
# ============================================================================

@pytest.fixture
def posts():
    return as_table("posts", {
        "name": "posts",
        "columns": [
            {"name": "id", "type": "number", "primary_key": True},
            {"name": "title", "type": "text"},
            {"name": "draft", "type": "boolean"},
            {"name": "meta", "type": "json", "optional": True},
            {"name": "published", "type": "date"},
        ],
    })


class TestTable:

    def test_as_table_validates_dict(self, posts):
        assert isinstance(posts.schema, TableSchema)
        assert posts.columns == ["id", "title", "draft", "meta", "published"]
        assert posts.raw is False

    def test_insert_converts_values(self, posts):
        statement = posts.insert({
            "id": 1,
            "title": "Hello",
            "draft": True,
            "meta": {"tags": ["a"]},
            "published": date(2026, 10, 19),
        })

        assert statement.sql == (
            'INSERT INTO "posts" ("id", "title", "draft", "meta", "published") VALUES (?, ?, ?, ?, ?)'
        )
        assert statement.args == (1, "Hello", 1, json.dumps({"tags": ["a"]}), "2026-10-19")

    def test_none_passes_through(self, posts):
        assert posts.insert({"meta": None}).args == (None,)

    def test_unknown_column(self, posts):
        with pytest.raises(KeyError, match="no column 'body'"):
            posts.insert({"body": "x"})

    def test_empty_row(self, posts):
        with pytest.raises(ValueError):
            posts.insert({})

    def test_select_and_delete(self, posts):
        assert posts.select().sql == 'SELECT * FROM "posts"'
        assert posts.delete().sql == 'DELETE FROM "posts"'

    def test_insert_many_against_sqlite(self):
        tags = as_table("tags", TableSchema(
            name="tags", columns=[ColumnDef(name="name", type=ColumnType.TEXT)],
        ))
        db = LocalDatabaseClient(MEMORY_DATABASE)
        try:
            db.run_sync('CREATE TABLE "tags" ("name" text NOT NULL)')
            asyncio.run(db.batch(tags.insert_many([{"name": "a"}, {"name": "b"}])))
            assert db.run_sync(tags.select()).rows == [("a",), ("b",)]
        finally:
            db.close()


# ============================================================================
# REMOTE CLIENT
# ============================================================================

RESULT = {"columns": ["n"], "rows": [[1]], "rowsAffected": 0, "lastInsertRowid": None}


def remote(handler, token="tok_123"):
    return RemoteDatabaseClient(
        token,
        "https://db.example.test/",
        transport=httpx.MockTransport(handler),
    )


class TestRemoteClient:

    def test_requires_token(self):
        with pytest.raises(MissingAppTokenError) as exc_info:
            RemoteDatabaseClient(None, "https://db.example.test")
        assert exc_info.value.env_var == "QUARRY_APP_TOKEN"

    def test_run_request_shape(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=RESULT)

        result = asyncio.run(remote(handler).run(sql("SELECT ? AS n", 1)))

        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://db.example.test/db/query"
        assert request.headers["Authorization"] == "Bearer tok_123"
        assert json.loads(request.content) == {"sql": "SELECT ? AS n", "args": [1]}
        assert result == QueryResult(columns=["n"], rows=[(1,)], rows_affected=0)

    def test_batch(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            return httpx.Response(200, json=[RESULT for _ in body])

        results = asyncio.run(remote(handler).batch(["SELECT 1", "SELECT 2"]))

        assert len(results) == 2

    def test_malformed_batch(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[RESULT])

        with pytest.raises(RemoteDatabaseError, match="malformed"):
            asyncio.run(remote(handler).batch(["SELECT 1", "SELECT 2"]))

    def test_http_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="invalid token")

        with pytest.raises(RemoteDatabaseError) as exc_info:
            asyncio.run(remote(handler).run("SELECT 1"))

        assert exc_info.value.status_code == 401
        assert "invalid token" in str(exc_info.value)

    def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RemoteDatabaseError, match="unreachable"):
            asyncio.run(remote(handler).run("SELECT 1"))

    def test_repr_hides_token(self):
        assert "tok_123" not in repr(remote(lambda r: httpx.Response(200, json=RESULT)))

    def test_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("QUARRY_REMOTE_TIMEOUT_SECONDS", "5")

        assert create_remote_database_client("tok", "https://db.example.test").timeout == 5.0
        assert create_remote_database_client("tok", "https://db.example.test", timeout=2).timeout == 2

    def test_timeout_default(self, monkeypatch):
        monkeypatch.delenv("QUARRY_REMOTE_TIMEOUT_SECONDS", raising=False)
        assert create_remote_database_client("tok", "https://db.example.test").timeout == 30.0
