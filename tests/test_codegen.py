# ============================================================================
# CODE GENERATOR TESTS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Tests - Generated quarry.db source
# PURPOSE: Verify the token matrix, client construction and table bindings
# CREATED: 19 OCT 2026
# ============================================================================
"""
Code Generator Tests

Tests:
1. App token expression for every build/output combination
2. Local and remote client construction
3. Generated source parses and binds exactly db plus the declared tables
4. User data cannot escape its string literal
5. Table names that would shadow module bindings are rejected

Run with:
    pytest tests/test_codegen.py -v
"""

import ast

import pytest
from pydantic import SecretStr

from codegen.generator import (
    CodeGenerator,
    app_token_expression,
    binding_name_error,
    remote_url_expression,
)
from codegen.ir import EnvVar, StringLiteral
from core.contracts import Backend, BuildMode, OutputMode
from core.errors import MissingAppTokenError
from core.models.generation import GenerationTarget
from core.models.table import ColumnDef, ColumnType, TableSchema


LOCAL_URL = "file:///project/.quarry/content.db"


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def tables():
    return {
        "posts": TableSchema(
            name="posts",
            columns=[
                ColumnDef(name="id", type=ColumnType.NUMBER, primary_key=True),
                ColumnDef(name="title", type=ColumnType.TEXT),
            ],
        ),
        "tags": TableSchema(
            name="tags",
            columns=[ColumnDef(name="name", type=ColumnType.TEXT)],
        ),
    }


def target(backend=Backend.REMOTE, build_mode=BuildMode.DEV, output_mode=OutputMode.STATIC, token="tok_123"):
    return GenerationTarget(
        backend=backend,
        build_mode=build_mode,
        output_mode=output_mode,
        app_token=SecretStr(token) if token else None,
        local_db_url=LOCAL_URL,
    )


def assigned_names(source: str):
    tree = ast.parse(source)
    return [
        node.targets[0].id
        for node in tree.body
        if isinstance(node, ast.Assign) and isinstance(node.targets[0], ast.Name)
    ]


# ============================================================================
# TOKEN MATRIX
# ============================================================================

class TestTokenMatrix:

    def test_build_server_reads_env_only(self):
        expr = app_token_expression(target(build_mode=BuildMode.BUILD, output_mode=OutputMode.SERVER))
        assert expr == EnvVar("QUARRY_APP_TOKEN")
        assert expr.render() == 'os.environ.get("QUARRY_APP_TOKEN")'

    def test_build_server_needs_no_token(self):
        expr = app_token_expression(target(build_mode=BuildMode.BUILD, output_mode=OutputMode.SERVER, token=None))
        assert expr.render() == 'os.environ.get("QUARRY_APP_TOKEN")'

    def test_build_static_env_with_fallback(self):
        expr = app_token_expression(target(build_mode=BuildMode.BUILD, output_mode=OutputMode.STATIC))
        assert expr == EnvVar("QUARRY_APP_TOKEN", fallback=StringLiteral("tok_123"))
        assert expr.render() == "os.environ.get(\"QUARRY_APP_TOKEN\", 'tok_123')"

    @pytest.mark.parametrize("output_mode", [OutputMode.SERVER, OutputMode.STATIC])
    def test_dev_inlines_literal(self, output_mode):
        expr = app_token_expression(target(build_mode=BuildMode.DEV, output_mode=output_mode))
        assert expr == StringLiteral("tok_123")
        assert expr.render() == "'tok_123'"

    def test_dev_without_token(self):
        with pytest.raises(MissingAppTokenError):
            app_token_expression(target(build_mode=BuildMode.DEV, token=None))

    def test_server_build_source_has_no_literal_token(self, tables):
        source = CodeGenerator().render(
            tables, target(build_mode=BuildMode.BUILD, output_mode=OutputMode.SERVER)
        )
        assert "tok_123" not in source
        assert 'create_remote_database_client(os.environ.get("QUARRY_APP_TOKEN"), ' in source

    def test_dev_source_has_no_token_lookup(self, tables):
        source = CodeGenerator().render(tables, target(build_mode=BuildMode.DEV))
        assert "QUARRY_APP_TOKEN" not in source
        assert "create_remote_database_client('tok_123', " in source


# ============================================================================
# CLIENT CONSTRUCTION
# ============================================================================

class TestClient:

    def test_remote_url_expression(self):
        expr = remote_url_expression(target())
        assert expr.render() == (
            "os.environ.get(\"QUARRY_REMOTE_DB_URL\", 'https://db.services.quarry.build')"
        )

    def test_local_client(self, tables):
        source = CodeGenerator().render(tables, target(backend=Backend.LOCAL, token=None))
        assert (
            "db = create_local_database_client(db_url=normalize_database_url("
            f"os.environ.get(\"QUARRY_DATABASE_FILE\"), '{LOCAL_URL}'))"
        ) in source
        assert "create_remote_database_client" not in source

    def test_imports(self, tables):
        module = CodeGenerator().build(tables, target(backend=Backend.LOCAL))
        rendered = [i.render() for i in module.imports]
        assert rendered == [
            "from runtime.exports import *",
            "import os",
            "from runtime import as_table, create_local_database_client, normalize_database_url",
        ]


# ============================================================================
# BINDINGS
# ============================================================================

class TestBindings:

    def test_posts_and_tags_exactly(self, tables):
        source = CodeGenerator().render(tables, target(backend=Backend.LOCAL))
        assert assigned_names(source) == ["db", "posts", "tags"]

    def test_binding_shape(self, tables):
        module = CodeGenerator().build(tables, target(backend=Backend.LOCAL))
        posts = module.bindings[0].render()
        assert posts.startswith("posts = as_table('posts', {")
        assert posts.endswith(", raw=False)")

    def test_schema_round_trips_through_literal(self, tables):
        source = CodeGenerator().render(tables, target(backend=Backend.LOCAL))
        call = next(
            node.value for node in ast.parse(source).body
            if isinstance(node, ast.Assign) and node.targets[0].id == "tags"
        )
        schema = ast.literal_eval(call.args[1])
        assert TableSchema.model_validate(schema) == tables["tags"]

    def test_no_tables(self):
        source = CodeGenerator().render({}, target(backend=Backend.LOCAL))
        assert assigned_names(source) == ["db"]

    def test_hostile_token_stays_literal(self, tables):
        token = "x'); import shutil; ('"
        source = CodeGenerator().render(tables, target(token=token))
        tree = ast.parse(source)
        assert not any(
            isinstance(node, ast.Import) and node.names[0].name == "shutil" for node in tree.body
        )
        assert repr(token) in source

    @pytest.mark.parametrize("name", ["posts", "blog_posts", "type", "_drafts"])
    def test_bindable_names(self, name):
        assert binding_name_error(name) is None

    @pytest.mark.parametrize("name, reason", [
        ("db", "reserved"),
        ("create_remote_database_client", "reserved"),
        ("Statement", "reserved"),
        ("__name__", "reserved"),
        ("for", "keyword"),
        ("blog-posts", "identifier"),
        ("2024", "identifier"),
    ])
    def test_unbindable_names(self, name, reason):
        assert reason in binding_name_error(name)
