# ============================================================================
# CODE GENERATOR
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Codegen - quarry.db module source
# PURPOSE: Build the ModuleIR for a backend/build mode and render it
# CREATED: 19 OCT 2026
# ============================================================================
"""
Code Generator

Pure function of (tables, target) to Python source.

Local backend:
    db = create_local_database_client(db_url=normalize_database_url(
        os.environ.get("QUARRY_DATABASE_FILE"), '<file url>'))

Remote backend:
    db = create_remote_database_client(<token>,
        os.environ.get("QUARRY_REMOTE_DB_URL", '<default url>'))

App token expression:
    build + server  -> os.environ.get("QUARRY_APP_TOKEN")
                       (read per request; never inlined)
    build + static  -> os.environ.get("QUARRY_APP_TOKEN", '<token>')
    dev             -> '<token>'

Every table becomes ``name = as_table('name', {...}, raw=False)``, in
declaration order.

Usage:
    source = CodeGenerator().render(tables, target)
"""

import keyword
from typing import List, Optional

from codegen.formatter import ModuleFormatter
from codegen.ir import (
    Binding,
    Call,
    EnvVar,
    Expr,
    ImportStatement,
    ModuleIR,
    PyValue,
    StringLiteral,
)
from core.contracts import (
    ENV_APP_TOKEN,
    ENV_DATABASE_FILE,
    ENV_REMOTE_DB_URL,
    RUNTIME_IMPORT,
    RUNTIME_VIRTUAL_IMPORT,
    Backend,
    OutputMode,
)
from core.errors import InternalInvariantError, MissingAppTokenError
from core.logging import ComponentType, get_logger
from core.models.generation import GenerationTarget
from core.models.table import DbTables, TableSchema
from runtime.exports import __all__ as RUNTIME_EXPORTS

logger = get_logger(__name__, ComponentType.CODEGEN)


CLIENT_BINDING = "db"

LOCAL_RUNTIME_NAMES = ("as_table", "create_local_database_client", "normalize_database_url")
REMOTE_RUNTIME_NAMES = ("as_table", "create_remote_database_client")

# Names the generated module binds before any table
RESERVED_BINDING_NAMES = frozenset(
    {CLIENT_BINDING, "os", *LOCAL_RUNTIME_NAMES, *REMOTE_RUNTIME_NAMES, *RUNTIME_EXPORTS}
)


def binding_name_error(name: str) -> Optional[str]:
    """Why ``name`` cannot be bound in the generated module, or None."""
    if not name.isidentifier():
        return f"{name!r} is not a valid Python identifier"
    if keyword.iskeyword(name):
        return f"{name!r} is a Python keyword"
    if name in RESERVED_BINDING_NAMES or name.startswith("__"):
        return f"{name!r} is reserved by the generated quarry.db module"
    return None


# ============================================================================
# EXPRESSION HELPERS
# ============================================================================

def app_token_expression(target: GenerationTarget) -> Expr:
    """
    Token argument for the remote client.

    Raises:
        MissingAppTokenError: When the expression must inline a token and
            none is available
    """
    if target.is_build and target.output_mode == OutputMode.SERVER:
        return EnvVar(ENV_APP_TOKEN)

    if target.app_token is None:
        raise MissingAppTokenError(ENV_APP_TOKEN)
    token = StringLiteral(target.app_token.get_secret_value())

    if target.is_build:
        return EnvVar(ENV_APP_TOKEN, fallback=token)
    return token


def remote_url_expression(target: GenerationTarget) -> Expr:
    return EnvVar(ENV_REMOTE_DB_URL, fallback=StringLiteral(target.remote_db_url))


def local_url_expression(target: GenerationTarget) -> Expr:
    if not target.local_db_url:
        raise InternalInvariantError("Local database URL was not computed before code generation.")
    return Call(
        "normalize_database_url",
        args=(EnvVar(ENV_DATABASE_FILE), StringLiteral(target.local_db_url)),
    )


def table_binding(name: str, table: TableSchema) -> Binding:
    schema = table.model_dump(mode="json")
    return Binding(
        name=name,
        value=Call(
            "as_table",
            args=(StringLiteral(name), PyValue(schema)),
            kwargs=(("raw", PyValue(False)),),
        ),
    )


# ============================================================================
# GENERATOR
# ============================================================================

class CodeGenerator:
    """Builds and renders the quarry.db module."""

    def __init__(self, formatter: Optional[ModuleFormatter] = None):
        self.formatter = formatter or ModuleFormatter()

    def build(self, tables: DbTables, target: GenerationTarget) -> ModuleIR:
        """Build the IR without rendering it."""
        if target.backend == Backend.REMOTE:
            runtime_names = REMOTE_RUNTIME_NAMES
            client = Call(
                "create_remote_database_client",
                args=(app_token_expression(target), remote_url_expression(target)),
            )
        else:
            runtime_names = LOCAL_RUNTIME_NAMES
            client = Call(
                "create_local_database_client",
                kwargs=(("db_url", local_url_expression(target)),),
            )

        imports = (
            ImportStatement(RUNTIME_VIRTUAL_IMPORT, star=True),
            ImportStatement("os"),
            ImportStatement(RUNTIME_IMPORT, names=runtime_names),
        )
        bindings: List[Binding] = [table_binding(name, table) for name, table in tables.items()]

        return ModuleIR(
            imports=imports,
            client=Binding(CLIENT_BINDING, client),
            bindings=tuple(bindings),
        )

    def render(self, tables: DbTables, target: GenerationTarget) -> str:
        module = self.build(tables, target)
        logger.debug(
            f"Rendering {target.backend.value} module ({target.build_mode.value}) "
            f"with {len(module.bindings)} table bindings"
        )
        return self.formatter.format(module)


__all__ = [
    "CLIENT_BINDING",
    "RESERVED_BINDING_NAMES",
    "binding_name_error",
    "CodeGenerator",
    "app_token_expression",
    "remote_url_expression",
    "local_url_expression",
    "table_binding",
]
