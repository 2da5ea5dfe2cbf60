# ============================================================================
# DDL UTILITIES
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - DRY utilities for SQLite DDL generation
# PURPOSE: Identifier/literal quoting, type mapping and index builders
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: quote_identifier, quote_literal, IndexBuilder, TYPE_MAP, get_sqlite_type
# DEPENDENCIES: none
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

All identifiers go through quote_identifier and all literal defaults
through quote_literal, so no table or column name is ever spliced into a
statement unescaped.

Usage:
    from core.schema.ddl_utils import IndexBuilder, quote_identifier

    stmt = IndexBuilder.create("posts", ["title"], unique=True)
    # CREATE UNIQUE INDEX IF NOT EXISTS "posts_title_idx" ON "posts" ("title")
"""

import json
from datetime import date, datetime
from typing import Any, List, Optional, Sequence, Union

from core.models.table import ColumnType, SqlDefault


# ============================================================================
# TYPE MAPPING
# ============================================================================

TYPE_MAP = {
    ColumnType.TEXT: "text",
    ColumnType.DATE: "text",
    ColumnType.JSON: "text",
    ColumnType.NUMBER: "integer",
    ColumnType.BOOLEAN: "integer",
}


def get_sqlite_type(column_type: ColumnType) -> str:
    """
    Map a declarative column type to its SQLite storage type.

    Dates are stored as ISO-8601 text, JSON as serialized text and
    booleans as 0/1 integers.
    """
    return TYPE_MAP.get(ColumnType(column_type), "text")


# ============================================================================
# QUOTING
# ============================================================================

def quote_identifier(name: str) -> str:
    """Quote a table/column/index name for SQLite."""
    return '"' + str(name).replace('"', '""') + '"'


def quote_literal(value: Any, column_type: Optional[ColumnType] = None) -> str:
    """
    Render a default value as a SQLite literal.

    SqlDefault expressions are emitted verbatim; everything else is
    converted according to the column type.
    """
    if isinstance(value, SqlDefault):
        return value.sql
    if value is None:
        return "NULL"
    if isinstance(value, bool) or column_type == ColumnType.BOOLEAN:
        return "TRUE" if value else "FALSE"
    if column_type == ColumnType.JSON:
        value = json.dumps(value)
    elif isinstance(value, (datetime, date)):
        value = value.isoformat()
    elif isinstance(value, (int, float)) and column_type != ColumnType.TEXT:
        return repr(value)
    return "'" + str(value).replace("'", "''") + "'"


# ============================================================================
# INDEX BUILDER
# ============================================================================

class IndexBuilder:
    """
    Builder for SQLite index DDL statements.

    All methods are static and return plain statement strings.
    """

    @staticmethod
    def _normalize_columns(columns: Union[str, Sequence[str]]) -> List[str]:
        """Convert single column or sequence to list."""
        if isinstance(columns, str):
            return [columns]
        return list(columns)

    @staticmethod
    def default_name(table: str, columns: Sequence[str]) -> str:
        """Conventional index name: <table>_<col>_<col>_idx."""
        return "_".join([table, *columns, "idx"])

    @staticmethod
    def create(
        table: str,
        columns: Union[str, Sequence[str]],
        name: Optional[str] = None,
        unique: bool = False,
    ) -> str:
        """
        Build a CREATE INDEX statement.

        Args:
            table: Table name
            columns: Column or columns to index
            name: Index name (defaults to the conventional name)
            unique: Emit a UNIQUE index

        Returns:
            CREATE [UNIQUE] INDEX IF NOT EXISTS statement
        """
        cols = IndexBuilder._normalize_columns(columns)
        index_name = name or IndexBuilder.default_name(table, cols)
        return "CREATE {unique}INDEX IF NOT EXISTS {name} ON {table} ({cols})".format(
            unique="UNIQUE " if unique else "",
            name=quote_identifier(index_name),
            table=quote_identifier(table),
            cols=", ".join(quote_identifier(c) for c in cols),
        )


__all__ = [
    "TYPE_MAP",
    "get_sqlite_type",
    "quote_identifier",
    "quote_literal",
    "IndexBuilder",
]
