# ============================================================================
# SCHEMA MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - Schema generation from TableSchema models
# PURPOSE: Generate SQLite DDL from declarative tables (single source of truth)
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.schema.ddl_utils import (
    IndexBuilder,
    TYPE_MAP,
    get_sqlite_type,
    quote_identifier,
    quote_literal,
)
from core.schema.sql_generator import TableToSQL, IMPLICIT_PRIMARY_KEY

__all__ = [
    # Generator
    "TableToSQL",
    "IMPLICIT_PRIMARY_KEY",
    # Utilities
    "IndexBuilder",
    "TYPE_MAP",
    "get_sqlite_type",
    "quote_identifier",
    "quote_literal",
]
