# ============================================================================
# TABLE SCHEMA TO SQL GENERATOR
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - DDL generation from TableSchema models
# PURPOSE: Generate SQLite DROP/CREATE/INDEX statements for a table set
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: TableToSQL
# DEPENDENCIES: pydantic (models)
# ============================================================================
"""
TableSchema to SQLite Schema Generator.

Generates SQLite DDL statements from TableSchema models.
TableSchema models (db/config.yaml) are the SINGLE SOURCE OF TRUTH for schema.

Column rules:
    - primary_key columns get PRIMARY KEY and nothing else
    - other columns get NOT NULL unless optional, then UNIQUE, DEFAULT
    - inline references become REFERENCES "table" ("column")
    - a table without any primary key gets an implicit _id INTEGER PRIMARY KEY

Usage:
    generator = TableToSQL()
    statements = generator.generate_all(tables)
    await client.batch(statements)
"""

import logging
from typing import List

from core.models.table import ColumnDef, DbTables, TableSchema
from core.schema.ddl_utils import IndexBuilder, get_sqlite_type, quote_identifier, quote_literal

# Setup logger
logger = logging.getLogger(__name__)


IMPLICIT_PRIMARY_KEY = "_id INTEGER PRIMARY KEY"


class TableToSQL:
    """
    Convert TableSchema models to SQLite DDL statements.

    The generated statements recreate each table from scratch; they are
    meant to run inside one batch with deferred foreign keys, so tables
    may reference each other in any order.
    """

    # =========================================================================
    # COLUMN GENERATION
    # =========================================================================

    @staticmethod
    def column_definition(column: ColumnDef) -> str:
        """Build a single column definition."""
        parts = [quote_identifier(column.name), get_sqlite_type(column.type)]

        if column.primary_key:
            parts.append("PRIMARY KEY")
        else:
            if not column.optional:
                parts.append("NOT NULL")
            if column.unique:
                parts.append("UNIQUE")
            if column.has_default:
                parts.append("DEFAULT " + quote_literal(column.default, column.type))

        if column.references is not None:
            parts.append(
                "REFERENCES {} ({})".format(
                    quote_identifier(column.references.table),
                    quote_identifier(column.references.column),
                )
            )
        return " ".join(parts)

    # =========================================================================
    # TABLE GENERATION
    # =========================================================================

    def drop_table(self, name: str) -> str:
        """DROP TABLE IF EXISTS statement."""
        return f"DROP TABLE IF EXISTS {quote_identifier(name)}"

    def create_table(self, name: str, table: TableSchema) -> str:
        """
        Generate CREATE TABLE DDL from a TableSchema.

        Args:
            name: Table name (key in the table collection)
            table: Declarative schema

        Returns:
            CREATE TABLE statement
        """
        logger.debug(f"Generating table {name}")

        definitions = []
        if not any(column.primary_key for column in table.columns):
            definitions.append(IMPLICIT_PRIMARY_KEY)

        definitions.extend(self.column_definition(column) for column in table.columns)

        for fk in table.foreign_keys:
            definitions.append(
                "FOREIGN KEY ({}) REFERENCES {} ({})".format(
                    ", ".join(quote_identifier(c) for c in fk.columns),
                    quote_identifier(fk.references_table),
                    ", ".join(quote_identifier(c) for c in fk.references_columns),
                )
            )

        return f"CREATE TABLE {quote_identifier(name)} ({', '.join(definitions)})"

    # =========================================================================
    # INDEX GENERATION
    # =========================================================================

    def create_indexes(self, name: str, table: TableSchema) -> List[str]:
        """Generate CREATE INDEX statements for the declared indexes."""
        return [
            IndexBuilder.create(name, index.on, name=index.name, unique=index.unique)
            for index in table.indexes
        ]

    # =========================================================================
    # COMPLETE SCHEMA GENERATION
    # =========================================================================

    def generate_table(self, name: str, table: TableSchema) -> List[str]:
        """Drop, create and index statements for one table, in that order."""
        return [
            self.drop_table(name),
            self.create_table(name, table),
            *self.create_indexes(name, table),
        ]

    def generate_all(self, tables: DbTables) -> List[str]:
        """
        Generate complete recreate DDL for a table collection.

        Tables are emitted in the collection's iteration order.

        Returns:
            List of statements ready for one batch
        """
        statements: List[str] = []
        for name, table in tables.items():
            statements.extend(self.generate_table(name, table))

        logger.info(f"Generated {len(statements)} DDL statements for {len(tables)} tables")
        return statements


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['TableToSQL', 'IMPLICIT_PRIMARY_KEY']
