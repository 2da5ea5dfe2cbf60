# ============================================================================
# SCHEMA SYNCHRONIZER
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Infrastructure - Destructive schema recreate
# PURPOSE: Drop and recreate every declared table in one atomic batch
# CREATED: 19 OCT 2026
# ============================================================================
"""
SchemaSynchronizer - destructive recreate of the declared tables.

For every table, in declaration order:
1. DROP TABLE IF EXISTS
2. CREATE TABLE
3. CREATE INDEX per declared index

All statements go to the client as ONE batch, prefixed with
``PRAGMA defer_foreign_keys=true`` so tables may be dropped and created in
any order even with cross-table (including circular) references. The batch
is all-or-nothing: on failure no table is left in a partial state.

Existing rows are destroyed. Seeding is expected to follow.

Usage:
    from infrastructure import SchemaSynchronizer

    result = await SchemaSynchronizer().recreate(tables, db)
    print(result.to_dict())
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.errors import SchemaError
from core.logging import ComponentType, get_logger, log_checkpoint
from core.models.table import DbTables
from core.schema.sql_generator import TableToSQL
from runtime.db_client import DatabaseClient

logger = get_logger(__name__, ComponentType.SCHEMA)


DEFER_FOREIGN_KEYS = "PRAGMA defer_foreign_keys=true;"


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class RecreateResult:
    """Result of one schema recreate."""
    tables: List[str] = field(default_factory=list)
    statements_executed: int = 0
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tables": self.tables,
            "statements_executed": self.statements_executed,
            "duration_ms": round(self.duration_ms, 1),
        }


# ============================================================================
# SYNCHRONIZER
# ============================================================================

class SchemaSynchronizer:
    """Turns declared tables into a freshly recreated schema."""

    def __init__(self, generator: Optional[TableToSQL] = None):
        self.generator = generator or TableToSQL()

    def statements(self, tables: DbTables) -> List[str]:
        """The full batch, pragma first."""
        return [DEFER_FOREIGN_KEYS, *self.generator.generate_all(tables)]

    async def recreate(self, tables: DbTables, client: DatabaseClient) -> RecreateResult:
        """
        Drop and recreate every table in ``tables``.

        Args:
            tables: Insertion-ordered table declarations
            client: Database client; must apply the batch atomically

        Returns:
            RecreateResult

        Raises:
            SchemaError: If any statement of the batch fails
        """
        names = list(tables.keys())
        statements = self.statements(tables)
        start = time.monotonic()

        logger.debug(f"Recreating {len(names)} tables: {names}")

        try:
            await client.batch(statements)
        except Exception as e:
            logger.error(f"Schema recreate failed: {e}")
            raise SchemaError(f"Failed to recreate database schema: {e}", tables=names) from e

        result = RecreateResult(
            tables=names,
            statements_executed=len(statements),
            duration_ms=(time.monotonic() - start) * 1000,
        )
        log_checkpoint("schema_recreated", result.to_dict())
        return result


__all__ = ["DEFER_FOREIGN_KEYS", "RecreateResult", "SchemaSynchronizer"]
