# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Infrastructure - Database schema operations
# PURPOSE: Schema recreate against a database client
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for quarry.

Provides:
- SchemaSynchronizer: Drop and recreate declared tables in one batch

Usage:
    from infrastructure import SchemaSynchronizer

    result = await SchemaSynchronizer().recreate(tables, db)
"""

from infrastructure.schema_synchronizer import (
    DEFER_FOREIGN_KEYS,
    RecreateResult,
    SchemaSynchronizer,
)

__all__ = [
    'DEFER_FOREIGN_KEYS',
    'RecreateResult',
    'SchemaSynchronizer',
]
