# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Single Source of Truth Pattern:
    - TableSchema models define structure (loaded from db/config.yaml)
    - TableToSQL reads them to build DDL
    - CodeGenerator serializes them into the generated bindings
"""

from core.models.table import (
    ColumnType,
    SqlDefault,
    ColumnReference,
    ColumnDef,
    IndexDef,
    ForeignKeyDef,
    TableSchema,
    DbTables,
)
from core.models.seed import SeedSource, order_seed_sources
from core.models.generation import GenerationTarget

__all__ = [
    # Tables
    "ColumnType",
    "SqlDefault",
    "ColumnReference",
    "ColumnDef",
    "IndexDef",
    "ForeignKeyDef",
    "TableSchema",
    "DbTables",
    # Seeding
    "SeedSource",
    "order_seed_sources",
    # Code generation
    "GenerationTarget",
]
