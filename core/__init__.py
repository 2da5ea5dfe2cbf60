# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core module initialization
# PURPOSE: Export core contracts, models, errors and schema utilities
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.contracts import (
    VIRTUAL_MODULE_ID,
    ModuleIdentity,
    Backend,
    BuildMode,
    OutputMode,
    SeedProvenance,
)
from core.errors import (
    QuarryError,
    SchemaError,
    SeedError,
    ConfigLoadError,
    UserConfigError,
    InternalInvariantError,
)
from core.models import (
    TableSchema,
    ColumnDef,
    IndexDef,
    ForeignKeyDef,
    SeedSource,
    GenerationTarget,
)
from core.schema import TableToSQL

__all__ = [
    # Contracts
    "VIRTUAL_MODULE_ID",
    "ModuleIdentity",
    "Backend",
    "BuildMode",
    "OutputMode",
    "SeedProvenance",
    # Errors
    "QuarryError",
    "SchemaError",
    "SeedError",
    "ConfigLoadError",
    "UserConfigError",
    "InternalInvariantError",
    # Models
    "TableSchema",
    "ColumnDef",
    "IndexDef",
    "ForeignKeyDef",
    "SeedSource",
    "GenerationTarget",
    # Schema
    "TableToSQL",
]
