# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Foundation - Core enums and well-known identifiers
# PURPOSE: Module identities, build/output modes and fixed import specifiers
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ModuleIdentity, Backend, BuildMode, OutputMode, SeedProvenance
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the quarry build pipeline.

These define the identifiers that cross boundaries:
- Importer code (the public ``quarry.db`` module)
- Plugin host (internal resolved module ids)
- Generated source (fixed runtime import specifiers)
"""

from enum import Enum


# ============================================================================
# WELL-KNOWN IDENTIFIERS
# ============================================================================

VIRTUAL_MODULE_ID = "quarry.db"

# Import specifiers baked into generated module source
RUNTIME_IMPORT = "runtime"
RUNTIME_VIRTUAL_IMPORT = "runtime.exports"

# Relative to the project root
DB_PATH = ".quarry/content.db"
CACHE_DIR = ".quarry"
DB_DIR = "db"
DB_CONFIG_FILE_NAME = "config.yaml"
PROJECT_CONFIG_FILE_NAME = "quarry.config.yaml"

# Conventional dev fixtures, resolved against the db directory
SEED_DEV_FILE_NAMES = ("seed.py",)

# Environment variables read by generated code and the CLI
ENV_DATABASE_FILE = "QUARRY_DATABASE_FILE"
ENV_REMOTE_DB_URL = "QUARRY_REMOTE_DB_URL"
ENV_APP_TOKEN = "QUARRY_APP_TOKEN"
ENV_REMOTE_TIMEOUT = "QUARRY_REMOTE_TIMEOUT_SECONDS"

DEFAULT_REMOTE_DB_URL = "https://db.services.quarry.build"


# ============================================================================
# MODULE RESOLUTION
# ============================================================================

class ModuleIdentity(str, Enum):
    """
    Resolution targets for the public module identifier.

    Only PUBLIC is ever written by importer code. The others are
    internal ids handed back from resolve_id and are never visible
    to user code.
    """
    PUBLIC = VIRTUAL_MODULE_ID
    LOCAL_IMPL = "\0" + VIRTUAL_MODULE_ID
    REMOTE_IMPL = "\0" + VIRTUAL_MODULE_ID + ":remote"
    SEEDED_IMPL = "\0" + VIRTUAL_MODULE_ID + ":seed"

    @classmethod
    def internal(cls) -> tuple:
        """Internal identities this package knows how to load."""
        return (cls.LOCAL_IMPL, cls.REMOTE_IMPL, cls.SEEDED_IMPL)


class Backend(str, Enum):
    """Which database the generated bindings talk to."""
    LOCAL = "local"      # Embedded SQLite file managed by the build
    REMOTE = "remote"    # Token-authenticated hosted database


class BuildMode(str, Enum):
    """Host command mapped to generation semantics."""
    BUILD = "build"
    DEV = "dev"

    @classmethod
    def from_command(cls, command: str) -> "BuildMode":
        """Map a host command ('build' or 'serve') to a build mode."""
        return cls.BUILD if command == "build" else cls.DEV


class OutputMode(str, Enum):
    """Project output mode."""
    SERVER = "server"    # Per-request runtime available
    STATIC = "static"    # Prerendered, no per-request runtime


class SeedProvenance(str, Enum):
    """Where a seed source came from. Declaration order is execution order."""
    INTEGRATION = "integration"    # Explicitly registered, must exist
    CONVENTIONAL = "conventional"  # Optional dev fixture in the db directory


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "VIRTUAL_MODULE_ID",
    "RUNTIME_IMPORT",
    "RUNTIME_VIRTUAL_IMPORT",
    "DB_PATH",
    "CACHE_DIR",
    "DB_DIR",
    "DB_CONFIG_FILE_NAME",
    "PROJECT_CONFIG_FILE_NAME",
    "SEED_DEV_FILE_NAMES",
    "ENV_DATABASE_FILE",
    "ENV_REMOTE_DB_URL",
    "ENV_APP_TOKEN",
    "ENV_REMOTE_TIMEOUT",
    "DEFAULT_REMOTE_DB_URL",
    "ModuleIdentity",
    "Backend",
    "BuildMode",
    "OutputMode",
    "SeedProvenance",
]
