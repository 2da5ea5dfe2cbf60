# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for database locations and remote access
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for the local database file and the remote database.
These can be overridden via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.contracts import (
    DB_PATH,
    DEFAULT_REMOTE_DB_URL,
    ENV_APP_TOKEN,
    ENV_DATABASE_FILE,
    ENV_REMOTE_DB_URL,
    ENV_REMOTE_TIMEOUT,
)


@dataclass(frozen=True)
class DatabaseDefaults:
    """
    Defaults for the local embedded database.

    database_file is the raw override from the environment; it is
    normalized against the working directory by the runtime, not here.
    """
    relative_path: str = DB_PATH
    database_file: Optional[str] = None

    def default_url(self, root: Path) -> str:
        """file:// URL of the database inside the project root."""
        return (Path(root).resolve() / self.relative_path).as_uri()

    @classmethod
    def from_env(cls) -> "DatabaseDefaults":
        """Create from environment variables."""
        return cls(database_file=os.getenv(ENV_DATABASE_FILE) or None)


@dataclass(frozen=True)
class RemoteDefaults:
    """Defaults for the hosted database."""
    remote_db_url: str = DEFAULT_REMOTE_DB_URL
    app_token: Optional[str] = None
    request_timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "RemoteDefaults":
        """Create from environment variables."""
        return cls(
            remote_db_url=os.getenv(ENV_REMOTE_DB_URL) or DEFAULT_REMOTE_DB_URL,
            app_token=os.getenv(ENV_APP_TOKEN) or None,
            request_timeout_seconds=float(os.getenv(ENV_REMOTE_TIMEOUT) or 30.0),
        )


def get_remote_database_url() -> str:
    """Remote database URL with the environment override applied."""
    return RemoteDefaults.from_env().remote_db_url


__all__ = [
    "DatabaseDefaults",
    "RemoteDefaults",
    "get_remote_database_url",
]
