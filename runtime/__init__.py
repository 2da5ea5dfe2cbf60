# ============================================================================
# RUNTIME PACKAGE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Runtime module initialization
# PURPOSE: Entry points imported by generated quarry.db source
# CREATED: 19 OCT 2026
# ============================================================================

from runtime.db_client import (
    DatabaseClient,
    LocalDatabaseClient,
    create_local_database_client,
    normalize_database_url,
)
from runtime.remote_client import RemoteDatabaseClient, create_remote_database_client
from runtime.statement import QueryResult, Statement, sql
from runtime.table import Table, as_table

__all__ = [
    "DatabaseClient",
    "LocalDatabaseClient",
    "RemoteDatabaseClient",
    "create_local_database_client",
    "create_remote_database_client",
    "normalize_database_url",
    "QueryResult",
    "Statement",
    "sql",
    "Table",
    "as_table",
]
