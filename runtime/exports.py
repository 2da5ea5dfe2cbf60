# ============================================================================
# SHARED RUNTIME EXPORTS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Runtime - Names re-exported by every generated module
# PURPOSE: sql helpers, column default constants, user-facing errors
# CREATED: 19 OCT 2026
# ============================================================================
"""
Shared Runtime Exports

Every generated ``quarry.db`` module starts with
``from runtime.exports import *``, so these names are importable from
``quarry.db`` alongside ``db`` and the table bindings:

    from quarry.db import db, posts, sql, NOW
"""

from core.errors import UserConfigError
from core.models.table import SqlDefault
from runtime.content import define_collection
from runtime.statement import Statement, sql

# Column default expressions
NOW = SqlDefault(sql="CURRENT_TIMESTAMP")
TRUE = SqlDefault(sql="TRUE")
FALSE = SqlDefault(sql="FALSE")


__all__ = [
    "sql",
    "Statement",
    "NOW",
    "TRUE",
    "FALSE",
    "UserConfigError",
    "define_collection",
]
