# ============================================================================
# SERVICES MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - Business logic layer
# PURPOSE: Table declarations and seed execution
# CREATED: 19 OCT 2026
# ============================================================================
"""
Services Module

Usage:
    from services import TableService, SeedRunner, SeedHandler

    tables = TableService(settings.db_dir).load_all()
    await SeedRunner(handler, watch=ctx.add_watch_file).run_all(sources)
"""

from .table_service import TableService
from .seed_runner import SeedGuard, SeedHandler, SeedRunner, SeedRunResult

__all__ = [
    "TableService",
    "SeedGuard",
    "SeedHandler",
    "SeedRunner",
    "SeedRunResult",
]
