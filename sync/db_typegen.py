# ============================================================================
# DATABASE TYPE STUB
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Sync - quarry.db type stub
# PURPOSE: Write .quarry/db.pyi describing the generated module's names
# CREATED: 19 OCT 2026
# ============================================================================
"""
Writes ``.quarry/db.pyi`` so editors and type checkers know what
``quarry.db`` exports without running the build:

    from runtime import DatabaseClient, Table
    from runtime.exports import *

    db: DatabaseClient
    posts: Table
"""

import asyncio
from pathlib import Path

from jinja2 import BaseLoader, Environment, StrictUndefined

from core.config.settings import ProjectSettings
from core.logging import ComponentType, get_logger
from core.models.table import DbTables
from services.table_service import TableService

logger = get_logger(__name__, ComponentType.SYNC)


DB_TYPES_FILE_NAME = "db.pyi"

DB_TYPES_TEMPLATE = """\
# Generated by quarry. Do not edit.
from runtime import DatabaseClient, Table
from runtime.exports import *

db: DatabaseClient
{% for name in tables -%}
{{ name }}: Table
{% endfor %}"""


def render_db_types(tables: DbTables) -> str:
    env = Environment(loader=BaseLoader(), autoescape=False, undefined=StrictUndefined)
    return env.from_string(DB_TYPES_TEMPLATE).render(tables=list(tables))


async def generate_db_types(settings: ProjectSettings) -> Path:
    """Load the declared tables and write the stub. Returns its path."""
    tables = await asyncio.to_thread(TableService(settings.db_dir).load_all)
    target = settings.cache_dir / DB_TYPES_FILE_NAME

    def write() -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_db_types(tables), encoding="utf-8")

    await asyncio.to_thread(write)
    logger.debug(f"Wrote {target} with {len(tables)} tables")
    return target


__all__ = ["DB_TYPES_FILE_NAME", "render_db_types", "generate_db_types"]
