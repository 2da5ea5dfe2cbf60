#!/usr/bin/env python
# ============================================================================
# QUARRY - COMMAND LINE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - CLI entry point
# PURPOSE: sync, db seed and db codegen commands
# CREATED: 19 OCT 2026
# USAGE:
#   quarry sync                         # Regenerate .quarry/*.pyi
#   quarry db seed                      # Recreate the local database and seed it
#   quarry db codegen --build --remote  # Print the generated quarry.db module
# ============================================================================

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from __version__ import __version__
from codegen.generator import CodeGenerator
from core.config.defaults import get_remote_database_url
from core.config.settings import ProjectSettings
from core.contracts import VIRTUAL_MODULE_ID, BuildMode, OutputMode
from core.errors import QuarryError
from core.logging import ComponentType, configure_logging, get_logger
from core.models.generation import GenerationTarget
from plugins.db_plugin import create_session
from services.table_service import TableService
from sync.pipeline import sync_project

logger = get_logger(__name__, ComponentType.CLI)


# ============================================================================
# COMMANDS
# ============================================================================

async def run_sync(settings: ProjectSettings) -> None:
    await sync_project(settings)


async def run_seed(settings: ProjectSettings) -> None:
    """Load quarry.db once, which recreates the schema and runs every seed."""
    evaluator = create_session(settings, command="build", watch=False)
    try:
        await evaluator.import_module(VIRTUAL_MODULE_ID)
        tables = TableService(settings.db_dir).load_all()
        logger.info(f"Database ready with {len(tables)} tables")
    finally:
        await evaluator.close()


def run_codegen(settings: ProjectSettings, build: bool) -> str:
    target = GenerationTarget(
        backend=settings.backend,
        build_mode=BuildMode.BUILD if build else BuildMode.DEV,
        output_mode=settings.output,
        app_token=settings.app_token,
        local_db_url=settings.local_db_url(),
        remote_db_url=get_remote_database_url(),
    )
    tables = TableService(settings.db_dir).load_all()
    return CodeGenerator().render(tables, target)


# ============================================================================
# ENTRY POINT
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quarry",
        description="Virtual database module and type generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quarry sync                          # Regenerate type stubs
  quarry db seed                       # Recreate .quarry/content.db and seed it
  quarry db codegen --build --remote   # Show the module a remote build would get

Environment Variables:
  QUARRY_DATABASE_FILE   Local database file override
  QUARRY_REMOTE_DB_URL   Remote database URL (default: https://db.services.quarry.build)
  QUARRY_APP_TOKEN       App token for the remote database
  QUARRY_REMOTE_TIMEOUT_SECONDS  Remote request timeout (default: 30)
  LOG_LEVEL              Log level (default: INFO)
  LOG_FORMAT             Set to "json" for structured logs
        """,
    )
    parser.add_argument("--version", action="version", version=f"quarry {__version__}")
    parser.add_argument("--root", default=".", help="Project root (default: current directory)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("sync", help="Generate type stubs in .quarry/")

    db = commands.add_parser("db", help="Database commands")
    db_commands = db.add_subparsers(dest="db_command", required=True)
    db_commands.add_parser("seed", help="Recreate the local database and run seed files")
    codegen = db_commands.add_parser("codegen", help="Print the generated quarry.db module")
    codegen.add_argument("--build", action="store_true", help="Generate for a build instead of dev")
    codegen.add_argument("--remote", action="store_true", help="Target the remote database")
    codegen.add_argument(
        "--output",
        choices=[m.value for m in OutputMode],
        help="Override the project output mode",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(
        level="DEBUG" if args.verbose else os.environ.get("LOG_LEVEL", "INFO"),
        json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
    )

    try:
        if args.command == "sync":
            settings = ProjectSettings.load(args.root)
            asyncio.run(run_sync(settings))
        elif args.db_command == "seed":
            settings = ProjectSettings.load(args.root, remote=False)
            asyncio.run(run_seed(settings))
        elif args.db_command == "codegen":
            settings = ProjectSettings.load(
                args.root,
                remote=True if args.remote else None,
                output=OutputMode(args.output) if args.output else None,
            )
            print(run_codegen(settings, build=args.build), end="")
    except QuarryError as e:
        logger.error(str(e))
        if e.hint:
            logger.error(f"  Hint: {e.hint}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
