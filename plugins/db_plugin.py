# ============================================================================
# DATABASE VIRTUAL MODULE PLUGIN
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Plugin - quarry.db resolution and loading
# PURPOSE: Recreate, seed and render the quarry.db module once per session
# CREATED: 19 OCT 2026
# ============================================================================
"""
VirtualModuleRegistry - the ``quarry:db`` plugin.

Resolution (resolve_id):
    Only ``quarry.db`` is claimed. While seeding is in progress it
    resolves to SEEDED_IMPL, otherwise to the primary identity fixed at
    construction (LOCAL_IMPL, or REMOTE_IMPL for a remote project).

Loading (load):
    REMOTE_IMPL   remote bindings; the remote schema is never touched
    SEEDED_IMPL   local bindings; no recreate, no seeding
    LOCAL_IMPL    recreate schema -> run seeds -> local bindings

    The LOCAL_IMPL source is kept for the rest of the session, so the
    schema is recreated and seeded at most once. build_end and a change
    to any watched file discard it and the next load starts over.

Unloading (unload):
    The database client bound in an evaluated internal module is closed
    when the evaluator discards the module.

Session state:
    Idle -> Recreating -> Seeding -> Ready
                  \\           \\
                   +-> error    +-> error (guard cleared)

Usage:
    handler = SeedHandler()
    registry = create_db_plugin(settings, handler)
    evaluator = ModuleEvaluator([registry], root=settings.root)
    handler.attach(evaluator.run_seed_file)
"""

import asyncio
from typing import Any, Callable, List, Optional

from codegen.generator import CLIENT_BINDING, CodeGenerator
from core.config.defaults import DatabaseDefaults, get_remote_database_url
from core.config.settings import ProjectSettings
from core.contracts import (
    DB_CONFIG_FILE_NAME,
    VIRTUAL_MODULE_ID,
    Backend,
    BuildMode,
    ModuleIdentity,
)
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.generation import GenerationTarget
from core.models.seed import SeedSource
from core.models.table import DbTables
from host.evaluator import ModuleEvaluator, virtual_filename
from host.plugin import Plugin, PluginContext, ResolvedConfig
from infrastructure.schema_synchronizer import SchemaSynchronizer
from runtime.db_client import create_local_database_client, normalize_database_url
from services.seed_runner import SeedHandler, SeedRunner
from services.table_service import TableService

logger = get_logger(__name__, ComponentType.REGISTRY)


PLUGIN_NAME = "quarry:db"

TablesProvider = Callable[[], DbTables]


class VirtualModuleRegistry(Plugin):
    """Owns resolution and loading of the quarry.db module."""

    name = PLUGIN_NAME

    def __init__(
        self,
        settings: ProjectSettings,
        *,
        tables: TablesProvider,
        seed_handler: SeedHandler,
        generator: Optional[CodeGenerator] = None,
        synchronizer: Optional[SchemaSynchronizer] = None,
    ):
        self.settings = settings
        self.tables = tables
        self.seed_handler = seed_handler
        self.generator = generator or CodeGenerator()
        self.synchronizer = synchronizer or SchemaSynchronizer()

        self.primary = (
            ModuleIdentity.REMOTE_IMPL
            if settings.backend == Backend.REMOTE
            else ModuleIdentity.LOCAL_IMPL
        )
        self.command = "serve"
        self.sourcemap = settings.sourcemap

        self._local_source: Optional[str] = None
        self._local_lock = asyncio.Lock()

    @property
    def build_mode(self) -> BuildMode:
        return BuildMode.from_command(self.command)

    @property
    def ready(self) -> bool:
        """True once the local schema has been recreated and seeded this session."""
        return self._local_source is not None

    # =========================================================================
    # HOOKS
    # =========================================================================

    def config_resolved(self, config: ResolvedConfig) -> None:
        self.command = config.command
        self.sourcemap = config.sourcemap
        logger.debug(f"Resolved host config: command={config.command} sourcemap={config.sourcemap}")

    async def resolve_id(
        self,
        ctx: PluginContext,
        source: str,
        importer: Optional[str],
    ) -> Optional[str]:
        if source != VIRTUAL_MODULE_ID:
            return None
        if self.seed_handler.in_progress:
            return ModuleIdentity.SEEDED_IMPL.value
        return self.primary.value

    async def load(self, ctx: PluginContext, module_id: str) -> Optional[str]:
        if module_id == ModuleIdentity.REMOTE_IMPL.value:
            with log_context(module_id="remote"):
                return self._render(Backend.REMOTE)

        if module_id == ModuleIdentity.SEEDED_IMPL.value:
            with log_context(module_id="seed"):
                return self._render(Backend.LOCAL)

        if module_id == ModuleIdentity.LOCAL_IMPL.value:
            with log_context(module_id="local"):
                return await self._load_local(ctx)

        return None

    def build_end(self) -> None:
        self._invalidate("build end")

    def watch_change(self, path: str) -> None:
        self._invalidate(f"change to {path}")

    def unload(self, module_id: str, module: Any) -> None:
        if module_id not in {identity.value for identity in ModuleIdentity.internal()}:
            return
        client = getattr(module, CLIENT_BINDING, None)
        if client is not None:
            client.close()
            logger.debug(f"Closed database client of {virtual_filename(module_id)}")

    # =========================================================================
    # LOCAL LOAD
    # =========================================================================

    async def _load_local(self, ctx: PluginContext) -> str:
        async with self._local_lock:
            if self._local_source is not None:
                return self._local_source

            self.seed_handler.require_executor()

            ctx.add_watch_file(str(self.settings.db_dir / DB_CONFIG_FILE_NAME))
            tables = self.tables()

            client = create_local_database_client(self.local_db_url())
            try:
                await self.synchronizer.recreate(tables, client)
            finally:
                client.close()

            runner = SeedRunner(self.seed_handler, watch=ctx.add_watch_file)
            await runner.run_all(self.seed_sources())

            source = self.generator.render(tables, self.target(Backend.LOCAL))
            self._local_source = source
            log_checkpoint("module_rendered", {"tables": list(tables.keys())})
            return source

    def seed_sources(self) -> List[SeedSource]:
        """Integration sources in registration order, then conventional ones."""
        sources = [
            SeedSource.integration(self.settings.root, path)
            for path in self.settings.integration_seed_files
        ]
        sources.extend(SeedSource.conventional(self.settings.db_dir))
        return sources

    # =========================================================================
    # RENDERING
    # =========================================================================

    def local_db_url(self) -> str:
        """Database URL with the QUARRY_DATABASE_FILE override applied."""
        return normalize_database_url(
            DatabaseDefaults.from_env().database_file,
            self.settings.local_db_url(),
        )

    def target(self, backend: Backend) -> GenerationTarget:
        return GenerationTarget(
            backend=backend,
            build_mode=self.build_mode,
            output_mode=self.settings.output,
            app_token=self.settings.app_token,
            local_db_url=self.settings.local_db_url(),
            remote_db_url=get_remote_database_url(),
        )

    def _render(self, backend: Backend) -> str:
        return self.generator.render(self.tables(), self.target(backend))

    def _invalidate(self, reason: str) -> None:
        if self._local_source is not None:
            logger.debug(f"Discarding rendered quarry.db module after {reason}")
        self._local_source = None


# ============================================================================
# FACTORIES
# ============================================================================

def create_db_plugin(
    settings: ProjectSettings,
    seed_handler: Optional[SeedHandler] = None,
) -> VirtualModuleRegistry:
    """Registry reading tables from the project's db/config.yaml on every load."""
    return VirtualModuleRegistry(
        settings,
        tables=lambda: TableService(settings.db_dir).load_all(),
        seed_handler=seed_handler or SeedHandler(),
    )


def create_session(
    settings: ProjectSettings,
    command: str = "serve",
    watch: bool = True,
) -> ModuleEvaluator:
    """Evaluator with the db plugin installed and seeding wired to it."""
    handler = SeedHandler()
    registry = create_db_plugin(settings, handler)
    evaluator = ModuleEvaluator(
        [registry],
        root=settings.root,
        command=command,
        sourcemap=settings.sourcemap,
        watch=watch,
    )
    handler.attach(evaluator.run_seed_file)
    return evaluator


__all__ = [
    "PLUGIN_NAME",
    "VirtualModuleRegistry",
    "create_db_plugin",
    "create_session",
]
