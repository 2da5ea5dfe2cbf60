# ============================================================================
# PLUGIN CONTRACT
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Host - Plugin hooks and per-session context
# PURPOSE: The hook surface the module evaluator calls into
# CREATED: 19 OCT 2026
# ============================================================================
"""
Plugin Contract

A plugin takes part in module resolution for one evaluator session.
Every hook is optional; the base class implements each as a no-op.

Hooks:
    config_resolved(config)             once, when the session starts
    resolve_id(ctx, source, importer)   async; return an id or None to decline
    load(ctx, module_id)                async; return source text or None
    build_end()                         when the session closes
    watch_change(path)                  when a watched file changed
    unload(module_id, module)           when a cached module is discarded

Plugins run in registration order; the first non-None answer wins.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

from core.contracts import BuildMode


@dataclass(frozen=True)
class ResolvedConfig:
    """Host configuration handed to config_resolved."""
    command: str = "serve"
    root: Path = field(default_factory=Path.cwd)
    sourcemap: bool = False

    @property
    def build_mode(self) -> BuildMode:
        return BuildMode.from_command(self.command)


class PluginContext:
    """Per-session services exposed to plugin hooks."""

    def __init__(self, on_watch: Optional[Callable[[str], None]] = None):
        self.watch_files: List[str] = []
        self._on_watch = on_watch

    def add_watch_file(self, path: str) -> None:
        """Invalidate the session when ``path`` changes (or appears)."""
        path = str(path)
        if path not in self.watch_files:
            self.watch_files.append(path)
            if self._on_watch is not None:
                self._on_watch(path)


class Plugin:
    """Base class for evaluator plugins."""

    name: str = "plugin"

    def config_resolved(self, config: ResolvedConfig) -> None:
        pass

    async def resolve_id(
        self,
        ctx: PluginContext,
        source: str,
        importer: Optional[str],
    ) -> Optional[str]:
        return None

    async def load(self, ctx: PluginContext, module_id: str) -> Optional[str]:
        return None

    def build_end(self) -> None:
        pass

    def watch_change(self, path: str) -> None:
        pass

    def unload(self, module_id: str, module: Any) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = ["ResolvedConfig", "PluginContext", "Plugin"]
