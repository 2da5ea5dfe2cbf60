# ============================================================================
# MODULE EVALUATOR
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Host - In-process module runner with plugin resolution
# PURPOSE: Evaluate user modules whose imports may resolve to virtual modules
# CREATED: 19 OCT 2026
# ============================================================================
"""
Module Evaluator

Runs Python source (seed scripts, content configuration, generated
modules) with a plugin chain in charge of resolving imports.

Threading model:
    Plugin hooks are coroutines on the event loop. Module bodies are
    executed with ``exec`` in a worker thread (asyncio.to_thread). Each
    evaluated module gets its own ``__import__``; an import statement in
    the module body calls back into the loop with
    ``asyncio.run_coroutine_threadsafe`` and blocks the worker thread
    until the plugin chain has resolved, loaded and evaluated the
    target. A seed script's ``from quarry.db import db`` therefore
    reaches the registry while the load that triggered the seed is
    still suspended.

    A seed script's ``seed()`` also runs in a worker thread, a coroutine
    function on an event loop of its own, so imports inside its body take
    the same blocking path. Imports executed on the evaluator's own loop
    thread cannot block; they are served from the module cache or fall
    through to the regular import system.

    Cached modules are handed to each plugin's ``unload`` hook when the
    session is invalidated or closed, so plugins can release what the
    module body opened.

Usage:
    evaluator = ModuleEvaluator([registry], root=settings.root, command="serve")
    await evaluator.start()
    try:
        module = await evaluator.import_module("quarry.db")
    finally:
        await evaluator.close()
"""

import asyncio
import builtins
import inspect
import time
import types
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from core.logging import ComponentType, get_logger
from host.plugin import Plugin, PluginContext, ResolvedConfig

logger = get_logger(__name__, ComponentType.HOST)


# ============================================================================
# HOT CHANNEL
# ============================================================================

@dataclass
class HotPayload:
    """Message sent over the hot channel."""
    type: str
    err: Optional[BaseException] = None
    data: Dict[str, Any] = field(default_factory=dict)


HotListener = Callable[[HotPayload], None]


class HotChannel:
    """
    Update/error channel between the evaluator and its listeners.

    Delivery is asynchronous: listeners are scheduled on the event loop
    and never run inside ``send``.
    """

    def __init__(self):
        self._listeners: List[HotListener] = []
        self.sent: List[HotPayload] = []

    def on(self, listener: HotListener) -> None:
        self._listeners.append(listener)

    def send(self, payload: HotPayload) -> None:
        self.sent.append(payload)
        loop = asyncio.get_running_loop()
        for listener in self._listeners:
            loop.call_soon(listener, payload)


# ============================================================================
# EVALUATOR
# ============================================================================

class ModuleEvaluator:
    """Plugin-driven module runner for one session."""

    def __init__(
        self,
        plugins: Iterable[Plugin],
        *,
        root: Union[str, Path, None] = None,
        command: str = "serve",
        sourcemap: bool = False,
        watch: bool = True,
    ):
        self.plugins: List[Plugin] = list(plugins)
        self.config = ResolvedConfig(
            command=command,
            root=Path(root) if root is not None else Path.cwd(),
            sourcemap=sourcemap,
        )
        self.watch = watch
        self.hot = HotChannel()
        self.context = PluginContext()

        self._modules: Dict[str, types.ModuleType] = {}
        self._resolved: Dict[str, str] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._started = False
        self._closed = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        if self._started:
            return
        self._loop = asyncio.get_running_loop()
        for plugin in self.plugins:
            plugin.config_resolved(self.config)
        self._started = True
        logger.debug(f"Evaluator started with plugins {[p.name for p in self.plugins]}")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for plugin in self.plugins:
            plugin.build_end()
        self._release_modules()
        logger.debug("Evaluator closed")

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> "ModuleEvaluator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def notify_change(self, path: Union[str, Path]) -> bool:
        """
        Report a changed file. Invalidates the session when watched.

        Returns:
            True if the change invalidated the session
        """
        path = str(path)
        if not self.watch or path not in self.context.watch_files:
            return False
        for plugin in self.plugins:
            plugin.watch_change(path)
        self._release_modules()
        logger.info(f"Invalidated session after change to {path}")
        return True

    def _release_modules(self) -> None:
        modules = list(self._modules.items())
        self._modules.clear()
        self._resolved.clear()
        for module_id, module in modules:
            for plugin in self.plugins:
                plugin.unload(module_id, module)

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    async def resolve(self, source: str, importer: Optional[str] = None) -> Optional[str]:
        for plugin in self.plugins:
            resolved = await plugin.resolve_id(self.context, source, importer)
            if resolved is not None:
                return resolved
        return None

    async def load(self, module_id: str) -> Optional[str]:
        for plugin in self.plugins:
            code = await plugin.load(self.context, module_id)
            if code is not None:
                return code
        return None

    async def import_module(
        self,
        source: str,
        importer: Optional[str] = None,
    ) -> types.ModuleType:
        """
        Resolve, load and evaluate ``source`` through the plugin chain.

        Raises:
            ModuleNotFoundError: If no plugin resolves or loads it
        """
        module = await self._import_virtual(source, importer)
        if module is None:
            raise ModuleNotFoundError(f"No plugin resolved {source!r}", name=source)
        return module

    async def _import_virtual(
        self,
        source: str,
        importer: Optional[str],
    ) -> Optional[types.ModuleType]:
        await self.start()
        module_id = await self.resolve(source, importer)
        if module_id is None:
            return None

        cached = self._modules.get(module_id)
        if cached is not None:
            return cached

        code = await self.load(module_id)
        if code is None:
            raise ModuleNotFoundError(f"No plugin loaded {module_id!r}", name=source)

        module = await self._evaluate(source, code, filename=virtual_filename(module_id))
        self._modules[module_id] = module
        self._resolved[source] = module_id
        return module

    # =========================================================================
    # EVALUATION
    # =========================================================================

    async def run_file(self, path: Union[str, Path]) -> types.ModuleType:
        """Read and evaluate a file. OSError propagates."""
        path = Path(path)
        code = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return await self.run_code(path, code)

    async def run_code(self, path: Union[str, Path], code: str) -> types.ModuleType:
        """Evaluate ``code`` as the module at ``path``. Not cached."""
        path = Path(path)
        return await self._evaluate(path.stem, code, filename=str(path))

    async def run_seed_file(self, path: Union[str, Path], code: str) -> types.ModuleType:
        """
        Evaluate a seed script, then call its ``seed()`` when it defines one.

        Either kind runs in a worker thread; a coroutine function (or an
        awaitable result) is driven by an event loop of that thread.
        """
        module = await self.run_code(path, code)
        seed = getattr(module, "seed", None)
        if seed is None:
            return module
        if not callable(seed):
            raise TypeError(f"{path}: seed must be callable, got {type(seed).__name__}")

        await asyncio.to_thread(_call_seed, seed)
        return module

    async def _evaluate(self, name: str, code: str, filename: str) -> types.ModuleType:
        await self.start()
        module = types.ModuleType(name)
        module.__file__ = filename

        namespace = module.__dict__
        module_builtins = dict(vars(builtins))
        module_builtins["__import__"] = self._make_import(filename)
        namespace["__builtins__"] = module_builtins

        start = time.monotonic()

        def execute() -> None:
            compiled = compile(code, filename, "exec")
            exec(compiled, namespace)

        await asyncio.to_thread(execute)
        logger.debug(f"Evaluated {filename!r} in {(time.monotonic() - start) * 1000:.1f} ms")
        return module

    def _make_import(self, importer: str) -> Callable[..., Any]:
        """Build the ``__import__`` installed into one evaluated module."""

        def _import(name, globals=None, locals=None, fromlist=(), level=0):
            if level == 0:
                module = self._import_from_module_body(name, importer)
                if module is not None:
                    if fromlist or "." not in name:
                        return module
                    return _package_chain(name, module)
            return builtins.__import__(name, globals, locals, fromlist, level)

        return _import

    def _import_from_module_body(
        self,
        name: str,
        importer: str,
    ) -> Optional[types.ModuleType]:
        if self._loop is None or _running_loop() is self._loop:
            module_id = self._resolved.get(name)
            return self._modules.get(module_id) if module_id else None

        future = asyncio.run_coroutine_threadsafe(
            self._import_virtual(name, importer),
            self._loop,
        )
        return future.result()


def virtual_filename(module_id: str) -> str:
    """Printable filename for a resolved id; internal ids carry a NUL prefix."""
    return "<" + module_id.replace("\0", "") + ">"


def _call_seed(seed: Callable[[], Any]) -> Any:
    result = seed()
    if inspect.isawaitable(result):
        async def wait() -> Any:
            return await result
        return asyncio.run(wait())
    return result


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _package_chain(name: str, leaf: types.ModuleType) -> types.ModuleType:
    """
    Top-level package for ``import a.b.c`` with ``leaf`` bound at the end.

    Virtual modules have no real parent packages; the parents are
    synthesized so attribute access down the dotted path works.
    """
    parts = name.split(".")
    root = types.ModuleType(parts[0])
    current = root
    for i, part in enumerate(parts[1:-1], start=1):
        child = types.ModuleType(".".join(parts[: i + 1]))
        setattr(current, part, child)
        current = child
    setattr(current, parts[-1], leaf)
    return root


__all__ = ["HotPayload", "HotChannel", "ModuleEvaluator", "virtual_filename"]
