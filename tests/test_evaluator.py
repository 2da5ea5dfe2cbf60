# ============================================================================
# MODULE EVALUATOR TESTS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Tests - Plugin-driven module evaluation
# PURPOSE: Verify resolution, caching, seed calls and the hot channel
# CREATED: 19 OCT 2026
# ============================================================================
"""
Module Evaluator Tests

Tests:
1. Imports inside evaluated modules go through the plugin chain
2. Non-virtual imports fall through to the regular import system
3. Modules are cached per resolved id until a watched file changes
4. run_seed_file calls async and sync seed() functions
5. Hot channel delivers listeners asynchronously
6. config_resolved and build_end reach every plugin
7. Cached modules reach unload on invalidation and close

Run with:
    pytest tests/test_evaluator.py -v
"""

import asyncio

import pytest

from host.evaluator import HotPayload, ModuleEvaluator, virtual_filename
from host.plugin import Plugin


# ============================================================================
# HELPERS
# ============================================================================

class StaticPlugin(Plugin):
    """Serves fixed source for a handful of virtual ids."""

    name = "test:static"

    def __init__(self, modules):
        self.modules = modules
        self.loads = []
        self.config = None
        self.ended = 0
        self.changes = []
        self.unloaded = []

    def config_resolved(self, config):
        self.config = config

    async def resolve_id(self, ctx, source, importer):
        if source in self.modules:
            return "\0" + source
        return None

    async def load(self, ctx, module_id):
        if module_id.startswith("\0"):
            self.loads.append(module_id)
            return self.modules[module_id[1:]]
        return None

    def build_end(self):
        self.ended += 1

    def watch_change(self, path):
        self.changes.append(path)

    def unload(self, module_id, module):
        self.unloaded.append((module_id, getattr(module, "value", None)))


# ============================================================================
# RESOLUTION & CACHING
# ============================================================================

class TestImports:

    def test_virtual_import_from_module_body(self, tmp_path):
        plugin = StaticPlugin({"virtual.answer": "value = 42\n"})

        async def scenario():
            async with ModuleEvaluator([plugin], root=tmp_path) as evaluator:
                return await evaluator.run_code(
                    tmp_path / "main.py",
                    "import json\nfrom virtual.answer import value\nencoded = json.dumps(value)\n",
                )

        module = asyncio.run(scenario())

        assert module.value == 42
        assert module.encoded == "42"
        assert plugin.config.root == tmp_path
        assert plugin.ended == 1

    def test_dotted_import_binds_parent_chain(self, tmp_path):
        plugin = StaticPlugin({"virtual.answer": "value = 7\n"})

        async def scenario():
            async with ModuleEvaluator([plugin], root=tmp_path) as evaluator:
                return await evaluator.run_code(
                    tmp_path / "main.py",
                    "import virtual.answer\nresult = virtual.answer.value\n",
                )

        assert asyncio.run(scenario()).result == 7

    def test_cached_per_resolved_id(self, tmp_path):
        plugin = StaticPlugin({"virtual.answer": "value = 1\n"})

        async def scenario():
            async with ModuleEvaluator([plugin], root=tmp_path) as evaluator:
                first = await evaluator.import_module("virtual.answer")
                second = await evaluator.import_module("virtual.answer")
                return first, second

        first, second = asyncio.run(scenario())

        assert first is second
        assert plugin.loads == ["\0virtual.answer"]
        assert first.__file__ == "<virtual.answer>"

    def test_unresolved_import_module(self, tmp_path):
        async def scenario():
            async with ModuleEvaluator([StaticPlugin({})], root=tmp_path) as evaluator:
                await evaluator.import_module("nowhere")

        with pytest.raises(ModuleNotFoundError):
            asyncio.run(scenario())

    def test_watched_change_invalidates(self, tmp_path):
        plugin = StaticPlugin({"virtual.answer": "value = 1\n"})

        async def scenario():
            async with ModuleEvaluator([plugin], root=tmp_path) as evaluator:
                evaluator.context.add_watch_file("db/seed.py")
                await evaluator.import_module("virtual.answer")
                ignored = evaluator.notify_change("elsewhere.py")
                invalidated = evaluator.notify_change("db/seed.py")
                await evaluator.import_module("virtual.answer")
                return ignored, invalidated

        ignored, invalidated = asyncio.run(scenario())

        assert ignored is False
        assert invalidated is True
        assert plugin.changes == ["db/seed.py"]
        assert len(plugin.loads) == 2

    def test_discarded_modules_unloaded(self, tmp_path):
        plugin = StaticPlugin({"virtual.answer": "value = 1\n"})

        async def scenario():
            async with ModuleEvaluator([plugin], root=tmp_path) as evaluator:
                evaluator.context.add_watch_file("db/seed.py")
                await evaluator.import_module("virtual.answer")
                evaluator.notify_change("db/seed.py")
                after_change = list(plugin.unloaded)
                await evaluator.import_module("virtual.answer")
            return after_change

        after_change = asyncio.run(scenario())

        assert after_change == [("\0virtual.answer", 1)]
        assert plugin.unloaded == [("\0virtual.answer", 1)] * 2

    def test_syntax_error_propagates(self, tmp_path):
        async def scenario():
            async with ModuleEvaluator([], root=tmp_path) as evaluator:
                await evaluator.run_code(tmp_path / "bad.py", "def (:\n")

        with pytest.raises(SyntaxError):
            asyncio.run(scenario())

    def test_run_file_missing(self, tmp_path):
        async def scenario():
            async with ModuleEvaluator([], root=tmp_path) as evaluator:
                await evaluator.run_file(tmp_path / "missing.py")

        with pytest.raises(OSError):
            asyncio.run(scenario())

    def test_virtual_filename(self):
        assert virtual_filename("\0quarry.db:seed") == "<quarry.db:seed>"


# ============================================================================
# SEED FILES
# ============================================================================

class TestSeedFiles:

    def test_async_seed_awaited(self, tmp_path):
        code = "calls = []\nasync def seed():\n    calls.append('async')\n"

        async def scenario():
            async with ModuleEvaluator([], root=tmp_path) as evaluator:
                return await evaluator.run_seed_file(tmp_path / "seed.py", code)

        assert asyncio.run(scenario()).calls == ["async"]

    def test_sync_seed_called(self, tmp_path):
        code = "calls = []\ndef seed():\n    calls.append('sync')\n"

        async def scenario():
            async with ModuleEvaluator([], root=tmp_path) as evaluator:
                return await evaluator.run_seed_file(tmp_path / "seed.py", code)

        assert asyncio.run(scenario()).calls == ["sync"]

    def test_async_seed_imports_virtual_module(self, tmp_path):
        plugin = StaticPlugin({"virtual.answer": "value = 42\n"})
        code = (
            "import asyncio\n"
            "seen = []\n"
            "async def seed():\n"
            "    from virtual.answer import value\n"
            "    await asyncio.sleep(0)\n"
            "    seen.append(value)\n"
        )

        async def scenario():
            async with ModuleEvaluator([plugin], root=tmp_path) as evaluator:
                return await evaluator.run_seed_file(tmp_path / "seed.py", code)

        assert asyncio.run(scenario()).seen == [42]
        assert plugin.loads == ["\0virtual.answer"]

    def test_sync_seed_returning_awaitable(self, tmp_path):
        code = (
            "calls = []\n"
            "async def later():\n"
            "    calls.append('awaited')\n"
            "def seed():\n"
            "    return later()\n"
        )

        async def scenario():
            async with ModuleEvaluator([], root=tmp_path) as evaluator:
                return await evaluator.run_seed_file(tmp_path / "seed.py", code)

        assert asyncio.run(scenario()).calls == ["awaited"]

    def test_module_without_seed(self, tmp_path):
        async def scenario():
            async with ModuleEvaluator([], root=tmp_path) as evaluator:
                return await evaluator.run_seed_file(tmp_path / "seed.py", "done = True\n")

        assert asyncio.run(scenario()).done is True


# ============================================================================
# HOT CHANNEL
# ============================================================================

class TestHotChannel:

    def test_listeners_run_after_send(self, tmp_path):
        received = []

        async def scenario():
            evaluator = ModuleEvaluator([], root=tmp_path)
            evaluator.hot.on(received.append)
            evaluator.hot.send(HotPayload(type="update"))
            delivered_inline = list(received)
            await asyncio.sleep(0)
            return delivered_inline

        delivered_inline = asyncio.run(scenario())

        assert delivered_inline == []
        assert [p.type for p in received] == ["update"]
