# ============================================================================
# SEED RUNNER TESTS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Tests - Seed ordering, existence and guard handling
# PURPOSE: Verify SeedRunner.run_all against a recording executor
# CREATED: 19 OCT 2026
# ============================================================================
"""
Seed Runner Tests

Tests:
1. Integration sources run before conventional ones, order kept
2. Every source is registered as a watch file, existing or not
3. Missing conventional source skipped; missing integration source fails
4. Guard is set during execution and cleared afterwards
5. A failing seed clears the guard and raises SeedError with a location
6. Missing executor is an internal error

Run with:
    pytest tests/test_seed_runner.py -v
"""

import asyncio
import logging
from pathlib import Path

import pytest

from core.contracts import SeedProvenance
from core.errors import InternalInvariantError, SeedError
from core.models.seed import SeedSource, order_seed_sources
from services.seed_runner import SeedGuard, SeedHandler, SeedRunner


# ============================================================================
# HELPERS
# ============================================================================

class RecordingExecutor:
    """Seed executor double that records calls and the guard state."""

    def __init__(self, handler: SeedHandler, fail_on: str = None):
        self.handler = handler
        self.fail_on = fail_on
        self.calls = []

    async def __call__(self, path: Path, code: str):
        self.calls.append((path.name, code, self.handler.in_progress))
        if self.fail_on and path.name == self.fail_on:
            exec(compile(code, str(path), "exec"), {})


def write(path: Path, text: str = "x = 1\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


@pytest.fixture
def handler():
    return SeedHandler()


# ============================================================================
# ORDERING
# ============================================================================

class TestOrdering:

    def test_integration_first_stable(self, tmp_path):
        conventional = SeedSource(path=tmp_path / "db/seed.py", provenance=SeedProvenance.CONVENTIONAL)
        a = SeedSource(path=tmp_path / "a.py", provenance=SeedProvenance.INTEGRATION)
        b = SeedSource(path=tmp_path / "b.py", provenance=SeedProvenance.INTEGRATION)

        ordered = order_seed_sources([conventional, a, b])

        assert ordered == [a, b, conventional]

    def test_execution_order(self, tmp_path, handler):
        executor = RecordingExecutor(handler)
        handler.attach(executor)
        conventional = SeedSource.conventional(tmp_path / "db")
        write(tmp_path / "db" / "seed.py", "conventional = True\n")
        write(tmp_path / "int" / "one.py")
        write(tmp_path / "int" / "two.py")
        sources = [
            *conventional,
            SeedSource.integration(tmp_path, "int/one.py"),
            SeedSource.integration(tmp_path, "int/two.py"),
        ]

        result = asyncio.run(SeedRunner(handler).run_all(sources))

        assert [c[0] for c in executor.calls] == ["one.py", "two.py", "seed.py"]
        assert executor.calls[2][1] == "conventional = True\n"
        assert len(result.executed) == 3


# ============================================================================
# EXISTENCE & WATCHING
# ============================================================================

class TestExistence:

    def test_missing_conventional_skipped(self, tmp_path, handler):
        executor = RecordingExecutor(handler)
        handler.attach(executor)

        result = asyncio.run(SeedRunner(handler).run_all(SeedSource.conventional(tmp_path / "db")))

        assert executor.calls == []
        assert result.skipped == [str(tmp_path / "db" / "seed.py")]
        assert not result.seeded

    def test_missing_integration_fails(self, tmp_path, handler):
        handler.attach(RecordingExecutor(handler))
        source = SeedSource.integration(tmp_path, "missing.py")

        with pytest.raises(SeedError) as exc_info:
            asyncio.run(SeedRunner(handler).run_all([source]))

        assert exc_info.value.reason == SeedError.MISSING
        assert exc_info.value.seed_file == str(tmp_path / "missing.py")
        assert not handler.in_progress

    def test_every_source_watched(self, tmp_path, handler):
        handler.attach(RecordingExecutor(handler))
        write(tmp_path / "int.py")
        watched = []
        sources = [
            SeedSource.integration(tmp_path, "int.py"),
            *SeedSource.conventional(tmp_path / "db"),
        ]

        asyncio.run(SeedRunner(handler, watch=watched.append).run_all(sources))

        assert watched == [str(tmp_path / "int.py"), str(tmp_path / "db" / "seed.py")]

    def test_unreadable_source(self, tmp_path, handler):
        handler.attach(RecordingExecutor(handler))
        write(tmp_path / "db" / "seed.py").write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(SeedError) as exc_info:
            asyncio.run(SeedRunner(handler).run_all(SeedSource.conventional(tmp_path / "db")))

        assert exc_info.value.reason == SeedError.UNREADABLE
        assert not handler.in_progress


# ============================================================================
# GUARD
# ============================================================================

class TestGuard:

    def test_guard_toggles(self):
        guard = SeedGuard()
        assert not guard.in_progress
        guard.enter()
        assert guard.in_progress
        guard.exit()
        assert not guard.in_progress

    def test_guard_set_during_execution(self, tmp_path, handler):
        executor = RecordingExecutor(handler)
        handler.attach(executor)
        write(tmp_path / "db" / "seed.py")

        asyncio.run(SeedRunner(handler).run_all(SeedSource.conventional(tmp_path / "db")))

        assert executor.calls[0][2] is True
        assert not handler.in_progress

    def test_seeded_log_once(self, tmp_path, handler, caplog):
        handler.attach(RecordingExecutor(handler))
        write(tmp_path / "a.py")
        write(tmp_path / "b.py")
        sources = [SeedSource.integration(tmp_path, "a.py"), SeedSource.integration(tmp_path, "b.py")]

        with caplog.at_level(logging.INFO, logger="services.seed_runner"):
            asyncio.run(SeedRunner(handler).run_all(sources))

        assert [r.getMessage() for r in caplog.records].count("Seeded database.") == 1

    def test_failure_clears_guard(self, tmp_path, handler):
        executor = RecordingExecutor(handler, fail_on="seed.py")
        handler.attach(executor)
        seed = write(tmp_path / "db" / "seed.py", "x = 1\nraise ValueError('bad row')\n")

        with pytest.raises(SeedError) as exc_info:
            asyncio.run(SeedRunner(handler).run_all(SeedSource.conventional(tmp_path / "db")))

        error = exc_info.value
        assert error.reason == SeedError.FAILED
        assert isinstance(error.__cause__, ValueError)
        assert error.location is not None
        assert error.location.file == str(seed)
        assert error.location.line == 2
        assert not handler.in_progress

    def test_missing_executor(self, tmp_path):
        handler = SeedHandler()
        write(tmp_path / "db" / "seed.py")

        with pytest.raises(InternalInvariantError, match="Please file an issue"):
            asyncio.run(SeedRunner(handler).run_all(SeedSource.conventional(tmp_path / "db")))

        assert not handler.in_progress
