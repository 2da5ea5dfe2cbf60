# ============================================================================
# SEED RUNNER
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Service - One-shot seed execution
# PURPOSE: Run seed scripts after a schema recreate, exactly once per cycle
# CREATED: 19 OCT 2026
# ============================================================================
"""
Seed Runner

Executes seed scripts against a freshly recreated schema.

Ordering:
    Integration-registered sources run first, then the conventional
    db/seed.py. Order within each class is kept.

Existence:
    Every source is registered as a watch file whether or not it exists,
    so creating it later invalidates the session. A missing conventional
    source is skipped. A missing integration source is an error.

Re-entrancy:
    A seed script imports ``quarry.db`` to get at the client and the
    table bindings. While seeding is in progress the SeedGuard is set and
    the registry resolves that import to the seeded implementation,
    which renders bindings without recreating or seeding again. The
    guard is set before the first executed source and cleared after the
    last, on success and on failure.

Usage:
    handler = SeedHandler()
    handler.attach(evaluator.run_seed_file)
    runner = SeedRunner(handler, watch=ctx.add_watch_file)
    result = await runner.run_all(sources)
"""

import asyncio
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from core.errors import (
    InternalInvariantError,
    SeedError,
    location_from_exception,
)
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.seed import SeedSource, order_seed_sources

logger = get_logger(__name__, ComponentType.SEED)


# Executes one seed script given its path and source text
SeedExecutor = Callable[[Path, str], Awaitable[Any]]
WatchCallback = Callable[[str], None]


# ============================================================================
# GUARD & HANDLER
# ============================================================================

class SeedGuard:
    """
    In-progress flag for one session.

    Read from worker threads running module bodies, written from the
    event loop, hence the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        with self._lock:
            return self._in_progress

    def enter(self) -> None:
        with self._lock:
            self._in_progress = True

    def exit(self) -> None:
        with self._lock:
            self._in_progress = False


class SeedHandler:
    """
    Session-owned seeding state: the guard plus the seed executor.

    The executor is attached late, once the host that can evaluate
    modules exists.
    """

    def __init__(self, execute: Optional[SeedExecutor] = None):
        self.guard = SeedGuard()
        self.execute = execute

    def attach(self, execute: SeedExecutor) -> None:
        self.execute = execute

    def require_executor(self) -> SeedExecutor:
        if self.execute is None:
            raise InternalInvariantError("Seed executor was never attached to the seed handler.")
        return self.execute

    @property
    def in_progress(self) -> bool:
        return self.guard.in_progress


# ============================================================================
# RESULT
# ============================================================================

@dataclass
class SeedRunResult:
    """Outcome of one run_all call."""
    executed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def seeded(self) -> bool:
        return bool(self.executed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executed": self.executed,
            "skipped": self.skipped,
            "duration_ms": round(self.duration_ms, 1),
        }


# ============================================================================
# RUNNER
# ============================================================================

class SeedRunner:
    """Runs an ordered set of seed sources once."""

    def __init__(self, handler: SeedHandler, watch: Optional[WatchCallback] = None):
        self.handler = handler
        self.watch = watch

    async def run_all(self, sources: Iterable[SeedSource]) -> SeedRunResult:
        """
        Execute every existing seed source in order.

        Args:
            sources: Seed sources in any order

        Returns:
            SeedRunResult

        Raises:
            SeedError: Missing integration source, unreadable file, or a
                failing seed script
            InternalInvariantError: No executor attached to the handler
        """
        ordered = order_seed_sources(sources)
        result = SeedRunResult()
        start = time.monotonic()
        guard_set = False

        try:
            for source in ordered:
                path = str(source.path)
                if self.watch is not None:
                    self.watch(path)

                exists = await asyncio.to_thread(source.exists)
                if not exists:
                    if source.required:
                        raise SeedError(
                            f"Seed file {path} does not exist.",
                            seed_file=path,
                            reason=SeedError.MISSING,
                            hint="Check the seed_files registered by your integrations.",
                        )
                    logger.debug(f"No seed file at {path}, skipping")
                    result.skipped.append(path)
                    continue

                execute = self.handler.require_executor()
                if not guard_set:
                    self.handler.guard.enter()
                    guard_set = True

                with log_context(seed_file=path):
                    await self._run_one(source, execute)
                result.executed.append(path)

            if result.executed:
                logger.info("Seeded database.")
        finally:
            if guard_set:
                self.handler.guard.exit()

        result.duration_ms = (time.monotonic() - start) * 1000
        log_checkpoint("seeding_complete", result.to_dict())
        return result

    async def _run_one(self, source: SeedSource, execute: SeedExecutor) -> None:
        path = str(source.path)

        try:
            code = await asyncio.to_thread(source.path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SeedError(
                f"Seed file {path} could not be read: {e}",
                seed_file=path,
                reason=SeedError.UNREADABLE,
            ) from e

        logger.debug(f"Executing seed file {path}")
        try:
            await execute(source.path, code)
        except InternalInvariantError:
            raise
        except Exception as e:
            location = location_from_exception(e, file=path)
            logger.error(f"Seed file {path} failed: {e}")
            raise SeedError(
                f"Failed to seed database from {source.path.name}: {e}",
                seed_file=path,
                reason=SeedError.FAILED,
                location=location,
            ) from e


__all__ = [
    "SeedExecutor",
    "SeedGuard",
    "SeedHandler",
    "SeedRunResult",
    "SeedRunner",
]
