# ============================================================================
# LOGGING TESTS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Tests - Structured logging context
# PURPOSE: Verify context propagation and formatter output
# CREATED: 19 OCT 2026
# ============================================================================
"""
Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import asyncio
import io
import json
import logging

from core.logging import (
    ComponentType,
    HumanFormatter,
    StructuredFormatter,
    get_current_context,
    get_logger,
    log_context,
)


def capture(formatter):
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    base = logging.getLogger("tests.logging")
    base.handlers[:] = [handler]
    base.setLevel(logging.DEBUG)
    base.propagate = False
    return get_logger("tests.logging", ComponentType.SEED), stream


class TestContext:

    def test_nested_blocks_inherit(self):
        with log_context(module_id="local"):
            with log_context(seed_file="db/seed.py", rows=2):
                assert get_current_context().to_dict() == {
                    "module_id": "local", "seed_file": "db/seed.py", "rows": 2,
                }
            assert get_current_context().seed_file is None
        assert get_current_context().to_dict() == {}

    def test_follows_into_worker_thread(self):
        async def scenario():
            with log_context(seed_file="db/seed.py"):
                return await asyncio.to_thread(lambda: get_current_context().seed_file)

        assert asyncio.run(scenario()) == "db/seed.py"

    def test_isolated_between_tasks(self):
        async def worker(name):
            with log_context(module_id=name):
                await asyncio.sleep(0)
                return get_current_context().module_id

        async def scenario():
            return await asyncio.gather(worker("a"), worker("b"))

        assert asyncio.run(scenario()) == ["a", "b"]


class TestFormatters:

    def test_json_line(self):
        logger, stream = capture(StructuredFormatter())

        with log_context(module_id="local"):
            logger.info("Seeded database.")

        record = json.loads(stream.getvalue())
        assert record["message"] == "Seeded database."
        assert record["component"] == "seed"
        assert record["context"] == {"module_id": "local"}

    def test_human_line(self):
        logger, stream = capture(HumanFormatter())

        with log_context(seed_file="db/seed.py"):
            logger.warning("slow seed")

        line = stream.getvalue()
        assert "WARNING" in line
        assert "slow seed [seed=db/seed.py]" in line
