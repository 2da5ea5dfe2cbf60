# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across registry, seeding and sync
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Component loggers whose records carry the module being loaded and the
seed file being executed.

The context lives in a ContextVar rather than thread-local storage: a
load hops between the event loop and worker threads (asyncio.to_thread
copies the current context), and concurrent tasks must not see each
other's fields.

Output:
    human (default)    12:00:01 INFO     seed    Seeded database. [module=local]
    LOG_FORMAT=json    one JSON object per line

Usage:
    from core.logging import ComponentType, get_logger, log_context

    logger = get_logger(__name__, ComponentType.SEED)

    with log_context(seed_file="db/seed.py"):
        logger.info("Executing seed file")
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, Optional, TextIO, Union


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    REGISTRY = "registry"
    SCHEMA = "schema"
    SEED = "seed"
    CODEGEN = "codegen"
    SYNC = "sync"
    HOST = "host"
    RUNTIME = "runtime"
    CLI = "cli"


# ============================================================================
# CONTEXT
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record logged inside a log_context block."""
    module_id: Optional[str] = None
    seed_file: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = dict(self.fields)
        if self.module_id is not None:
            result["module_id"] = self.module_id
        if self.seed_file is not None:
            result["seed_file"] = self.seed_file
        return result


_current: ContextVar[LogContext] = ContextVar("quarry_log_context", default=LogContext())


def get_current_context() -> LogContext:
    return _current.get()


@contextmanager
def log_context(
    *,
    module_id: Optional[str] = None,
    seed_file: Any = None,
    **fields: Any,
) -> Iterator[LogContext]:
    """
    Add fields to the logging context for the duration of the block.

    Unset arguments inherit the enclosing block's values.
    """
    parent = _current.get()
    context = replace(
        parent,
        module_id=module_id if module_id is not None else parent.module_id,
        seed_file=str(seed_file) if seed_file is not None else parent.seed_file,
        fields={**parent.fields, **fields},
    )
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# FORMATTERS
# ============================================================================

def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return dict(getattr(record, "quarry", None) or {})


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for CI log collection."""

    def format(self, record: logging.LogRecord) -> str:
        data = _record_fields(record)
        log_data: Dict[str, Any] = {
            "timestamp": _utcnow().isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "component": data.pop("component", None),
            "message": record.getMessage(),
        }
        if data:
            log_data["context"] = data
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line output for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        data = _record_fields(record)
        component = data.pop("component", None) or record.name
        parts = []
        if data.get("module_id"):
            parts.append(f"module={data['module_id']}")
        if data.get("seed_file"):
            parts.append(f"seed={data['seed_file']}")

        line = f"{_utcnow():%H:%M:%S} {record.levelname:<8} {component:<8} {record.getMessage()}"
        if parts:
            line += f" [{', '.join(parts)}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """
    Adapter that stamps records with the component and the current context.

    Caller-supplied ``extra`` keys are merged in; context fields win.
    """

    def process(self, msg, kwargs):
        data = dict(kwargs.get("extra") or {})
        data.update(get_current_context().to_dict())
        component = (self.extra or {}).get("component")
        if component:
            data.setdefault("component", component)
        kwargs["extra"] = {"quarry": data}
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """Context-aware logger for ``name`` (usually ``__name__``)."""
    return ContextLogger(
        logging.getLogger(name),
        {"component": component.value if component else None},
    )


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Install a single root handler for the CLI.

    Args:
        level: Log level name or number
        json_output: JSON lines instead of human output
        stream: Output stream (default: stderr, keeping stdout for codegen output)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named checkpoint at DEBUG.

    Checkpoints mark the phases of one load cycle (schema_recreated,
    seeding_complete, module_rendered).
    """
    checkpoint: Dict[str, Any] = {"checkpoint": name, **get_current_context().to_dict()}
    if data:
        checkpoint["data"] = data
    (logger or logging.getLogger("quarry.checkpoint")).debug(
        f"CHECKPOINT: {name}",
        extra={"quarry": checkpoint},
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
