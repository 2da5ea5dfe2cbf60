# ============================================================================
# SYNC PIPELINE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Sync - Isolated type generation
# PURPOSE: Generate content and db type stubs with a throwaway evaluator
# CREATED: 19 OCT 2026
# ============================================================================
"""
Sync Pipeline

``quarry sync`` regenerates the type stubs in ``.quarry/``:

1. db.pyi from db/config.yaml
2. content.pyi from src/content/config.py

Content types need the user's config evaluated, so the pipeline boots a
short-lived ModuleEvaluator (no watching) and always closes it.

The evaluator reports config load failures over its hot channel, which
is asynchronous. The pipeline replaces ``hot.send`` so an ``error``
payload is raised at the call site instead of being delivered later.

Errors:
    QuarryError (except UserConfigError)  re-raised unchanged
    UserConfigError                        wrapped, its hint preserved
    anything else                          wrapped with the generic hint

Usage:
    info = await ContentSyncPipeline(settings).sync()
    await sync_project(settings)
"""

import time
from typing import Callable, Optional

from core.config.settings import ProjectSettings
from core.errors import (
    ConfigLoadError,
    InternalInvariantError,
    QuarryError,
    UserConfigError,
    location_from_exception,
)
from core.logging import ComponentType, get_logger
from host.evaluator import HotChannel, HotPayload, ModuleEvaluator
from plugins.db_plugin import create_session
from sync.content_types import (
    CONTENT_CONFIG_FILE_NAME,
    ConfigStatus,
    ContentConfigObserver,
    ContentTypesGenerator,
    TypesGeneratedInfo,
)
from sync.db_typegen import generate_db_types

logger = get_logger(__name__, ComponentType.SYNC)


GENERATE_CONTENT_TYPES_HINT = (
    "Check your src/content/config.py file for typos. Every collection must "
    "be created with define_collection()."
)

EvaluatorFactory = Callable[[ProjectSettings], ModuleEvaluator]
GeneratorFactory = Callable[
    [ProjectSettings, ModuleEvaluator, ContentConfigObserver],
    ContentTypesGenerator,
]


def generate_content_types_message(inner: str) -> str:
    return f"failed to generate content collection types: {inner}"


def raise_hot_errors(hot: HotChannel) -> None:
    """Make ``error`` payloads raise synchronously from ``hot.send``."""
    send = hot.send

    def send_or_raise(payload: HotPayload) -> None:
        if payload.type == "error" and payload.err is not None:
            raise payload.err
        return send(payload)

    hot.send = send_or_raise


def _default_evaluator(settings: ProjectSettings) -> ModuleEvaluator:
    return create_session(settings, command="build", watch=False)


# ============================================================================
# CONTENT SYNC
# ============================================================================

class ContentSyncPipeline:
    """Runs content type generation against an isolated evaluator."""

    def __init__(
        self,
        settings: ProjectSettings,
        *,
        evaluator_factory: Optional[EvaluatorFactory] = None,
        generator_factory: Optional[GeneratorFactory] = None,
        observer: Optional[ContentConfigObserver] = None,
    ):
        self.settings = settings
        self.evaluator_factory = evaluator_factory or _default_evaluator
        self.generator_factory = generator_factory or ContentTypesGenerator
        self.observer = observer or ContentConfigObserver()

    async def sync(self) -> TypesGeneratedInfo:
        """
        Generate content collection types.

        Raises:
            ConfigLoadError: If the content config failed to load
            QuarryError: Recognized errors, unchanged
        """
        evaluator = self.evaluator_factory(self.settings)
        raise_hot_errors(evaluator.hot)

        try:
            await evaluator.start()
            generator = self.generator_factory(self.settings, evaluator, self.observer)
            info = await generator.init()

            state = self.observer.get()
            if state.status == ConfigStatus.ERROR and state.error is not None:
                raise state.error
            if not state.settled:
                raise InternalInvariantError(
                    f"Content config loading never settled (status: {state.status.value})."
                )

            if not info.types_generated:
                logger.debug("No content directory found. Skipping type generation.")
            return info

        except Exception as e:
            if isinstance(e, QuarryError) and not isinstance(e, UserConfigError):
                raise
            hint = e.hint if isinstance(e, UserConfigError) and e.hint else GENERATE_CONTENT_TYPES_HINT
            raise ConfigLoadError(
                generate_content_types_message(str(e)),
                hint=hint,
                user_authored=isinstance(e, UserConfigError),
                location=location_from_exception(e, file=self.settings.content_dir / CONTENT_CONFIG_FILE_NAME),
            ) from e
        finally:
            await evaluator.close()


# ============================================================================
# FULL SYNC
# ============================================================================

async def sync_project(
    settings: ProjectSettings,
    *,
    skip_content: bool = False,
) -> Optional[TypesGeneratedInfo]:
    """
    Regenerate every type stub for the project.

    Errors are logged, then re-raised for the CLI to turn into an exit code.
    """
    start = time.monotonic()
    try:
        await generate_db_types(settings)
        info = None
        if not skip_content:
            info = await ContentSyncPipeline(settings).sync()
        logger.info(f"Generated in {(time.monotonic() - start) * 1000:.0f} ms")
        return info
    except Exception as e:
        hint = getattr(e, "hint", None)
        logger.error(f"{e}" + (f"\n  Hint: {hint}" if hint else ""))
        raise


__all__ = [
    "GENERATE_CONTENT_TYPES_HINT",
    "ContentSyncPipeline",
    "generate_content_types_message",
    "raise_hot_errors",
    "sync_project",
]
