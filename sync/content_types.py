# ============================================================================
# CONTENT COLLECTION TYPES
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Sync - Content config loading and type stubs
# PURPOSE: Load src/content/config.py and write .quarry/content.pyi
# CREATED: 19 OCT 2026
# ============================================================================
"""
Content Types Generator

Loads the user's content configuration through a ModuleEvaluator and
writes a type stub naming the declared collections:

    # .quarry/content.pyi
    from typing import Literal
    CollectionKey = Literal['authors', 'blog']

The outcome of loading the config is published on a
ContentConfigObserver. A load failure does not raise here: the error is
stored on the observer and sent over the evaluator's hot channel, where
a dev session shows it and the sync pipeline turns it into an exception.

Without a ``src/content`` directory nothing is generated and the result
carries the ``no-content-dir`` reason.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import BaseLoader, Environment, StrictUndefined

from core.config.settings import ProjectSettings
from core.errors import UserConfigError
from core.logging import ComponentType, get_logger
from host.evaluator import HotPayload, ModuleEvaluator
from runtime.content import CollectionConfig

logger = get_logger(__name__, ComponentType.SYNC)


CONTENT_CONFIG_FILE_NAME = "config.py"
CONTENT_TYPES_FILE_NAME = "content.pyi"
NO_CONTENT_DIR = "no-content-dir"

CONTENT_TYPES_TEMPLATE = """\
# Generated by quarry. Do not edit.
{% if literals -%}
from typing import Literal

CollectionKey = Literal[{{ literals | join(', ') }}]
{% else -%}
from typing import NoReturn

CollectionKey = NoReturn
{% endif %}"""


# ============================================================================
# CONFIG OBSERVER
# ============================================================================

class ConfigStatus(str, Enum):
    INIT = "init"
    LOADING = "loading"
    LOADED = "loaded"
    DOES_NOT_EXIST = "does-not-exist"
    ERROR = "error"


@dataclass
class ContentConfigState:
    status: ConfigStatus = ConfigStatus.INIT
    collections: Optional[Dict[str, CollectionConfig]] = None
    error: Optional[BaseException] = None

    @property
    def settled(self) -> bool:
        return self.status not in (ConfigStatus.INIT, ConfigStatus.LOADING)


class ContentConfigObserver:
    """Holds the latest content config state for one session."""

    def __init__(self):
        self._state = ContentConfigState()

    def get(self) -> ContentConfigState:
        return self._state

    def set(self, state: ContentConfigState) -> None:
        logger.debug(f"Content config status: {state.status.value}")
        self._state = state


@dataclass(frozen=True)
class TypesGeneratedInfo:
    """Outcome of one content type generation."""
    content_dir_found: bool
    types_generated: bool
    reason: Optional[str] = None
    collections: tuple = ()


# ============================================================================
# GENERATOR
# ============================================================================

def collections_from_module(module: Any) -> Dict[str, CollectionConfig]:
    """
    Read the ``collections`` mapping from an evaluated config module.

    Raises:
        UserConfigError: If it is missing or not a mapping of CollectionConfig
    """
    collections = getattr(module, "collections", None)
    if not isinstance(collections, dict):
        raise UserConfigError(
            "The content config must define a `collections` mapping.",
            hint="Add `collections = {\"blog\": define_collection()}` to src/content/config.py.",
        )
    invalid = [name for name, value in collections.items() if not isinstance(value, CollectionConfig)]
    if invalid:
        raise UserConfigError(
            f"Collections {invalid} were not created with define_collection().",
            hint="Wrap every collection in define_collection().",
        )
    return dict(collections)


class ContentTypesGenerator:
    """Loads the content config and writes the collection type stub."""

    def __init__(
        self,
        settings: ProjectSettings,
        evaluator: ModuleEvaluator,
        observer: ContentConfigObserver,
    ):
        self.settings = settings
        self.evaluator = evaluator
        self.observer = observer
        self._env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    @property
    def config_path(self) -> Path:
        return self.settings.content_dir / CONTENT_CONFIG_FILE_NAME

    @property
    def types_path(self) -> Path:
        return self.settings.cache_dir / CONTENT_TYPES_FILE_NAME

    async def init(self) -> TypesGeneratedInfo:
        content_dir = self.settings.content_dir
        if not await asyncio.to_thread(content_dir.is_dir):
            self.observer.set(ContentConfigState(status=ConfigStatus.DOES_NOT_EXIST))
            return TypesGeneratedInfo(
                content_dir_found=False,
                types_generated=False,
                reason=NO_CONTENT_DIR,
            )

        collections = await self._load_collections()
        if collections is None:
            return TypesGeneratedInfo(content_dir_found=True, types_generated=False, reason="config-error")

        names = sorted(collections)
        await asyncio.to_thread(self._write_types, names)
        logger.info(f"Generated types for {len(names)} content collections")
        return TypesGeneratedInfo(
            content_dir_found=True,
            types_generated=True,
            collections=tuple(names),
        )

    async def _load_collections(self) -> Optional[Dict[str, CollectionConfig]]:
        if not await asyncio.to_thread(self.config_path.is_file):
            # No config: every subdirectory is an undeclared collection
            names = await asyncio.to_thread(self._directory_collections)
            collections = {name: CollectionConfig() for name in names}
            self.observer.set(ContentConfigState(status=ConfigStatus.LOADED, collections=collections))
            return collections

        self.observer.set(ContentConfigState(status=ConfigStatus.LOADING))
        try:
            module = await self.evaluator.run_file(self.config_path)
            collections = collections_from_module(module)
        except Exception as e:
            logger.error(f"Failed to load content config {self.config_path}: {e}")
            self.observer.set(ContentConfigState(status=ConfigStatus.ERROR, error=e))
            self.evaluator.hot.send(HotPayload(type="error", err=e))
            return None

        self.observer.set(ContentConfigState(status=ConfigStatus.LOADED, collections=collections))
        return collections

    def _directory_collections(self) -> List[str]:
        return sorted(
            p.name for p in self.settings.content_dir.iterdir()
            if p.is_dir() and not p.name.startswith((".", "_"))
        )

    def render_types(self, names: List[str]) -> str:
        return self._env.from_string(CONTENT_TYPES_TEMPLATE).render(literals=[repr(n) for n in names])

    def _write_types(self, names: List[str]) -> None:
        self.types_path.parent.mkdir(parents=True, exist_ok=True)
        self.types_path.write_text(self.render_types(names), encoding="utf-8")


__all__ = [
    "CONTENT_CONFIG_FILE_NAME",
    "CONTENT_TYPES_FILE_NAME",
    "NO_CONTENT_DIR",
    "ConfigStatus",
    "ContentConfigState",
    "ContentConfigObserver",
    "TypesGeneratedInfo",
    "ContentTypesGenerator",
    "collections_from_module",
]
