# ============================================================================
# CONTENT COLLECTIONS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Runtime - Declarative content collection config
# PURPOSE: define_collection() used by src/content/config.py
# CREATED: 19 OCT 2026
# ============================================================================
"""
Content Collections

User content configuration lives in ``src/content/config.py`` and exposes
a ``collections`` mapping:

    from runtime.exports import define_collection

    collections = {
        "blog": define_collection(schema={"title": "text", "draft": "boolean"}),
        "authors": define_collection(type="data"),
    }

The sync pipeline evaluates that module and derives type stubs from the
collection names.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.models.table import ColumnType


class CollectionType(str, Enum):
    CONTENT = "content"   # Markdown entries with frontmatter
    DATA = "data"         # YAML/JSON entries


class CollectionConfig(BaseModel):
    """One declared content collection."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: CollectionType = CollectionType.CONTENT
    schema_fields: Dict[str, ColumnType] = Field(default_factory=dict, alias="schema")


def define_collection(
    type: str = "content",
    schema: Optional[Dict[str, str]] = None,
) -> CollectionConfig:
    """Declare a content collection."""
    return CollectionConfig(type=type, schema=schema or {})


__all__ = ["CollectionType", "CollectionConfig", "define_collection"]
