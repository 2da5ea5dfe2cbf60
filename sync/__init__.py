# ============================================================================
# SYNC MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Sync module initialization
# PURPOSE: Type stub generation for quarry sync
# CREATED: 19 OCT 2026
# ============================================================================

from sync.content_types import ContentTypesGenerator, TypesGeneratedInfo
from sync.pipeline import ContentSyncPipeline, sync_project

__all__ = [
    "ContentSyncPipeline",
    "ContentTypesGenerator",
    "TypesGeneratedInfo",
    "sync_project",
]
