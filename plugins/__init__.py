# ============================================================================
# PLUGINS MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Plugins module initialization
# PURPOSE: Evaluator plugins shipped with quarry
# CREATED: 19 OCT 2026
# ============================================================================

from plugins.db_plugin import (
    PLUGIN_NAME,
    VirtualModuleRegistry,
    create_db_plugin,
    create_session,
)

__all__ = [
    "PLUGIN_NAME",
    "VirtualModuleRegistry",
    "create_db_plugin",
    "create_session",
]
