# ============================================================================
# HOST MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Host module initialization
# PURPOSE: Plugin contract and module evaluator
# CREATED: 19 OCT 2026
# ============================================================================

from host.evaluator import HotChannel, HotPayload, ModuleEvaluator
from host.plugin import Plugin, PluginContext, ResolvedConfig

__all__ = [
    "HotChannel",
    "HotPayload",
    "ModuleEvaluator",
    "Plugin",
    "PluginContext",
    "ResolvedConfig",
]
