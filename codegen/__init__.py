# ============================================================================
# CODEGEN MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Codegen module initialization
# PURPOSE: Generated quarry.db source from table declarations
# CREATED: 19 OCT 2026
# ============================================================================

from codegen.formatter import ModuleFormatter
from codegen.generator import CodeGenerator, app_token_expression, remote_url_expression
from codegen.ir import ModuleIR

__all__ = [
    "CodeGenerator",
    "ModuleFormatter",
    "ModuleIR",
    "app_token_expression",
    "remote_url_expression",
]
