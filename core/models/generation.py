# ============================================================================
# GENERATION TARGET MODEL
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core model - Code generation inputs
# PURPOSE: Backend, build mode, output mode and app token for one load
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: GenerationTarget
# DEPENDENCIES: pydantic
# ============================================================================
"""
Generation Target

Computed per load by the registry, never persisted. The app token is a
SecretStr so it never shows up in logs or reprs; only the code generator
reveals it, and only where the token matrix allows inlining.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from core.contracts import Backend, BuildMode, OutputMode, DEFAULT_REMOTE_DB_URL


class GenerationTarget(BaseModel):
    """Everything the code generator needs besides the tables."""
    model_config = ConfigDict(frozen=True)

    backend: Backend
    build_mode: BuildMode
    output_mode: OutputMode = OutputMode.STATIC
    app_token: Optional[SecretStr] = None

    # Statically computed defaults baked into the generated source
    local_db_url: Optional[str] = Field(
        default=None,
        description="file:// URL of the local database, used when no env override is set",
    )
    remote_db_url: str = Field(
        default=DEFAULT_REMOTE_DB_URL,
        description="Remote database URL, used when no env override is set",
    )

    @property
    def is_build(self) -> bool:
        return self.build_mode == BuildMode.BUILD


__all__ = ["GenerationTarget"]
