# ============================================================================
# SEED SOURCE MODEL
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core model - Locatable seed script reference
# PURPOSE: Seed file path plus provenance class
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: SeedSource
# DEPENDENCIES: pydantic
# ============================================================================
"""
Seed Source Model

A seed source is a Python script that populates a freshly recreated
schema. Integration-provided sources are registered explicitly and must
exist; conventional sources (db/seed.py) are optional dev fixtures.
"""

from pathlib import Path
from typing import Iterable, List, Union
from pydantic import BaseModel, ConfigDict

from core.contracts import SEED_DEV_FILE_NAMES, SeedProvenance


class SeedSource(BaseModel):
    """A seed script and where it came from."""
    model_config = ConfigDict(frozen=True)

    path: Path
    provenance: SeedProvenance

    @property
    def required(self) -> bool:
        """Integration-provided sources must exist."""
        return self.provenance == SeedProvenance.INTEGRATION

    def exists(self) -> bool:
        return self.path.is_file()

    @classmethod
    def integration(cls, root: Path, path: Union[str, Path]) -> "SeedSource":
        """Resolve an integration-registered path against the project root."""
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = root / resolved
        return cls(path=resolved, provenance=SeedProvenance.INTEGRATION)

    @classmethod
    def conventional(cls, db_dir: Path) -> List["SeedSource"]:
        """Well-known dev fixture files, in lookup order."""
        return [
            cls(path=db_dir / name, provenance=SeedProvenance.CONVENTIONAL)
            for name in SEED_DEV_FILE_NAMES
        ]


def order_seed_sources(sources: Iterable[SeedSource]) -> List[SeedSource]:
    """
    Integration-provided sources first, then conventional ones.

    The sort is stable, so order within each class is preserved.
    """
    return sorted(sources, key=lambda s: 0 if s.required else 1)


__all__ = ["SeedSource", "order_seed_sources"]
