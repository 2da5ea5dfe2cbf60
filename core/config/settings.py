# ============================================================================
# PROJECT SETTINGS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - Project configuration
# PURPOSE: Load quarry.config.yaml into a validated settings model
# CREATED: 19 OCT 2026
# ============================================================================
"""
Project Settings

Reads the optional quarry.config.yaml at the project root:

    output: server          # or static (default)
    remote: false           # talk to the hosted database instead of db/
    integrations:
      - name: blog
        seed_files:
          - integrations/blog/seed.py

The app token never comes from the file; it is read from QUARRY_APP_TOKEN.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from core.config.defaults import DatabaseDefaults, RemoteDefaults
from core.contracts import (
    CACHE_DIR,
    DB_DIR,
    PROJECT_CONFIG_FILE_NAME,
    Backend,
    OutputMode,
)
from core.errors import ConfigLoadError, ErrorLocation

logger = logging.getLogger(__name__)


class IntegrationConfig(BaseModel):
    """An integration contributing seed files."""
    model_config = ConfigDict(frozen=True)

    name: str
    seed_files: List[str] = Field(default_factory=list)


class ProjectSettings(BaseModel):
    """Validated project configuration with derived paths."""
    model_config = ConfigDict(frozen=True)

    root: Path
    src_dir: Optional[Path] = None
    output: OutputMode = OutputMode.STATIC
    remote: bool = False
    app_token: Optional[SecretStr] = None
    sourcemap: bool = False
    integrations: List[IntegrationConfig] = Field(default_factory=list)

    # =========================================================================
    # DERIVED PATHS
    # =========================================================================

    @property
    def source_dir(self) -> Path:
        return self.src_dir if self.src_dir is not None else self.root / "src"

    @property
    def db_dir(self) -> Path:
        return self.root / DB_DIR

    @property
    def cache_dir(self) -> Path:
        return self.root / CACHE_DIR

    @property
    def content_dir(self) -> Path:
        return self.source_dir / "content"

    @property
    def backend(self) -> Backend:
        return Backend.REMOTE if self.remote else Backend.LOCAL

    @property
    def integration_seed_files(self) -> List[str]:
        """Seed files registered by integrations, in registration order."""
        return [path for integration in self.integrations for path in integration.seed_files]

    def local_db_url(self) -> str:
        return DatabaseDefaults().default_url(self.root)

    # =========================================================================
    # LOADING
    # =========================================================================

    @classmethod
    def load(
        cls,
        root: Union[str, Path],
        *,
        remote: Optional[bool] = None,
        output: Optional[OutputMode] = None,
    ) -> "ProjectSettings":
        """
        Load settings for the project at ``root``.

        Args:
            root: Project root directory
            remote: Override the ``remote`` flag from the file (CLI --remote)
            output: Override the output mode

        Raises:
            ConfigLoadError: If the config file is not valid YAML or fails validation
        """
        root = Path(root).resolve()
        config_path = root / PROJECT_CONFIG_FILE_NAME
        data = {}

        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                mark = getattr(e, "problem_mark", None)
                raise ConfigLoadError(
                    f"Invalid YAML in {config_path.name}: {e}",
                    location=ErrorLocation(
                        file=str(config_path),
                        line=mark.line + 1 if mark else None,
                        column=mark.column + 1 if mark else None,
                    ),
                    user_authored=True,
                ) from e
            logger.debug(f"Loaded project config from {config_path}")

        data = dict(data)
        data["root"] = root
        if data.get("src_dir"):
            data["src_dir"] = root / data["src_dir"]
        if remote is not None:
            data["remote"] = remote
        if output is not None:
            data["output"] = output

        token = RemoteDefaults.from_env().app_token
        if token:
            data["app_token"] = token

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigLoadError(
                f"Invalid project configuration: {e}",
                location=ErrorLocation(file=str(config_path)),
                hint=f"Check {PROJECT_CONFIG_FILE_NAME} at the project root.",
                user_authored=True,
            ) from e


__all__ = ["IntegrationConfig", "ProjectSettings"]
