# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides project settings and environment-backed defaults.
"""

from core.config.defaults import (
    DatabaseDefaults,
    RemoteDefaults,
    get_remote_database_url,
)
from core.config.settings import IntegrationConfig, ProjectSettings

__all__ = [
    "DatabaseDefaults",
    "RemoteDefaults",
    "get_remote_database_url",
    "IntegrationConfig",
    "ProjectSettings",
]
