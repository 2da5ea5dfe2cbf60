# ============================================================================
# TABLE SERVICE
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Service - Table declaration loading
# PURPOSE: Load and cache table declarations from db/config.yaml
# CREATED: 19 OCT 2026
# ============================================================================
"""
Table Service

Loads the table declarations from ``db/config.yaml`` into an
insertion-ordered DbTables mapping. The file is read once and cached
until ``reload()``; the registry reloads after a watched-file change.

File format:

    posts:
      columns:
        id: { type: number, primary_key: true }
        title: { type: text }
        published: { type: date, default: { sql: CURRENT_TIMESTAMP } }
      indexes:
        - { on: title }
    tags:
      columns:
        name: { type: text, unique: true }

A project with no db/config.yaml has no tables.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from codegen.generator import binding_name_error
from core.contracts import DB_CONFIG_FILE_NAME
from core.errors import ConfigLoadError, ErrorLocation
from core.models.table import DbTables, TableSchema

logger = logging.getLogger(__name__)


class TableService:
    """Service for loading and caching table declarations."""

    def __init__(self, db_dir: Union[str, Path]):
        """
        Initialize table service.

        Args:
            db_dir: Directory holding config.yaml and the conventional seed file
        """
        self.db_dir = Path(db_dir)
        self._cache: Optional[DbTables] = None

    @property
    def config_path(self) -> Path:
        return self.db_dir / DB_CONFIG_FILE_NAME

    def load_all(self) -> DbTables:
        """
        Load every declared table, in file order.

        Returns:
            DbTables (empty when the config file does not exist)

        Raises:
            ConfigLoadError: On invalid YAML or an invalid table declaration
        """
        if self._cache is not None:
            return self._cache

        if not self.config_path.exists():
            logger.debug(f"No table config at {self.config_path}")
            self._cache = {}
            return self._cache

        data = self._load_yaml(self.config_path)

        tables: DbTables = {}
        for name, table_data in data.items():
            tables[name] = self._parse_table(name, table_data)

        self._cache = tables
        logger.info(f"Loaded {len(tables)} tables from {self.config_path}")
        return tables

    def reload(self) -> DbTables:
        """Drop the cache and read the file again."""
        self._cache = None
        return self.load_all()

    def _error(self, message: str, hint: Optional[str] = None) -> ConfigLoadError:
        return ConfigLoadError(
            message,
            location=ErrorLocation(file=str(self.config_path)),
            hint=hint,
            user_authored=True,
        )

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            raise ConfigLoadError(
                f"Invalid YAML in {path.name}: {e}",
                location=ErrorLocation(
                    file=str(path),
                    line=mark.line + 1 if mark else None,
                    column=mark.column + 1 if mark else None,
                ),
                user_authored=True,
            ) from e

        if not isinstance(data, dict):
            raise self._error(f"{path.name} must map table names to table declarations")
        return data

    def _parse_table(self, name: Any, table_data: Any) -> TableSchema:
        """
        Convert one YAML table entry to a TableSchema.

        Column mapping keys become column names.
        """
        problem = binding_name_error(str(name))
        if problem is not None:
            raise self._error(
                f"Invalid table name: {problem}",
                hint="Table names become Python names in quarry.db. Rename the table in "
                     f"{DB_CONFIG_FILE_NAME}.",
            )

        hint = f"Check the {name!r} entry in {DB_CONFIG_FILE_NAME}."
        if table_data is None:
            table_data = {}
        if not isinstance(table_data, dict):
            raise self._error(f"Table {name!r} must be a mapping with a `columns` key", hint=hint)
        table_data = dict(table_data)

        raw_columns = table_data.get("columns") or {}
        if not isinstance(raw_columns, dict):
            raise self._error(f"Columns of table {name!r} must map column names to definitions", hint=hint)

        columns = []
        for column_name, column_data in raw_columns.items():
            if isinstance(column_data, str):
                column_data = {"type": column_data}
            if not isinstance(column_data, dict):
                raise self._error(
                    f"Column {column_name!r} of table {name!r} must be a type name or a mapping",
                    hint=hint,
                )
            column_data = dict(column_data)
            column_data["name"] = column_name
            columns.append(column_data)
        table_data["columns"] = columns

        raw_indexes = table_data.get("indexes") or []
        if not isinstance(raw_indexes, list):
            raise self._error(f"Indexes of table {name!r} must be a list", hint=hint)
        table_data["indexes"] = [_index_entry(entry) for entry in raw_indexes]
        table_data["name"] = name

        try:
            return TableSchema.model_validate(table_data)
        except ValidationError as e:
            raise self._error(f"Invalid declaration for table {name!r}: {e}", hint=hint) from e


def _index_entry(entry: Any) -> Any:
    """YAML 1.1 reads an unquoted ``on:`` key as the boolean True."""
    if isinstance(entry, dict) and True in entry and "on" not in entry:
        entry = dict(entry)
        entry["on"] = entry.pop(True)
    return entry


__all__ = ["TableService"]
