# ============================================================================
# TABLE SCHEMA MODEL
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Core model - Declarative table description
# PURPOSE: Columns, indexes and foreign keys of one table (data only)
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: TableSchema, ColumnDef, IndexDef, ForeignKeyDef, ColumnType, DbTables
# DEPENDENCIES: pydantic
# ============================================================================
"""
Table Schema Model

A TableSchema is the declarative description of one table, read from
db/config.yaml. It carries no behavior: the DDL generator turns it into
statements and the code generator serializes it into the bindings.

Example (YAML):
    posts:
      columns:
        id: { type: number, primary_key: true }
        title: { type: text }
        author_id: { type: number, references: { table: authors, column: id } }
      indexes:
        - { on: [title], unique: true }

Models are frozen: a schema set is immutable once handed to a sync cycle.
"""

from enum import Enum
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ColumnType(str, Enum):
    """Declarative column types."""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"


class SqlDefault(BaseModel):
    """A column default given as a raw SQL expression (e.g. CURRENT_TIMESTAMP)."""
    model_config = ConfigDict(frozen=True)

    sql: str = Field(..., min_length=1)


class ColumnReference(BaseModel):
    """Inline foreign key of a single column."""
    model_config = ConfigDict(frozen=True)

    table: str
    column: str


class ColumnDef(BaseModel):
    """One column of a table."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    type: ColumnType
    primary_key: bool = False
    optional: bool = False
    unique: bool = False
    default: Optional[Union[SqlDefault, bool, int, float, str]] = None
    references: Optional[ColumnReference] = None

    @property
    def has_default(self) -> bool:
        return self.default is not None


class IndexDef(BaseModel):
    """Index declared on a table. Unnamed indexes get a conventional name."""
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    on: List[str] = Field(..., min_length=1)
    unique: bool = False

    @field_validator("on", mode="before")
    @classmethod
    def _single_column(cls, value):
        if isinstance(value, str):
            return [value]
        return value


class ForeignKeyDef(BaseModel):
    """Table-level (possibly composite) foreign key."""
    model_config = ConfigDict(frozen=True)

    columns: List[str] = Field(..., min_length=1)
    references_table: str
    references_columns: List[str] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _same_arity(self) -> "ForeignKeyDef":
        if len(self.columns) != len(self.references_columns):
            raise ValueError(
                f"Foreign key {self.columns} -> {self.references_table}"
                f"{self.references_columns} must reference as many columns as it declares"
            )
        return self


class TableSchema(BaseModel):
    """
    Declarative description of one table.

    Owned by the configuration loader; borrowed by the schema
    synchronizer for the duration of one recreate.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    columns: List[ColumnDef] = Field(default_factory=list)
    indexes: List[IndexDef] = Field(default_factory=list)
    foreign_keys: List[ForeignKeyDef] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_columns(self) -> "TableSchema":
        names = [c.name for c in self.columns]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Table {self.name!r} declares duplicate columns: {duplicates}")

        known = set(names)
        for index in self.indexes:
            missing = [c for c in index.on if c not in known]
            if missing:
                raise ValueError(f"Index on {self.name!r} references unknown columns: {missing}")
        for fk in self.foreign_keys:
            missing = [c for c in fk.columns if c not in known]
            if missing:
                raise ValueError(f"Foreign key on {self.name!r} references unknown columns: {missing}")
        return self

    def column(self, name: str) -> Optional[ColumnDef]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


# Insertion-ordered mapping of table name -> schema
DbTables = Dict[str, TableSchema]


__all__ = [
    "ColumnType",
    "SqlDefault",
    "ColumnReference",
    "ColumnDef",
    "IndexDef",
    "ForeignKeyDef",
    "TableSchema",
    "DbTables",
]
