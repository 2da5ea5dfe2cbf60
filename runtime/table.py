# ============================================================================
# TABLE BINDINGS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Runtime - Typed table wrappers for generated modules
# PURPOSE: as_table() target of every generated table binding
# CREATED: 19 OCT 2026
# ============================================================================
"""
Table Bindings

Generated modules expose each declared table as a Table wrapper built
by ``as_table(name, schema, raw=False)``. The wrapper knows its schema
and builds statements; it never holds a client.

Usage (inside a seed file):
    from quarry.db import db, posts

    async def seed():
        await db.batch(posts.insert_many([
            {"id": 1, "title": "Hello"},
            {"id": 2, "title": "World"},
        ]))
"""

import json
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Union

from core.models.table import ColumnType, TableSchema
from core.schema.ddl_utils import quote_identifier
from runtime.statement import Statement


class Table:
    """A declared table, bound by name to its declarative schema."""

    def __init__(self, name: str, schema: TableSchema, raw: bool = False):
        self.name = name
        self.schema = schema
        self.raw = raw

    @property
    def columns(self) -> List[str]:
        return self.schema.column_names

    def _convert(self, column: str, value: Any) -> Any:
        definition = self.schema.column(column)
        if definition is None:
            raise KeyError(f"Table {self.name!r} has no column {column!r}")
        if value is None:
            return None
        if definition.type == ColumnType.BOOLEAN:
            return 1 if value else 0
        if definition.type == ColumnType.JSON:
            return json.dumps(value)
        if definition.type == ColumnType.DATE and isinstance(value, (datetime, date)):
            return value.isoformat()
        return value

    def insert(self, values: Mapping[str, Any]) -> Statement:
        """INSERT statement for one row."""
        if not values:
            raise ValueError(f"Cannot insert an empty row into {self.name!r}")
        names = list(values.keys())
        args = tuple(self._convert(name, values[name]) for name in names)
        return Statement(
            sql="INSERT INTO {} ({}) VALUES ({})".format(
                quote_identifier(self.name),
                ", ".join(quote_identifier(n) for n in names),
                ", ".join("?" for _ in names),
            ),
            args=args,
        )

    def insert_many(self, rows: Iterable[Mapping[str, Any]]) -> List[Statement]:
        return [self.insert(row) for row in rows]

    def select(self) -> Statement:
        return Statement(sql=f"SELECT * FROM {quote_identifier(self.name)}")

    def delete(self) -> Statement:
        return Statement(sql=f"DELETE FROM {quote_identifier(self.name)}")

    def __repr__(self) -> str:
        return f"Table({self.name!r}, columns={self.columns})"


def as_table(
    name: str,
    schema: Union[TableSchema, Dict[str, Any]],
    raw: bool = False,
) -> Table:
    """Build the typed wrapper for one table binding."""
    if not isinstance(schema, TableSchema):
        schema = TableSchema.model_validate(schema)
    return Table(name, schema, raw=raw)


__all__ = ["Table", "as_table"]
