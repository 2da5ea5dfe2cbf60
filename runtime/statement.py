# ============================================================================
# SQL STATEMENTS & RESULTS
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Runtime - Raw SQL construction
# PURPOSE: Parameterized statements and query results shared by all clients
# CREATED: 19 OCT 2026
# ============================================================================
"""
SQL Statements

Statements are plain SQL text plus positional ``?`` arguments. Both the
local and the remote client accept either a Statement or a bare string.

Usage:
    from runtime.statement import sql

    await db.run(sql("INSERT INTO posts (id, title) VALUES (?, ?)", 1, "Hello"))
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union


@dataclass(frozen=True)
class Statement:
    """A SQL statement with positional arguments."""
    sql: str
    args: Tuple[Any, ...] = ()

    def __str__(self) -> str:
        return self.sql


StatementLike = Union[str, Statement]


def sql(text: str, *args: Any) -> Statement:
    """Build a raw SQL statement."""
    return Statement(sql=text, args=tuple(args))


def as_statement(value: StatementLike) -> Statement:
    """Coerce a string or Statement to a Statement."""
    if isinstance(value, Statement):
        return value
    if isinstance(value, str):
        return Statement(sql=value)
    raise TypeError(f"Expected SQL string or Statement, got {type(value).__name__}")


@dataclass
class QueryResult:
    """Result of one executed statement."""
    columns: List[str] = field(default_factory=list)
    rows: List[Tuple[Any, ...]] = field(default_factory=list)
    rows_affected: int = 0
    last_insert_rowid: Optional[int] = None

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [dict(zip(self.columns, row)) for row in self.rows]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "QueryResult":
        """Build from the remote database's JSON response body."""
        return cls(
            columns=list(payload.get("columns") or []),
            rows=[tuple(row) for row in payload.get("rows") or []],
            rows_affected=int(payload.get("rowsAffected") or 0),
            last_insert_rowid=payload.get("lastInsertRowid"),
        )


def to_payload(statement: Statement) -> Dict[str, Any]:
    """Serialize a statement for the remote database."""
    return {"sql": statement.sql, "args": list(statement.args)}


def batch_payload(statements: Sequence[Statement]) -> List[Dict[str, Any]]:
    return [to_payload(s) for s in statements]


__all__ = [
    "Statement",
    "StatementLike",
    "sql",
    "as_statement",
    "QueryResult",
    "to_payload",
    "batch_payload",
]
