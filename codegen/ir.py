# ============================================================================
# GENERATED MODULE IR
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Codegen - Typed intermediate representation
# PURPOSE: Expression and statement nodes for the generated quarry.db module
# CREATED: 19 OCT 2026
# ============================================================================
"""
Generated Module IR

The code generator never concatenates source text. It builds a ModuleIR
out of typed nodes, and each node renders itself to a Python source
fragment. String values are always emitted with ``repr`` so user data
(table names, tokens, URLs) cannot break out of its literal.

    ModuleIR
    ├── imports:  [ImportStatement, ...]
    ├── client:   Binding("db", Call(...))
    └── bindings: [Binding("posts", Call("as_table", ...)), ...]
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple


# ============================================================================
# EXPRESSIONS
# ============================================================================

class Expr:
    """A Python expression."""

    def render(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class StringLiteral(Expr):
    value: str

    def render(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class PyValue(Expr):
    """Any value whose repr is a valid Python literal (dicts, lists, bools, None)."""
    value: Any

    def render(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class Name(Expr):
    identifier: str

    def render(self) -> str:
        return self.identifier


@dataclass(frozen=True)
class EnvVar(Expr):
    """``os.environ.get("NAME")``, with an optional fallback expression."""
    name: str
    fallback: Optional[Expr] = None

    def render(self) -> str:
        if self.fallback is None:
            return f"os.environ.get({json.dumps(self.name)})"
        return f"os.environ.get({json.dumps(self.name)}, {self.fallback.render()})"


@dataclass(frozen=True)
class Call(Expr):
    func: str
    args: Tuple[Expr, ...] = ()
    kwargs: Tuple[Tuple[str, Expr], ...] = ()

    def render(self) -> str:
        parts = [a.render() for a in self.args]
        parts.extend(f"{key}={value.render()}" for key, value in self.kwargs)
        return f"{self.func}({', '.join(parts)})"


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class ImportStatement:
    """``import module``, ``from module import a, b`` or ``from module import *``."""
    module: str
    names: Tuple[str, ...] = ()
    star: bool = False

    def render(self) -> str:
        if self.star:
            return f"from {self.module} import *"
        if self.names:
            return f"from {self.module} import {', '.join(self.names)}"
        return f"import {self.module}"


@dataclass(frozen=True)
class Binding:
    """A module-level assignment."""
    name: str
    value: Expr

    def render(self) -> str:
        return f"{self.name} = {self.value.render()}"


@dataclass(frozen=True)
class ModuleIR:
    """One generated module: imports, the client construction, table bindings."""
    imports: Tuple[ImportStatement, ...]
    client: Binding
    bindings: Tuple[Binding, ...] = field(default_factory=tuple)

    @property
    def exported_names(self) -> Tuple[str, ...]:
        return (self.client.name, *(b.name for b in self.bindings))


__all__ = [
    "Expr",
    "StringLiteral",
    "PyValue",
    "Name",
    "EnvVar",
    "Call",
    "ImportStatement",
    "Binding",
    "ModuleIR",
]
