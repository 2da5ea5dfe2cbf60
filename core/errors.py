# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Foundation - Tagged error variants
# PURPOSE: Structured errors raised up to the host boundary
# CREATED: 19 OCT 2026
# ============================================================================
"""
Error Taxonomy

Every error raised by quarry derives from QuarryError and carries its
structured fields (kind, hint, location) from construction. Causes are
attached with ``raise ... from err``.

Hierarchy:
    QuarryError
    ├── SchemaError             recreate batch failed
    ├── SeedError               integration seed missing/unreadable/failed
    ├── ConfigLoadError         user configuration failed to load
    ├── UserConfigError         raised by user-authored configuration code
    ├── MissingAppTokenError    remote backend without a token
    ├── RemoteDatabaseError     remote database HTTP failure
    └── InternalInvariantError  programming error, never swallowed
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union


INTERNAL_ERROR_SUFFIX = "This is an internal error. Please file an issue."


class ErrorKind(str, Enum):
    """Error categories for presentation at the host boundary."""
    SCHEMA = "schema"
    SEED = "seed"
    CONFIG = "config"
    USER_CONFIG = "user_config"
    AUTH = "auth"
    REMOTE = "remote"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorLocation:
    """Source position attached to an error."""
    file: str
    line: Optional[int] = None
    column: Optional[int] = None

    def __str__(self) -> str:
        parts = [self.file]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


def location_from_exception(
    exc: BaseException,
    file: Union[str, Path, None] = None,
) -> Optional[ErrorLocation]:
    """
    Derive an ErrorLocation from an exception.

    SyntaxErrors carry their own position. For other exceptions the
    innermost traceback frame inside ``file`` is used; when ``file`` is
    not given, the innermost frame overall.
    """
    if isinstance(exc, SyntaxError) and exc.filename:
        return ErrorLocation(file=exc.filename, line=exc.lineno, column=exc.offset)

    frames = traceback.extract_tb(exc.__traceback__)
    if file is not None:
        target = str(file)
        frames = [f for f in frames if f.filename == target]
    if not frames:
        return ErrorLocation(file=str(file)) if file is not None else None

    frame = frames[-1]
    column = getattr(frame, "colno", None)
    return ErrorLocation(
        file=frame.filename,
        line=frame.lineno,
        column=column + 1 if column is not None else None,
    )


# ============================================================================
# BASE
# ============================================================================

class QuarryError(Exception):
    """Base exception for all quarry errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        hint: Optional[str] = None,
        location: Optional[ErrorLocation] = None,
    ):
        self.message = message
        self.hint = hint
        self.location = location
        super().__init__(message)

    def __str__(self) -> str:
        if self.location is not None:
            return f"{self.message} ({self.location})"
        return self.message


# ============================================================================
# VARIANTS
# ============================================================================

class SchemaError(QuarryError):
    """Raised when any statement of the schema recreate batch fails."""
    kind = ErrorKind.SCHEMA

    def __init__(self, message: str, *, tables: Optional[list] = None):
        self.tables = list(tables or [])
        super().__init__(
            message,
            hint="No table was changed. Check the column and index definitions in db/config.yaml.",
        )


class SeedError(QuarryError):
    """Raised when a seed source cannot be executed."""
    kind = ErrorKind.SEED

    MISSING = "missing"
    UNREADABLE = "unreadable"
    FAILED = "failed"

    def __init__(
        self,
        message: str,
        *,
        seed_file: Union[str, Path],
        reason: str,
        location: Optional[ErrorLocation] = None,
        hint: Optional[str] = None,
    ):
        self.seed_file = str(seed_file)
        self.reason = reason
        super().__init__(message, hint=hint, location=location)


class ConfigLoadError(QuarryError):
    """Raised when user configuration fails to load inside the evaluator."""
    kind = ErrorKind.CONFIG

    def __init__(
        self,
        message: str,
        *,
        hint: Optional[str] = None,
        user_authored: bool = False,
        location: Optional[ErrorLocation] = None,
    ):
        self.user_authored = user_authored
        super().__init__(message, hint=hint, location=location)


class UserConfigError(QuarryError):
    """
    Error raised deliberately by user-authored configuration code.

    Its hint is shown to the end user unchanged.
    """
    kind = ErrorKind.USER_CONFIG


class MissingAppTokenError(QuarryError):
    """Raised when the remote backend is selected without an app token."""
    kind = ErrorKind.AUTH

    def __init__(self, env_var: str):
        self.env_var = env_var
        super().__init__(
            "Remote database selected but no app token is available.",
            hint=f"Set the {env_var} environment variable.",
        )


class RemoteDatabaseError(QuarryError):
    """Raised when the remote database rejects or fails a request."""
    kind = ErrorKind.REMOTE

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class InternalInvariantError(QuarryError):
    """Raised when a value a collaborator must have provided is absent."""
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(f"{message} {INTERNAL_ERROR_SUFFIX}")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "INTERNAL_ERROR_SUFFIX",
    "ErrorKind",
    "ErrorLocation",
    "location_from_exception",
    "QuarryError",
    "SchemaError",
    "SeedError",
    "ConfigLoadError",
    "UserConfigError",
    "MissingAppTokenError",
    "RemoteDatabaseError",
    "InternalInvariantError",
]
