"""Custom exception hierarchy for visql.

All public errors inherit from VisqlError so callers can catch the base
class for any visql-specific failure.

Caller-input errors (``CompilationError``, ``MissingParameterError``) are
raised synchronously and must not be retried.  ``ConnectionError`` covers
pool exhaustion and driver connect failures; ``ExecutionError`` carries the
engine's own message so the diagnostic detail survives.
"""
from __future__ import annotations

from typing import Any


class VisqlError(Exception):
    """Base exception for all visql errors."""


class ParseError(VisqlError):
    """Raised when a document cannot be parsed as a VisualQuery.

    Args:
        message: Human-readable description.
        raw: The raw document that failed to parse.
    """

    def __init__(self, message: str, raw: Any = None) -> None:
        super().__init__(message)
        self.raw = raw


class CompilationError(VisqlError):
    """Raised when a VisualQuery cannot be compiled to SQL.

    Args:
        message: Human-readable description.
        clause: The query clause being compiled when the error occurred.
    """

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause


class QueryValidationError(CompilationError):
    """Raised when a VisualQuery fails pre-compilation validation.

    Args:
        errors: Every validation message collected for the query.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            f"Visual query validation failed: {'; '.join(errors)}",
            clause="query",
        )
        self.errors = list(errors)


class MissingParameterError(VisqlError):
    """Raised when a placeholder has no value in the supplied parameters.

    Args:
        missing: Names of all placeholders without a supplied value.
    """

    def __init__(self, missing: list[str]) -> None:
        names = ", ".join(f"'{name}'" for name in missing)
        super().__init__(f"Missing required parameter(s): {names}")
        self.missing = list(missing)


class UnsupportedValueError(VisqlError):
    """Raised when a value cannot be rendered as a SQL literal."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Cannot render value of type {type(value).__name__} as a SQL literal: {value!r}"
        )
        self.value = value


class ConnectionError(VisqlError):  # noqa: A001 - mirrors the engine taxonomy
    """Raised when a connection cannot be obtained for a datasource.

    Covers driver connect/authentication failures and pool checkout
    timeouts.  Never retried by visql.

    Args:
        message: Human-readable description.
        datasource_id: Identifier of the datasource involved.
    """

    def __init__(self, message: str, datasource_id: str | int | None = None) -> None:
        super().__init__(message)
        self.datasource_id = datasource_id


class ExecutionError(VisqlError):
    """Raised when the target engine rejects a statement.

    Args:
        message: The engine's error message, passed through verbatim.
        datasource_id: Identifier of the datasource involved.
        sql: The statement that was rejected.
    """

    def __init__(
        self,
        message: str,
        datasource_id: str | int | None = None,
        sql: str | None = None,
    ) -> None:
        super().__init__(message)
        self.datasource_id = datasource_id
        self.sql = sql


class ReadOnlyViolationError(VisqlError):
    """Raised when a statement other than SELECT / WITH is submitted."""
