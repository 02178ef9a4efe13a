"""visql – compile visual query definitions to SQL and run them.

Public API
----------
``parse_visual_query``
    Parse a JSON document (or dict) into a :class:`VisualQuery`.

``compile_query``
    Compile a VisualQuery to dialect-specific SQL with ``:name``
    placeholders.

``resolve_parameters``
    Substitute ``:name`` placeholders with dialect-formatted literals.

``QueryEngine``
    Validate, compile, resolve and execute against pooled connections.

Extensibility
-------------
New engines are supported by registering a dialect::

    from visql.compile.registry import DialectFactory

    @DialectFactory.register(DataSourceType.POSTGRESQL)
    class MyPostgresDialect(PostgresDialect):
        ...
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from visql.compile.base import CompiledSQL, SQLDialect
from visql.compile.builder import QueryBuilder
from visql.compile.clickhouse import ClickHouseDialect
from visql.compile.postgres import PostgresDialect
from visql.compile.registry import DialectFactory
from visql.engine import QueryEngine, QueryPreview, ensure_read_only
from visql.errors import (
    CompilationError,
    ConnectionError,
    ExecutionError,
    MissingParameterError,
    ParseError,
    QueryValidationError,
    ReadOnlyViolationError,
    UnsupportedValueError,
    VisqlError,
)
from visql.execute.connection_manager import ConnectionManager
from visql.params.resolver import ParameterResolver
from visql.schema.datasource import DataSource, DataSourceType
from visql.schema.results import (
    ColumnInfo,
    ColumnMeta,
    ConnectionTestResult,
    QueryResult,
    TableInfo,
)
from visql.schema.visual_query import VisualQuery
from visql.settings import EngineSettings, PoolSettings
from visql.validate.validator import QueryValidator

# ---------------------------------------------------------------------------
# Register built-in dialects with DialectFactory
# ---------------------------------------------------------------------------

DialectFactory.register_class(DataSourceType.POSTGRESQL, PostgresDialect)
DialectFactory.register_class(DataSourceType.CLICKHOUSE, ClickHouseDialect)

__all__ = [
    # Core pipeline
    "parse_visual_query",
    "compile_query",
    "resolve_parameters",
    "QueryEngine",
    "QueryPreview",
    "ensure_read_only",
    # Models
    "VisualQuery",
    "DataSource",
    "DataSourceType",
    "QueryResult",
    "ColumnMeta",
    "ConnectionTestResult",
    "TableInfo",
    "ColumnInfo",
    # Compilation
    "CompiledSQL",
    "SQLDialect",
    "DialectFactory",
    "PostgresDialect",
    "ClickHouseDialect",
    "QueryBuilder",
    "ParameterResolver",
    "QueryValidator",
    # Execution
    "ConnectionManager",
    "EngineSettings",
    "PoolSettings",
    # Errors
    "VisqlError",
    "ParseError",
    "CompilationError",
    "QueryValidationError",
    "MissingParameterError",
    "UnsupportedValueError",
    "ConnectionError",
    "ExecutionError",
    "ReadOnlyViolationError",
]


def parse_visual_query(document: str | bytes | Mapping[str, Any]) -> VisualQuery:
    """Parse a camelCase JSON document (or an already-decoded dict).

    Raises:
        ParseError: If the input is not valid JSON or not a valid VisualQuery.
    """
    if isinstance(document, (str, bytes)):
        try:
            raw = json.loads(document)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid JSON: {exc}", raw=document) from exc
    else:
        raw = document

    try:
        return VisualQuery.model_validate(raw)
    except ValidationError as exc:
        raise ParseError(f"VisualQuery structure is invalid: {exc}", raw=document) from exc


def compile_query(
    query: VisualQuery, dialect: SQLDialect | DataSourceType | str
) -> CompiledSQL:
    """Compile ``query`` for ``dialect``.

    Args:
        query: The visual query definition.
        dialect: A dialect instance, or a datasource type naming one.

    Returns:
        ``CompiledSQL`` with ``sql``, ``parameter_names`` and ``dialect``.

    Raises:
        CompilationError: If the query cannot be rendered for the dialect.
    """
    if not isinstance(dialect, SQLDialect):
        dialect = DialectFactory.create(dialect)
    return QueryBuilder(dialect).build(query)


def resolve_parameters(
    sql: str,
    parameters: Mapping[str, Any] | None,
    dialect: SQLDialect | DataSourceType | str,
) -> str:
    """Substitute ``:name`` placeholders in ``sql`` for ``dialect``.

    Raises:
        MissingParameterError: Listing every placeholder without a value.
    """
    if not isinstance(dialect, SQLDialect):
        dialect = DialectFactory.create(dialect)
    return ParameterResolver(dialect).resolve(sql, parameters)
