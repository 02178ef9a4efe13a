"""Query engine facade: VisualQuery or raw SQL in, rows out.

``QueryEngine`` strings the layers together for a single request::

    validate -> compile -> resolve parameters -> read-only guard -> execute

It is the collaborator an HTTP layer would call; it holds no per-request
state and is safe to share between threads.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from visql.compile.base import CompiledSQL, SQLDialect
from visql.compile.builder import QueryBuilder
from visql.compile.registry import DialectFactory
from visql.errors import CompilationError, ReadOnlyViolationError
from visql.execute.connection_manager import ConnectionManager
from visql.params.resolver import ParameterResolver
from visql.schema.datasource import DataSource, DataSourceType
from visql.schema.results import QueryResult
from visql.schema.visual_query import VisualQuery
from visql.settings import EngineSettings
from visql.validate.validator import QueryValidator

logger = logging.getLogger(__name__)

# Leading comments and parentheses are skipped before the first keyword.
_LEADING_NOISE = re.compile(r"^(?:\s+|--[^\n]*|/\*.*?\*/|\()*", re.DOTALL)
_READ_ONLY_KEYWORDS = ("SELECT", "WITH")


def ensure_read_only(sql: str) -> None:
    """Raise :class:`ReadOnlyViolationError` unless ``sql`` is a SELECT / WITH."""
    body = _LEADING_NOISE.sub("", sql, count=1)
    keyword = re.match(r"[A-Za-z]+", body)
    if keyword is None or keyword.group(0).upper() not in _READ_ONLY_KEYWORDS:
        raise ReadOnlyViolationError("Only SELECT and WITH statements can be executed.")


@dataclass(frozen=True)
class QueryPreview:
    """Compiled SQL for display, with any validation problems.

    Attributes:
        sql: Compiled SQL with unresolved ``:name`` placeholders, or ``None``
            when compilation failed.
        parameter_names: Placeholders the caller must supply.
        errors: Validation and compilation messages; empty when valid.
    """

    sql: str | None
    parameter_names: tuple[str, ...] = ()
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class QueryEngine:
    """Compiles and executes queries against registered datasources.

    Args:
        connection_manager: Pool registry used for execution.
        settings: Row limits and dialect options; read from the environment
            when omitted.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._connections = connection_manager or ConnectionManager(
            self._settings.pool_settings()
        )
        self._validator = QueryValidator()
        # Constructor options per engine type, passed to DialectFactory.create.
        self._dialect_options: dict[DataSourceType, dict[str, Any]] = {
            DataSourceType.CLICKHOUSE: {
                "supports_full_join": self._settings.clickhouse_full_join
            },
        }

    @property
    def connections(self) -> ConnectionManager:
        return self._connections

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def dialect_for(self, datasource: DataSource) -> SQLDialect:
        """Return the compilation dialect for ``datasource``."""
        options = self._dialect_options.get(datasource.type, {})
        return DialectFactory.create(datasource.type, **options)

    def compile(self, query: VisualQuery, datasource: DataSource) -> CompiledSQL:
        """Compile ``query`` for ``datasource``'s engine without validating it."""
        return QueryBuilder(self.dialect_for(datasource)).build(query)

    def preview(self, query: VisualQuery, datasource: DataSource) -> QueryPreview:
        """Compile for display; problems are returned, not raised."""
        errors = self._validator.validate(query)
        try:
            compiled = self.compile(query, datasource)
        except CompilationError as exc:
            return QueryPreview(sql=None, errors=[*errors, str(exc)])
        return QueryPreview(
            sql=compiled.sql,
            parameter_names=compiled.parameter_names,
            errors=errors,
        )

    def execute(
        self,
        query: VisualQuery | str,
        datasource: DataSource,
        parameters: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> QueryResult:
        """Run a visual query or raw SQL against ``datasource``.

        Args:
            query: A :class:`VisualQuery` or a SQL string with optional
                ``:name`` placeholders.
            datasource: Target datasource.
            parameters: Values for the placeholders.
            limit: Requested row limit; capped at ``settings.max_rows`` and
                defaulting to ``settings.default_limit``.

        Raises:
            QueryValidationError: If the visual query is structurally invalid.
            CompilationError: If the visual query cannot be compiled.
            MissingParameterError: If a placeholder has no value.
            ReadOnlyViolationError: If the statement is not a SELECT / WITH.
            ConnectionError: If no connection could be obtained.
            ExecutionError: If the engine rejects the statement.
        """
        dialect = self.dialect_for(datasource)
        if isinstance(query, VisualQuery):
            self._validator.check(query)
            sql = QueryBuilder(dialect).build(query).sql
        else:
            sql = query

        resolved = ParameterResolver(dialect).resolve(sql, parameters)
        ensure_read_only(resolved)

        row_limit = min(limit or self._settings.default_limit, self._settings.max_rows)
        logger.debug(
            "Executing on datasource %s with limit %d", datasource.id, row_limit
        )
        return self._connections.execute_query(datasource, resolved, row_limit)
