"""Core VisualQuery → SQL compilation logic.

``QueryBuilder`` is the top-level orchestrator.  It wires together focused
clause-level and expression-level sub-builders, then assembles the clauses
in SQL order.  All engine-specific behaviour is delegated to the injected
:class:`~visql.compile.base.SQLDialect`.

Sub-builder hierarchy
---------------------
QueryBuilder
  ├── ValueBuilder          (expression_builder.py)
  ├── FilterBuilder         (expression_builder.py)
  ├── SelectClauseBuilder   (clause_builders.py)
  ├── FromClauseBuilder     (clause_builders.py)
  ├── JoinClauseBuilder     (clause_builders.py)
  ├── GroupByClauseBuilder  (clause_builders.py)
  └── OrderByClauseBuilder  (clause_builders.py)

A fresh :class:`~visql.compile.context.RuntimeContext` is created per
``build()`` call, so a builder instance is reusable and safe to share
between threads.
"""

from __future__ import annotations

import logging

from visql.compile.base import CompiledSQL, SQLDialect
from visql.compile.clause_builders import (
    FromClauseBuilder,
    GroupByClauseBuilder,
    JoinClauseBuilder,
    OrderByClauseBuilder,
    SelectClauseBuilder,
)
from visql.compile.context import CompilationContext, RuntimeContext
from visql.compile.expression_builder import FilterBuilder, ValueBuilder
from visql.errors import CompilationError
from visql.schema.visual_query import VisualQuery

logger = logging.getLogger(__name__)


class QueryBuilder:
    """Compiles a VisualQuery to SQL with unresolved ``:name`` placeholders.

    Args:
        dialect: Engine-specific SQL dialect.
    """

    def __init__(self, dialect: SQLDialect) -> None:
        self._ctx = CompilationContext(dialect=dialect)

    @property
    def dialect(self) -> SQLDialect:
        return self._ctx.dialect

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, query: VisualQuery) -> CompiledSQL:
        """Compile ``query`` to SQL.

        Args:
            query: The visual query definition.

        Returns:
            :class:`~visql.compile.base.CompiledSQL` with the ``sql`` string
            and the parameter names it references.

        Raises:
            CompilationError: If a clause is malformed or unsupported by the
                dialect.
        """
        runtime = RuntimeContext()
        sql = self._build_query(query, runtime)
        logger.debug("Compiled visual query for %s:\n%s", self.dialect.dialect_name, sql)
        return CompiledSQL(
            sql=sql,
            parameter_names=runtime.parameter_names,
            dialect=self.dialect.dialect_name,
        )

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _build_query(self, query: VisualQuery, runtime: RuntimeContext) -> str:
        ctx = self._ctx
        value_builder = ValueBuilder(ctx, runtime)
        filter_builder = FilterBuilder(ctx, value_builder)

        parts: list[str] = [
            SelectClauseBuilder(ctx).build(query.columns, query.distinct),
            FromClauseBuilder(ctx).build(query.source),
        ]

        join_builder = JoinClauseBuilder(ctx, filter_builder)
        for join in query.joins:
            parts.append(join_builder.build(join))

        if query.filters:
            parts.append(f"WHERE {filter_builder.build_list(query.filters, 'WHERE')}")

        if query.group_by:
            parts.append(GroupByClauseBuilder(ctx).build(query.group_by))

        if query.having:
            parts.append(f"HAVING {filter_builder.build_list(query.having, 'HAVING')}")

        if query.order_by:
            parts.append(OrderByClauseBuilder(ctx).build(query.order_by))

        tail = self._build_limit_offset(query)
        if tail:
            parts.append(tail)

        return "\n".join(parts)

    def _build_limit_offset(self, query: VisualQuery) -> str:
        if query.limit is not None and query.limit < 0:
            raise CompilationError(
                f"LIMIT must be non-negative, got {query.limit}.", clause="LIMIT"
            )
        if query.offset is not None and query.offset < 0:
            raise CompilationError(
                f"OFFSET must be non-negative, got {query.offset}.", clause="OFFSET"
            )
        return self.dialect.format_limit_offset(query.limit, query.offset)
