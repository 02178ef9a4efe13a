"""Value and filter SQL builders.

``ValueBuilder`` renders the three value variants (COLUMN, LITERAL, PARAM);
``FilterBuilder`` renders the filter tree and delegates every leaf operand
to the value builder.  Both receive a
:class:`~visql.compile.context.CompilationContext` (static config) and a
:class:`~visql.compile.context.RuntimeContext` (per-query parameter names).

Every failure is a :class:`~visql.errors.CompilationError` whose ``clause``
names the clause being rendered (``WHERE``, ``HAVING``, ``JOIN`` ...).
"""
from __future__ import annotations

import re
from collections.abc import Sequence

from visql.compile.base import PARAMETER_NAME_PATTERN
from visql.compile.context import CompilationContext, RuntimeContext
from visql.errors import CompilationError, UnsupportedValueError
from visql.schema.expressions import COMPARISON_SYMBOLS
from visql.schema.visual_query import (
    BetweenFilter,
    ColumnValue,
    ComparisonFilter,
    FilterExpression,
    InFilter,
    IsNotNullFilter,
    IsNullFilter,
    LikeFilter,
    LiteralValue,
    LogicalFilter,
    ParamValue,
    ValueExpression,
)

_PARAMETER_NAME = re.compile(PARAMETER_NAME_PATTERN)


# ---------------------------------------------------------------------------
# Value builder
# ---------------------------------------------------------------------------


class ValueBuilder:
    """Compiles :data:`~visql.schema.visual_query.ValueExpression` nodes to SQL.

    Args:
        ctx: Static compilation context.
        runtime: Shared parameter-name accumulator for this query.
    """

    def __init__(self, ctx: CompilationContext, runtime: RuntimeContext) -> None:
        self._ctx = ctx
        self._runtime = runtime

    def build(self, value: ValueExpression | None, clause: str) -> str:
        """Compile a value operand to a SQL fragment."""
        if value is None:
            raise CompilationError("Filter operand is missing.", clause=clause)
        if isinstance(value, ColumnValue):
            if not value.column:
                raise CompilationError(
                    "COLUMN value requires a column name.", clause=clause
                )
            return self._ctx.dialect.format_column_ref(value.table, value.column)
        if isinstance(value, LiteralValue):
            try:
                return self._ctx.dialect.format_literal(value.value)
            except UnsupportedValueError as exc:
                raise CompilationError(str(exc), clause=clause) from exc
        if isinstance(value, ParamValue):
            return self._build_param(value, clause)
        raise CompilationError(
            f"Unknown value type: {type(value).__name__}", clause=clause
        )

    def _build_param(self, value: ParamValue, clause: str) -> str:
        name = value.name
        if not name or not _PARAMETER_NAME.fullmatch(name):
            raise CompilationError(
                f"Invalid parameter name: {name!r}. Names must match "
                f"{PARAMETER_NAME_PATTERN}.",
                clause=clause,
            )
        self._runtime.add_parameter(name)
        return f":{name}"


# ---------------------------------------------------------------------------
# Filter builder
# ---------------------------------------------------------------------------


class FilterBuilder:
    """Compiles filter trees (WHERE / HAVING / JOIN ON) to SQL.

    Args:
        ctx: Static compilation context.
        value_builder: Builder used for every leaf operand.
    """

    def __init__(self, ctx: CompilationContext, value_builder: ValueBuilder) -> None:
        self._ctx = ctx
        self._value = value_builder

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_list(self, filters: Sequence[FilterExpression], clause: str) -> str:
        """Compile top-level filters combined with an implicit AND.

        A single filter renders bare; several are each parenthesised.
        """
        if len(filters) == 1:
            return self.build(filters[0], clause)
        return " AND ".join(f"({self.build(f, clause)})" for f in filters)

    def build(self, node: FilterExpression | None, clause: str) -> str:
        """Compile one filter node, applying ``NOT (...)`` when negated."""
        if node is None:
            raise CompilationError("Filter expression is missing.", clause=clause)
        sql = self._dispatch(node, clause)
        return f"NOT ({sql})" if node.negate else sql

    # ------------------------------------------------------------------
    # Variant compilers
    # ------------------------------------------------------------------

    def _dispatch(self, node: FilterExpression, clause: str) -> str:
        if isinstance(node, ComparisonFilter):
            return self._build_comparison(node, clause)
        if isinstance(node, LogicalFilter):
            return self._build_logical(node, clause)
        if isinstance(node, InFilter):
            return self._build_in(node, clause)
        if isinstance(node, BetweenFilter):
            col = self._value.build(node.column, clause)
            low = self._value.build(node.low, clause)
            high = self._value.build(node.high, clause)
            return f"{col} BETWEEN {low} AND {high}"
        if isinstance(node, IsNullFilter):
            return f"{self._value.build(node.column, clause)} IS NULL"
        if isinstance(node, IsNotNullFilter):
            return f"{self._value.build(node.column, clause)} IS NOT NULL"
        if isinstance(node, LikeFilter):
            return self._build_like(node, clause)
        raise CompilationError(
            f"Unknown filter type: {type(node).__name__}", clause=clause
        )

    def _build_comparison(self, node: ComparisonFilter, clause: str) -> str:
        if node.operator is None:
            raise CompilationError(
                "COMPARISON filter requires an operator.", clause=clause
            )
        left = self._value.build(node.left, clause)
        right = self._value.build(node.right, clause)
        return f"{left} {COMPARISON_SYMBOLS[node.operator]} {right}"

    def _build_logical(self, node: LogicalFilter, clause: str) -> str:
        if node.logical_op is None:
            raise CompilationError(
                "LOGICAL filter requires a logical operator.", clause=clause
            )
        if not node.children:
            raise CompilationError(
                "LOGICAL filter requires at least one child.", clause=clause
            )
        joiner = f" {node.logical_op.value} "
        inner = joiner.join(f"({self.build(child, clause)})" for child in node.children)
        return f"({inner})"

    def _build_in(self, node: InFilter, clause: str) -> str:
        col = self._value.build(node.column, clause)
        if not node.values:
            raise CompilationError("IN filter requires at least one value.", clause=clause)
        values = ", ".join(self._value.build(v, clause) for v in node.values)
        return f"{col} IN ({values})"

    def _build_like(self, node: LikeFilter, clause: str) -> str:
        col = self._value.build(node.column, clause)
        if node.pattern is None:
            raise CompilationError("LIKE filter requires a pattern.", clause=clause)
        return f"{col} LIKE {self._ctx.dialect.format_string_literal(node.pattern)}"
