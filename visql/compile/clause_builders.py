"""Clause-level SQL builders.

Each class handles exactly one SQL clause.  Filter conditions inside JOIN
``ON`` are delegated to the shared
:class:`~visql.compile.expression_builder.FilterBuilder`, so parameters used
in join conditions are collected alongside those of WHERE and HAVING.

Classes
-------
SelectClauseBuilder  : ``SELECT [DISTINCT] <items>``
FromClauseBuilder    : ``FROM [schema.]table [AS alias]``
JoinClauseBuilder    : ``<kind> JOIN <table> [ON <condition>]``
GroupByClauseBuilder : ``GROUP BY <columns>``
OrderByClauseBuilder : ``ORDER BY <column> ASC|DESC, ...``
"""
from __future__ import annotations

from collections.abc import Sequence

from visql.compile.context import CompilationContext
from visql.compile.expression_builder import FilterBuilder
from visql.errors import CompilationError
from visql.schema.expressions import JOIN_KEYWORDS, JoinType
from visql.schema.visual_query import (
    ColumnRef,
    JoinClause,
    OrderByClause,
    SelectColumn,
    TableRef,
)


class SelectClauseBuilder:
    """Builds the ``SELECT [DISTINCT] …`` clause."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, columns: Sequence[SelectColumn], distinct: bool = False) -> str:
        if not columns:
            raise CompilationError("At least one column must be selected.", clause="SELECT")
        prefix = "SELECT DISTINCT" if distinct else "SELECT"
        items = [self._build_item(col) for col in columns]
        return f"{prefix} {', '.join(items)}"

    def _build_item(self, col: SelectColumn) -> str:
        dialect = self._ctx.dialect
        if col.expression is not None and col.column is not None:
            raise CompilationError(
                "Select column sets both 'column' and 'expression'.", clause="SELECT"
            )
        if col.expression is not None:
            # Raw expressions come from the trusted builder and are emitted verbatim.
            if not col.expression.strip():
                raise CompilationError("Select expression is empty.", clause="SELECT")
            if col.alias:
                return f"{col.expression} AS {dialect.quote_identifier(col.alias)}"
            return col.expression
        if col.column is None:
            raise CompilationError(
                "Select column sets neither 'column' nor 'expression'.", clause="SELECT"
            )
        ref = dialect.format_column_ref(col.table, col.column)
        if col.alias and col.alias != col.column:
            return f"{ref} AS {dialect.quote_identifier(col.alias)}"
        return ref


class FromClauseBuilder:
    """Builds the ``FROM`` fragment for the source table."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, source: TableRef) -> str:
        if not source.table:
            raise CompilationError("Source table is required.", clause="FROM")
        ref = self._ctx.dialect.format_table_ref(
            source.schema_name, source.table, source.alias
        )
        return f"FROM {ref}"


class JoinClauseBuilder:
    """Builds a single ``JOIN … ON …`` fragment.

    CROSS joins never carry a condition; every other kind requires one.
    ``FULL`` joins are refused on dialects that lack them.
    """

    def __init__(self, ctx: CompilationContext, filter_builder: FilterBuilder) -> None:
        self._ctx = ctx
        self._filter = filter_builder

    def build(self, join: JoinClause) -> str:
        dialect = self._ctx.dialect
        if not join.table:
            raise CompilationError("JOIN table name is required.", clause="JOIN")
        keyword = JOIN_KEYWORDS.get(join.type)
        if keyword is None:
            raise CompilationError(f"Unsupported join type: {join.type}", clause="JOIN")
        if join.type is JoinType.FULL and not dialect.supports_full_join:
            raise CompilationError(
                f"FULL JOIN not supported by {dialect.dialect_name}.", clause="JOIN"
            )
        table_ref = dialect.format_table_ref(join.schema_name, join.table, join.alias)
        if join.type is JoinType.CROSS:
            return f"{keyword} {table_ref}"
        if join.on is None:
            raise CompilationError(
                f"{keyword} on '{join.table}' requires an ON condition.", clause="JOIN"
            )
        return f"{keyword} {table_ref} ON {self._filter.build(join.on, 'JOIN')}"


class GroupByClauseBuilder:
    """Builds the ``GROUP BY`` clause."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, refs: Sequence[ColumnRef]) -> str:
        fmt = self._ctx.dialect.format_column_ref
        return "GROUP BY " + ", ".join(fmt(ref.table, ref.column) for ref in refs)


class OrderByClauseBuilder:
    """Builds the ``ORDER BY`` clause."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, items: Sequence[OrderByClause]) -> str:
        fmt = self._ctx.dialect.format_column_ref
        parts = [f"{fmt(o.table, o.column)} {o.direction.value}" for o in items]
        return "ORDER BY " + ", ".join(parts)
