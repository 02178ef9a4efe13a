"""Pydantic models for the VisualQuery.

A VisualQuery is the engine-agnostic, JSON-serializable description of a
query produced by the external drag-and-drop builder.  It is built once per
request, never mutated (every model is frozen), and consumed by
:class:`~visql.compile.builder.QueryBuilder`.

Example document::

    {
      "source": {"table": "sales", "schema": "public", "alias": "s"},
      "joins": [{
        "table": "products", "alias": "p", "type": "LEFT",
        "on": {"type": "COMPARISON",
               "left": {"type": "COLUMN", "table": "s", "column": "product_id"},
               "operator": "EQ",
               "right": {"type": "COLUMN", "table": "p", "column": "id"}}
      }],
      "columns": [
        {"table": "s", "column": "region"},
        {"expression": "SUM(s.total_amount)", "alias": "revenue", "aggregate": true}
      ],
      "filters": [{"type": "COMPARISON",
                   "left": {"type": "COLUMN", "table": "s", "column": "sale_date"},
                   "operator": "GTE",
                   "right": {"type": "PARAM", "name": "dateFrom"}}],
      "groupBy": [{"table": "s", "column": "region"}],
      "orderBy": [{"column": "revenue", "direction": "DESC"}],
      "limit": 1000
    }

Shape checks are deliberately shallow: payload fields of each filter
variant are optional here, and a missing required field is reported by the
compiler as a :class:`~visql.errors.CompilationError`.
"""
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from visql.schema.expressions import ComparisonOp, JoinType, LogicalOp, SortDirection
from visql.schema.values import SqlValue

_FROZEN = ConfigDict(
    extra="forbid",
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
)


# ---------------------------------------------------------------------------
# Value expressions
# ---------------------------------------------------------------------------


class ColumnValue(BaseModel):
    """A column reference: ``{"type": "COLUMN", "table": "s", "column": "id"}``."""

    model_config = _FROZEN

    type: Literal["COLUMN"] = "COLUMN"
    table: str | None = None
    column: str | None = None


class LiteralValue(BaseModel):
    """A constant: ``{"type": "LITERAL", "value": 42}``.

    An absent ``value`` is the SQL ``NULL`` literal.
    """

    model_config = _FROZEN

    type: Literal["LITERAL"] = "LITERAL"
    value: SqlValue = None


class ParamValue(BaseModel):
    """A named parameter resolved at execution time: ``{"type": "PARAM", "name": "x"}``."""

    model_config = _FROZEN

    type: Literal["PARAM"] = "PARAM"
    name: str | None = None


ValueExpression = Annotated[
    Union[ColumnValue, LiteralValue, ParamValue],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Filter expressions
# ---------------------------------------------------------------------------


class ComparisonFilter(BaseModel):
    """``<left> <operator> <right>``."""

    model_config = _FROZEN

    type: Literal["COMPARISON"] = "COMPARISON"
    left: ValueExpression | None = None
    operator: ComparisonOp | None = None
    right: ValueExpression | None = None
    negate: bool = False


class LogicalFilter(BaseModel):
    """``(<child> AND|OR <child> ...)`` over a non-empty list of children."""

    model_config = _FROZEN

    type: Literal["LOGICAL"] = "LOGICAL"
    logical_op: LogicalOp | None = None
    children: tuple[FilterExpression, ...] | None = None
    negate: bool = False


class InFilter(BaseModel):
    """``<column> IN (<value>, ...)``."""

    model_config = _FROZEN

    type: Literal["IN"] = "IN"
    column: ValueExpression | None = None
    values: tuple[ValueExpression, ...] | None = None
    negate: bool = False


class BetweenFilter(BaseModel):
    """``<column> BETWEEN <low> AND <high>``."""

    model_config = _FROZEN

    type: Literal["BETWEEN"] = "BETWEEN"
    column: ValueExpression | None = None
    low: ValueExpression | None = None
    high: ValueExpression | None = None
    negate: bool = False


class IsNullFilter(BaseModel):
    """``<column> IS NULL``."""

    model_config = _FROZEN

    type: Literal["IS_NULL"] = "IS_NULL"
    column: ValueExpression | None = None
    negate: bool = False


class IsNotNullFilter(BaseModel):
    """``<column> IS NOT NULL``."""

    model_config = _FROZEN

    type: Literal["IS_NOT_NULL"] = "IS_NOT_NULL"
    column: ValueExpression | None = None
    negate: bool = False


class LikeFilter(BaseModel):
    """``<column> LIKE '<pattern>'``; the pattern is always a string literal."""

    model_config = _FROZEN

    type: Literal["LIKE"] = "LIKE"
    column: ValueExpression | None = None
    pattern: str | None = None
    negate: bool = False


FilterExpression = Annotated[
    Union[
        ComparisonFilter,
        LogicalFilter,
        InFilter,
        BetweenFilter,
        IsNullFilter,
        IsNotNullFilter,
        LikeFilter,
    ],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------


class TableRef(BaseModel):
    """A table reference with optional schema and alias.

    Attributes:
        table: Table name.
        schema_name: Optional schema (``"schema"`` in JSON documents).
        alias: Optional alias used by column references.
    """

    model_config = _FROZEN

    table: str
    schema_name: str | None = Field(None, alias="schema")
    alias: str | None = None


class SelectColumn(BaseModel):
    """A single SELECT item: a ``(table?, column)`` pair or a raw expression.

    Raw expressions are trusted input from the builder and are emitted
    verbatim.  Exactly one of ``column`` / ``expression`` must be set.

    Attributes:
        table: Optional table or alias qualifying ``column``.
        column: Column name.
        expression: Raw SQL expression such as ``SUM(s.amount)``.
        alias: Optional output name.
        aggregate: Marks the item as an aggregate for validation.
    """

    model_config = _FROZEN

    table: str | None = None
    column: str | None = None
    expression: str | None = None
    alias: str | None = None
    aggregate: bool = False


class ColumnRef(BaseModel):
    """A ``(table?, column)`` pair used by GROUP BY."""

    model_config = _FROZEN

    table: str | None = None
    column: str


class JoinClause(BaseModel):
    """A single JOIN entry.

    Attributes:
        table: Joined table name.
        schema_name: Optional schema of the joined table.
        alias: Optional alias for the joined table.
        type: SQL join type.
        on: Join condition; required for every type except CROSS.
    """

    model_config = _FROZEN

    table: str
    schema_name: str | None = Field(None, alias="schema")
    alias: str | None = None
    type: JoinType = JoinType.INNER
    on: FilterExpression | None = None


class OrderByClause(BaseModel):
    """A single ORDER BY item."""

    model_config = _FROZEN

    table: str | None = None
    column: str
    direction: SortDirection = SortDirection.ASC


class VisualQuery(BaseModel):
    """Root of a visual query definition.

    Attributes:
        source: The FROM table.
        joins: Joins, rendered in declaration order.
        columns: SELECT items, rendered in declaration order.
        filters: WHERE filters combined with an implicit AND.
        group_by: GROUP BY column references.
        having: HAVING filters combined with an implicit AND.
        order_by: ORDER BY items.
        limit: Optional row limit.
        offset: Optional number of rows to skip.
        distinct: Emit ``SELECT DISTINCT``.
    """

    model_config = _FROZEN

    source: TableRef
    joins: tuple[JoinClause, ...] = ()
    columns: tuple[SelectColumn, ...] = ()
    filters: tuple[FilterExpression, ...] = ()
    group_by: tuple[ColumnRef, ...] = ()
    having: tuple[FilterExpression, ...] = ()
    order_by: tuple[OrderByClause, ...] = ()
    limit: int | None = None
    offset: int | None = None
    distinct: bool = False


# Resolve forward references in the recursive filter types.
LogicalFilter.model_rebuild()
JoinClause.model_rebuild()
VisualQuery.model_rebuild()
