"""Enumerations for VisualQuery filter and value expressions.

The tag enums (``FilterType``, ``ValueType``) are the discriminators of the
filter / value unions in :mod:`visql.schema.visual_query`.  The operator
enums map one-to-one onto SQL keywords through the lookup tables below.
"""

from __future__ import annotations

from enum import Enum

# ---------------------------------------------------------------------------
# Discriminator tags
# ---------------------------------------------------------------------------


class FilterType(str, Enum):
    """The ``type`` tag of each filter expression variant."""

    COMPARISON = "COMPARISON"
    LOGICAL = "LOGICAL"
    IN = "IN"
    BETWEEN = "BETWEEN"
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"
    LIKE = "LIKE"


class ValueType(str, Enum):
    """The ``type`` tag of each value expression variant."""

    COLUMN = "COLUMN"
    LITERAL = "LITERAL"
    PARAM = "PARAM"


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class ComparisonOp(str, Enum):
    """Binary comparison operators."""

    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"


class LogicalOp(str, Enum):
    """Logical connectives for LOGICAL filters."""

    AND = "AND"
    OR = "OR"


class JoinType(str, Enum):
    """Supported SQL join types."""

    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"
    CROSS = "CROSS"


class SortDirection(str, Enum):
    """ORDER BY direction."""

    ASC = "ASC"
    DESC = "DESC"


# ---------------------------------------------------------------------------
# SQL keyword tables
# ---------------------------------------------------------------------------

#: SQL symbol for each comparison operator.
COMPARISON_SYMBOLS: dict[ComparisonOp, str] = {
    ComparisonOp.EQ: "=",
    ComparisonOp.NEQ: "<>",
    ComparisonOp.GT: ">",
    ComparisonOp.GTE: ">=",
    ComparisonOp.LT: "<",
    ComparisonOp.LTE: "<=",
}

#: SQL keyword for each join type.
JOIN_KEYWORDS: dict[JoinType, str] = {
    JoinType.INNER: "INNER JOIN",
    JoinType.LEFT: "LEFT JOIN",
    JoinType.RIGHT: "RIGHT JOIN",
    JoinType.FULL: "FULL OUTER JOIN",
    JoinType.CROSS: "CROSS JOIN",
}
