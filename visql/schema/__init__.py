"""visql schema models: VisualQuery, DataSource, result types."""
from visql.schema.datasource import DataSource, DataSourceType
from visql.schema.expressions import (
    ComparisonOp,
    FilterType,
    JoinType,
    LogicalOp,
    SortDirection,
    ValueType,
)
from visql.schema.results import (
    ColumnInfo,
    ColumnMeta,
    ConnectionTestResult,
    QueryResult,
    TableInfo,
)
from visql.schema.values import SqlValue
from visql.schema.visual_query import (
    BetweenFilter,
    ColumnRef,
    ColumnValue,
    ComparisonFilter,
    FilterExpression,
    InFilter,
    IsNotNullFilter,
    IsNullFilter,
    JoinClause,
    LikeFilter,
    LiteralValue,
    LogicalFilter,
    OrderByClause,
    ParamValue,
    SelectColumn,
    TableRef,
    ValueExpression,
    VisualQuery,
)

__all__ = [
    "DataSource",
    "DataSourceType",
    "ComparisonOp",
    "FilterType",
    "JoinType",
    "LogicalOp",
    "SortDirection",
    "ValueType",
    "ColumnInfo",
    "ColumnMeta",
    "ConnectionTestResult",
    "QueryResult",
    "TableInfo",
    "SqlValue",
    "BetweenFilter",
    "ColumnRef",
    "ColumnValue",
    "ComparisonFilter",
    "FilterExpression",
    "InFilter",
    "IsNotNullFilter",
    "IsNullFilter",
    "JoinClause",
    "LikeFilter",
    "LiteralValue",
    "LogicalFilter",
    "OrderByClause",
    "ParamValue",
    "SelectColumn",
    "TableRef",
    "ValueExpression",
    "VisualQuery",
]
