"""visql compilation layer: VisualQuery → dialect-specific SQL."""
from visql.compile.base import CompiledSQL, SQLDialect
from visql.compile.builder import QueryBuilder
from visql.compile.clickhouse import ClickHouseDialect
from visql.compile.postgres import PostgresDialect
from visql.compile.registry import DialectFactory

__all__ = [
    "CompiledSQL",
    "SQLDialect",
    "QueryBuilder",
    "ClickHouseDialect",
    "PostgresDialect",
    "DialectFactory",
]
