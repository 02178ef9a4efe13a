"""Pydantic models returned by the connection manager.

``QueryResult`` dumps with camelCase keys (``rowCount``,
``executionTimeMs``) for the query-execution endpoints that consume it.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from visql.schema.values import SqlValue

_RESULT = ConfigDict(extra="forbid", populate_by_name=True, alias_generator=to_camel)


class ColumnMeta(BaseModel):
    """Metadata for one result column.

    Attributes:
        name: Column label as returned by the engine.
        type: Engine type name (e.g. ``'int4'``, ``'String'``).
        nullable: Whether the column can hold NULL; ``True`` when unknown.
    """

    model_config = _RESULT

    name: str
    type: str
    nullable: bool = True


class QueryResult(BaseModel):
    """Rows and metadata from a single statement execution.

    Attributes:
        columns: Ordered column metadata.
        rows: Row-major cell values, at most the requested limit.
        row_count: ``len(rows)``.
        execution_time_ms: Wall time from checkout to last row consumed.
        truncated: ``True`` when more rows existed than were returned.
    """

    model_config = _RESULT

    columns: list[ColumnMeta]
    rows: list[list[SqlValue]] = Field(default_factory=list)
    row_count: int = 0
    execution_time_ms: float = 0.0
    truncated: bool = False

    @property
    def column_names(self) -> list[str]:
        """Returns all column names in result order."""
        return [c.name for c in self.columns]

    def as_dicts(self) -> list[dict[str, SqlValue]]:
        """Returns rows keyed by column name."""
        names = self.column_names
        return [dict(zip(names, row)) for row in self.rows]


class ConnectionTestResult(BaseModel):
    """Outcome of a connectivity probe; failures are values, not exceptions."""

    model_config = _RESULT

    success: bool
    message: str
    duration_ms: float


class ColumnInfo(BaseModel):
    """Catalog metadata for a single column.

    Attributes:
        name: Column name.
        type: SQL type string (e.g. ``'TEXT'``, ``'UInt64'``).
        nullable: Whether the column can be NULL.
    """

    model_config = _RESULT

    name: str
    type: str
    nullable: bool = True


class TableInfo(BaseModel):
    """Catalog metadata for a table or view.

    Attributes:
        name: Table name.
        type: ``'TABLE'`` or ``'VIEW'``.
        columns: Ordered column metadata.
    """

    model_config = _RESULT

    name: str
    type: str = "TABLE"
    columns: list[ColumnInfo] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        """Returns all column names for this table."""
        return [c.name for c in self.columns]
