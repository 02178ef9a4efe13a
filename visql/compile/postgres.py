"""PostgreSQL dialect."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from visql.compile.base import SQLDialect
from visql.schema.datasource import DataSourceType

if TYPE_CHECKING:
    from visql.schema.datasource import DataSource
    from visql.settings import PoolSettings


class PostgresDialect(SQLDialect):
    """Formats SQL for PostgreSQL.

    Identifiers are double-quoted with embedded quotes doubled; string
    literals double embedded single quotes (``standard_conforming_strings``
    is assumed on, the server default).  ``LIMIT`` and ``OFFSET`` are
    independently optional.
    """

    @property
    def type(self) -> DataSourceType:
        return DataSourceType.POSTGRESQL

    @property
    def dialect_name(self) -> str:
        return "postgres"

    @property
    def driver_name(self) -> str:
        return "postgresql+psycopg"

    @property
    def default_port(self) -> int:
        return 5432

    @property
    def supports_full_join(self) -> bool:
        return True

    @property
    def supports_standalone_offset(self) -> bool:
        return True

    @property
    def quoted_token_pattern(self) -> str:
        return r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\""

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def format_limit_offset(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset:
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def format_string_literal(self, value: str) -> str:
        escaped = value.replace("'", "''")
        return f"'{escaped}'"

    def format_boolean_literal(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def catalog_scope(self, datasource: DataSource) -> str:
        return datasource.schema_name or "public"

    def connect_args(
        self, datasource: DataSource, pool: PoolSettings
    ) -> dict[str, Any]:
        """libpq connect timeout, plus ``search_path`` when a schema is set."""
        args: dict[str, Any] = {"connect_timeout": int(pool.connect_timeout)}
        if datasource.schema_name:
            args["options"] = f"-c search_path={datasource.schema_name}"
        return args

    def describe_type(self, type_code: Any) -> str:
        """Resolve a type OID to its PostgreSQL name (``23`` -> ``'int4'``)."""
        if isinstance(type_code, int) and not isinstance(type_code, bool):
            from psycopg.postgres import types as pg_types

            info = pg_types.get(type_code)
            if info is not None:
                return info.name
        return super().describe_type(type_code)
