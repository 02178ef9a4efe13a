"""Dialect abstractions: CompiledSQL and the SQLDialect ABC.

The Template Method pattern (GoF) is used:
- ``SQLDialect`` defines the shared rendering skeleton (table references,
  literal dispatch, the safe-execution LIMIT guard).
- ``PostgresDialect`` and ``ClickHouseDialect`` override the engine-specific
  steps (identifier quoting, literal escaping, LIMIT/OFFSET shape).

Every engine-specific rule lives behind this interface so neither the
compiler nor the connection manager branches on the engine type.
"""
from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from visql.errors import UnsupportedValueError
from visql.schema.datasource import DataSourceType
from visql.schema.values import TEXTUAL_TYPES, textual_form

if TYPE_CHECKING:
    from visql.schema.datasource import DataSource
    from visql.settings import PoolSettings

_LIMIT_CLAUSE = re.compile(r"\bLIMIT\s+\d+", re.IGNORECASE)

#: Grammar of a parameter name; placeholders are written ``:name``.
PARAMETER_NAME_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"


@dataclass(frozen=True)
class CompiledSQL:
    """The output of a successful compilation.

    Attributes:
        sql: The compiled SQL string with ``:name`` placeholders.
        parameter_names: Placeholder names in first-use order, without
            duplicates.  Values are supplied later to the
            :class:`~visql.params.resolver.ParameterResolver`.
        dialect: The target dialect name (``'postgres'`` or ``'clickhouse'``).
    """

    sql: str
    parameter_names: tuple[str, ...]
    dialect: str


class SQLDialect(ABC):
    """Abstract base for engine-specific SQL formatting.

    Subclasses implement the abstract capabilities; ``QueryBuilder``,
    ``ParameterResolver`` and ``ConnectionManager`` use only this interface.
    """

    #: Trivial statement used to probe connectivity.
    probe_statement: str = "SELECT 1"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def type(self) -> DataSourceType:
        """Return the datasource type this dialect serves."""

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name (``'postgres'`` or ``'clickhouse'``)."""

    @property
    @abstractmethod
    def driver_name(self) -> str:
        """Return the SQLAlchemy ``dialect+driver`` name used to connect."""

    @property
    @abstractmethod
    def default_port(self) -> int:
        """Return the engine's default server port."""

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def supports_full_join(self) -> bool:
        """Whether ``FULL OUTER JOIN`` is accepted by the target engine."""

    @property
    @abstractmethod
    def supports_standalone_offset(self) -> bool:
        """Whether ``OFFSET`` may appear without ``LIMIT``."""

    @property
    @abstractmethod
    def quoted_token_pattern(self) -> str:
        """Regex matching one string literal or quoted identifier.

        Used by the placeholder scanner to skip over quoted text.
        """

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Return a properly-quoted SQL identifier.

        Args:
            name: Unquoted identifier (schema, table, column or alias).

        Returns:
            Quoted identifier with embedded quote characters escaped.
        """

    @abstractmethod
    def format_limit_offset(self, limit: int | None, offset: int | None) -> str:
        """Return the LIMIT/OFFSET tail, or ``''`` when neither applies."""

    @abstractmethod
    def format_string_literal(self, value: str) -> str:
        """Return ``value`` as an escaped, quoted SQL string literal."""

    @abstractmethod
    def format_boolean_literal(self, value: bool) -> str:
        """Return the engine's boolean literal."""

    def format_table_ref(
        self, schema: str | None, table: str, alias: str | None = None
    ) -> str:
        """Return ``[schema.]table [AS alias]`` with every part quoted."""
        quote = self.quote_identifier
        ref = f"{quote(schema)}.{quote(table)}" if schema else quote(table)
        return f"{ref} AS {quote(alias)}" if alias else ref

    def format_column_ref(self, table: str | None, column: str) -> str:
        """Return ``[table.]column`` with every part quoted."""
        quote = self.quote_identifier
        return f"{quote(table)}.{quote(column)}" if table else quote(column)

    def format_literal(self, value: Any) -> str:
        """Render a ``SqlValue`` as a SQL literal.

        Strings and booleans always go through the dialect's escaping
        methods; numbers are rendered in their canonical text form; lists
        become comma-joined literals (an empty list renders ``NULL`` so
        ``IN (...)`` stays valid and matches nothing).

        Raises:
            UnsupportedValueError: For non-finite numbers and types outside
                the closed value set.
        """
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return self.format_boolean_literal(value)
        if isinstance(value, int):
            return str(int(value))
        if isinstance(value, float):
            if not math.isfinite(value):
                raise UnsupportedValueError(value)
            return repr(float(value))
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise UnsupportedValueError(value)
            return str(value)
        if isinstance(value, str):
            return self.format_string_literal(value)
        if isinstance(value, TEXTUAL_TYPES):
            return self.format_string_literal(textual_form(value))
        if isinstance(value, (list, tuple)):
            if not value:
                return "NULL"
            return ", ".join(self.format_literal(v) for v in value)
        raise UnsupportedValueError(value)

    # ------------------------------------------------------------------
    # Execution support
    # ------------------------------------------------------------------

    def wrap_for_safe_execution(self, sql: str, max_rows: int) -> str:
        """Bound an ad-hoc statement to ``max_rows`` rows.

        Trailing whitespace and semicolons are trimmed.  A statement that
        already contains ``LIMIT <number>`` is returned as is; otherwise a
        ``LIMIT max_rows`` line is appended.  Applying it twice is a no-op.
        """
        normalized = sql.strip().rstrip("; \t\r\n")
        if _LIMIT_CLAUSE.search(normalized):
            return normalized
        return f"{normalized}\nLIMIT {max_rows}"

    @abstractmethod
    def catalog_scope(self, datasource: DataSource) -> str:
        """Return the schema / database that introspection is scoped to."""

    def connect_args(
        self, datasource: DataSource, pool: PoolSettings
    ) -> dict[str, Any]:
        """Return driver keyword arguments for new connections.

        The default passes nothing; drivers that read their options from the
        URL query need no override.
        """
        return {}

    def describe_type(self, type_code: Any) -> str:
        """Map a DB-API ``cursor.description`` type code to a type name."""
        if type_code is None:
            return "UNKNOWN"
        if isinstance(type_code, type):
            return type_code.__name__
        return str(type_code)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
