"""ClickHouse dialect."""

from __future__ import annotations

from typing import TYPE_CHECKING

from visql.compile.base import SQLDialect
from visql.schema.datasource import DataSourceType

if TYPE_CHECKING:
    from visql.schema.datasource import DataSource

#: Sentinel LIMIT emitted when only an OFFSET is requested.
UNBOUNDED_LIMIT = 2**63 - 1

#: First server release with FULL OUTER JOIN support.
FULL_JOIN_MIN_VERSION: tuple[int, int] = (21, 8)


def parse_server_version(version: str | tuple[int, ...]) -> tuple[int, ...]:
    """Parse ``'23.8.2.7'`` (or an int tuple) into comparable integers."""
    if isinstance(version, tuple):
        return version
    parts: list[int] = []
    for piece in version.split("."):
        digits = "".join(ch for ch in piece if ch.isdigit())
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


class ClickHouseDialect(SQLDialect):
    """Formats SQL for ClickHouse.

    Identifiers are backtick-quoted and string literals single-quoted, both
    with backslash escaping.  ClickHouse rejects ``OFFSET`` without
    ``LIMIT``, so a standalone offset is paired with :data:`UNBOUNDED_LIMIT`.

    FULL OUTER JOIN support depends on the server release; pass
    ``server_version`` to derive it or ``supports_full_join`` to force it.

    Args:
        server_version: Server version string or tuple, e.g. ``"23.8"``.
        supports_full_join: Explicit override of the version-derived flag.
    """

    def __init__(
        self,
        server_version: str | tuple[int, ...] | None = None,
        supports_full_join: bool | None = None,
    ) -> None:
        self._server_version = (
            parse_server_version(server_version) if server_version is not None else None
        )
        if supports_full_join is not None:
            self._full_join = supports_full_join
        elif self._server_version:
            self._full_join = self._server_version[:2] >= FULL_JOIN_MIN_VERSION
        else:
            self._full_join = True

    @property
    def type(self) -> DataSourceType:
        return DataSourceType.CLICKHOUSE

    @property
    def dialect_name(self) -> str:
        return "clickhouse"

    @property
    def driver_name(self) -> str:
        return "clickhousedb"

    @property
    def default_port(self) -> int:
        return 8123

    @property
    def supports_full_join(self) -> bool:
        return self._full_join

    @property
    def supports_standalone_offset(self) -> bool:
        return False

    @property
    def quoted_token_pattern(self) -> str:
        return r"'(?:[^'\\]|\\.|'')*'|`(?:[^`\\]|\\.)*`|\"(?:[^\"\\]|\\.)*\""

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("\\", "\\\\").replace("`", "\\`")
        return f"`{escaped}`"

    def format_limit_offset(self, limit: int | None, offset: int | None) -> str:
        if limit is None and not offset:
            return ""
        parts = [f"LIMIT {UNBOUNDED_LIMIT if limit is None else limit}"]
        if offset:
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def format_string_literal(self, value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"

    def format_boolean_literal(self, value: bool) -> str:
        return "1" if value else "0"

    def catalog_scope(self, datasource: DataSource) -> str:
        return datasource.database

    def __repr__(self) -> str:
        return f"ClickHouseDialect(supports_full_join={self._full_join})"
