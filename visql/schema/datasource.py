"""Pydantic models describing a connectable datasource.

Records are supplied by an external datasource registry; the password is
already decrypted by the caller's credential store and is held as a
:class:`~pydantic.SecretStr` so it never leaks through ``repr`` or logs.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from sqlalchemy.engine import URL


class DataSourceType(str, Enum):
    """Supported relational engines."""

    POSTGRESQL = "POSTGRESQL"
    CLICKHOUSE = "CLICKHOUSE"


class DataSource(BaseModel):
    """Connection parameters for one datasource.

    Attributes:
        id: Registry identifier; keys the connection pool.
        type: Engine type, selects dialect and driver.
        host: Server host.
        port: Server port; ``None`` picks the engine default.
        database: Database name.
        username: Login name.
        password: Decrypted credential.
        schema_name: Catalog scope override for schema introspection.
        options: Engine-specific driver parameters (``sslmode``,
            ``secure``, ``connect_timeout`` ...), passed through as URL
            query arguments.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    id: str | int
    type: DataSourceType
    host: str
    port: int | None = None
    database: str
    username: str | None = None
    password: SecretStr | None = None
    schema_name: str | None = Field(None, alias="schema")
    options: dict[str, Any] = Field(default_factory=dict)

    def build_url(self, drivername: str, default_port: int | None = None) -> URL:
        """Return the SQLAlchemy URL for this datasource.

        Args:
            drivername: SQLAlchemy ``dialect+driver`` name chosen by the
                engine's SQL dialect.
            default_port: Port used when :attr:`port` is unset.
        """
        return URL.create(
            drivername,
            username=self.username,
            password=self.password.get_secret_value() if self.password else None,
            host=self.host,
            port=self.port or default_port,
            database=self.database,
            query={k: str(v) for k, v in sorted(self.options.items())},
        )

    def describe(self) -> str:
        """Human-readable location without credentials, for log lines."""
        port = f":{self.port}" if self.port else ""
        return f"{self.type.value} {self.host}{port}/{self.database}"
