"""Pooled connections to registered datasources.

``ConnectionManager`` owns one bounded SQLAlchemy connection pool per
datasource id.  It is an explicitly constructed service object: create one
per process (or per test) and share it.

Thread-safety
-------------
The registry is a plain dict guarded by a :class:`threading.Lock`;
get-or-create happens entirely inside the lock, so concurrent first
requests for the same datasource build exactly one pool.  Building an
engine opens no connection, so holding the lock during creation is cheap.

Eviction
--------
:meth:`ConnectionManager.evict_pool` removes the pool and disposes it.
Idle connections are closed immediately.  Connections checked out at that
moment finish their statement; on release they return to the retired pool,
which is never handed out again, and are closed along with it.  A query
whose checkout races an eviction notices that its engine is no longer
registered, releases the connection, disposes the engine again and retries
on the current pool.
"""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Hashable
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import CompileError, DBAPIError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.pool import QueuePool

from visql.compile.base import SQLDialect
from visql.compile.registry import DialectFactory
from visql.errors import ConnectionError, ExecutionError
from visql.execute.engines import EngineFactory, create_datasource_engine
from visql.schema.datasource import DataSource
from visql.schema.results import (
    ColumnInfo,
    ColumnMeta,
    ConnectionTestResult,
    QueryResult,
    TableInfo,
)
from visql.schema.values import to_cell_value
from visql.settings import PoolSettings

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 1000


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


def _type_name(col_type: Any) -> str:
    try:
        return str(col_type)
    except CompileError:
        # Untyped columns (NullType) have no DDL rendering.
        return type(col_type).__name__


class ConnectionManager:
    """Registry of per-datasource connection pools.

    Args:
        pool_settings: Bounds applied to every pool created by this manager.
        engine_factory: Builds the engine for a datasource; replace it to
            point the manager at another database (tests use SQLite).
    """

    def __init__(
        self,
        pool_settings: PoolSettings | None = None,
        engine_factory: EngineFactory = create_datasource_engine,
    ) -> None:
        self._pool_settings = pool_settings or PoolSettings()
        self._engine_factory = engine_factory
        self._pools: dict[Hashable, Engine] = {}
        self._lock = threading.Lock()

    @property
    def pool_settings(self) -> PoolSettings:
        return self._pool_settings

    # ------------------------------------------------------------------
    # Pool registry
    # ------------------------------------------------------------------

    def dialect_for(self, datasource: DataSource) -> SQLDialect:
        """Return the dialect serving ``datasource``'s engine type."""
        return DialectFactory.create(datasource.type)

    def get_pool(self, datasource: DataSource) -> Engine:
        """Return the pool for ``datasource``, creating it on first use."""
        with self._lock:
            engine = self._pools.get(datasource.id)
            if engine is None:
                engine = self._engine_factory(
                    datasource, self.dialect_for(datasource), self._pool_settings
                )
                self._pools[datasource.id] = engine
            return engine

    def evict_pool(self, datasource_id: Hashable) -> bool:
        """Remove and dispose the pool for ``datasource_id``.

        Call this after a datasource's connection parameters change.

        Returns:
            ``True`` if a pool was registered, ``False`` if there was none.
        """
        with self._lock:
            engine = self._pools.pop(datasource_id, None)
        if engine is None:
            return False
        engine.dispose()
        logger.info("Evicted connection pool for datasource %s", datasource_id)
        return True

    def close_all(self) -> int:
        """Dispose every pool; returns the number of pools closed."""
        with self._lock:
            engines = list(self._pools.items())
            self._pools.clear()
        for datasource_id, engine in engines:
            engine.dispose()
            logger.info("Closed connection pool for datasource %s", datasource_id)
        return len(engines)

    def pool_status(self) -> dict[Hashable, dict[str, Any]]:
        """Return a snapshot of every registered pool, keyed by datasource id."""
        with self._lock:
            engines = dict(self._pools)
        status: dict[Hashable, dict[str, Any]] = {}
        for datasource_id, engine in engines.items():
            pool = engine.pool
            entry: dict[str, Any] = {
                "url": engine.url.render_as_string(hide_password=True),
            }
            if isinstance(pool, QueuePool):
                entry.update(
                    size=pool.size(),
                    checked_out=pool.checkedout(),
                    checked_in=pool.checkedin(),
                )
            status[datasource_id] = entry
        return status

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def test_connection(self, datasource: DataSource) -> ConnectionTestResult:
        """Probe ``datasource`` with a trivial statement.

        Uses a throwaway engine so an unreachable datasource never leaves a
        pool behind.  Failures are reported in the result, never raised.
        """
        dialect = self.dialect_for(datasource)
        start = time.perf_counter()
        engine = None
        try:
            engine = self._engine_factory(datasource, dialect, self._pool_settings)
            with engine.connect() as conn:
                conn.exec_driver_sql(dialect.probe_statement).fetchall()
        except Exception as exc:
            message = str(getattr(exc, "orig", None) or exc)
            logger.warning(
                "Connection test failed for %s: %s", datasource.describe(), message
            )
            return ConnectionTestResult(
                success=False,
                message=f"Connection failed: {message}",
                duration_ms=_elapsed_ms(start),
            )
        finally:
            if engine is not None:
                engine.dispose()
        return ConnectionTestResult(
            success=True,
            message="Connection successful",
            duration_ms=_elapsed_ms(start),
        )

    def execute_query(
        self, datasource: DataSource, sql: str, limit: int = DEFAULT_LIMIT
    ) -> QueryResult:
        """Execute ``sql`` and return at most ``limit`` rows.

        The statement is bounded server-side to ``limit + 1`` rows; fetching
        that extra row is how truncation is detected.

        Raises:
            ConnectionError: If no connection could be checked out (driver
                connect failure or pool timeout).
            ExecutionError: If the engine rejects the statement; the message
                is the driver's own.
        """
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")
        dialect = self.dialect_for(datasource)
        bounded_sql = dialect.wrap_for_safe_execution(sql, limit + 1)

        start = time.perf_counter()
        try:
            conn = self._checkout(datasource)
        except (PoolTimeoutError, DBAPIError) as exc:
            message = str(getattr(exc, "orig", None) or exc)
            logger.error(
                "Could not obtain a connection for %s: %s", datasource.describe(), message
            )
            raise ConnectionError(
                f"Could not connect to datasource {datasource.id}: {message}",
                datasource_id=datasource.id,
            ) from exc

        with conn:
            try:
                result = conn.exec_driver_sql(bounded_sql)
                if not result.returns_rows:
                    return QueryResult(columns=[], execution_time_ms=_elapsed_ms(start))
                columns = self._describe_columns(dialect, result.cursor.description)
                fetched = result.fetchmany(limit + 1)
            except DBAPIError as exc:
                message = str(exc.orig) if exc.orig is not None else str(exc)
                logger.error(
                    "Query failed on datasource %s: %s", datasource.id, message
                )
                raise ExecutionError(
                    message, datasource_id=datasource.id, sql=bounded_sql
                ) from exc

        truncated = len(fetched) > limit
        rows = [[to_cell_value(cell) for cell in row] for row in fetched[:limit]]
        elapsed = _elapsed_ms(start)
        logger.debug(
            "Datasource %s returned %d row(s) in %.1f ms (truncated=%s)",
            datasource.id,
            len(rows),
            elapsed,
            truncated,
        )
        return QueryResult(
            columns=columns,
            rows=rows,
            row_count=len(rows),
            execution_time_ms=elapsed,
            truncated=truncated,
        )

    def get_schema_info(self, datasource: DataSource) -> list[TableInfo]:
        """List tables and views, with their columns, in the catalog scope.

        Raises:
            ConnectionError: If the catalog cannot be read.
        """
        dialect = self.dialect_for(datasource)
        scope = dialect.catalog_scope(datasource)
        engine = self.get_pool(datasource)
        try:
            inspector = inspect(engine)
            view_names = set(inspector.get_view_names(schema=scope))
            # Some dialects (clickhouse-connect) list views among the tables.
            table_names = set(inspector.get_table_names(schema=scope)) - view_names
            tables: list[TableInfo] = []
            for kind, names in (("TABLE", table_names), ("VIEW", view_names)):
                for name in sorted(names):
                    columns = [
                        ColumnInfo(
                            name=col["name"],
                            type=_type_name(col["type"]),
                            nullable=bool(col.get("nullable", True)),
                        )
                        for col in inspector.get_columns(name, schema=scope)
                    ]
                    tables.append(TableInfo(name=name, type=kind, columns=columns))
        except SQLAlchemyError as exc:
            message = str(getattr(exc, "orig", None) or exc)
            raise ConnectionError(
                f"Could not read schema of datasource {datasource.id}: {message}",
                datasource_id=datasource.id,
            ) from exc
        return tables

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _checkout(self, datasource: DataSource) -> Connection:
        """Check out a connection from a pool that is still registered.

        An eviction between :meth:`get_pool` and ``connect()`` leaves the
        caller holding a disposed engine; that connection is released, the
        engine disposed again and the checkout retried on the current pool.
        """
        while True:
            engine = self.get_pool(datasource)
            conn = engine.connect()
            with self._lock:
                current = self._pools.get(datasource.id)
            if current is engine:
                return conn
            conn.close()
            engine.dispose()
            logger.debug(
                "Pool for datasource %s was evicted during checkout; retrying",
                datasource.id,
            )

    @staticmethod
    def _describe_columns(
        dialect: SQLDialect, description: Any
    ) -> list[ColumnMeta]:
        columns: list[ColumnMeta] = []
        for desc in description or ():
            null_ok = desc[6] if len(desc) > 6 else None
            columns.append(
                ColumnMeta(
                    name=str(desc[0]),
                    type=dialect.describe_type(desc[1]),
                    nullable=null_ok is not False,
                )
            )
        return columns
