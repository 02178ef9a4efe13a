"""Shared pytest fixtures for visql unit tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from visql.compile.clickhouse import ClickHouseDialect
from visql.compile.postgres import PostgresDialect
from visql.execute.connection_manager import ConnectionManager
from visql.schema.datasource import DataSource
from visql.settings import PoolSettings
from tests.fixtures import SQLiteEngineFactory, create_sales_db, make_datasource


@pytest.fixture(scope="session")
def pg() -> PostgresDialect:
    return PostgresDialect()


@pytest.fixture(scope="session")
def ch() -> ClickHouseDialect:
    return ClickHouseDialect()


@pytest.fixture()
def sales_db(tmp_path: Path) -> Path:
    """SQLite file with 11 sales rows."""
    return create_sales_db(tmp_path / "sales.db", rows=11)


@pytest.fixture()
def engine_factory(sales_db: Path) -> SQLiteEngineFactory:
    return SQLiteEngineFactory(sales_db)


@pytest.fixture()
def datasource() -> DataSource:
    return make_datasource()


@pytest.fixture()
def manager(engine_factory: SQLiteEngineFactory):
    """ConnectionManager backed by the SQLite sales database."""
    mgr = ConnectionManager(
        PoolSettings(max_size=2, connect_timeout=2.0), engine_factory=engine_factory
    )
    yield mgr
    mgr.close_all()
