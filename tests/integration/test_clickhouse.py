"""Integration tests against a real ClickHouse server.

Uses VISQL_CH_URL (e.g. ``clickhouse://default:@localhost:8123/default``).
Skips all tests if the env var is unset or the server is unreachable.
"""
from __future__ import annotations

import os

import pytest
from sqlalchemy.engine import make_url

from visql.engine import QueryEngine
from visql.execute.connection_manager import ConnectionManager
from visql.schema.datasource import DataSource, DataSourceType
from visql.schema.expressions import ComparisonOp
from visql.schema.visual_query import (
    ColumnValue,
    ComparisonFilter,
    LiteralValue,
    OrderByClause,
    SelectColumn,
    TableRef,
    VisualQuery,
)
from visql.settings import EngineSettings, PoolSettings

pytest.importorskip("clickhouse_connect", reason="clickhouse-connect required")


def _datasource() -> DataSource:
    url = os.environ.get("VISQL_CH_URL")
    if not url:
        pytest.skip("VISQL_CH_URL not set")
    parsed = make_url(url)
    return DataSource(
        id="ch-integration",
        type=DataSourceType.CLICKHOUSE,
        host=parsed.host or "localhost",
        port=parsed.port,
        database=parsed.database or "default",
        username=parsed.username,
        password=parsed.password or None,
    )


@pytest.fixture(scope="module")
def ch_source():
    return _datasource()


@pytest.fixture(scope="module")
def ch_engine(ch_source):
    manager = ConnectionManager(PoolSettings(max_size=2, connect_timeout=5))
    probe = manager.test_connection(ch_source)
    if not probe.success:
        pytest.skip(f"Cannot connect to ClickHouse: {probe.message}")
    yield QueryEngine(manager, EngineSettings(max_rows=100, default_limit=10))
    manager.close_all()


def _numbers(**overrides) -> VisualQuery:
    fields = {
        "source": TableRef(table="numbers", schema_name="system"),
        "columns": [SelectColumn(column="number")],
        "filters": [
            ComparisonFilter(
                left=ColumnValue(column="number"),
                operator=ComparisonOp.LT,
                right=LiteralValue(value=20),
            )
        ],
        "order_by": [OrderByClause(column="number")],
    }
    fields.update(overrides)
    return VisualQuery(**fields)


def test_truncation_on_bounded_scan(ch_engine, ch_source):
    result = ch_engine.execute(_numbers(), ch_source, limit=10)
    assert [row[0] for row in result.rows] == list(range(10))
    assert result.truncated is True


def test_offset_without_limit_uses_sentinel(ch_engine, ch_source):
    result = ch_engine.execute(_numbers(offset=15), ch_source)
    assert [row[0] for row in result.rows] == [15, 16, 17, 18, 19]


def test_string_literal_escaping(ch_engine, ch_source):
    result = ch_engine.execute("SELECT :s AS s", ch_source, {"s": "it's \\ fine"})
    assert result.rows == [["it's \\ fine"]]


def test_schema_info_lists_system_tables(ch_engine):
    source = _datasource().model_copy(update={"database": "system", "id": "ch-system"})
    tables = {t.name for t in ch_engine.connections.get_schema_info(source)}
    assert "numbers" in tables
