"""QueryEngine tests: the validate → compile → resolve → execute pipeline."""
from __future__ import annotations

import pytest

from visql.compile.clickhouse import ClickHouseDialect
from visql.engine import QueryEngine, ensure_read_only
from visql.errors import (
    MissingParameterError,
    QueryValidationError,
    ReadOnlyViolationError,
)
from visql.schema.datasource import DataSourceType
from visql.schema.expressions import ComparisonOp, JoinType
from visql.schema.visual_query import (
    ColumnRef,
    ColumnValue,
    ComparisonFilter,
    JoinClause,
    OrderByClause,
    ParamValue,
    SelectColumn,
    TableRef,
    VisualQuery,
)
from visql.settings import EngineSettings
from tests.fixtures import make_datasource

_COUNT = SelectColumn(expression="COUNT(*)", alias="n", aggregate=True)


@pytest.fixture()
def engine(manager) -> QueryEngine:
    return QueryEngine(manager, EngineSettings(max_rows=5, default_limit=3))


def _by_region(**overrides) -> VisualQuery:
    fields = {
        "source": TableRef(table="sales"),
        "columns": [SelectColumn(column="region"), _COUNT],
        "filters": [
            ComparisonFilter(
                left=ColumnValue(column="total_amount"),
                operator=ComparisonOp.GTE,
                right=ParamValue(name="minAmount"),
            )
        ],
        "group_by": [ColumnRef(column="region")],
        "order_by": [OrderByClause(column="region")],
    }
    fields.update(overrides)
    return VisualQuery(**fields)


# ---------------------------------------------------------------------------
# execute
# ---------------------------------------------------------------------------


def test_execute_visual_query_with_parameters(engine, datasource):
    result = engine.execute(_by_region(), datasource, {"minAmount": 50}, limit=10)
    assert result.rows == [["east", 2], ["north", 1], ["south", 2], ["west", 2]]
    assert result.column_names == ["region", "n"]
    assert result.truncated is False


def test_execute_raw_sql_uses_default_limit(engine, datasource):
    result = engine.execute("SELECT id FROM sales ORDER BY id", datasource)
    assert [row[0] for row in result.rows] == [1, 2, 3]
    assert result.truncated is True


def test_requested_limit_is_capped_by_max_rows(engine, datasource):
    result = engine.execute("SELECT id FROM sales", datasource, limit=100)
    assert result.row_count == 5
    assert result.truncated is True


def test_missing_parameter_is_reported_before_execution(engine, datasource, manager):
    with pytest.raises(MissingParameterError) as exc:
        engine.execute(_by_region(), datasource, {})
    assert exc.value.missing == ["minAmount"]
    assert manager.pool_status() == {}


def test_invalid_visual_query_is_rejected(engine, datasource, manager):
    query = _by_region(group_by=[])
    with pytest.raises(QueryValidationError) as exc:
        engine.execute(query, datasource, {"minAmount": 0})
    assert "region" in exc.value.errors[0]
    assert manager.pool_status() == {}


def test_write_statements_are_refused(engine, datasource, manager):
    with pytest.raises(ReadOnlyViolationError):
        engine.execute("DELETE FROM sales", datasource)
    assert manager.execute_query(datasource, "SELECT COUNT(*) FROM sales").rows == [[11]]


# ---------------------------------------------------------------------------
# Read-only guard
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT 1",
        "  select * from t",
        "WITH x AS (SELECT 1) SELECT * FROM x",
        "-- leading comment\nSELECT 1",
        "/* block */ (SELECT 1)",
    ],
)
def test_read_only_guard_accepts_queries(sql):
    ensure_read_only(sql)


@pytest.mark.parametrize(
    "sql",
    [
        "DELETE FROM sales",
        "insert into t values (1)",
        "UPDATE t SET a = 1",
        "DROP TABLE t",
        "-- SELECT\nTRUNCATE t",
        "",
    ],
)
def test_read_only_guard_rejects_other_statements(sql):
    with pytest.raises(ReadOnlyViolationError):
        ensure_read_only(sql)


# ---------------------------------------------------------------------------
# compile / preview
# ---------------------------------------------------------------------------


def test_compile_picks_dialect_from_datasource(engine):
    ch_source = make_datasource(type=DataSourceType.CLICKHOUSE, schema=None)
    compiled = engine.compile(_by_region(), ch_source)
    assert compiled.dialect == "clickhouse"
    assert "`region`" in compiled.sql


def test_clickhouse_full_join_setting(manager):
    engine = QueryEngine(manager, EngineSettings(clickhouse_full_join=False))
    dialect = engine.dialect_for(make_datasource(type=DataSourceType.CLICKHOUSE))
    assert isinstance(dialect, ClickHouseDialect)
    assert dialect.supports_full_join is False


def test_preview_returns_sql_and_parameters(engine, datasource):
    preview = engine.preview(_by_region(), datasource)
    assert preview.is_valid
    assert preview.parameter_names == ("minAmount",)
    assert preview.sql.startswith('SELECT "region", COUNT(*) AS "n"')


def test_preview_reports_validation_errors_without_raising(engine, datasource):
    preview = engine.preview(_by_region(group_by=[]), datasource)
    assert not preview.is_valid
    assert preview.sql is not None


def test_preview_reports_compilation_errors(engine, datasource):
    query = _by_region(joins=[JoinClause(table="products", type=JoinType.LEFT)])
    preview = engine.preview(query, datasource)
    assert preview.sql is None
    assert any("ON condition" in e for e in preview.errors)
