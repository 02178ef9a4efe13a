"""Unit tests for ParameterResolver."""
from __future__ import annotations

import pytest

import visql
from visql.compile.clickhouse import ClickHouseDialect
from visql.compile.postgres import PostgresDialect
from visql.errors import MissingParameterError, UnsupportedValueError
from visql.params.resolver import ParameterResolver


def _pg() -> ParameterResolver:
    return ParameterResolver(PostgresDialect())


def _ch() -> ParameterResolver:
    return ParameterResolver(ClickHouseDialect())


def test_sql_without_placeholders_is_returned_unchanged():
    sql = "SELECT * FROM sales"
    assert _pg().resolve(sql, {"unused": 1}) is sql
    assert _pg().resolve(sql) is sql


def test_basic_substitution():
    sql = "SELECT * FROM sales WHERE region = :region AND date >= :startDate"
    out = _pg().resolve(sql, {"region": "north", "startDate": "2024-01-01"})
    assert out == "SELECT * FROM sales WHERE region = 'north' AND date >= '2024-01-01'"


def test_repeated_placeholder_replaced_everywhere():
    sql = "SELECT * FROM t WHERE a = :param1 AND b = :param2 AND c = :param1"
    out = _pg().resolve(sql, {"param1": 1, "param2": 2})
    assert out == "SELECT * FROM t WHERE a = 1 AND b = 2 AND c = 1"


def test_missing_parameters_are_all_reported():
    sql = "SELECT * FROM t WHERE a = :a AND b = :b AND c = :c"
    with pytest.raises(MissingParameterError) as exc:
        _pg().resolve(sql, {"b": 1})
    assert exc.value.missing == ["a", "c"]
    assert "'a'" in str(exc.value) and "'c'" in str(exc.value)


def test_missing_parameters_when_none_supplied():
    with pytest.raises(MissingParameterError):
        _pg().resolve("SELECT * FROM t WHERE a = :a", None)


def test_value_formatting_postgres():
    sql = "SELECT :n, :b, :f, :s, :l, :e"
    out = _pg().resolve(
        sql, {"n": None, "b": True, "f": 3.5, "s": "it's", "l": [1, 2, 3], "e": []}
    )
    assert out == "SELECT NULL, TRUE, 3.5, 'it''s', 1, 2, 3, NULL"


def test_value_formatting_clickhouse():
    out = _ch().resolve("SELECT :b, :s", {"b": False, "s": "it's"})
    assert out == "SELECT 0, 'it\\'s'"


def test_list_parameter_in_in_clause():
    sql = "SELECT * FROM sales WHERE region IN (:regions)"
    out = _pg().resolve(sql, {"regions": ["north", "south"]})
    assert out == "SELECT * FROM sales WHERE region IN ('north', 'south')"


def test_postgres_casts_are_not_placeholders():
    sql = "SELECT created_at::date FROM t WHERE id = :id AND x = '1'::int"
    assert _pg().extract_parameter_names(sql) == ["id"]
    assert _pg().resolve(sql, {"id": 5}) == (
        "SELECT created_at::date FROM t WHERE id = 5 AND x = '1'::int"
    )


def test_placeholders_inside_string_literals_are_ignored():
    sql = "SELECT ':notparam' AS x, \"col:umn\" FROM t WHERE b = :b"
    assert _pg().extract_parameter_names(sql) == ["b"]
    assert _pg().resolve(sql, {"b": 1}) == (
        "SELECT ':notparam' AS x, \"col:umn\" FROM t WHERE b = 1"
    )


def test_placeholders_inside_comments_are_ignored():
    sql = "SELECT 1 -- :skipped\nFROM t /* :also_skipped */ WHERE x = :x"
    assert _pg().extract_parameter_names(sql) == ["x"]


def test_clickhouse_backslash_escaped_quote_does_not_end_literal():
    sql = "SELECT 'it\\'s :not_a_param' FROM t WHERE a = :a"
    assert _ch().extract_parameter_names(sql) == ["a"]


def test_substituted_values_are_not_rescanned():
    out = _pg().resolve("SELECT :a, :b", {"a": ":b", "b": 1})
    assert out == "SELECT ':b', 1"


def test_extract_preserves_first_use_order():
    sql = "SELECT :z, :a, :z, :m"
    assert _pg().extract_parameter_names(sql) == ["z", "a", "m"]


def test_unsupported_value_raises():
    with pytest.raises(UnsupportedValueError):
        _pg().resolve("SELECT :x", {"x": object()})


def test_functional_entry_point():
    out = visql.resolve_parameters("SELECT :x", {"x": "a"}, "CLICKHOUSE")
    assert out == "SELECT 'a'"
