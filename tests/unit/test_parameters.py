"""Unit tests for placeholder scanning, style conversion and binding."""

import pytest

from sqlarrays.core.parameters import (
    ParameterStyle,
    bind_named_parameters,
    convert_named_parameters,
    placeholder_name,
    scan_parameters,
)
from sqlarrays.exceptions import InvalidInputError, MissingParameterError, PrepareError


def test_scan_finds_named_placeholders_in_order() -> None:
    infos = scan_parameters("SELECT * FROM t WHERE a = :a AND b = :b_2")
    assert [info.name for info in infos] == ["a", "b_2"]
    assert infos[0].placeholder_text == ":a"


def test_scan_skips_literals_and_comments() -> None:
    sql = "SELECT ':fake', \":also\", `:col` FROM t -- :comment\n WHERE x = :real /* :block */"
    assert [info.name for info in scan_parameters(sql)] == ["real"]


def test_scan_ignores_percent_signs() -> None:
    assert scan_parameters("SELECT * FROM t WHERE name LIKE 'a%' AND pct > 5 % 2") == []


@pytest.mark.parametrize("sql", ["SELECT * FROM t WHERE a = ?", "SELECT %s", "SELECT %(a)s"])
def test_scan_rejects_other_styles(sql: str) -> None:
    with pytest.raises(PrepareError, match="Unsupported placeholder"):
        scan_parameters(sql)


def test_convert_to_pyformat() -> None:
    sql = "SELECT * FROM t WHERE a = :a AND name LIKE 'x%' AND b = :b"
    assert convert_named_parameters(sql, ParameterStyle.NAMED_PYFORMAT) == (
        "SELECT * FROM t WHERE a = %(a)s AND name LIKE 'x%%' AND b = %(b)s"
    )


def test_convert_doubles_bare_percent() -> None:
    assert convert_named_parameters("SELECT 7 % 3", ParameterStyle.NAMED_PYFORMAT) == "SELECT 7 %% 3"


def test_convert_named_colon_is_identity() -> None:
    sql = "SELECT * FROM t WHERE a = :a"
    assert convert_named_parameters(sql, ParameterStyle.NAMED_COLON) is sql


def test_bind_accepts_keys_with_and_without_colon() -> None:
    assert bind_named_parameters(("a", "b"), {":a": 1, "b": 2}) == {"a": 1, "b": 2}


def test_bind_drops_unused_keys() -> None:
    assert bind_named_parameters(("a",), {":a": 1, ":unused": 2}) == {"a": 1}


def test_bind_missing_value_raises() -> None:
    with pytest.raises(MissingParameterError, match=":b") as exc_info:
        bind_named_parameters(("a", "b"), {":a": 1}, "SELECT :a, :b")
    assert exc_info.value.sql == "SELECT :a, :b"
    assert isinstance(exc_info.value, InvalidInputError)


def test_bind_none_parameters() -> None:
    assert bind_named_parameters((), None) == {}


@pytest.mark.parametrize(
    ("key", "expected"),
    [("status", "status"), ("user-name", "username"), ("2fa", "_2fa"), ("a b.c", "abc"), ("_x", "_x")],
)
def test_placeholder_name(key: str, expected: str) -> None:
    assert placeholder_name(key) == expected


def test_placeholder_name_nothing_left() -> None:
    with pytest.raises(InvalidInputError):
        placeholder_name("--;")
