"""Tests for statement classification."""

import pytest

from roadlines.core.statements import (
    StatementKind,
    WriteResult,
    classify_statement,
    normalize_params,
)


class TestClassifyStatement:
    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT 1",
            "select * from users",
            "   \n\tSeLeCt id FROM t",
            "SELECT\n  *\nFROM t",
        ],
    )
    def test_select_is_read(self, sql):
        assert classify_statement(sql) is StatementKind.READ

    @pytest.mark.parametrize(
        "sql",
        [
            "INSERT INTO t (id) VALUES (?)",
            "UPDATE t SET x = 1",
            "DELETE FROM t",
            "CREATE TABLE t (id INTEGER)",
            # prefix rule: these read data but still take the write path
            "WITH x AS (SELECT 1) SELECT * FROM x",
            "PRAGMA journal_mode",
            "EXPLAIN SELECT 1",
            "(SELECT 1)",
            "-- comment\nSELECT 1",
            "",
        ],
    )
    def test_everything_else_is_write(self, sql):
        assert classify_statement(sql) is StatementKind.WRITE

    def test_selected_prefix_counts_as_read(self):
        # the rule is a plain startswith, not a token match
        assert classify_statement("SELECTED_TABLE") is StatementKind.READ


class TestNormalizeParams:
    def test_none_is_empty_tuple(self):
        assert normalize_params(None) == ()

    def test_list_becomes_tuple(self):
        assert normalize_params([5, "a"]) == (5, "a")

    def test_mapping_passes_through(self):
        params = {"id": 5}
        assert normalize_params(params) is params

    def test_bare_string_is_one_value(self):
        assert normalize_params("abc") == ("abc",)


class TestWriteResult:
    def test_to_dict(self):
        assert WriteResult(changes=2, last_insert_rowid=7).to_dict() == {
            "changes": 2,
            "last_insert_rowid": 7,
        }
