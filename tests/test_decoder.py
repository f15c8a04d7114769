"""Tests for typed, NULL-safe row decoding."""

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from conftest import FakeRows
from db_mapper.decoder import (
    decode_bool,
    decode_string,
    decoder_for,
    map_query,
    map_query_row,
    normalize_type,
)


def _db(rows: FakeRows) -> MagicMock:
    db = MagicMock()
    db.query.return_value = rows
    return db


class TestDecoders:
    """Verify per-type decoding."""

    @pytest.mark.parametrize(
        ("type_name", "expected"),
        [
            ("varchar(255)", "VARCHAR"),
            ("BIGINT UNSIGNED", "BIGINT"),
            ("decimal(10,2)", "DECIMAL"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_type(self, type_name, expected: str) -> None:
        assert normalize_type(type_name) == expected

    def test_int_family(self) -> None:
        for type_name in ("INT", "TINYINT", "SMALLINT", "BIGINT"):
            assert decoder_for(type_name)(b"42") == 42

    def test_float_family(self) -> None:
        for type_name in ("FLOAT", "DOUBLE", "REAL"):
            assert decoder_for(type_name)("1.5") == 1.5

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(1, True), (0, False), ("t", True), ("false", False), (b"1", True), (True, True)],
    )
    def test_bool(self, value, expected: bool) -> None:
        assert decode_bool(value) is expected

    def test_bool_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            decode_bool("maybe")

    def test_string_family(self) -> None:
        assert decode_string(b"abc") == "abc"
        assert decode_string(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05"
        assert decode_string(date(2024, 1, 2)) == "2024-01-02"
        assert decode_string({"a": 1}) == '{"a": 1}'
        assert decoder_for("DECIMAL")(12) == "12"

    def test_unknown_type_passes_value_through(self) -> None:
        blob = object()
        assert decoder_for("BLOB")(blob) is blob
        assert decoder_for("")(blob) is blob


class TestMapQuery:
    """Verify record construction from result sets."""

    def test_keys_and_types(self) -> None:
        rows = FakeRows(
            [("user_id", "INT"), ("email", "VARCHAR"), ("active", "BOOLEAN")],
            [(b"1", "a@x.com", 1), (2, "b@x.com", 0)],
        )

        records = map_query(_db(rows), "SELECT ...")

        assert records == [
            {"userID": 1, "email": "a@x.com", "active": True},
            {"userID": 2, "email": "b@x.com", "active": False},
        ]
        assert rows.closed

    def test_null_omits_key_for_every_type(self) -> None:
        rows = FakeRows(
            [("id", "INT"), ("score", "REAL"), ("note", "TEXT"), ("blob", "")],
            [(1, None, None, None)],
        )

        assert map_query(_db(rows), "SELECT ...") == [{"id": 1}]

    def test_zero_values_are_kept(self) -> None:
        rows = FakeRows([("n", "INT"), ("s", "VARCHAR"), ("b", "BOOL")], [(0, "", 0)])

        assert map_query(_db(rows), "SELECT ...") == [{"n": 0, "s": "", "b": False}]

    def test_key_map_overrides_naming(self) -> None:
        rows = FakeRows([("user_id", "INT"), ("group_id", "INT")], [(1, 2)])

        records = map_query(_db(rows), "SELECT ...", key_map={"user_id": "uid"})

        assert records == [{"uid": 1, "groupID": 2}]

    def test_type_hints_override_driver_type(self) -> None:
        rows = FakeRows([("flag", ""), ("n", "TEXT")], [(1, 5)])

        records = map_query(_db(rows), "SELECT ...", type_hints={"flag": "BOOLEAN", "n": "INT"})

        assert records == [{"flag": True, "n": 5}]

    def test_args_forwarded(self) -> None:
        db = _db(FakeRows([("id", "INT")], []))

        assert map_query(db, "SELECT id FROM t WHERE id = ?", [7]) == []
        db.query.assert_called_once_with("SELECT id FROM t WHERE id = ?", [7])

    def test_decode_error_propagates_and_closes(self) -> None:
        rows = FakeRows([("flag", "BOOLEAN")], [("maybe",)])

        with pytest.raises(ValueError):
            map_query(_db(rows), "SELECT ...")
        assert rows.closed


class TestMapQueryRow:
    def test_first_row_only(self) -> None:
        rows = FakeRows([("id", "INT")], [(1,), (2,), (3,)])

        assert map_query_row(_db(rows), "SELECT ...") == {"id": 1}
        assert rows.fetched == 1
        assert rows.closed

    def test_no_rows(self) -> None:
        rows = FakeRows([("id", "INT")], [])

        assert map_query_row(_db(rows), "SELECT ...") is None
        assert rows.closed
