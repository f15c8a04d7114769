"""Typed, NULL-safe row decoding.

Turns a result set into ``dict`` records keyed by external key.  Each
column is decoded according to its declared SQL type:

==========================================================  ==============
declared type                                               decoded as
==========================================================  ==============
INT, TINYINT, SMALLINT, BIGINT                              ``int``
FLOAT, DOUBLE, REAL                                         ``float``
BOOL, BOOLEAN                                               ``bool``
VARCHAR, CHAR, TEXT, JSON, DECIMAL, DATETIME, DATE, TIME    ``str``
anything else                                               driver value
==========================================================  ==============

SQL NULL is never represented as ``None`` in the output: the key is left
out of the record, so callers tell NULL apart from zero values by key
absence.

Usage:
    from db_mapper.decoder import map_query, map_query_row

    rows = map_query(db, "SELECT user_id, email FROM users", key_map={"user_id": "uid"})
    row = map_query_row(db, "SELECT * FROM users WHERE id = ?", [1])
"""

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime, time
from typing import Any

from db_mapper.adapters.base import ColumnType, Database
from db_mapper.naming import DEFAULT_NAMING, Naming

logger = logging.getLogger(__name__)

INT_TYPES = frozenset({"INT", "TINYINT", "SMALLINT", "BIGINT"})
FLOAT_TYPES = frozenset({"FLOAT", "DOUBLE", "REAL"})
BOOL_TYPES = frozenset({"BOOL", "BOOLEAN"})
STRING_TYPES = frozenset(
    {"VARCHAR", "CHAR", "TEXT", "JSON", "DECIMAL", "DATETIME", "DATE", "TIME"}
)

_TRUE_STRINGS = frozenset({"1", "t", "true"})
_FALSE_STRINGS = frozenset({"0", "f", "false"})


def normalize_type(type_name: str | None) -> str:
    """Reduce a declared type to its family keyword.

    Example:
        >>> normalize_type("varchar(255)")
        'VARCHAR'
        >>> normalize_type("BIGINT UNSIGNED")
        'BIGINT'
    """
    words = (type_name or "").split("(", 1)[0].split()
    return words[0].upper() if words else ""


def decode_int(value: Any) -> int:
    if isinstance(value, (bytes, bytearray)):
        value = value.decode()
    return int(value)


def decode_float(value: Any) -> float:
    if isinstance(value, (bytes, bytearray)):
        value = value.decode()
    return float(value)


def decode_bool(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray)):
        value = value.decode()
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Cannot decode {value!r} as boolean")
    return bool(value)


def decode_string(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode()
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def decode_opaque(value: Any) -> Any:
    return value


def decoder_for(type_name: str | None) -> Callable[[Any], Any]:
    """Pick the decoder for a declared SQL type."""
    family = normalize_type(type_name)
    if family in INT_TYPES:
        return decode_int
    if family in FLOAT_TYPES:
        return decode_float
    if family in BOOL_TYPES:
        return decode_bool
    if family in STRING_TYPES:
        return decode_string
    return decode_opaque


def make_decoders(
    columns: Sequence[ColumnType],
    type_hints: Mapping[str, str] | None = None,
) -> list[Callable[[Any], Any]]:
    """Build one decoder per column.

    A hint in *type_hints* (keyed by physical column name) takes precedence
    over the type name reported by the driver.
    """
    hints = type_hints or {}
    return [decoder_for(hints.get(col.name) or col.type_name) for col in columns]


def _map_rows(
    first_only: bool,
    db: Database,
    sql: str,
    args: Sequence[Any],
    key_map: Mapping[str, str] | None,
    type_hints: Mapping[str, str] | None,
    naming: Naming,
) -> list[dict[str, Any]]:
    logger.debug(f"Query: {sql} ({len(args)} args)")
    rows = db.query(sql, args)
    try:
        columns = rows.columns
        decoders = make_decoders(columns, type_hints)
        keys_by_name = key_map or {}
        keys = [keys_by_name.get(col.name) or naming.key(col.name) for col in columns]

        result: list[dict[str, Any]] = []
        for row in rows:
            record: dict[str, Any] = {}
            for key, decode, value in zip(keys, decoders, row):
                if value is None:
                    continue
                record[key] = decode(value)
            result.append(record)
            if first_only:
                break
        return result
    finally:
        rows.close()


def map_query(
    db: Database,
    sql: str,
    args: Sequence[Any] = (),
    key_map: Mapping[str, str] | None = None,
    type_hints: Mapping[str, str] | None = None,
    naming: Naming = DEFAULT_NAMING,
) -> list[dict[str, Any]]:
    """Run a query and decode every row into a record.

    Args:
        db: Connection to query.
        sql: SELECT statement with ``?`` placeholders.
        args: Positional arguments for the placeholders.
        key_map: Optional physical column name -> external key overrides.
            Columns not listed get ``naming.key(column)``.
        type_hints: Optional physical column name -> declared SQL type.
        naming: Naming convention for columns without a key override.

    Returns:
        One dict per row.  NULL columns are absent from the dict.

    Raises:
        Exception: Query errors and decoding errors propagate unchanged.
    """
    return _map_rows(False, db, sql, args, key_map, type_hints, naming)


def map_query_row(
    db: Database,
    sql: str,
    args: Sequence[Any] = (),
    key_map: Mapping[str, str] | None = None,
    type_hints: Mapping[str, str] | None = None,
    naming: Naming = DEFAULT_NAMING,
) -> dict[str, Any] | None:
    """Like ``map_query`` but decode only the first row.

    Returns:
        The first record, or ``None`` when the query returned no rows.
    """
    rows = _map_rows(True, db, sql, args, key_map, type_hints, naming)
    return rows[0] if rows else None
