"""PEP 249 (DB-API 2.0) database adapter.

Wraps a plain driver connection (``sqlite3``, ``psycopg`` or anything
else following PEP 249) as a ``Database``.  Drivers using the ``qmark``
paramstyle receive the SQL unchanged; ``format`` drivers (psycopg) get
``%s`` markers with literal percent signs doubled.

Usage:
    import sqlite3
    from db_mapper.adapters.dbapi import DbApiDatabase

    conn = sqlite3.connect("app.db")
    db = DbApiDatabase(conn)
    users.insert(db, {"email": "a@x.com"})
    conn.commit()
"""

from collections.abc import Iterator, Sequence
from typing import Any

from db_mapper.adapters.base import ColumnType, ExecResult, rewrite_placeholders

PARAMSTYLES = ("qmark", "format")


class DbApiRows:
    """``Rows`` view over a DB-API cursor; closing it closes the cursor."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        self._columns = [
            ColumnType(
                name=item[0],
                type_name=item[1] if isinstance(item[1], str) else "",
            )
            for item in (cursor.description or [])
        ]

    @property
    def columns(self) -> list[ColumnType]:
        return self._columns

    def __iter__(self) -> Iterator[Sequence[Any]]:
        while True:
            row = self._cursor.fetchone()
            if row is None:
                return
            yield tuple(row)

    def close(self) -> None:
        self._cursor.close()


class DbApiDatabase:
    """``Database`` implementation over a DB-API connection.

    The adapter never commits; call ``connection.commit()`` yourself.

    Args:
        connection: Open PEP 249 connection.
        paramstyle: ``"qmark"`` (sqlite3) or ``"format"`` (psycopg).

    Raises:
        ValueError: If *paramstyle* is not supported.
    """

    def __init__(self, connection: Any, paramstyle: str = "qmark") -> None:
        if paramstyle not in PARAMSTYLES:
            raise ValueError(
                f"Unsupported paramstyle '{paramstyle}'. Use one of: {', '.join(PARAMSTYLES)}"
            )
        self.connection = connection
        self.paramstyle = paramstyle

    def _sql(self, sql: str) -> str:
        if self.paramstyle == "format":
            return rewrite_placeholders(sql, "%s", escape_percent=True)
        return sql

    def _execute(self, sql: str, args: Sequence[Any]) -> Any:
        cursor = self.connection.cursor()
        try:
            cursor.execute(self._sql(sql), tuple(args))
        except Exception:
            cursor.close()
            raise
        return cursor

    def query(self, sql: str, args: Sequence[Any] = ()) -> DbApiRows:
        return DbApiRows(self._execute(sql, args))

    def query_row(self, sql: str, args: Sequence[Any] = ()) -> Sequence[Any] | None:
        cursor = self._execute(sql, args)
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        return tuple(row) if row is not None else None

    def execute(self, sql: str, args: Sequence[Any] = ()) -> ExecResult:
        cursor = self._execute(sql, args)
        try:
            return ExecResult(
                last_insert_id=getattr(cursor, "lastrowid", None),
                rows_affected=cursor.rowcount,
            )
        finally:
            cursor.close()
