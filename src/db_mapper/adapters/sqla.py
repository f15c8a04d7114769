"""SQLAlchemy database adapter.

Provides ``SqlAlchemyDatabase``, an implementation of the ``Database``
protocol over an already-open synchronous SQLAlchemy ``Connection``.
Positional ``?`` markers are rewritten into named ``:p_0, :p_1, ...``
parameters and run through ``sqlalchemy.text()``, so the same SQL works on
every dialect SQLAlchemy supports.

Usage:
    from sqlalchemy import create_engine
    from db_mapper.adapters.sqla import SqlAlchemyDatabase

    engine = create_engine("sqlite:///app.db")
    with engine.begin() as conn:
        db = SqlAlchemyDatabase(conn)
        users.insert(db, {"email": "a@x.com"})
"""

from collections.abc import Iterator, Sequence
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult

from db_mapper.adapters.base import ColumnType, ExecResult, rewrite_placeholders


def _bind(sql: str, args: Sequence[Any]) -> tuple[Any, dict[str, Any]]:
    """Convert a ``?`` statement plus positional args into ``text()`` + params."""
    query = text(rewrite_placeholders(sql, lambda i: f":p_{i}"))
    params = {f"p_{i}": value for i, value in enumerate(args)}
    return query, params


def _description_columns(result: CursorResult) -> list[ColumnType]:
    """Read column names (and string type codes, when reported) from a result."""
    cursor = getattr(result, "cursor", None)
    description = cursor.description if cursor is not None else None
    if not description:
        return [ColumnType(name=name) for name in result.keys()]
    columns = []
    for item in description:
        type_code = item[1]
        type_name = type_code if isinstance(type_code, str) else ""
        columns.append(ColumnType(name=item[0], type_name=type_name))
    return columns


class SqlAlchemyRows:
    """``Rows`` view over a SQLAlchemy ``CursorResult``."""

    def __init__(self, result: CursorResult) -> None:
        self._result = result
        self._columns = _description_columns(result)

    @property
    def columns(self) -> list[ColumnType]:
        return self._columns

    def __iter__(self) -> Iterator[Sequence[Any]]:
        for row in self._result:
            yield tuple(row)

    def close(self) -> None:
        self._result.close()


class SqlAlchemyDatabase:
    """``Database`` implementation over a SQLAlchemy ``Connection``.

    The adapter does not begin, commit or roll back; use ``engine.begin()``
    or ``connection.begin()`` around it.

    Args:
        connection: Open synchronous SQLAlchemy connection.

    Example:
        with engine.begin() as conn:
            db = SqlAlchemyDatabase(conn)
            rows = users.select(db, "email = ?", ["a@x.com"])
    """

    # Dialects whose DB-API cursor reports lastrowid.
    LASTROWID_DIALECTS = frozenset({"sqlite", "mysql", "mariadb"})

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def query(self, sql: str, args: Sequence[Any] = ()) -> SqlAlchemyRows:
        query, params = _bind(sql, args)
        return SqlAlchemyRows(self.connection.execute(query, params))

    def query_row(self, sql: str, args: Sequence[Any] = ()) -> Sequence[Any] | None:
        query, params = _bind(sql, args)
        result = self.connection.execute(query, params)
        try:
            row = result.fetchone()
        finally:
            result.close()
        return tuple(row) if row is not None else None

    def execute(self, sql: str, args: Sequence[Any] = ()) -> ExecResult:
        query, params = _bind(sql, args)
        result = self.connection.execute(query, params)
        try:
            return ExecResult(
                last_insert_id=(
                    result.lastrowid
                    if self.connection.dialect.name in self.LASTROWID_DIALECTS
                    else None
                ),
                rows_affected=result.rowcount,
            )
        finally:
            result.close()
