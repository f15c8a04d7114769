"""Database connection protocol definition.

Defines the ``Database`` Protocol the mapper consumes.  It is deliberately
small: a parameterized row query, a single-row query and a statement
execution.  SQL passed to every method uses ``?`` as the positional
placeholder; adapters translate it to their driver's parameter style.

Usage:
    from db_mapper.adapters.base import Database

    def do_work(db: Database) -> None:
        rows = db.query("SELECT id, name FROM users WHERE id = ?", [1])
        try:
            for row in rows:
                print(row)
        finally:
            rows.close()
        db.execute("DELETE FROM users WHERE id = ?", [1])
"""

import re
from collections.abc import Iterator, Sequence
from typing import Any, Protocol

from pydantic import BaseModel

PLACEHOLDER = "?"

# A single-quoted literal, a positional marker, or a bare percent sign.
_MARKER_PATTERN = re.compile(r"'(?:[^']|'')*'|\?|%")


class ColumnType(BaseModel):
    """Name and declared SQL type of a result column.

    ``type_name`` is empty when the driver does not report one.
    """

    name: str
    type_name: str = ""


class ExecResult(BaseModel):
    """Outcome of a mutating statement.

    Example:
        >>> ExecResult(last_insert_id=7, rows_affected=1).rows_affected
        1
    """

    last_insert_id: int | None = None
    rows_affected: int = 0


class Rows(Protocol):
    """Result set returned by ``Database.query``.

    Iterating yields one tuple per row, in ``columns`` order.  ``close()``
    releases the cursor and must be safe to call more than once.
    """

    @property
    def columns(self) -> list[ColumnType]: ...

    def __iter__(self) -> Iterator[Sequence[Any]]: ...

    def close(self) -> None: ...


class Database(Protocol):
    """Connection or transaction handle the mapper runs statements on.

    Implementations never begin or commit transactions themselves; the
    caller owns the handle's lifetime.
    """

    def query(self, sql: str, args: Sequence[Any] = ()) -> Rows:
        """Run a query and return its result set.

        Raises:
            Exception: Driver errors propagate unchanged.
        """
        ...

    def query_row(self, sql: str, args: Sequence[Any] = ()) -> Sequence[Any] | None:
        """Run a query and return its first row, or ``None`` if empty."""
        ...

    def execute(self, sql: str, args: Sequence[Any] = ()) -> ExecResult:
        """Execute an INSERT, UPDATE, DELETE or DDL statement."""
        ...


def rewrite_placeholders(sql: str, marker: Any, escape_percent: bool = False) -> str:
    """Replace positional ``?`` markers outside string literals.

    Args:
        sql: Statement using ``?`` placeholders.
        marker: Replacement string, or a callable taking the zero-based
            marker index and returning the replacement.
        escape_percent: Double every ``%`` (for ``format`` paramstyle drivers).

    Returns:
        The rewritten statement.

    Example:
        >>> rewrite_placeholders("a = ? AND b = '?'", "%s")
        "a = %s AND b = '?'"
        >>> rewrite_placeholders("a = ? AND b = ?", lambda i: f":p_{i}")
        'a = :p_0 AND b = :p_1'
    """
    index = 0

    def replace(match: re.Match) -> str:
        nonlocal index
        token = match.group(0)
        if token == PLACEHOLDER:
            value = marker(index) if callable(marker) else marker
            index += 1
            return value
        if escape_percent:
            return token.replace("%", "%%")
        return token

    return _MARKER_PATTERN.sub(replace, sql)
