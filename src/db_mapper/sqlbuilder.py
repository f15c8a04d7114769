"""SELECT statement builder.

``Selector`` is an immutable builder: every method returns a new selector,
so a base selector can be shared and refined per call.

Usage:
    from db_mapper.sqlbuilder import select

    sql = (
        select("u.id", "u.email", "g.name")
        .from_("users u")
        .join("LEFT JOIN groups g ON g.id = u.group_id")
        .where("u.active = ?")
        .order_by("u.id")
        .limit(10)
        .sql()
    )
"""

import copy

COLUMN_SEPARATOR = ", "


class Selector:
    """Builder for a single SELECT statement."""

    def __init__(self) -> None:
        self._columns: tuple[str, ...] = ()
        self._from = ""
        self._joins: tuple[str, ...] = ()
        self._where = ""
        self._order_by = ""
        self._limit: int | None = None
        self._offset: int | None = None

    def _copy(self, **changes) -> "Selector":
        clone = copy.copy(self)
        for name, value in changes.items():
            setattr(clone, f"_{name}", value)
        return clone

    def columns(self, *columns: str) -> "Selector":
        """Set the column list (empty means ``*``)."""
        return self._copy(columns=tuple(columns))

    def from_(self, source: str) -> "Selector":
        """Set the FROM clause."""
        return self._copy(**{"from": source})

    def join(self, clause: str) -> "Selector":
        """Append a JOIN clause, e.g. ``"LEFT JOIN b ON b.id = a.b_id"``."""
        return self._copy(joins=self._joins + (clause,))

    def where(self, condition: str) -> "Selector":
        """Set the WHERE condition."""
        return self._copy(where=condition)

    def where_and(self, condition: str) -> "Selector":
        """AND a condition onto the existing WHERE clause."""
        if not self._where:
            return self.where(condition)
        return self._copy(where=f"{self._where} AND {condition}")

    def order_by(self, order_by: str) -> "Selector":
        """Set the ORDER BY clause."""
        return self._copy(order_by=order_by)

    def limit(self, limit: int | None) -> "Selector":
        return self._copy(limit=limit)

    def offset(self, offset: int | None) -> "Selector":
        return self._copy(offset=offset)

    def merge(self, other: "Selector | None") -> "Selector":
        """Overlay the non-empty parts of *other* onto this selector.

        Joins are concatenated; every other part is replaced when *other*
        sets it.
        """
        if other is None:
            return self
        return self._copy(
            columns=other._columns or self._columns,
            joins=self._joins + other._joins,
            where=other._where or self._where,
            order_by=other._order_by or self._order_by,
            limit=other._limit if other._limit is not None else self._limit,
            offset=other._offset if other._offset is not None else self._offset,
            **{"from": other._from or self._from},
        )

    def sql(self) -> str:
        """Render the SELECT statement.

        Example:
            >>> select("id").from_("users").where("id = ?").sql()
            'SELECT id FROM users WHERE id = ?'
        """
        parts = ["SELECT " + (COLUMN_SEPARATOR.join(self._columns) or "*")]
        if self._from:
            parts.append("FROM " + self._from)
        parts.extend(self._joins)
        if self._where:
            parts.append("WHERE " + self._where)
        if self._order_by:
            parts.append("ORDER BY " + self._order_by)
        if self._limit is not None:
            parts.append(f"LIMIT {int(self._limit)}")
        if self._offset is not None:
            parts.append(f"OFFSET {int(self._offset)}")
        return " ".join(parts)

    def __str__(self) -> str:
        return self.sql()

    def __repr__(self) -> str:
        return f"Selector({self.sql()!r})"


def select(*columns: str) -> Selector:
    """Start a SELECT builder with the given columns."""
    return Selector().columns(*columns)
