"""Table schema: ordered fields, derived indexing, and the mutation entry points.

A ``Table`` starts closed.  The first call to any public operation opens it:
names are checked and the column list, external keys, primary key indexes
and auto-increment index are derived in one pass.  Opening is guarded by a
lock so concurrent first use is safe; later calls skip the lock.

Usage:
    from db_mapper import Field, Table, Unique

    users = Table(
        "users",
        [
            Field(name="id", primary_key=True, auto_increment=True, sql_type="INT"),
            Field(name="email", sql_type="VARCHAR", validations=[Unique()]),
        ],
    )

    result = users.insert(db, {"email": "a@x.com"})
    row = result.record(refresh=True)        # {'id': 1, 'email': 'a@x.com'}
    users.update(db, {"id": 1, "email": "b@x.com"})
    users.delete(db, {"id": 1})
"""

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any

from db_mapper.adapters.base import PLACEHOLDER, Database
from db_mapper.decoder import map_query
from db_mapper.errors import MissingKeyError, SchemaError
from db_mapper.mutation import default_delete, default_insert, default_update
from db_mapper.naming import DEFAULT_NAMING, Naming
from db_mapper.result import Result
from db_mapper.schema.context import MutationContext, Operation
from db_mapper.schema.field import Field
from db_mapper.sqlbuilder import Selector

logger = logging.getLogger(__name__)

Action = Callable[[MutationContext], Result]


class Table:
    """A database table described by an ordered list of fields.

    Args:
        name: Table name.  Must be non-blank.
        fields: Column descriptors, in column order.
        naming: Naming convention for keys and titles not set on a field.
        on_insert: Optional hook replacing the default INSERT.
        on_update: Optional hook replacing the default UPDATE.
        on_delete: Optional hook replacing the default DELETE.

    ``name`` and ``fields`` may be reassigned after ``close()``; the next
    operation re-derives everything.
    """

    def __init__(
        self,
        name: str,
        fields: Sequence[Field] = (),
        naming: Naming = DEFAULT_NAMING,
        on_insert: Action | None = None,
        on_update: Action | None = None,
        on_delete: Action | None = None,
    ) -> None:
        self.name = name
        self.fields: list[Field] = list(fields)
        self.naming = naming
        self.on_insert = on_insert
        self.on_update = on_update
        self.on_delete = on_delete

        self._lock = threading.Lock()
        self._active = False
        self._columns: list[str] = []
        self._keys: list[str] = []
        self._keys_map: dict[str, str] = {}
        self._type_hints: dict[str, str] = {}
        self._primary_key: list[int] = []
        self._auto_increment: int | None = None

    def __repr__(self) -> str:
        return f"Table({self.name!r}, fields={[f.name for f in self.fields]})"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._active

    def open(self) -> None:
        """Validate the definition and derive column/key/index state.

        Idempotent: once open, further calls return immediately.

        Raises:
            SchemaError: If the table name or any field name is blank.
        """
        if self._active:
            return
        with self._lock:
            if self._active:
                return
            if not self.name or not self.name.strip():
                logger.warning("Table name is empty")
                raise SchemaError("Table name cannot be empty")

            columns: list[str] = []
            keys: list[str] = []
            keys_map: dict[str, str] = {}
            type_hints: dict[str, str] = {}
            primary_key: list[int] = []
            auto_increment: int | None = None
            for i, field in enumerate(self.fields):
                if not field.name or not field.name.strip():
                    logger.warning(f"Table {self.name}: field {i} has an empty name")
                    raise SchemaError(f"Fields[{i}]: name cannot be empty")
                key = field.get_key(self.naming)
                columns.append(field.name)
                keys.append(key)
                keys_map[field.name] = key
                if field.sql_type:
                    type_hints[field.name] = field.sql_type
                if field.primary_key:
                    primary_key.append(i)
                if auto_increment is None and field.auto_increment:
                    auto_increment = i

            self._columns = columns
            self._keys = keys
            self._keys_map = keys_map
            self._type_hints = type_hints
            self._primary_key = primary_key
            self._auto_increment = auto_increment
            self._active = True

    def close(self) -> None:
        """Mark the table closed so the next operation re-derives its state."""
        with self._lock:
            self._active = False

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def columns(self) -> list[str]:
        self.open()
        return list(self._columns)

    @property
    def keys(self) -> list[str]:
        self.open()
        return list(self._keys)

    @property
    def keys_map(self) -> dict[str, str]:
        """Physical column name -> external key."""
        self.open()
        return dict(self._keys_map)

    @property
    def type_hints(self) -> dict[str, str]:
        """Physical column name -> declared SQL type, for declared fields."""
        self.open()
        return dict(self._type_hints)

    @property
    def primary_key(self) -> list[int]:
        """Indexes of primary key fields, in schema order."""
        self.open()
        return list(self._primary_key)

    @property
    def auto_increment(self) -> int | None:
        """Index of the first auto-increment field, or ``None``."""
        self.open()
        return self._auto_increment

    def key_of(self, index: int) -> str:
        """External key of the field at *index*."""
        self.open()
        return self._keys[index]

    def field(self, name: str) -> Field:
        """Look up a field by physical column name.

        Raises:
            KeyError: If the table has no such column.
        """
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(f"Table {self.name} has no field '{name}'")

    def primary_key_fields(self) -> list[Field]:
        """Primary key fields in schema order.

        Raises:
            SchemaError: If the table defines no primary key.
        """
        indexes = self.primary_key
        if not indexes:
            raise SchemaError(f"The table {self.name} does not define primary key")
        return [self.fields[i] for i in indexes]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def selector(self) -> Selector:
        """Base selector: every column of this table."""
        self.open()
        return Selector().columns(*self._columns).from_(self.name)

    def select(
        self,
        db: Database,
        where: str = "",
        args: Sequence[Any] = (),
        *,
        order_by: str = "",
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select records, decoded with this table's keys and type hints.

        Args:
            db: Connection to query.
            where: Optional WHERE condition with ``?`` placeholders.
            args: Arguments for *where*.
            order_by: Optional ORDER BY expression.
            limit: Optional row limit.
            offset: Optional row offset.

        Returns:
            One dict per row; NULL columns are absent.

        Example:
            rows = users.select(db, "email LIKE ?", ["%@x.com"], order_by="id", limit=10)
        """
        sql = (
            self.selector()
            .where(where)
            .order_by(order_by)
            .limit(limit)
            .offset(offset)
            .sql()
        )
        return map_query(
            db,
            sql,
            args,
            key_map=self._keys_map,
            type_hints=self._type_hints,
            naming=self.naming,
        )

    def select_one(
        self, db: Database, where: str = "", args: Sequence[Any] = ()
    ) -> dict[str, Any] | None:
        """Select the first matching record, or ``None``."""
        rows = self.select(db, where, args, limit=1)
        return rows[0] if rows else None

    def where_primary_key(
        self, record: dict[str, Any], exclude: bool = False
    ) -> tuple[str, list[Any]]:
        """Build the primary key condition for *record*.

        Args:
            record: Record holding a value for every primary key's external key.
            exclude: Match every row other than *record*: ``id <> ?`` for a
                single key, ``NOT (a = ? AND b = ?)`` for a composite one.

        Returns:
            ``(condition, args)``, e.g. ``("id = ?", [1])``.  Composite keys
            are joined with ``AND`` in schema order.

        Raises:
            SchemaError: If the table defines no primary key.
            MissingKeyError: If a primary key value is absent from *record*.
        """
        self.open()
        if not self._primary_key:
            raise SchemaError(f"The table {self.name} does not define primary key")
        columns: list[str] = []
        args: list[Any] = []
        for i in self._primary_key:
            key = self._keys[i]
            if key not in record:
                raise MissingKeyError(f"Primary key {key} is required in record")
            columns.append(self.fields[i].name)
            args.append(record[key])

        if exclude and len(columns) == 1:
            return f"{columns[0]} <> {PLACEHOLDER}", args
        condition = " AND ".join(f"{column} = {PLACEHOLDER}" for column in columns)
        if exclude:
            # Composite keys: only the exact key tuple is excluded.
            return f"NOT ({condition})", args
        return condition, args

    def count(self, db: Database, where: str = "", args: Sequence[Any] = ()) -> int:
        """Run ``SELECT COUNT(*)`` with an optional WHERE condition."""
        self.open()
        sql = f"SELECT COUNT(*) FROM {self.name}"
        if where:
            sql += " WHERE " + where
        logger.debug(f"Count: {sql} ({len(args)} args)")
        row = db.query_row(sql, list(args))
        if row is None:
            return 0
        return int(row[0])

    def count_value(
        self,
        db: Database,
        field: Field,
        value: Any,
        where: str = "",
        args: Sequence[Any] = (),
    ) -> int:
        """Count rows whose *field* column equals *value*.

        ``None`` counts NULLs.  Strings are trimmed and compared against
        ``TRIM(column)`` so surrounding whitespace cannot dodge a duplicate
        check.  *where* / *args* are ANDed after the value condition.
        """
        column = field.name
        condition_args: list[Any] = []
        if value is None:
            condition = f"{column} IS NULL"
        else:
            if isinstance(value, str):
                column = f"TRIM({column})"
                value = value.strip()
            condition = f"{column} = {PLACEHOLDER}"
            condition_args.append(value)
        if where:
            condition = f"{condition} AND {where}"
        return self.count(db, condition, condition_args + list(args))

    def count_record(
        self,
        db: Database,
        field: Field,
        record: dict[str, Any],
        exclude_self: bool = False,
        where: str = "",
        args: Sequence[Any] = (),
    ) -> int:
        """Count rows sharing *record*'s value for *field*.

        With *exclude_self*, rows matching *record*'s primary key are left
        out, so an UPDATE does not collide with the row being updated.

        Raises:
            SchemaError / MissingKeyError: From ``where_primary_key`` when
                *exclude_self* is set.
        """
        self.open()
        if exclude_self:
            pk_where, pk_args = self.where_primary_key(record, exclude=True)
            where = f"{pk_where} AND {where}" if where else pk_where
            args = pk_args + list(args)
        value = record.get(field.get_key(self.naming))
        return self.count_value(db, field, value, where, args)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _run(self, context: MutationContext, hook: Action | None, default: Action) -> Result:
        self.open()
        if hook is None:
            return default(context)
        return hook(context)

    def execute(self, context: MutationContext) -> Result:
        """Run the hook or default mutation for ``context.operation``."""
        if context.operation is Operation.INSERT:
            return self._run(context, self.on_insert, default_insert)
        if context.operation is Operation.UPDATE:
            return self._run(context, self.on_update, default_update)
        return self._run(context, self.on_delete, default_delete)

    def insert(self, db: Database, record: dict[str, Any]) -> Result:
        """Insert *record*, resolving defaults and running validations.

        Raises:
            SchemaError: If the table definition is invalid.
            ValidationError: If a field fails a rule; nothing is executed.
        """
        return self.execute(MutationContext(Operation.INSERT, db, self, record))

    def update(self, db: Database, record: dict[str, Any]) -> Result:
        """Update the row addressed by *record*'s primary key.

        Raises:
            SchemaError: If the table defines no primary key.
            MissingKeyError: If a primary key value is missing.
            ValidationError: If a field fails a rule.
            PreflightError: If no column would be updated.
        """
        return self.execute(MutationContext(Operation.UPDATE, db, self, record))

    def delete(self, db: Database, record: dict[str, Any]) -> Result:
        """Delete the row addressed by *record*'s primary key.

        Raises:
            SchemaError: If the table defines no primary key.
            MissingKeyError: If a primary key value is missing.
        """
        return self.execute(MutationContext(Operation.DELETE, db, self, record))


