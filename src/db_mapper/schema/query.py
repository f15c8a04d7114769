"""Dataset query: a read model over one or more tables.

A ``Query`` selects through a base ``Selector`` (joins, computed columns)
and decodes rows with external keys gathered from its own extra fields and
from every table's fields.  Mutations go to the first table, the "default
table", so a joined list view can still insert, update and delete rows of
its main table.

Usage:
    from db_mapper import Field, Query, select

    user_list = Query(
        tables=[users, groups],
        fields=[Field(name="group_name")],
        selector=select("u.id", "u.email", "g.name AS group_name")
        .from_("users u")
        .join("LEFT JOIN groups g ON g.id = u.group_id"),
    )

    rows = user_list.select(db, select().where("g.id = ?"), [3])
    user_list.update(db, {"id": 1, "email": "b@x.com"})
"""

import logging
import threading
from collections.abc import Sequence
from typing import Any

from db_mapper.adapters.base import Database
from db_mapper.decoder import map_query
from db_mapper.errors import SchemaError
from db_mapper.naming import DEFAULT_NAMING, Naming
from db_mapper.result import Result
from db_mapper.schema.context import MutationContext, Operation
from db_mapper.schema.field import Field
from db_mapper.schema.table import Action, Table
from db_mapper.sqlbuilder import Selector

logger = logging.getLogger(__name__)


class Query:
    """Dataset built from a SELECT over one or more tables.

    Args:
        tables: Tables the dataset reads; the first receives mutations.
        fields: Extra fields (computed or aliased columns).  They take
            precedence over table fields with the same name.
        selector: Base SELECT.
        naming: Naming convention for columns without a declared field.
        on_insert / on_update / on_delete: Optional hooks replacing the
            delegation to the default table.
    """

    def __init__(
        self,
        tables: Sequence[Table] = (),
        fields: Sequence[Field] = (),
        selector: Selector | None = None,
        naming: Naming = DEFAULT_NAMING,
        on_insert: Action | None = None,
        on_update: Action | None = None,
        on_delete: Action | None = None,
    ) -> None:
        self.tables = list(tables)
        self.fields = list(fields)
        self.selector = selector or Selector()
        self.naming = naming
        self.on_insert = on_insert
        self.on_update = on_update
        self.on_delete = on_delete

        self._lock = threading.Lock()
        self._active = False
        self._default_table: Table | None = None
        self._keys_map: dict[str, str] = {}
        self._type_hints: dict[str, str] = {}

    def open(self) -> None:
        """Derive the key map; idempotent."""
        if self._active:
            return
        with self._lock:
            if self._active:
                return
            self._default_table = self.tables[0] if self.tables else None
            fields = list(self.fields)
            for table in self.tables:
                fields.extend(table.fields)
            keys_map: dict[str, str] = {}
            type_hints: dict[str, str] = {}
            # Earlier definitions win, for the key and the type hint alike.
            for field in reversed(fields):
                keys_map[field.name] = field.get_key(self.naming)
                if field.sql_type:
                    type_hints[field.name] = field.sql_type
                else:
                    type_hints.pop(field.name, None)
            self._keys_map = keys_map
            self._type_hints = type_hints
            self._active = True

    def close(self) -> None:
        with self._lock:
            self._active = False

    @property
    def keys_map(self) -> dict[str, str]:
        self.open()
        return dict(self._keys_map)

    @property
    def type_hints(self) -> dict[str, str]:
        """Physical column name -> declared SQL type used for decoding."""
        self.open()
        return dict(self._type_hints)

    @property
    def default_table(self) -> Table | None:
        self.open()
        return self._default_table

    def sql(self, selector: Selector | None = None) -> str:
        """Render the base selector merged with *selector*."""
        return self.selector.merge(selector).sql()

    def select(
        self,
        db: Database,
        selector: Selector | None = None,
        args: Sequence[Any] = (),
    ) -> list[dict[str, Any]]:
        """Run the merged SELECT and decode the rows.

        Args:
            db: Connection to query.
            selector: Call-site refinements (WHERE, ORDER BY, LIMIT ...)
                overlaid on the base selector.
            args: Arguments for the placeholders.
        """
        self.open()
        return map_query(
            db,
            self.sql(selector),
            args,
            key_map=self._keys_map,
            type_hints=self._type_hints,
            naming=self.naming,
        )

    def _run(self, context: MutationContext, hook: Action | None) -> Result:
        self.open()
        if hook is not None:
            return hook(context)
        return self.default_action(context)

    def default_action(self, context: MutationContext) -> Result:
        """Delegate a mutation to the default table.

        Raises:
            SchemaError: If the query has no tables.
        """
        table = self.default_table
        if table is None:
            raise SchemaError("Query tables undefined")
        return table.execute(context.with_table(table))

    def insert(self, db: Database, record: dict[str, Any]) -> Result:
        context = MutationContext(Operation.INSERT, db, None, record, dataset=self)
        return self._run(context, self.on_insert)

    def update(self, db: Database, record: dict[str, Any]) -> Result:
        context = MutationContext(Operation.UPDATE, db, None, record, dataset=self)
        return self._run(context, self.on_update)

    def delete(self, db: Database, record: dict[str, Any]) -> Result:
        context = MutationContext(Operation.DELETE, db, None, record, dataset=self)
        return self._run(context, self.on_delete)
