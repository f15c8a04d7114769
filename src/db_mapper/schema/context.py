"""Mutation context passed to validation rules and mutation hooks."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from db_mapper.adapters.base import Database
    from db_mapper.schema.field import Field
    from db_mapper.schema.query import Query
    from db_mapper.schema.table import Table


class Operation(str, Enum):
    """Kind of mutation being performed."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class MutationContext:
    """Immutable snapshot of an in-flight mutation.

    Attributes:
        operation: Insert, update or delete.
        db: Connection the mutation (and any validation lookups) runs on.
        table: Table being mutated.  ``None`` only while a ``Query`` is
            still choosing its default table.
        record: Record snapshot.  During per-field validation this is the
            working record as resolved so far.
        field: Field currently being validated, if any.
        dataset: The ``Query`` the mutation was issued through, if any.

    Example:
        ctx = MutationContext(Operation.INSERT, db, users, {"email": "a@x.com"})
        field_ctx = ctx.with_field(email_field, dict(working))
    """

    operation: Operation
    db: "Database"
    table: "Table | None"
    record: dict[str, Any]
    field: "Field | None" = None
    dataset: "Query | None" = None

    @property
    def is_insert(self) -> bool:
        return self.operation is Operation.INSERT

    def with_field(self, field: "Field", record: dict[str, Any]) -> "MutationContext":
        """Copy of this context focused on *field* with a fresh record snapshot."""
        return replace(self, field=field, record=record)

    def with_table(self, table: "Table") -> "MutationContext":
        return replace(self, table=table)
