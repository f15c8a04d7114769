"""Delete guards.

Checkers are callables taking a ``MutationContext`` and raising when the
mutation must not proceed.  ``deleter`` turns a list of checkers into an
``on_delete`` hook.

Usage:
    from db_mapper.checkers import deleter, exists

    groups = Table(
        "groups",
        [Field(name="id", primary_key=True)],
        on_delete=deleter(exists(users.field("group_id"), users)),
    )
    groups.delete(db, {"id": 3})   # InUseError if a user is still in group 3
"""

from collections.abc import Callable

from db_mapper.errors import DELETE_ERROR_FORMAT, InUseError, MapperError
from db_mapper.mutation import default_delete
from db_mapper.result import Result
from db_mapper.schema.context import MutationContext
from db_mapper.schema.field import Field
from db_mapper.schema.table import Table

Checker = Callable[[MutationContext], None]


def exists(field: Field, table: Table, key: str | None = None) -> Checker:
    """Checker failing when *table* still has rows referencing the record.

    Args:
        field: Referencing column in *table*, e.g. ``users.group_id``.
        table: Referencing table.
        key: Key of the referenced value in the record being deleted.
            Defaults to the external key of that table's first primary key.
    """

    def check(context: MutationContext) -> None:
        source_key = key
        if source_key is None:
            pk_field = context.table.primary_key_fields()[0]
            source_key = pk_field.get_key(context.table.naming)
        value = context.record.get(source_key)
        if value is None:
            return
        if table.count_value(context.db, field, value) > 0:
            raise InUseError("this record is in use")

    return check


def deleter(*checkers: Checker) -> Callable[[MutationContext], Result]:
    """Build an ``on_delete`` hook that runs *checkers* before deleting.

    A ``MapperError`` from a checker is re-raised with a "can not be
    deleted" prefix and the same code (``InUseError`` keeps its class).
    """

    def on_delete(context: MutationContext) -> Result:
        for checker in checkers:
            try:
                checker(context)
            except MapperError as e:
                error_class = InUseError if isinstance(e, InUseError) else MapperError
                message = DELETE_ERROR_FORMAT.format(error=e.message)
                raise error_class(message, e.code) from e
        return default_delete(context)

    return on_delete
