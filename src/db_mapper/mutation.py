"""Default INSERT / UPDATE / DELETE synthesis.

These functions are what ``Table.insert/update/delete`` run when no hook is
configured.  Hooks can call them too, e.g. to wrap the default with extra
checks.

All three work on a shallow copy of the caller's record.  Validation runs
field by field before any SQL is issued, so a failing rule never leaves a
partial write behind.
"""

import logging
from typing import Any

from db_mapper.adapters.base import PLACEHOLDER
from db_mapper.errors import PreflightError, ValidationError
from db_mapper.result import Result
from db_mapper.schema.context import MutationContext, Operation
from db_mapper.schema.field import Field
from db_mapper.sqlbuilder import COLUMN_SEPARATOR
from db_mapper.validation.rules import RuleError, validate

logger = logging.getLogger(__name__)


def validate_field(
    context: MutationContext,
    field: Field,
    record: dict[str, Any],
    value: Any,
) -> None:
    """Run *field*'s rules against *value* with a per-field context.

    Raises:
        ValidationError: Wrapping the first ``RuleError``.
    """
    if not field.validations:
        return
    field_context = context.with_field(field, dict(record))
    try:
        validate(value, field.validations, field_context)
    except RuleError as e:
        title = field.get_title(context.table.naming)
        logger.debug(f"Table {context.table.name}: {title} failed '{e.code}' rule")
        raise ValidationError(title, e) from e


def default_insert(context: MutationContext) -> Result:
    """Build and execute ``INSERT INTO table(cols) VALUES(?, ...)``.

    Auto-increment fields are left to the database.  Read-only fields are
    written only from their default (caller values are ignored) and skipped
    entirely when they have none.  Other fields take the record's value, or
    their default when the value is missing or ``None``.

    Raises:
        SchemaError: If the table definition is invalid.
        ValidationError: If a field fails a rule.
        PreflightError: If no column would be inserted.
    """
    table = context.table
    table.open()
    record = dict(context.record)

    columns: list[str] = []
    args: list[Any] = []
    for i, field in enumerate(table.fields):
        if field.auto_increment:
            continue
        key = table.key_of(i)
        value = record.get(key)
        if field.read_only:
            if field.default is None:
                continue
            value = None
        if value is None:
            value = field.get_default()
        record[key] = value
        validate_field(context, field, record, value)
        columns.append(field.name)
        args.append(value)

    if not columns:
        raise PreflightError(f"Table {table.name}: not enough columns to insert")

    sql = "INSERT INTO {}({})VALUES({})".format(
        table.name,
        COLUMN_SEPARATOR.join(columns),
        COLUMN_SEPARATOR.join([PLACEHOLDER] * len(columns)),
    )
    logger.debug(f"Insert: {sql} ({len(args)} args)")
    outcome = context.db.execute(sql, args)
    return Result(outcome, Operation.INSERT, context.db, table, record)


def default_update(context: MutationContext) -> Result:
    """Build and execute ``UPDATE table SET col = ?, ... WHERE pk = ?``.

    Primary key and auto-increment fields are never updated.  Read-only
    fields and fields missing from the record are written from
    ``on_update`` when configured, skipped otherwise.

    Raises:
        SchemaError / MissingKeyError: If the row cannot be addressed.
        ValidationError: If a field fails a rule.
        PreflightError: If no column would be updated.
    """
    table = context.table
    where, where_args = table.where_primary_key(context.record)
    record = dict(context.record)

    sets: list[str] = []
    args: list[Any] = []
    for i, field in enumerate(table.fields):
        if field.primary_key or field.auto_increment:
            continue
        key = table.key_of(i)
        value = record.get(key)
        if field.read_only or key not in record:
            if field.on_update is None:
                continue
            value = None
        if value is None:
            value = field.get_on_update()
        record[key] = value
        validate_field(context, field, record, value)
        sets.append(f"{field.name} = {PLACEHOLDER}")
        args.append(value)

    if not sets:
        raise PreflightError(f"Table {table.name}: not enough columns to update")

    sql = f"UPDATE {table.name} SET {COLUMN_SEPARATOR.join(sets)} WHERE {where}"
    logger.debug(f"Update: {sql} ({len(args) + len(where_args)} args)")
    outcome = context.db.execute(sql, args + where_args)
    return Result(outcome, Operation.UPDATE, context.db, table, record)


def default_delete(context: MutationContext) -> Result:
    """Build and execute ``DELETE FROM table WHERE pk = ?``.

    Raises:
        SchemaError / MissingKeyError: If the row cannot be addressed.
    """
    table = context.table
    where, args = table.where_primary_key(context.record)
    sql = f"DELETE FROM {table.name} WHERE {where}"
    logger.debug(f"Delete: {sql} ({len(args)} args)")
    outcome = context.db.execute(sql, args)
    return Result(outcome, Operation.DELETE, context.db, table, context.record)
