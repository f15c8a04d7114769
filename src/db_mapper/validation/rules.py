"""Validation rules and the rule protocol.

A rule is any object with ``validate(value)`` that raises ``RuleError`` when
the value is not acceptable.  Rules that need to look at the database also
implement ``bind(context)``: before validating a field the mutation engine
calls it with the current ``MutationContext`` and validates with the
returned, bound copy.  The shared rule instance is never modified, so a
single ``Unique()`` can sit on many fields and be used from many threads.

Empty values (``None``, ``""``, empty collections) pass every rule except
``Required``.

Usage:
    from db_mapper.validation import Required, Length, Match, Unique, In

    Field(name="email", validations=[Required(), Length(max=255), Unique()])
    Field(name="group_id", validations=[In(groups)])
"""

import copy
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from db_mapper.schema.context import MutationContext
    from db_mapper.schema.field import Field
    from db_mapper.schema.table import Table


class RuleError(Exception):
    """A value failed a rule.

    Attributes:
        code: Machine-readable rule code, e.g. ``"unique"``.
        message: Human-readable message, e.g. ``"already exists"``.
    """

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class Rule(Protocol):
    """Value validator."""

    def validate(self, value: Any) -> None:
        """Raise ``RuleError`` if *value* is invalid."""
        ...


@runtime_checkable
class ContextRule(Protocol):
    """Value validator that needs the mutation context."""

    def bind(self, context: "MutationContext") -> Rule:
        """Return a copy of the rule bound to *context*."""
        ...

    def validate(self, value: Any) -> None: ...


def is_empty(value: Any) -> bool:
    """``None``, empty strings and empty collections count as empty."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def validate(
    value: Any,
    rules: Sequence[Any],
    context: "MutationContext | None" = None,
) -> None:
    """Run *rules* against *value* in order; the first failure propagates.

    When *context* is given, rules implementing ``ContextRule`` are bound to
    it first.

    Raises:
        RuleError: From the first failing rule.
    """
    for rule in rules:
        if context is not None and isinstance(rule, ContextRule):
            rule = rule.bind(context)
        rule.validate(value)


class Required:
    """Value must not be empty."""

    def validate(self, value: Any) -> None:
        if is_empty(value):
            raise RuleError("required", "cannot be blank")


class Length:
    """String or collection length must be within ``[min, max]``.

    Args:
        min: Minimum length (0 disables the lower bound).
        max: Maximum length (0 disables the upper bound).
    """

    def __init__(self, min: int = 0, max: int = 0) -> None:
        self.min = min
        self.max = max

    def _message(self) -> str:
        if self.min == self.max:
            return f"the length must be exactly {self.min}"
        if self.min and self.max:
            return f"the length must be between {self.min} and {self.max}"
        if self.min:
            return f"the length must be no less than {self.min}"
        return f"the length must be no more than {self.max}"

    def validate(self, value: Any) -> None:
        if is_empty(value):
            return
        length = len(value)
        if (self.min and length < self.min) or (self.max and length > self.max):
            raise RuleError("length", self._message())


class Match:
    """String value must match a regular expression."""

    def __init__(self, pattern: str | re.Pattern) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def validate(self, value: Any) -> None:
        if is_empty(value):
            return
        if not isinstance(value, str) or not self.pattern.search(value):
            raise RuleError("match", "must be in a valid format")


class _BoundRule:
    """Shared ``bind`` implementation for context rules."""

    context: "MutationContext | None" = None

    def bind(self, context: "MutationContext") -> "_BoundRule":
        bound = copy.copy(self)
        bound.context = context
        return bound

    def _require_context(self) -> "MutationContext":
        if self.context is None or self.context.table is None:
            raise RuntimeError(
                f"{type(self).__name__} rule needs a mutation context. "
                "Validate through Table.insert() or Table.update()."
            )
        return self.context


class Unique(_BoundRule):
    """Value must not already exist in the field's column.

    On insert, counts rows whose column equals the value.  On update, counts
    rows holding the same value excluding the record being updated (matched
    by primary key).  String values are compared trimmed.
    """

    def validate(self, value: Any) -> None:
        context = self._require_context()
        table = context.table
        if context.is_insert:
            count = table.count_value(context.db, context.field, value)
        else:
            count = table.count_record(
                context.db, context.field, context.record, exclude_self=True
            )
        if count > 0:
            raise RuleError("unique", "already exists")


class In(_BoundRule):
    """Value must exist in a column of another table.

    Args:
        table: Referenced table.
        field: Referenced field (or its column name).  Defaults to the
            referenced table's first primary key field.

    ``None`` values are not looked up, so nullable references pass.
    """

    def __init__(self, table: "Table", field: "Field | str | None" = None) -> None:
        self.table = table
        self.field = field

    def _referenced_field(self) -> "Field":
        if self.field is None:
            return self.table.primary_key_fields()[0]
        if isinstance(self.field, str):
            return self.table.field(self.field)
        return self.field

    def validate(self, value: Any) -> None:
        context = self._require_context()
        if value is None:
            return
        count = self.table.count_value(context.db, self._referenced_field(), value)
        if count == 0:
            raise RuleError("in", "does not exist")
