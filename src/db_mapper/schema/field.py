"""Field descriptor: the schema description of one table column.

Usage:
    from db_mapper.schema.field import Field, current_timestamp
    from db_mapper.validation import Required, Unique

    Field(name="id", primary_key=True, auto_increment=True, sql_type="INT")
    Field(name="email", sql_type="VARCHAR", validations=[Required(), Unique()])
    Field(name="created_at", read_only=True, default=current_timestamp)
    Field(name="updated_at", read_only=True, on_update=current_timestamp)
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field as ModelField, field_validator

from db_mapper.naming import DEFAULT_NAMING, Naming


class Constant:
    """A literal default value."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def resolve(self) -> Any:
        return self.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Constant) and other.value == self.value

    def __repr__(self) -> str:
        return f"Constant({self.value!r})"


class Provider:
    """A zero-argument function producing a value, called on every mutation."""

    __slots__ = ("func",)

    def __init__(self, func: Callable[[], Any]) -> None:
        self.func = func

    def resolve(self) -> Any:
        return self.func()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Provider) and other.func is self.func

    def __repr__(self) -> str:
        return f"Provider({getattr(self.func, '__name__', self.func)!r})"


ValueSource = Constant | Provider


def current_timestamp() -> datetime:
    """Provider returning the current local time."""
    return datetime.now()


def to_value_source(value: Any) -> ValueSource | None:
    """Normalise a literal or a callable into ``Constant`` / ``Provider``.

    ``None`` means "not configured" and is kept as ``None``.

    Example:
        >>> to_value_source(0)
        Constant(0)
        >>> to_value_source(current_timestamp)
        Provider('current_timestamp')
    """
    if value is None or isinstance(value, (Constant, Provider)):
        return value
    if callable(value):
        return Provider(value)
    return Constant(value)


class Field(BaseModel):
    """Schema description of one column.

    Attributes:
        name: Physical column name.  Must be non-blank.
        key: External key used in records.  Derived from ``name`` when unset.
        title: Label used in validation messages.  Derived when unset.
        sql_type: Declared SQL type, used as a decoding hint on SELECT.
        primary_key: Column is part of the primary key.
        auto_increment: Value is assigned by the database on INSERT.
        read_only: Callers cannot set the value; only ``default`` (INSERT)
            and ``on_update`` (UPDATE) write it.
        default: Literal or zero-argument callable used on INSERT.
        on_update: Literal or zero-argument callable used on UPDATE.
        validations: Rules run in order against the resolved value.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    key: str | None = None
    title: str | None = None
    sql_type: str | None = None
    primary_key: bool = False
    auto_increment: bool = False
    read_only: bool = False
    default: Any = None
    on_update: Any = None
    validations: tuple[Any, ...] = ModelField(default_factory=tuple)

    @field_validator("default", "on_update", mode="before")
    @classmethod
    def _value_source(cls, value: Any) -> ValueSource | None:
        return to_value_source(value)

    @field_validator("validations", mode="before")
    @classmethod
    def _rules_tuple(cls, value: Any) -> tuple[Any, ...]:
        if value is None:
            return ()
        return tuple(value)

    def get_key(self, naming: Naming = DEFAULT_NAMING) -> str:
        """External key, derived from ``name`` when not set explicitly."""
        return self.key or naming.key(self.name)

    def get_title(self, naming: Naming = DEFAULT_NAMING) -> str:
        """Display title, derived from ``name`` when not set explicitly."""
        return self.title or naming.title(self.name)

    def get_default(self) -> Any:
        """Resolve the INSERT default; providers are called every time."""
        return self.default.resolve() if self.default is not None else None

    def get_on_update(self) -> Any:
        """Resolve the UPDATE value; providers are called every time."""
        return self.on_update.resolve() if self.on_update is not None else None
