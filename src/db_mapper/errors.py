"""Exception taxonomy for db-mapper.

Every error raised by the mapper itself derives from ``MapperError`` and
carries a numeric ``code``: 400 for problems the caller can fix (bad
record, failed validation) and 500 for broken schema definitions.

Errors raised by the underlying connection (SQLAlchemy or DB-API driver
exceptions) are never wrapped; they reach the caller untouched.

Usage:
    from db_mapper.errors import MapperError, ValidationError

    try:
        users.insert(db, {"email": "a@x.com"})
    except ValidationError as e:
        print(e.title, e.error.code)
    except MapperError as e:
        print(e.code, e)
"""

from typing import Any

CODE_USER = 400
CODE_INTERNAL = 500

# {title} is the field title, {error} the rule message; title comes first.
VALIDATION_ERROR_FORMAT = "{title}: {error}"

DELETE_ERROR_FORMAT = "can not be deleted, {error}"


class MapperError(Exception):
    """Base class for errors raised by the mapper."""

    code: int = CODE_USER

    def __init__(self, message: str, code: int | None = None) -> None:
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class SchemaError(MapperError):
    """Raised when a table or query definition is unusable."""

    code = CODE_INTERNAL


class MissingKeyError(MapperError, KeyError):
    """Raised when a record lacks a primary key value needed for addressing."""

    def __str__(self) -> str:
        return self.message


class PreflightError(MapperError):
    """Raised when a statement would be semantically empty."""


class InUseError(MapperError):
    """Raised by delete checkers when other rows still reference a record."""


class ValidationError(MapperError):
    """A field failed one of its validation rules.

    Attributes:
        title: Human-readable title of the failing field.
        error: The rule error (usually a ``RuleError``) that was raised.
    """

    def __init__(self, title: str, error: Any) -> None:
        self.title = title
        self.error = error
        super().__init__(VALIDATION_ERROR_FORMAT.format(title=title, error=error))


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass
