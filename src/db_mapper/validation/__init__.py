"""Validation rules.

Usage:
    from db_mapper.validation import Required, Length, Match, Unique, In, RuleError
"""

from db_mapper.validation.rules import (
    ContextRule,
    In,
    Length,
    Match,
    Required,
    Rule,
    RuleError,
    Unique,
    is_empty,
    validate,
)

__all__ = [
    "Rule",
    "ContextRule",
    "RuleError",
    "validate",
    "is_empty",
    "Required",
    "Length",
    "Match",
    "Unique",
    "In",
]
