"""Tests for validation rules and context binding."""

import re
from unittest.mock import MagicMock

import pytest

from db_mapper.schema.context import MutationContext, Operation
from db_mapper.schema.field import Field
from db_mapper.schema.table import Table
from db_mapper.validation import (
    ContextRule,
    In,
    Length,
    Match,
    Required,
    RuleError,
    Unique,
    is_empty,
    validate,
)


def _context(operation: Operation, db, table: Table, record: dict, field: Field) -> MutationContext:
    return MutationContext(operation, db, table, record, field=field)


class TestIsEmpty:
    @pytest.mark.parametrize("value", [None, "", b"", [], {}, ()])
    def test_empty(self, value) -> None:
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, False, " ", [0], 0.0])
    def test_not_empty(self, value) -> None:
        assert not is_empty(value)


class TestValueRules:
    """Verify rules that only look at the value."""

    def test_required(self) -> None:
        with pytest.raises(RuleError) as exc:
            Required().validate("")

        assert exc.value.code == "required"
        assert str(exc.value) == "cannot be blank"
        Required().validate(0)

    @pytest.mark.parametrize(
        ("rule", "message"),
        [
            (Length(2, 2), "the length must be exactly 2"),
            (Length(2, 4), "the length must be between 2 and 4"),
            (Length(min=2), "the length must be no less than 2"),
        ],
    )
    def test_length_too_short(self, rule: Length, message: str) -> None:
        with pytest.raises(RuleError, match=message) as exc:
            rule.validate("a")

        assert exc.value.code == "length"

    def test_length_too_long(self) -> None:
        with pytest.raises(RuleError, match="no more than 3"):
            Length(max=3).validate("abcd")

    def test_length_accepts(self) -> None:
        Length(1, 3).validate("ab")
        Length(1, 3).validate([1, 2, 3])
        Length(1, 3).validate("")

    def test_match(self) -> None:
        rule = Match(r"^[a-z]+@[a-z.]+$")

        rule.validate("a@x.com")
        rule.validate(None)
        with pytest.raises(RuleError, match="must be in a valid format") as exc:
            rule.validate("nope")
        assert exc.value.code == "match"

    def test_match_compiled_pattern(self) -> None:
        Match(re.compile(r"\d+")).validate("abc123")

    def test_validate_stops_at_first_failure(self) -> None:
        second = MagicMock()

        with pytest.raises(RuleError, match="cannot be blank"):
            validate("", [Required(), second])
        second.validate.assert_not_called()


class TestContextRules:
    """Verify binding and database-backed rules."""

    def test_protocol_detection(self, teams: Table) -> None:
        assert isinstance(Unique(), ContextRule)
        assert isinstance(In(teams), ContextRule)
        assert not isinstance(Required(), ContextRule)

    def test_bind_returns_copy(self, spy_db: MagicMock, simple_users: Table) -> None:
        rule = Unique()
        field = simple_users.field("email")
        context = _context(Operation.INSERT, spy_db, simple_users, {}, field)

        bound = rule.bind(context)

        assert bound is not rule
        assert bound.context is context
        assert rule.context is None

    def test_unbound_rule_refuses(self) -> None:
        with pytest.raises(RuntimeError, match="needs a mutation context"):
            Unique().validate("a")

    def test_unique_insert(self, spy_db: MagicMock, simple_users: Table) -> None:
        field = simple_users.field("email")
        context = _context(Operation.INSERT, spy_db, simple_users, {"email": "a"}, field)
        spy_db.query_row.return_value = (1,)

        with pytest.raises(RuleError, match="already exists") as exc:
            validate("a", [Unique()], context)

        assert exc.value.code == "unique"
        spy_db.query_row.assert_called_once_with(
            "SELECT COUNT(*) FROM users WHERE TRIM(email) = ?", ["a"]
        )

    def test_unique_update_excludes_self(self, spy_db: MagicMock, simple_users: Table) -> None:
        field = simple_users.field("email")
        record = {"id": 7, "email": "a"}
        context = _context(Operation.UPDATE, spy_db, simple_users, record, field)

        validate("a", [Unique()], context)

        spy_db.query_row.assert_called_once_with(
            "SELECT COUNT(*) FROM users WHERE TRIM(email) = ? AND id <> ?", ["a", 7]
        )

    def test_in_default_primary_key(self, spy_db: MagicMock, users: Table, teams: Table) -> None:
        field = users.field("team_id")
        context = _context(Operation.INSERT, spy_db, users, {"teamID": 3}, field)

        with pytest.raises(RuleError, match="does not exist") as exc:
            validate(3, [In(teams)], context)

        assert exc.value.code == "in"
        spy_db.query_row.assert_called_once_with(
            "SELECT COUNT(*) FROM teams WHERE id = ?", [3]
        )

    def test_in_named_field(self, spy_db: MagicMock, users: Table, teams: Table) -> None:
        field = users.field("team_id")
        context = _context(Operation.INSERT, spy_db, users, {}, field)
        spy_db.query_row.return_value = (1,)

        validate("staff", [In(teams, "name")], context)

        spy_db.query_row.assert_called_once_with(
            "SELECT COUNT(*) FROM teams WHERE TRIM(name) = ?", ["staff"]
        )

    def test_in_skips_none(self, spy_db: MagicMock, users: Table, teams: Table) -> None:
        field = users.field("team_id")
        context = _context(Operation.INSERT, spy_db, users, {}, field)

        validate(None, [In(teams)], context)

        spy_db.query_row.assert_not_called()

    def test_shared_rule_across_fields(self, spy_db: MagicMock) -> None:
        """One Unique instance on two fields checks each field's own column."""
        unique = Unique()
        table = Table(
            "accounts",
            [
                Field(name="id", primary_key=True),
                Field(name="email", validations=[unique]),
                Field(name="login", validations=[unique]),
            ],
        )

        table.insert(spy_db, {"id": 1, "email": "e", "login": "l"})

        sql = [c.args[0] for c in spy_db.query_row.call_args_list]
        assert sql == [
            "SELECT COUNT(*) FROM accounts WHERE TRIM(email) = ?",
            "SELECT COUNT(*) FROM accounts WHERE TRIM(login) = ?",
        ]
        assert unique.context is None
