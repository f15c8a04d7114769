"""Tests for the SELECT builder."""

from db_mapper.sqlbuilder import Selector, select


class TestSelector:
    """Verify SELECT rendering."""

    def test_star_when_no_columns(self) -> None:
        assert Selector().from_("users").sql() == "SELECT * FROM users"

    def test_all_clauses(self) -> None:
        sql = (
            select("u.id", "g.name")
            .from_("users u")
            .join("LEFT JOIN teams g ON g.id = u.team_id")
            .where("u.active = ?")
            .order_by("u.id DESC")
            .limit(10)
            .offset(20)
            .sql()
        )

        assert sql == (
            "SELECT u.id, g.name FROM users u "
            "LEFT JOIN teams g ON g.id = u.team_id "
            "WHERE u.active = ? ORDER BY u.id DESC LIMIT 10 OFFSET 20"
        )

    def test_immutable(self) -> None:
        base = select("id").from_("users")
        refined = base.where("id = ?")

        assert base.sql() == "SELECT id FROM users"
        assert refined.sql() == "SELECT id FROM users WHERE id = ?"

    def test_where_and(self) -> None:
        selector = Selector().from_("t").where_and("a = ?").where_and("b = ?")

        assert selector.sql() == "SELECT * FROM t WHERE a = ? AND b = ?"

    def test_limit_zero_rendered(self) -> None:
        assert Selector().from_("t").limit(0).sql() == "SELECT * FROM t LIMIT 0"


class TestMerge:
    """Verify call-site selectors overlay a base selector."""

    def test_overlay(self) -> None:
        base = select("id", "email").from_("users").join("JOIN a ON a.id = users.a_id")
        call = Selector().join("JOIN b ON b.id = users.b_id").where("id = ?").limit(1)

        assert base.merge(call).sql() == (
            "SELECT id, email FROM users JOIN a ON a.id = users.a_id "
            "JOIN b ON b.id = users.b_id WHERE id = ? LIMIT 1"
        )

    def test_merge_none(self) -> None:
        base = select("id").from_("users")

        assert base.merge(None) is base

    def test_columns_replaced(self) -> None:
        base = select("id", "email").from_("users")

        assert base.merge(select("COUNT(*)")).sql() == "SELECT COUNT(*) FROM users"
