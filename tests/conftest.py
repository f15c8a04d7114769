"""Shared fixtures: in-memory SQLite databases, spy connections and sample tables."""

import itertools
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from db_mapper.adapters.base import ColumnType, ExecResult
from db_mapper.adapters.sqla import SqlAlchemyDatabase
from db_mapper.schema.field import Field
from db_mapper.schema.table import Table
from db_mapper.validation.rules import In, Unique

DDL = [
    """
    CREATE TABLE teams (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(50) NOT NULL
    )
    """,
    """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email VARCHAR(255),
        team_id INT,
        score REAL,
        active BOOLEAN,
        created_at VARCHAR(32),
        updated_at VARCHAR(32)
    )
    """,
    """
    CREATE TABLE memberships (
        user_id INT NOT NULL,
        group_id INT NOT NULL,
        role VARCHAR(20),
        PRIMARY KEY (user_id, group_id)
    )
    """,
]


class FakeRows:
    """In-memory ``Rows`` used to drive the decoder without a database."""

    def __init__(self, columns: list[tuple[str, str]], rows: list[tuple]) -> None:
        self.columns = [ColumnType(name=n, type_name=t) for n, t in columns]
        self._rows = rows
        self.closed = False
        self.fetched = 0

    def __iter__(self) -> Iterator[tuple]:
        for row in self._rows:
            self.fetched += 1
            yield row

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        for statement in DDL:
            conn.execute(text(statement))
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine: Engine) -> Iterator[SqlAlchemyDatabase]:
    """A ``SqlAlchemyDatabase`` on one connection; rolled back afterwards."""
    with engine.connect() as conn:
        yield SqlAlchemyDatabase(conn)


@pytest.fixture
def spy_db() -> MagicMock:
    """Connection double recording every statement; counts return 0."""
    spy = MagicMock()
    spy.execute.return_value = ExecResult(last_insert_id=1, rows_affected=1)
    spy.query_row.return_value = (0,)
    return spy


@pytest.fixture
def clock() -> Any:
    """Provider returning a new timestamp string on every call."""
    counter = itertools.count(1)
    return lambda: f"2024-01-01 00:00:{next(counter):02d}"


@pytest.fixture
def teams() -> Table:
    return Table(
        "teams",
        [
            Field(name="id", primary_key=True, auto_increment=True, sql_type="INT"),
            Field(name="name", sql_type="VARCHAR"),
        ],
    )


@pytest.fixture
def simple_users() -> Table:
    """The two-column users schema: auto-increment id and unique email."""
    return Table(
        "users",
        [
            Field(name="id", primary_key=True, auto_increment=True, sql_type="INT"),
            Field(name="email", key="email", sql_type="VARCHAR", validations=[Unique()]),
        ],
    )


@pytest.fixture
def users(teams: Table, clock: Any) -> Table:
    return Table(
        "users",
        [
            Field(name="id", primary_key=True, auto_increment=True, sql_type="INT"),
            Field(name="email", sql_type="VARCHAR", validations=[Unique()]),
            Field(name="team_id", sql_type="INT", validations=[In(teams)]),
            Field(name="score", sql_type="REAL", default=0.0),
            Field(name="active", sql_type="BOOLEAN", default=True),
            Field(name="created_at", sql_type="VARCHAR", read_only=True, default=clock),
            Field(name="updated_at", sql_type="VARCHAR", read_only=True, on_update=clock),
        ],
    )


@pytest.fixture
def memberships() -> Table:
    return Table(
        "memberships",
        [
            Field(name="user_id", primary_key=True, sql_type="INT"),
            Field(name="group_id", primary_key=True, sql_type="INT"),
            Field(name="role", sql_type="VARCHAR"),
        ],
    )
