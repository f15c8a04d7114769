"""Database adapters package.

Provides the ``Database`` Protocol consumed by the mapper and concrete
synchronous adapters for SQLAlchemy connections and raw DB-API
connections.

Usage:
    from db_mapper.adapters import Database, SqlAlchemyDatabase, DbApiDatabase
"""

from db_mapper.adapters.base import ColumnType, Database, ExecResult, Rows
from db_mapper.adapters.dbapi import DbApiDatabase
from db_mapper.adapters.sqla import SqlAlchemyDatabase

__all__ = [
    "Database",
    "Rows",
    "ColumnType",
    "ExecResult",
    "SqlAlchemyDatabase",
    "DbApiDatabase",
]
