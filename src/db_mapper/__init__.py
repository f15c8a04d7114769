"""db-mapper: schema-driven table mapping over plain SQL connections.

Declare tables as ordered field descriptors and get parameterized
INSERT / UPDATE / DELETE synthesis, defaults resolved at mutation time,
database-aware validation (uniqueness, references) and NULL-safe row
decoding into dicts.

Usage:
    from db_mapper import Field, Table, Unique, SqlAlchemyDatabase
    from db_mapper import load_config, get_engine, connect
    from db_mapper import MapperError, ValidationError
"""

__version__ = "0.1.0"

# Errors
from db_mapper.errors import (
    InUseError,
    MapperError,
    MissingKeyError,
    PreflightError,
    ProfileNotFoundError,
    SchemaError,
    ValidationError,
)

# Config
from db_mapper.config.loader import load_config
from db_mapper.config.models import DatabaseProfile, MapperConfig, NamingConfig
from db_mapper.naming import Naming

# Adapters
from db_mapper.adapters.base import Database, ExecResult
from db_mapper.adapters.dbapi import DbApiDatabase
from db_mapper.adapters.sqla import SqlAlchemyDatabase

# Decoding and SQL building
from db_mapper.decoder import map_query, map_query_row
from db_mapper.sqlbuilder import Selector, select

# Schema and mutations
from db_mapper.schema import (
    Constant,
    Field,
    MutationContext,
    Operation,
    Provider,
    Query,
    Table,
    current_timestamp,
)
from db_mapper.mutation import default_delete, default_insert, default_update
from db_mapper.result import Result
from db_mapper.checkers import deleter, exists

# Validation
from db_mapper.validation import In, Length, Match, Required, RuleError, Unique

# Factory
from db_mapper.factory import connect, get_engine, get_naming, resolve_url

__all__ = [
    # Errors
    "MapperError",
    "SchemaError",
    "MissingKeyError",
    "ValidationError",
    "PreflightError",
    "InUseError",
    "ProfileNotFoundError",
    # Config
    "load_config",
    "MapperConfig",
    "DatabaseProfile",
    "NamingConfig",
    "Naming",
    # Adapters
    "Database",
    "ExecResult",
    "SqlAlchemyDatabase",
    "DbApiDatabase",
    # Decoding and SQL building
    "map_query",
    "map_query_row",
    "Selector",
    "select",
    # Schema and mutations
    "Field",
    "Constant",
    "Provider",
    "current_timestamp",
    "Table",
    "Query",
    "MutationContext",
    "Operation",
    "Result",
    "default_insert",
    "default_update",
    "default_delete",
    "exists",
    "deleter",
    # Validation
    "RuleError",
    "Required",
    "Length",
    "Match",
    "Unique",
    "In",
    # Factory
    "get_engine",
    "connect",
    "get_naming",
    "resolve_url",
]
