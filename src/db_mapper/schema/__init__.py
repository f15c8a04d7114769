"""Schema model: fields, tables, dataset queries and the mutation context.

Usage:
    from db_mapper.schema import Field, Table, Query, MutationContext, Operation
"""

from db_mapper.schema.field import Constant, Field, Provider, current_timestamp
from db_mapper.schema.context import MutationContext, Operation
from db_mapper.schema.table import Table
from db_mapper.schema.query import Query

__all__ = [
    "Field",
    "Constant",
    "Provider",
    "current_timestamp",
    "MutationContext",
    "Operation",
    "Table",
    "Query",
]
