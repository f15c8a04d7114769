"""Result handle returned by mutations."""

import logging
from typing import TYPE_CHECKING, Any

from db_mapper.adapters.base import Database, ExecResult
from db_mapper.schema.context import Operation

if TYPE_CHECKING:
    from db_mapper.schema.table import Table

logger = logging.getLogger(__name__)


class Result:
    """Outcome of an INSERT, UPDATE or DELETE.

    Holds the driver outcome, the record as submitted (after defaults were
    resolved) and the table/connection needed to re-read the stored row.
    The connection is only used again if ``record(refresh=True)`` is called;
    it must still be usable at that point.

    Example:
        result = users.insert(db, {"email": "a@x.com"})
        result.last_insert_id          # 1
        result.record()                # {'email': 'a@x.com'}
        result.record(refresh=True)    # {'id': 1, 'email': 'a@x.com'}
    """

    def __init__(
        self,
        outcome: ExecResult,
        operation: Operation,
        db: Database,
        table: "Table",
        record: dict[str, Any],
    ) -> None:
        self.outcome = outcome
        self.operation = operation
        self.db = db
        self.table = table
        self._record = dict(record)

    def __repr__(self) -> str:
        return (
            f"Result({self.operation.value} {self.table.name}, "
            f"rows_affected={self.rows_affected}, last_insert_id={self.last_insert_id})"
        )

    @property
    def last_insert_id(self) -> int | None:
        return self.outcome.last_insert_id

    @property
    def rows_affected(self) -> int:
        return self.outcome.rows_affected

    def record(self, refresh: bool = False) -> dict[str, Any] | None:
        """Return the submitted record, optionally merged with the stored row.

        Args:
            refresh: Re-read the row from the database.  After an INSERT into
                a table whose auto-increment field is a primary key, the
                driver's last insert id is merged in first so the new row
                can be addressed.

        Returns:
            The submitted record when *refresh* is false.  Otherwise the
            submitted record overlaid with the fetched columns, or ``None``
            when the row is not found.

        Raises:
            MissingKeyError: If the primary key cannot be derived.
            SchemaError: If the table defines no primary key.
        """
        if not refresh:
            return dict(self._record)

        snapshot = dict(self._record)
        auto_inc = self.table.auto_increment
        if (
            self.operation is Operation.INSERT
            and auto_inc is not None
            and self.table.fields[auto_inc].primary_key
            and self.last_insert_id is not None
        ):
            snapshot[self.table.key_of(auto_inc)] = self.last_insert_id

        where, args = self.table.where_primary_key(snapshot)
        row = self.table.select_one(self.db, where, args)
        if row is None:
            logger.debug(f"Table {self.table.name}: no row found for {where}")
            return None
        snapshot.update(row)
        return snapshot
