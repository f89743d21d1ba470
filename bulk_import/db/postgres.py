from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

from psycopg2 import sql

from ..errors import PersistenceError
from ..models.config_models import ImportConfig
from ..models.reference import ReferenceEntity

"""PostgreSQL repository (psycopg2).

Runs on a cursor owned by the caller, inside one transaction the caller
commits. Every per-row statement (create, sequence count) runs inside a
SAVEPOINT so a failing row is rolled back alone and the remaining rows
of the batch still go through.

Table and column names come from configuration and are quoted with
``psycopg2.sql.Identifier``; values are always passed as parameters.
"""

__all__ = [
    "PostgresRepository",
]

logger = logging.getLogger(__name__)

SAVEPOINT = sql.Identifier("bulk_import_row")


class PostgresRepository:
    def __init__(self, cursor: Any, config: ImportConfig | None = None) -> None:
        self.cursor = cursor
        self.config = config or ImportConfig()

    def _table(self, entity: str) -> sql.Identifier:
        try:
            return sql.Identifier(self.config.tables[entity])
        except KeyError:
            raise PersistenceError(f"no table configured for entity '{entity}'") from None

    def list_all(self, collection: str) -> list[ReferenceEntity]:
        try:
            cfg = self.config.collections[collection]
        except KeyError:
            raise PersistenceError(f"no table configured for collection '{collection}'") from None

        code = sql.Identifier(cfg.code_column) if cfg.code_column else sql.SQL("NULL")
        query = sql.SQL("SELECT {id}, {name}, {code} FROM {table} ORDER BY {id}").format(
            id=sql.Identifier(cfg.id_column),
            name=sql.Identifier(cfg.name_column),
            code=code,
            table=sql.Identifier(cfg.table),
        )
        try:
            self.cursor.execute(query)
            rows = self.cursor.fetchall()
        except Exception as e:
            raise PersistenceError(f"cannot load {collection}: {e}") from e
        return [
            ReferenceEntity(id=str(r[0]), name=r[1] or "", code=None if r[2] is None else str(r[2]))
            for r in rows
        ]

    @contextmanager
    def _savepoint(self) -> Iterator[None]:
        """Run the block inside a SAVEPOINT; a failure rolls back to it and re-raises."""
        self.cursor.execute(sql.SQL("SAVEPOINT {}").format(SAVEPOINT))
        try:
            yield
        except Exception:
            self.cursor.execute(sql.SQL("ROLLBACK TO SAVEPOINT {}").format(SAVEPOINT))
            raise
        self.cursor.execute(sql.SQL("RELEASE SAVEPOINT {}").format(SAVEPOINT))

    def create(self, entity: str, payload: dict[str, Any]) -> str:
        columns = list(payload)
        query = sql.SQL("INSERT INTO {table} ({cols}) VALUES ({vals}) RETURNING id").format(
            table=self._table(entity),
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            vals=sql.SQL(", ").join(sql.Placeholder() * len(columns)),
        )
        try:
            with self._savepoint():
                self.cursor.execute(query, [payload[c] for c in columns])
                row = self.cursor.fetchone()
        except Exception as e:
            raise PersistenceError(str(e).strip() or e.__class__.__name__) from e
        new_id = row[0] if row else payload.get("id")
        return str(new_id)

    def next_sequence_number(self, unit_id: str | None, year: int) -> int:
        """Contracts of ``unit_id`` signed in ``year``, plus one."""
        query = sql.SQL(
            "SELECT count(*) FROM {table} WHERE unit_id IS NOT DISTINCT FROM %s "
            "AND signed_date >= %s AND signed_date < %s"
        ).format(table=self._table("contract"))
        try:
            with self._savepoint():
                self.cursor.execute(query, (unit_id, date(year, 1, 1), date(year + 1, 1, 1)))
                (count,) = self.cursor.fetchone()
        except Exception as e:
            raise PersistenceError(f"cannot compute contract number: {e}") from e
        logger.debug("unit=%s year=%d existing contracts=%d", unit_id, year, count)
        return int(count) + 1
