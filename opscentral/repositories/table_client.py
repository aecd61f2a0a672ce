"""
Generic table client: select / insert / update / delete with equality filters.

This is the only module that talks SQLAlchemy to the row store. Each call runs
in its own short session and either commits or rolls back; failures are
translated into the StoreError family.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from opscentral.database import Base
from opscentral.models import job, resources, system_settings  # noqa: F401
from opscentral.repositories.errors import (
    RecordNotFoundError,
    SchemaMismatchError,
    translate_db_error,
)

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class TableClient:
    def __init__(self, session_factory: Callable[[], Session], metadata=None):
        self._session_factory = session_factory
        self._metadata = metadata if metadata is not None else Base.metadata

    def _table(self, name: str) -> Table:
        try:
            return self._metadata.tables[name]
        except KeyError:
            raise SchemaMismatchError(f"relation {name!r} is not defined") from None

    @staticmethod
    def _where(table: Table, filters: Row | None) -> list:
        clauses = []
        for column_name, value in (filters or {}).items():
            if column_name not in table.c:
                raise SchemaMismatchError(
                    f"no such column: {table.name}.{column_name}"
                )
            clauses.append(table.c[column_name] == value)
        return clauses

    def select(
        self,
        table_name: str,
        filters: Row | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        table = self._table(table_name)
        stmt = select(table).where(*self._where(table, filters))
        if order_by:
            if order_by not in table.c:
                raise SchemaMismatchError(f"no such column: {table_name}.{order_by}")
            column = table.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        with self._session_factory() as db:
            try:
                rows = db.execute(stmt).mappings().all()
            except SQLAlchemyError as exc:
                raise translate_db_error(exc) from exc
        return [dict(row) for row in rows]

    def select_one(self, table_name: str, filters: Row) -> Row | None:
        rows = self.select(table_name, filters)
        return rows[0] if rows else None

    def insert(self, table_name: str, rows: list[Row]) -> int:
        """Insert all rows in one transaction. Nothing is written if any row fails."""
        if not rows:
            return 0
        table = self._table(table_name)
        with self._session_factory() as db:
            try:
                db.execute(insert(table), rows)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.warning("table_client: insert into %s failed: %s", table_name, exc)
                raise translate_db_error(exc) from exc
        return len(rows)

    def update(self, table_name: str, values: Row, filters: Row) -> int:
        table = self._table(table_name)
        stmt = update(table).where(*self._where(table, filters)).values(**values)
        with self._session_factory() as db:
            try:
                result = db.execute(stmt)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.warning("table_client: update of %s failed: %s", table_name, exc)
                raise translate_db_error(exc) from exc
        if result.rowcount == 0:
            raise RecordNotFoundError(f"{table_name}: no row matches {filters}")
        return result.rowcount

    def delete(self, table_name: str, filters: Row) -> int:
        table = self._table(table_name)
        stmt = delete(table).where(*self._where(table, filters))
        with self._session_factory() as db:
            try:
                result = db.execute(stmt)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.warning("table_client: delete from %s failed: %s", table_name, exc)
                raise translate_db_error(exc) from exc
        if result.rowcount == 0:
            raise RecordNotFoundError(f"{table_name}: no row matches {filters}")
        return result.rowcount
