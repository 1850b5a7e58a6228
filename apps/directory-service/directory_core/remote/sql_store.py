"""
Relational remote store backed by SQLAlchemy Core.

Serves the table-oriented contract straight from the directory models'
metadata. Blocking database work runs in a worker thread; SQLite access is
serialized because the in-memory database shares a single connection.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import nullcontext
from typing import Any, Iterable, Mapping, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from directory_core.db import models
from directory_core.remote.base import Join, RemoteStoreError, Row, is_multi_value

logger = logging.getLogger(__name__)


def _error_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    if orig is not None and str(orig):
        return str(orig)
    return str(exc)


class SqlRemoteStore:
    """Remote store implementation over a SQLAlchemy engine."""

    def __init__(self, engine: Engine, metadata: sa.MetaData = models.Base.metadata) -> None:
        self.engine = engine
        self.metadata = metadata
        self._lock = threading.Lock() if engine.dialect.name == "sqlite" else None

    async def select(
        self,
        table: str,
        columns: Sequence[str] = ("*",),
        *,
        joins: Iterable[Join] = (),
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        return await self._run(
            self._select, table, tuple(columns), tuple(joins), dict(filters or {}), order_by, descending
        )

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        return await self._run(self._insert, table, [dict(r) for r in rows])

    async def update(self, table: str, values: Mapping[str, Any], *, match: Mapping[str, Any]) -> None:
        await self._run(self._update, table, dict(values), dict(match))

    async def delete(self, table: str, *, match: Mapping[str, Any]) -> None:
        await self._run(self._delete, table, dict(match))

    async def _run(self, fn, *args):
        return await asyncio.to_thread(self._guarded, fn, *args)

    def _guarded(self, fn, *args):
        with self._lock if self._lock is not None else nullcontext():
            try:
                return fn(*args)
            except SQLAlchemyError as exc:
                raise RemoteStoreError(_error_message(exc)) from exc

    def _table(self, name: str) -> sa.Table:
        table = self.metadata.tables.get(name)
        if table is None:
            raise RemoteStoreError(f"relation \"{name}\" does not exist")
        return table

    def _column(self, table: sa.Table, name: str) -> sa.Column:
        if name not in table.c:
            raise RemoteStoreError(f"column {table.name}.{name} does not exist")
        return table.c[name]

    def _conditions(self, table: sa.Table, match: Mapping[str, Any]) -> list:
        conditions = []
        for key, value in match.items():
            column = self._column(table, key)
            if is_multi_value(value):
                conditions.append(column.in_(list(value)))
            else:
                conditions.append(column == value)
        return conditions

    def _select(
        self,
        table_name: str,
        columns: tuple[str, ...],
        joins: tuple[Join, ...],
        filters: dict[str, Any],
        order_by: Optional[str],
        descending: bool,
    ) -> list[Row]:
        table = self._table(table_name)
        if "*" in columns:
            selected = list(table.c)
        else:
            selected = [self._column(table, name) for name in columns]

        from_clause = table
        joined: list[tuple[Join, list[str]]] = []
        for join in joins:
            parent = self._table(join.table).alias(f"j_{join.table}")
            fk = self._column(table, join.fk_column)
            from_clause = from_clause.outerjoin(parent, fk == parent.c.id)
            labels = []
            for col_name in join.columns:
                if col_name not in parent.c:
                    raise RemoteStoreError(f"column {join.table}.{col_name} does not exist")
                label = f"{join.table}__{col_name}"
                selected.append(parent.c[col_name].label(label))
                labels.append(label)
            # presence probe so an all-null parent projection still counts as present
            presence = f"{join.table}__present"
            selected.append(parent.c.id.label(presence))
            joined.append((join, labels))

        stmt = sa.select(*selected).select_from(from_clause)
        conditions = self._conditions(table, filters)
        if conditions:
            stmt = stmt.where(*conditions)
        if order_by:
            order_col = self._column(table, order_by)
            stmt = stmt.order_by(order_col.desc() if descending else order_col.asc())

        with self.engine.connect() as conn:
            result = conn.execute(stmt).mappings().all()

        rows: list[Row] = []
        for record in result:
            row: Row = {}
            for key, value in record.items():
                if "__" not in key:
                    row[key] = value
            for join, labels in joined:
                if record[f"{join.table}__present"] is None:
                    row[join.table] = None
                else:
                    row[join.table] = {label.split("__", 1)[1]: record[label] for label in labels}
            rows.append(row)
        return rows

    def _insert(self, table_name: str, rows: list[dict[str, Any]]) -> list[Row]:
        table = self._table(table_name)
        if not rows:
            return []
        prepared = []
        for row in rows:
            for key in row:
                self._column(table, key)
            if "id" in table.c and row.get("id") is None:
                row["id"] = models.new_id()
            if "created_at" in table.c and row.get("created_at") is None:
                row["created_at"] = models.now_utc()
            prepared.append(row)
        with self.engine.begin() as conn:
            conn.execute(sa.insert(table), prepared)
        logger.debug("Inserted %d row(s) into %s", len(prepared), table_name)
        return [dict(row) for row in prepared]

    def _update(self, table_name: str, values: dict[str, Any], match: dict[str, Any]) -> None:
        table = self._table(table_name)
        if not match:
            raise RemoteStoreError("UPDATE requires a WHERE clause")
        for key in values:
            self._column(table, key)
        if not values:
            return
        stmt = sa.update(table).where(*self._conditions(table, match)).values(**values)
        with self.engine.begin() as conn:
            conn.execute(stmt)

    def _delete(self, table_name: str, match: dict[str, Any]) -> None:
        table = self._table(table_name)
        if not match:
            raise RemoteStoreError("DELETE requires a WHERE clause")
        stmt = sa.delete(table).where(*self._conditions(table, match))
        with self.engine.begin() as conn:
            conn.execute(stmt)
