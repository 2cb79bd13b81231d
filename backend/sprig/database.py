"""Backing store provider: flat key/value rows over an async SQLAlchemy engine.

Write helpers never raise on store errors. Failures are logged and reported
as ``False`` so callers decide how to react.
"""

import logging
from typing import Any, Iterable, Mapping

from sqlalchemy import column, delete, insert, inspect, select, table, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger("sprig.db")


def _where(tbl, where: Mapping[str, Any]):
    return [tbl.c[key] == value for key, value in where.items()]


class Database:
    """Row-level data access used by entities and the schema inspector."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    async def get(
        self,
        table_name: str,
        columns: Iterable[str] = ("*",),
        where: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Return the first matching row, or None."""
        where = where or {}
        columns = list(columns)
        tbl = table(table_name, *[column(c) for c in {*columns, *where} if c != "*"])
        if "*" in columns:
            stmt = select(text("*")).select_from(tbl)
        else:
            stmt = select(*[tbl.c[c] for c in columns])
        stmt = stmt.where(*_where(tbl, where)).limit(1)
        try:
            async with self.engine.connect() as conn:
                row = (await conn.execute(stmt)).mappings().first()
        except SQLAlchemyError as exc:
            logger.warning("get from %s failed: %s", table_name, exc)
            return None
        return dict(row) if row is not None else None

    async def query(self, statement: str, params: Mapping[str, Any] | None = None) -> list[dict] | None:
        """Run a raw statement. Returns the result rows, or None when it fails."""
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(text(statement), dict(params or {}))
                if not result.returns_rows:
                    return []
                return [dict(r) for r in result.mappings().all()]
        except SQLAlchemyError as exc:
            logger.warning("query failed: %s", exc)
            return None

    async def describe(self, table_name: str) -> list[dict] | None:
        """Column metadata rows shaped like ``SHOW COLUMNS`` output.

        Keys: ``Field``, ``Type``, ``Null`` (YES/NO), ``Key`` (PRI/UNI/MUL or
        empty) and ``Default``. Returns None when the table cannot be read.
        """
        if self.dialect in ("mysql", "mariadb"):
            return await self.query(f"SHOW COLUMNS FROM `{table_name}`")
        try:
            async with self.engine.connect() as conn:
                return await conn.run_sync(_inspect_columns, table_name)
        except SQLAlchemyError as exc:
            logger.warning("describe %s failed: %s", table_name, exc)
            return None

    async def insert(self, table_name: str, row: Mapping[str, Any]) -> bool:
        if not row:
            logger.warning("insert into %s skipped: no columns", table_name)
            return False
        tbl = table(table_name, *[column(c) for c in row])
        return await self._write(insert(tbl).values(**row), table_name, "insert")

    async def update(self, table_name: str, row: Mapping[str, Any], where: Mapping[str, Any]) -> bool:
        if not row:
            logger.warning("update of %s skipped: no columns", table_name)
            return False
        tbl = table(table_name, *[column(c) for c in {*row, *where}])
        stmt = update(tbl).where(*_where(tbl, where)).values(**row)
        return await self._write(stmt, table_name, "update")

    async def delete(self, table_name: str, where: Mapping[str, Any]) -> bool:
        tbl = table(table_name, *[column(c) for c in where])
        return await self._write(delete(tbl).where(*_where(tbl, where)), table_name, "delete")

    async def _write(self, stmt, table_name: str, action: str) -> bool:
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
        except SQLAlchemyError as exc:
            logger.warning("%s on %s failed: %s", action, table_name, exc)
            return False
        if action != "insert" and result.rowcount == 0:
            logger.info("%s on %s matched no rows", action, table_name)
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


def _inspect_columns(sync_conn, table_name: str) -> list[dict]:
    insp = inspect(sync_conn)
    columns = insp.get_columns(table_name)
    primary = set(insp.get_pk_constraint(table_name).get("constrained_columns") or [])
    unique: set[str] = set()
    for constraint in insp.get_unique_constraints(table_name):
        if len(constraint["column_names"]) == 1:
            unique.update(constraint["column_names"])
    indexed: set[str] = set()
    for index in insp.get_indexes(table_name):
        names = [n for n in index["column_names"] if n]
        if index.get("unique") and len(names) == 1:
            unique.update(names)
        elif names:
            indexed.add(names[0])

    rows = []
    for col in columns:
        name = col["name"]
        if name in primary:
            key = "PRI"
        elif name in unique:
            key = "UNI"
        elif name in indexed:
            key = "MUL"
        else:
            key = ""
        rows.append(
            {
                "Field": name,
                "Type": str(col["type"]),
                "Null": "YES" if col.get("nullable", True) else "NO",
                "Key": key,
                "Default": col.get("default"),
            }
        )
    return rows
