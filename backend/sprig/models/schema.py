"""Column introspection for entity tables."""

import re
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from sprig.database import Database

TypeBucket = Literal["int", "float", "string"]
IndexKind = Literal["none", "index", "unique", "primary"]

VARCHAR_DEFAULT_LENGTH = 255
TEXT_LENGTH = 60000

_VARCHAR = re.compile(r"varchar\(([0-9]*)\)")
_INDEX_KINDS: dict[str, IndexKind] = {"PRI": "primary", "MUL": "index", "UNI": "unique"}


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    name: str
    db_type: str
    type: TypeBucket
    length: int | None
    null: bool
    index: IndexKind
    default: Any = None


def describe_column(row: Mapping[str, Any]) -> ColumnDescriptor:
    """Build a descriptor from one ``SHOW COLUMNS`` shaped metadata row."""
    declared = str(row.get("Type") or "")
    lowered = declared.lower()

    if re.search(r"int|bool", lowered):
        bucket: TypeBucket = "int"
    elif "float" in lowered:
        bucket = "float"
    else:
        bucket = "string"

    length = None
    varchar = _VARCHAR.search(lowered)
    if varchar:
        length = int(varchar.group(1)) if varchar.group(1) else VARCHAR_DEFAULT_LENGTH
    elif lowered == "text":
        length = TEXT_LENGTH

    return ColumnDescriptor(
        name=row["Field"],
        db_type=declared.upper(),
        type=bucket,
        length=length,
        null=str(row.get("Null") or "").lower() == "yes",
        index=_INDEX_KINDS.get(row.get("Key") or "", "none"),
        default=row.get("Default"),
    )


async def columns_of(db: Database, table: str) -> list[ColumnDescriptor]:
    """Describe the columns of ``table``. A missing table or failed query gives ``[]``."""
    rows = await db.describe(table)
    if not rows:
        return []
    return [describe_column(row) for row in rows]


class ColumnCache:
    """Per-table column lists kept for the life of the process."""

    def __init__(self) -> None:
        self._columns: dict[str, list[ColumnDescriptor]] = {}

    async def get(self, db: Database, table: str) -> list[ColumnDescriptor]:
        if table not in self._columns:
            columns = await columns_of(db, table)
            if not columns:
                return columns
            self._columns[table] = columns
        return self._columns[table]

    def clear(self, table: str | None = None) -> None:
        if table is None:
            self._columns.clear()
        else:
            self._columns.pop(table, None)
