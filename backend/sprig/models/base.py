"""Active-record base for single-table entities.

A concrete entity binds ``__tablename__`` and declares its columns as typed
class attributes::

    class Note(Entity):
        __tablename__ = "notes"

        title: str = ""
        views: int = 0

Hydration only assigns declared fields. Row keys and field names are matched
in internal case (``createdAt``), columns are written back in external case
(``created_at``).
"""

import typing
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, ClassVar, Mapping

from sprig.config import Settings, settings as default_settings
from sprig.core.errors import NotFoundError
from sprig.core.ids import new_uuid
from sprig.core.keycase import to_external_case, to_internal_case
from sprig.core.text import esc
from sprig.core.timefmt import DEFAULT_DISPLAY_FORMAT, parse_offset, parse_storage, to_storage, utc_now
from sprig.database import Database
from sprig.models.schema import ColumnCache, ColumnDescriptor, columns_of

STORE_MANAGED = ("created_at", "updated_at")
DERIVED = frozenset(
    {
        "created_at_formatted",
        "created_at_local",
        "created_at_local_formatted",
        "updated_at_formatted",
        "updated_at_local",
        "updated_at_local_formatted",
    }
)


@dataclass(frozen=True, slots=True)
class Field:
    attr: str
    name: str
    column: str
    kind: type
    derived: bool = False

    def coerce(self, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, datetime):
            return to_storage(value)
        if isinstance(value, date):
            return to_storage(datetime.combine(value, time()))
        if isinstance(value, str):
            value = esc(value)
            if self.kind in (int, float) and value.strip():
                try:
                    return self.kind(value)
                except ValueError:
                    return value
            return value
        if self.kind is int and isinstance(value, bool):
            return int(value)
        return value


class Entity:
    __tablename__: ClassVar[str] = ""
    __column_cache__: ClassVar[ColumnCache | None] = None
    __fields__: ClassVar[dict[str, Field]] = {}

    id: str = ""
    created_at: str = ""
    created_at_formatted: str = ""
    created_at_local: str = ""
    created_at_local_formatted: str = ""
    updated_at: str = ""
    updated_at_formatted: str = ""
    updated_at_local: str = ""
    updated_at_local_formatted: str = ""

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        cls.__fields__ = _build_registry(cls)

    def __init__(self, row: Mapping[str, Any] | None = None, *, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings
        for f in self.__fields__.values():
            setattr(self, f.attr, getattr(type(self), f.attr, ""))

        if not self.id:
            self.id = new_uuid()

        for key, value in (row or {}).items():
            f = self.__fields__.get(to_internal_case(key))
            if f is not None and not f.derived:
                setattr(self, f.attr, f.coerce(value))

        # updated_at falls back to "now" whenever the row leaves it empty.
        self.created_at = self.created_at or utc_now()
        self.updated_at = self.updated_at or utc_now()
        self._derive_timestamps()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.__tablename__}:{self.id}>"

    def _derive_timestamps(self) -> None:
        fmt = self._settings.datetime_format or DEFAULT_DISPLAY_FORMAT
        offset = self._settings.datetime_offset
        for stamp in STORE_MANAGED:
            value = getattr(self, stamp)
            try:
                parsed = parse_storage(value)
            except ValueError:
                # Zero dates and other unparseable stamps leave the derived fields empty.
                continue
            setattr(self, f"{stamp}_formatted", parsed.strftime(fmt))
            if offset:
                local = parsed + parse_offset(offset)
                setattr(self, f"{stamp}_local", to_storage(local))
                setattr(self, f"{stamp}_local_formatted", local.strftime(fmt))

    @classmethod
    async def load(cls, db: Database, item_id: str, *, settings: Settings | None = None):
        """Fetch the row with ``item_id``. Raises NotFoundError when there is none."""
        row = await db.get(cls.__tablename__, ["*"], {"id": item_id})
        if not row:
            raise NotFoundError(item_id, cls.__tablename__)
        return cls(row, settings=settings)

    @classmethod
    async def from_source(cls, db: Database, source: str | Mapping[str, Any], *, settings: Settings | None = None):
        """Build from an id (loaded from the store) or from a raw row."""
        if isinstance(source, str) and source:
            return await cls.load(db, source, settings=settings)
        return cls(source or None, settings=settings)

    async def columns(self, db: Database) -> list[ColumnDescriptor]:
        if self.__column_cache__ is not None:
            return await self.__column_cache__.get(db, self.__tablename__)
        return await columns_of(db, self.__tablename__)

    async def insert(self, db: Database) -> bool:
        """Insert every declared field that is a column of the table.

        ``created_at`` and ``updated_at`` are left to the store's defaults.
        """
        names = {c.name for c in await self.columns(db)}
        row = {}
        for f in self.__fields__.values():
            if f.column in names and f.column not in STORE_MANAGED:
                row[f.column] = getattr(self, f.attr)
        return await db.insert(self.__tablename__, row)

    async def update(self, db: Database, data: Mapping[str, Any]) -> bool:
        """Write ``data`` to this row as given. Keys must be column names."""
        return await db.update(self.__tablename__, data, {"id": self.id})

    async def delete(self, db: Database) -> bool:
        return await db.delete(self.__tablename__, {"id": self.id})

    def to_dict(self) -> dict[str, Any]:
        """Field values keyed by internal-case name, derived fields included."""
        return {name: getattr(self, f.attr) for name, f in self.__fields__.items()}


def _build_registry(cls: type) -> dict[str, Field]:
    registry: dict[str, Field] = {}
    for attr, hint in typing.get_type_hints(cls).items():
        if attr.startswith("_") or typing.get_origin(hint) is ClassVar or hint is ClassVar:
            continue
        kind = hint if isinstance(hint, type) else str
        name = to_internal_case(attr)
        registry[name] = Field(
            attr=attr,
            name=name,
            column=to_external_case(name),
            kind=kind,
            derived=attr in DERIVED,
        )
    return registry


Entity.__fields__ = _build_registry(Entity)
