from __future__ import annotations

from sqlalchemy import CursorResult, String, Text, delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from catalog_sync.domain.models import CatalogRecord, FavoriteEntry
from catalog_sync.repositories.base import AbstractFavoritesStore, AbstractRecordStore


class Base(DeclarativeBase):
    pass


class CatalogRecordORM(Base):
    __tablename__ = "catalog_records"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    origin: Mapped[str] = mapped_column(String, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    qr: Mapped[str | None] = mapped_column(String, index=True, nullable=True)
    # Der vollständige Datensatz als JSON; nur Such-/Filterspalten sind normalisiert.
    data: Mapped[str] = mapped_column(Text, nullable=False)


class FavoriteEntryORM(Base):
    __tablename__ = "favorite_entries"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    data: Mapped[str] = mapped_column(Text, nullable=False)


class SQLiteDatabase:
    """
    Ein Engine-Handle pro Prozess, explizit im Composition Root erzeugt
    und an beide Stores übergeben.
    """

    def __init__(self, database_url: str) -> None:
        self.engine: AsyncEngine = create_async_engine(database_url)
        self.async_session_maker = async_sessionmaker(self.engine, expire_on_commit=False)

    async def initialize(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def _record_row(record: CatalogRecord) -> dict[str, str | None]:
    return {
        "id": record.id,
        "origin": record.origin.value,
        "name": record.name,
        "qr": record.qr,
        "data": record.model_dump_json(),
    }


class SQLiteRecordStore(AbstractRecordStore):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    async def upsert(self, record: CatalogRecord) -> CatalogRecord:
        await self.upsert_many([record])
        return record

    async def upsert_many(self, records: list[CatalogRecord]) -> int:
        if not records:
            return 0
        stmt = insert(CatalogRecordORM)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CatalogRecordORM.id],
            set_={
                "origin": stmt.excluded.origin,
                "name": stmt.excluded.name,
                "qr": stmt.excluded.qr,
                "data": stmt.excluded.data,
            },
        )
        # Gleiche Id mehrfach im Batch: der letzte gewinnt
        rows = list({r.id: _record_row(r) for r in records}.values())
        async with self._db.async_session_maker() as session, session.begin():
            await session.execute(stmt, rows)
        return len(rows)

    async def get_all(self) -> list[CatalogRecord]:
        async with self._db.async_session_maker() as session:
            result = await session.execute(select(CatalogRecordORM))
            return [CatalogRecord.model_validate_json(row.data) for row in result.scalars()]

    async def get_by_id(self, record_id: str) -> CatalogRecord | None:
        async with self._db.async_session_maker() as session:
            result = await session.execute(
                select(CatalogRecordORM).where(CatalogRecordORM.id == record_id)
            )
            orm_record = result.scalar_one_or_none()
            if orm_record:
                return CatalogRecord.model_validate_json(orm_record.data)
            return None

    async def find_by_qr(self, code: str) -> CatalogRecord | None:
        async with self._db.async_session_maker() as session:
            result = await session.execute(
                select(CatalogRecordORM).where(CatalogRecordORM.qr == code).limit(1)
            )
            orm_record = result.scalar_one_or_none()
            if orm_record:
                return CatalogRecord.model_validate_json(orm_record.data)
            return None

    async def delete_by_id(self, record_id: str) -> bool:
        async with self._db.async_session_maker() as session, session.begin():
            result = await session.execute(
                delete(CatalogRecordORM).where(CatalogRecordORM.id == record_id)
            )
            if isinstance(result, CursorResult):
                return bool(result.rowcount > 0)
            return False


class SQLiteFavoritesStore(AbstractFavoritesStore):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    async def insert(self, entry: FavoriteEntry) -> FavoriteEntry:
        stmt = insert(FavoriteEntryORM).values(id=entry.id, data=entry.model_dump_json())
        stmt = stmt.on_conflict_do_update(
            index_elements=[FavoriteEntryORM.id],
            set_={"data": stmt.excluded.data},
        )
        async with self._db.async_session_maker() as session, session.begin():
            await session.execute(stmt)
        return entry

    async def delete(self, entry: FavoriteEntry) -> bool:
        async with self._db.async_session_maker() as session, session.begin():
            result = await session.execute(
                delete(FavoriteEntryORM).where(FavoriteEntryORM.id == entry.id)
            )
            if isinstance(result, CursorResult):
                return bool(result.rowcount > 0)
            return False

    async def get_by_id(self, record_id: str) -> FavoriteEntry | None:
        async with self._db.async_session_maker() as session:
            result = await session.execute(
                select(FavoriteEntryORM).where(FavoriteEntryORM.id == record_id)
            )
            orm_entry = result.scalar_one_or_none()
            if orm_entry:
                return FavoriteEntry.model_validate_json(orm_entry.data)
            return None

    async def get_all(self) -> list[FavoriteEntry]:
        async with self._db.async_session_maker() as session:
            result = await session.execute(select(FavoriteEntryORM))
            return [FavoriteEntry.model_validate_json(row.data) for row in result.scalars()]
