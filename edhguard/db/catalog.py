"""
Card catalog store.

Persists CardRecords in an embedded SQLite database through the async
SQLAlchemy engine. Lookups are case-insensitive: every row is keyed by the
case-folded card name and writes replace the existing row.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType
from typing import Any

from sqlalchemy import URL, Connection, func, inspect, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from edhguard.config import settings
from edhguard.db.errors import InvalidRecordError, StoreClosedError, StoreUnavailableError
from edhguard.models.card import CardFace, CardRecord, normalize_card_name
from edhguard.models.db import Base, CardDB

logger = logging.getLogger(__name__)

# Columns overwritten when a row with the same name key already exists
_REPLACED_COLUMNS = (
    "name",
    "type_line",
    "colors",
    "color_identity",
    "rarity",
    "legalities",
    "mana_cost",
    "cmc",
    "image_uris",
    "card_faces",
)


def record_to_row(record: CardRecord) -> dict[str, Any]:
    """Convert a CardRecord to column values for the cards table."""
    faces = [{"name": face.name, "image_uris": face.image_uris} for face in record.faces]
    return {
        "name_key": record.key,
        "name": record.name.strip(),
        "type_line": record.type_line,
        "colors": list(record.colors),
        "color_identity": list(record.color_identity),
        "rarity": record.rarity,
        "legalities": dict(record.legalities),
        "mana_cost": record.mana_cost,
        "cmc": record.cmc,
        "image_uris": dict(record.image_uris) if record.image_uris is not None else None,
        "card_faces": faces or None,
    }


def row_to_record(row: CardDB) -> CardRecord:
    """Convert a catalog row to a CardRecord."""
    faces = tuple(
        CardFace(name=face.get("name", ""), image_uris=face.get("image_uris"))
        for face in row.card_faces or []
    )
    return CardRecord(
        name=row.name,
        type_line=row.type_line,
        colors=tuple(row.colors or ()),
        color_identity=tuple(row.color_identity or ()),
        rarity=row.rarity,
        legalities=dict(row.legalities or {}),
        mana_cost=row.mana_cost,
        cmc=row.cmc,
        image_uris=row.image_uris,
        faces=faces,
    )


def _require_valid(record: CardRecord) -> None:
    if not record.name or not record.name.strip():
        raise InvalidRecordError(record.name, "name is required")
    if not record.type_line or not record.type_line.strip():
        raise InvalidRecordError(record.name, "type_line is required")


def _has_cards_table(conn: Connection) -> bool:
    return inspect(conn).has_table(CardDB.__tablename__)


def _upsert_statement() -> Any:
    stmt = sqlite_insert(CardDB.__table__)
    replaced: dict[str, Any] = {column: stmt.excluded[column] for column in _REPLACED_COLUMNS}
    replaced["updated_at"] = func.now()
    return stmt.on_conflict_do_update(index_elements=["name_key"], set_=replaced)


class CatalogStore:
    """
    Handle to one card catalog file.

    The store is owned by a single caller for a sequence of operations:
    connect, use, close. It can be used as an async context manager.

    Usage:
        async with CatalogStore(path) as store:
            await store.initialize_schema()
            card = await store.get_by_name("sol ring")
    """

    def __init__(self, path: Path | str | None = None, *, echo: bool | None = None):
        self.path = Path(path) if path is not None else settings.catalog_path
        self._echo = settings.debug if echo is None else echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def __aenter__(self) -> "CatalogStore":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def connect(self) -> None:
        """
        Open (creating if needed) the catalog file.

        Raises:
            StoreUnavailableError: If the location cannot be opened or created
        """
        if self._engine is not None:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailableError(str(self.path), str(e)) from e

        engine = create_async_engine(
            URL.create("sqlite+aiosqlite", database=str(self.path)),
            echo=self._echo,
        )
        try:
            async with engine.connect() as conn:
                # Reads the file header, so a non-SQLite file fails here
                await conn.execute(text("SELECT count(*) FROM sqlite_master"))
        except (OSError, SQLAlchemyError) as e:
            await engine.dispose()
            raise StoreUnavailableError(str(self.path), str(e)) from e

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.debug("Connected to card catalog at %s", self.path)

    async def close(self) -> None:
        """Release the engine. Safe to call more than once."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.debug("Closed card catalog at %s", self.path)

    def _require_engine(self, operation: str) -> AsyncEngine:
        if self._engine is None:
            raise StoreClosedError(operation)
        return self._engine

    def _require_sessions(self, operation: str) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise StoreClosedError(operation)
        return self._session_factory

    async def initialize_schema(self) -> None:
        """
        Create the cards table and its indexes if absent.

        Idempotent: existing tables and data are left untouched.
        """
        engine = self._require_engine("initialize schema")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def reset_all(self) -> None:
        """
        Drop and recreate the catalog schema.

        WARNING: Destroys every stored card.
        """
        engine = self._require_engine("reset catalog")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Card catalog at %s reset", self.path)

    async def get_by_name(self, name: str) -> CardRecord | None:
        """
        Look up a card by name, ignoring case.

        Returns None if the card is not in the catalog.
        """
        session_factory = self._require_sessions("look up card")
        async with session_factory() as session:
            row = await session.get(CardDB, normalize_card_name(name))
            if row is None:
                return None
            return row_to_record(row)

    async def upsert(self, record: CardRecord) -> None:
        """
        Insert a card or replace the existing card with the same name.

        Raises:
            InvalidRecordError: If name or type line is empty
        """
        await self.upsert_batch([record])

    async def upsert_batch(self, records: Iterable[CardRecord]) -> int:
        """
        Insert or replace many cards in a single transaction.

        Either every record is visible afterwards or none is. When the batch
        contains several records with the same case-folded name, the last
        one wins.

        Returns:
            Number of distinct cards written

        Raises:
            InvalidRecordError: If any record lacks a name or type line
                (nothing is written)
        """
        engine = self._require_engine("write cards")

        rows: dict[str, dict[str, Any]] = {}
        for record in records:
            _require_valid(record)
            row = record_to_row(record)
            # Re-insert so the surviving row keeps the position of its last occurrence
            rows.pop(row["name_key"], None)
            rows[row["name_key"]] = row

        if not rows:
            return 0

        async with engine.begin() as conn:
            await conn.execute(_upsert_statement(), list(rows.values()))

        return len(rows)

    async def count(self) -> int:
        """
        Total number of cards in the catalog.

        A catalog whose schema was never initialized holds no cards.
        """
        engine = self._require_engine("count cards")
        async with engine.connect() as conn:
            if not await conn.run_sync(_has_cards_table):
                return 0
            result = await conn.execute(select(func.count()).select_from(CardDB))
            return int(result.scalar_one())
