"""
Card Store.

Persistent, normalized storage for cards, printings and cached queries.
Every write runs in its own session and commit, serialized by one
asyncio.Lock per store instance. There are no multi-operation transactions;
callers order their writes so that a partially completed sequence leaves
the store consistent.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, nullcontext
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from scrycache.config import MEMORY_DATABASE_URL
from scrycache.db import operations
from scrycache.db.database import create_engine, create_session_factory, init_db, is_memory_url
from scrycache.errors import StoreError
from scrycache.models.card import (
    Card,
    CardRecord,
    PrintingRecord,
    QueryCacheEntry,
    QueryCacheStats,
    normalize_oracle_id,
)
from scrycache.models.db import CardDB, PrintingDB

logger = logging.getLogger(__name__)


class CardStore:
    """
    Async card store over a SQLAlchemy session factory.

    Reads of file or server databases run outside the write lock. An
    in-memory SQLite database lives on one shared connection, so its reads
    are serialized through the lock as well (serialize_reads=True).
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        serialize_reads: bool = False,
        engine: AsyncEngine | None = None,
    ):
        self._session_factory = session_factory
        self._serialize_reads = serialize_reads
        self._engine = engine
        self._write_lock = asyncio.Lock()

    @classmethod
    async def from_url(cls, database_url: str, echo: bool = False) -> "CardStore":
        """
        Open a store on a database URL, creating tables if needed.

        Raises:
            StoreError: If the database cannot be opened or initialized
        """
        engine = create_engine(database_url, echo=echo)
        try:
            await init_db(engine)
        except SQLAlchemyError as e:
            await engine.dispose()
            raise StoreError("open", database_url, str(e)) from e

        logger.debug("Opened card store at %s", database_url)
        return cls(
            create_session_factory(engine),
            serialize_reads=is_memory_url(database_url),
            engine=engine,
        )

    @classmethod
    async def in_memory(cls) -> "CardStore":
        """Open a private in-memory store."""
        return await cls.from_url(MEMORY_DATABASE_URL)

    async def aclose(self) -> None:
        """Dispose of the engine if this store owns one."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    @asynccontextmanager
    async def _write(self, operation: str, key: str) -> AsyncIterator[AsyncSession]:
        async with self._write_lock, self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(operation, key, str(e)) from e

    @asynccontextmanager
    async def _read(self, operation: str, key: str) -> AsyncIterator[AsyncSession]:
        lock = self._write_lock if self._serialize_reads else nullcontext()
        async with lock, self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                raise StoreError(operation, key, str(e)) from e

    # --- Writes ---

    async def upsert_card(self, record: CardRecord) -> None:
        """Insert or overwrite a card record."""
        async with self._write("upsert_card", record.oracle_id) as session:
            await operations.upsert_card(session, record)

    async def upsert_printing(self, record: PrintingRecord) -> None:
        """
        Insert or overwrite a printing.

        Raises:
            StoreError: If no card exists for the printing's oracle id
        """
        async with self._write("upsert_printing", record.printing_id) as session:
            if await operations.get_card(session, record.oracle_id) is None:
                raise StoreError(
                    "upsert_printing",
                    record.printing_id,
                    f"no card stored for oracle_id {record.oracle_id}",
                )
            await operations.upsert_printing(session, record)

    async def put_query_cache(self, query: str, oracle_ids: list[str]) -> None:
        """Cache a query's ordered oracle ids, overwriting any earlier entry."""
        async with self._write("put_query_cache", query) as session:
            await operations.put_query_cache(session, query, oracle_ids, datetime.now(UTC))

    async def record_query_hit(self, query: str) -> bool:
        """Count a cache hit. Returns False if the query is not cached."""
        async with self._write("record_query_hit", query) as session:
            return await operations.record_query_hit(session, query, datetime.now(UTC))

    async def delete_query_cache(self, query: str) -> bool:
        """Forget a cached query. Returns False if it was not cached."""
        async with self._write("delete_query_cache", query) as session:
            return await operations.delete_query_cache(session, query)

    async def delete_query_cache_older_than(self, cutoff: datetime) -> int:
        """Forget every query cached before cutoff. Returns the count removed."""
        async with self._write("delete_query_cache_older_than", cutoff.isoformat()) as session:
            return await operations.delete_query_cache_older_than(session, cutoff)

    # --- Reads ---

    async def get_card(self, oracle_id: str) -> Card | None:
        """
        Get a fully resolved card by oracle id, ignoring case.

        Returns None if the card is unknown or has no stored printings.
        """
        key = normalize_oracle_id(oracle_id)
        async with self._read("get_card", key) as session:
            db_card = await operations.get_card(session, key)
            if db_card is None:
                return None
            db_printings = await operations.get_printings(session, key)
            return _assemble(db_card, db_printings)

    async def get_card_by_name(self, name: str) -> Card | None:
        """Get a fully resolved card by exact name, ignoring case."""
        async with self._read("get_card_by_name", name) as session:
            db_card = await operations.get_card_by_name(session, name)
            if db_card is None:
                return None
            db_printings = await operations.get_printings(session, db_card.oracle_id)
            return _assemble(db_card, db_printings)

    async def get_printings(self, oracle_id: str) -> list[PrintingRecord]:
        """All stored printings of a card, newest first."""
        key = normalize_oracle_id(oracle_id)
        async with self._read("get_printings", key) as session:
            db_printings = await operations.get_printings(session, key)
            return [operations.printing_to_record(p) for p in db_printings]

    async def get_cached_query(self, query: str) -> QueryCacheEntry | None:
        """Get a cached query by exact text."""
        async with self._read("get_cached_query", query) as session:
            db_entry = await operations.get_query_cache(session, query)
            if db_entry is None:
                return None
            return operations.query_cache_to_entry(db_entry)

    async def query_cache_stats(self) -> QueryCacheStats:
        """Count of cached queries and their hit totals."""
        async with self._read("query_cache_stats", "*") as session:
            total, hits = await operations.query_cache_totals(session)
        average = hits / total if total else 0.0
        return QueryCacheStats(total_queries=total, total_hits=hits, average_hits=average)


def _assemble(db_card: CardDB, db_printings: list[PrintingDB]) -> Card | None:
    if not db_printings:
        return None
    return Card(
        record=operations.card_to_record(db_card),
        printings=tuple(operations.printing_to_record(p) for p in db_printings),
    )
