"""
Database CRUD operations.

Provides async functions for reading and writing cards, printings and
cached queries. Functions flush but never commit; the caller owns the
transaction.
"""

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scrycache.models.card import CardRecord, PrintingRecord, QueryCacheEntry
from scrycache.models.db import CardDB, PrintingDB, QueryCacheDB

# --- Card Operations ---


async def get_card(session: AsyncSession, oracle_id: str) -> CardDB | None:
    """
    Get a card by oracle id.

    The id must already be in stored (lower-case) form.
    """
    result = await session.execute(select(CardDB).where(CardDB.oracle_id == oracle_id))
    return result.scalar_one_or_none()


async def get_card_by_name(session: AsyncSession, name: str) -> CardDB | None:
    """Get a card by exact name, ignoring case."""
    result = await session.execute(
        select(CardDB).where(func.lower(CardDB.name) == name.lower()).limit(1)
    )
    return result.scalars().first()


async def upsert_card(session: AsyncSession, record: CardRecord) -> CardDB:
    """
    Insert or update a card.

    If a card with the same oracle id exists, its fields are overwritten.
    Otherwise creates a new row.
    """
    existing = await get_card(session, record.oracle_id)

    if existing:
        existing.name = record.name
        existing.type_line = record.type_line
        existing.layout = record.layout
        existing.cmc = record.cmc
        existing.colors = list(record.colors)
        existing.color_identity = list(record.color_identity)
        existing.mana_cost = record.mana_cost
        existing.oracle_text = record.oracle_text
        existing.power = record.power
        existing.toughness = record.toughness
        existing.keywords = list(record.keywords)
        existing.legalities = dict(record.legalities)
        existing.prints_search_uri = record.prints_search_uri
        await session.flush()
        return existing

    db_card = CardDB(
        oracle_id=record.oracle_id,
        name=record.name,
        type_line=record.type_line,
        layout=record.layout,
        cmc=record.cmc,
        colors=list(record.colors),
        color_identity=list(record.color_identity),
        mana_cost=record.mana_cost,
        oracle_text=record.oracle_text,
        power=record.power,
        toughness=record.toughness,
        keywords=list(record.keywords),
        legalities=dict(record.legalities),
        prints_search_uri=record.prints_search_uri,
    )
    session.add(db_card)
    await session.flush()
    return db_card


def card_to_record(db_card: CardDB) -> CardRecord:
    """Convert a database card to a domain record."""
    return CardRecord(
        oracle_id=db_card.oracle_id,
        name=db_card.name,
        type_line=db_card.type_line,
        layout=db_card.layout,
        cmc=db_card.cmc,
        colors=tuple(db_card.colors or ()),
        color_identity=tuple(db_card.color_identity or ()),
        mana_cost=db_card.mana_cost,
        oracle_text=db_card.oracle_text,
        power=db_card.power,
        toughness=db_card.toughness,
        keywords=tuple(db_card.keywords or ()),
        legalities=dict(db_card.legalities or {}),
        prints_search_uri=db_card.prints_search_uri,
    )


# --- Printing Operations ---


async def get_printing(session: AsyncSession, printing_id: str) -> PrintingDB | None:
    """Get a printing by its id."""
    result = await session.execute(select(PrintingDB).where(PrintingDB.id == printing_id))
    return result.scalar_one_or_none()


async def get_printings(session: AsyncSession, oracle_id: str) -> list[PrintingDB]:
    """Get all printings of a card, newest release first."""
    result = await session.execute(
        select(PrintingDB)
        .where(PrintingDB.oracle_id == oracle_id)
        .order_by(PrintingDB.released_at.desc(), PrintingDB.id)
    )
    return list(result.scalars().all())


async def upsert_printing(session: AsyncSession, record: PrintingRecord) -> PrintingDB:
    """
    Insert or update a printing.

    The owning card row must already exist; callers check this first.
    """
    existing = await get_printing(session, record.printing_id)

    if existing:
        existing.oracle_id = record.oracle_id
        existing.set_code = record.set_code
        existing.set_name = record.set_name
        existing.rarity = record.rarity
        existing.scryfall_uri = record.scryfall_uri
        existing.released_at = record.released_at
        existing.games = list(record.games)
        existing.image_uri = record.image_uri
        existing.collector_number = record.collector_number
        existing.lang = record.lang
        existing.arena_id = record.arena_id
        await session.flush()
        return existing

    db_printing = PrintingDB(
        id=record.printing_id,
        oracle_id=record.oracle_id,
        set_code=record.set_code,
        set_name=record.set_name,
        rarity=record.rarity,
        scryfall_uri=record.scryfall_uri,
        released_at=record.released_at,
        games=list(record.games),
        image_uri=record.image_uri,
        collector_number=record.collector_number,
        lang=record.lang,
        arena_id=record.arena_id,
    )
    session.add(db_printing)
    await session.flush()
    return db_printing


def printing_to_record(db_printing: PrintingDB) -> PrintingRecord:
    """Convert a database printing to a domain record."""
    return PrintingRecord(
        printing_id=db_printing.id,
        oracle_id=db_printing.oracle_id,
        set_code=db_printing.set_code,
        set_name=db_printing.set_name,
        rarity=db_printing.rarity,
        scryfall_uri=db_printing.scryfall_uri,
        released_at=db_printing.released_at,
        games=tuple(db_printing.games or ()),
        image_uri=db_printing.image_uri,
        collector_number=db_printing.collector_number,
        lang=db_printing.lang,
        arena_id=db_printing.arena_id,
    )


# --- Query Cache Operations ---


async def get_query_cache(session: AsyncSession, query_text: str) -> QueryCacheDB | None:
    """Get a cached query by its exact text."""
    result = await session.execute(
        select(QueryCacheDB).where(QueryCacheDB.query_text == query_text)
    )
    return result.scalar_one_or_none()


async def put_query_cache(
    session: AsyncSession,
    query_text: str,
    oracle_ids: list[str],
    now: datetime,
) -> QueryCacheDB:
    """
    Insert or overwrite a cached query.

    Overwriting resets the timestamps and hit count.
    """
    existing = await get_query_cache(session, query_text)

    if existing:
        existing.oracle_ids = list(oracle_ids)
        existing.cached_at = now
        existing.last_accessed = now
        existing.hit_count = 0
        await session.flush()
        return existing

    db_entry = QueryCacheDB(
        query_text=query_text,
        oracle_ids=list(oracle_ids),
        cached_at=now,
        last_accessed=now,
        hit_count=0,
    )
    session.add(db_entry)
    await session.flush()
    return db_entry


async def record_query_hit(session: AsyncSession, query_text: str, now: datetime) -> bool:
    """
    Count one cache hit for a query.

    Returns True if the query exists, False otherwise.
    """
    existing = await get_query_cache(session, query_text)
    if not existing:
        return False

    existing.hit_count = (existing.hit_count or 0) + 1
    existing.last_accessed = now
    await session.flush()
    return True


async def delete_query_cache(session: AsyncSession, query_text: str) -> bool:
    """
    Delete a cached query.

    Returns True if deleted, False if not found.
    """
    existing = await get_query_cache(session, query_text)
    if not existing:
        return False

    await session.delete(existing)
    return True


async def delete_query_cache_older_than(session: AsyncSession, cutoff: datetime) -> int:
    """
    Delete cached queries written before cutoff.

    Returns the number of deleted records.
    """
    result = await session.execute(delete(QueryCacheDB).where(QueryCacheDB.cached_at < cutoff))
    # rowcount is available on DELETE results; type stubs incomplete for async
    return int(result.rowcount)  # type: ignore[attr-defined]


async def query_cache_totals(session: AsyncSession) -> tuple[int, int]:
    """Number of cached queries and the sum of their hit counts."""
    result = await session.execute(
        select(func.count(QueryCacheDB.id), func.coalesce(func.sum(QueryCacheDB.hit_count), 0))
    )
    count, hits = result.one()
    return int(count), int(hits)


def query_cache_to_entry(db_entry: QueryCacheDB) -> QueryCacheEntry:
    """Convert a database cache row to a domain entry."""
    return QueryCacheEntry(
        query_text=db_entry.query_text,
        oracle_ids=tuple(db_entry.oracle_ids or ()),
        cached_at=db_entry.cached_at,
        last_accessed=db_entry.last_accessed,
        hit_count=db_entry.hit_count,
    )
