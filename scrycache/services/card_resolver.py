"""
Card Resolver.

Cache-or-fetch resolution of search queries, card names and oracle ids
into fully populated Cards.

Every Card handed out has been re-read from the store, so callers see
what is actually persisted. Inserting a card always fetches its complete
printing history; failures while doing so are recorded as warnings on
the InsertionResult rather than failing the insertion.

INVARIANTS:
- A Card returned from any path has at least one printing
- A cached query is never answered with a shorter list than was cached;
  a missing oracle id raises CacheInconsistentError instead
- Query results are grouped by oracle id, in order of first appearance
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Sequence
from datetime import datetime
from typing import TypeVar

from scrycache.client.base import RemoteSearchClient
from scrycache.db.store import CardStore
from scrycache.errors import (
    AmbiguousCardError,
    CacheInconsistentError,
    CardCacheError,
    NotCachedError,
    NotFoundError,
    StoreError,
)
from scrycache.models.card import (
    Card,
    InsertionResult,
    QueryCacheEntry,
    QueryCacheStats,
    normalize_oracle_id,
)
from scrycache.models.remote import RemoteCard

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _run(awaitable: Awaitable[T], timeout: float | None) -> T:
    """Await with an optional deadline. Committed writes are not rolled back."""
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)


def group_by_oracle_id(records: Iterable[RemoteCard]) -> dict[str, list[RemoteCard]]:
    """
    Partition remote records by oracle id.

    Records without an oracle id are dropped. Groups keep the order in
    which each oracle id first appeared; the first record of a group is
    its representative.
    """
    groups: dict[str, list[RemoteCard]] = {}
    for record in records:
        if not record.oracle_id:
            logger.debug("Dropping result without oracle_id: %s", record.name)
            continue
        groups.setdefault(normalize_oracle_id(record.oracle_id), []).append(record)
    return groups


def pick_by_name(name: str, candidates: Sequence[RemoteCard]) -> RemoteCard:
    """
    Choose one card for a name from search results.

    Prefers a case-insensitive exact name match, else the only candidate.
    Candidates are compared per oracle id, so several printings of one card
    count once.

    Raises:
        NotFoundError: If there are no candidates
        AmbiguousCardError: If several cards match and none exactly
    """
    representatives = [group[0] for group in group_by_oracle_id(candidates).values()]
    if not representatives:
        raise NotFoundError(name)

    wanted = name.lower()
    for candidate in representatives:
        if candidate.name.lower() == wanted:
            return candidate

    if len(representatives) == 1:
        return representatives[0]

    raise AmbiguousCardError(name, [c.name for c in representatives])


class CardResolver:
    """
    Resolves queries, names and oracle ids against a store and a remote client.

    Both collaborators are supplied by the caller; the resolver holds no
    global state. Concurrent identical lookups are not de-duplicated: each
    reaches the remote client, and the last cache write wins.
    """

    def __init__(self, store: CardStore, client: RemoteSearchClient):
        self._store = store
        self._client = client

    @property
    def store(self) -> CardStore:
        return self._store

    @property
    def client(self) -> RemoteSearchClient:
        return self._client

    # --- Remote-backed resolution ---

    async def resolve_query(self, query: str, *, timeout: float | None = None) -> list[Card]:
        """
        Resolve a search query to Cards, one per oracle id, in discovery order.

        A cached query is answered from the store with zero remote calls.

        Raises:
            CacheInconsistentError: If a cached oracle id is missing from the store
            RemoteUnavailableError: If the search itself fails
            MalformedRecordError: If a result page or representative record is unusable
            StoreError: If a card cannot be written
        """
        return await _run(self._resolve_query(query), timeout)

    async def resolve_name(self, name: str, *, timeout: float | None = None) -> Card:
        """
        Resolve an exact card name.

        Checks the store (case-insensitive), then a quoted exact search, then
        an unquoted search if the exact one found nothing. Errors from either
        search propagate.

        Raises:
            NotFoundError: If neither search returns anything
            AmbiguousCardError: If several cards match and none exactly
        """
        return await _run(self._resolve_name(name, exact_errors_fall_through=False), timeout)

    async def resolve_decklist_name(self, name: str, *, timeout: float | None = None) -> Card:
        """
        Resolve a card name found on a decklist line.

        Same as resolve_name, except that a failing quoted search also falls
        back to the unquoted search.
        """
        return await _run(self._resolve_name(name, exact_errors_fall_through=True), timeout)

    async def resolve_identity(self, oracle_id: str, *, timeout: float | None = None) -> Card:
        """
        Resolve an oracle id. A stored card is returned without remote calls.

        Raises:
            NotFoundError: If the remote source has no card with this id
        """
        return await _run(self._resolve_identity(oracle_id), timeout)

    async def insert_card(
        self,
        remote: RemoteCard,
        *,
        extra_printings: Sequence[RemoteCard] = (),
        timeout: float | None = None,
    ) -> InsertionResult:
        """
        Store a card and its complete printing history.

        Writes the card, then its own printing, then every extra printing
        given, then every printing the remote client reports. Only the first
        two steps are fatal; the rest are recorded as warnings.

        Raises:
            MalformedRecordError: If the record lacks card or printing data
            StoreError: If the card or its own printing cannot be written
        """
        return await _run(self._insert_card(remote, extra_printings), timeout)

    # --- Cache-only lookups ---

    async def fetch_cards_by_query(self, query: str, *, timeout: float | None = None) -> list[Card]:
        """
        Answer a query from the cache only.

        Raises:
            NotCachedError: If the query was never resolved
            CacheInconsistentError: If a cached oracle id is missing from the store
        """
        return await _run(self._fetch_cached_query(query), timeout)

    async def fetch_card_by_exact_name(self, name: str, *, timeout: float | None = None) -> Card:
        """Stored card by exact name, ignoring case. Raises NotCachedError if absent."""
        return await _run(self._fetch_by_name(name), timeout)

    async def fetch_cards_by_exact_names(
        self, names: Sequence[str], *, timeout: float | None = None
    ) -> list[Card]:
        """Stored cards by name, in input order. Fails on the first absent name."""

        async def fetch_all() -> list[Card]:
            return [await self._fetch_by_name(name) for name in names]

        return await _run(fetch_all(), timeout)

    async def fetch_card_by_oracle_id(
        self, oracle_id: str, *, timeout: float | None = None
    ) -> Card:
        """Stored card by oracle id. Raises NotCachedError if absent."""
        return await _run(self._fetch_by_oracle_id(oracle_id), timeout)

    async def fetch_cards_by_oracle_ids(
        self, oracle_ids: Sequence[str], *, timeout: float | None = None
    ) -> list[Card]:
        """Stored cards by oracle id, in input order. Fails on the first absent id."""

        async def fetch_all() -> list[Card]:
            return [await self._fetch_by_oracle_id(oracle_id) for oracle_id in oracle_ids]

        return await _run(fetch_all(), timeout)

    # --- Cache maintenance ---

    async def invalidate_query(self, query: str) -> bool:
        """Forget one cached query. Returns False if it was not cached."""
        return await self._store.delete_query_cache(query)

    async def invalidate_queries_older_than(self, cutoff: datetime) -> int:
        """Forget every query cached before cutoff. Returns the count removed."""
        return await self._store.delete_query_cache_older_than(cutoff)

    async def query_cache_stats(self) -> QueryCacheStats:
        return await self._store.query_cache_stats()

    # --- Internals ---

    async def _resolve_query(self, query: str) -> list[Card]:
        entry = await self._store.get_cached_query(query)
        if entry is not None:
            logger.debug("Query cache hit: %r", query)
            cards = await self._cards_for_entry(entry)
            try:
                await self._store.record_query_hit(query)
            except StoreError as e:
                logger.warning("Could not record cache hit for %r: %s", query, e)
            return cards

        logger.debug("Query cache miss: %r", query)
        results = [record async for record in self._client.search_by_query(query)]
        groups = group_by_oracle_id(results)

        oracle_ids: list[str] = []
        cards: list[Card] = []
        for oracle_id, group in groups.items():
            result = await self._insert_card(group[0], group[1:])
            oracle_ids.append(oracle_id)
            cards.append(result.card)

        try:
            await self._store.put_query_cache(query, oracle_ids)
        except StoreError as e:
            logger.warning("Could not cache query %r: %s", query, e)

        logger.info("Resolved query %r to %d cards", query, len(cards))
        return cards

    async def _fetch_cached_query(self, query: str) -> list[Card]:
        entry = await self._store.get_cached_query(query)
        if entry is None:
            raise NotCachedError(query)
        return await self._cards_for_entry(entry)

    async def _cards_for_entry(self, entry: QueryCacheEntry) -> list[Card]:
        cards: list[Card] = []
        for oracle_id in entry.oracle_ids:
            card = await self._store.get_card(oracle_id)
            if card is None:
                raise CacheInconsistentError(entry.query_text, oracle_id)
            cards.append(card)
        return cards

    async def _resolve_name(self, name: str, exact_errors_fall_through: bool) -> Card:
        card = await self._store.get_card_by_name(name)
        if card is not None:
            logger.debug("Name cache hit: %r", name)
            return card

        try:
            candidates = await self._client.search_by_exact_name(name)
        except CardCacheError as e:
            if not exact_errors_fall_through:
                raise
            logger.debug("Exact search for %r failed, trying broad search: %s", name, e)
            candidates = []

        if not candidates:
            candidates = [record async for record in self._client.search_by_query(name)]

        chosen = pick_by_name(name, candidates)
        result = await self._insert_card(chosen, ())
        return result.card

    async def _resolve_identity(self, oracle_id: str) -> Card:
        card = await self._store.get_card(oracle_id)
        if card is not None:
            logger.debug("Oracle id cache hit: %s", oracle_id)
            return card

        records = await self._client.search_by_identifier(oracle_id)
        if not records:
            raise NotFoundError(oracle_id, detail="no card with this oracle id")

        result = await self._insert_card(records[0], records[1:])
        return result.card

    async def _insert_card(
        self, remote: RemoteCard, extra_printings: Sequence[RemoteCard]
    ) -> InsertionResult:
        # Convert both before writing so a card row never lands without a printing
        record = remote.to_card_record()
        own_printing = remote.to_printing_record()

        await self._store.upsert_card(record)
        await self._store.upsert_printing(own_printing)

        warnings: list[str] = []
        for extra in extra_printings:
            await self._store_printing(record.oracle_id, extra, warnings)

        try:
            async for printing in self._client.fetch_all_printings(remote):
                await self._store_printing(record.oracle_id, printing, warnings)
        except CardCacheError as e:
            warnings.append(f"printing history fetch failed for {record.name}: {e}")

        for warning in warnings:
            logger.warning("%s", warning)

        card = await self._store.get_card(record.oracle_id)
        if card is None:
            raise StoreError("insert_card", record.oracle_id, "card not readable after insert")
        return InsertionResult(card=card, warnings=tuple(warnings))

    async def _store_printing(
        self, oracle_id: str, printing: RemoteCard, warnings: list[str]
    ) -> None:
        if not printing.oracle_id:
            logger.debug("Skipping printing without oracle_id: %s", printing.id)
            return
        if normalize_oracle_id(printing.oracle_id) != oracle_id:
            warnings.append(
                f"printing {printing.id} belongs to another card ({printing.oracle_id})"
            )
            return

        try:
            await self._store.upsert_printing(printing.to_printing_record())
        except CardCacheError as e:
            warnings.append(f"printing {printing.id or '<no id>'} skipped: {e}")

    async def _fetch_by_name(self, name: str) -> Card:
        card = await self._store.get_card_by_name(name)
        if card is None:
            raise NotCachedError(name, what="card name")
        return card

    async def _fetch_by_oracle_id(self, oracle_id: str) -> Card:
        card = await self._store.get_card(oracle_id)
        if card is None:
            raise NotCachedError(oracle_id, what="oracle_id")
        return card
