"""
Process-wide default resolver.

Library code never needs this: every component takes its collaborators
explicitly. This module backs the module-level convenience coroutines
(scrycache.query, scrycache.query_card, ...) with one lazily created
resolver, configured from Settings.

Usage:
    await configure(Settings(db_path="~/.cache/scrycache/cards.db"))
    cards = await query("t:goblin cmc=1")
    await reset_default_resolver()
"""

import asyncio
import logging

from scrycache.client.base import RemoteSearchClient
from scrycache.client.scryfall import ScryfallClient
from scrycache.config import Settings, settings as default_settings
from scrycache.db.store import CardStore
from scrycache.models.card import Card
from scrycache.models.decklist import Decklist
from scrycache.services.card_resolver import CardResolver
from scrycache.services.deck_parser import DecklistParser

logger = logging.getLogger(__name__)

_lock = asyncio.Lock()
_settings: Settings | None = None
_client: RemoteSearchClient | None = None
_resolver: CardResolver | None = None
_owned_client: ScryfallClient | None = None


async def configure(
    settings: Settings | None = None, *, client: RemoteSearchClient | None = None
) -> None:
    """
    Set the configuration used for the default resolver.

    Closes any existing default resolver; the next use creates a new one.

    Args:
        settings: Settings to use, defaults to the environment-loaded settings
        client: Remote client to use instead of building a ScryfallClient.
                It is not closed on reset.
    """
    global _settings, _client
    async with _lock:
        await _close()
        _settings = settings
        _client = client


async def get_default_resolver() -> CardResolver:
    """Return the default resolver, creating it on first use."""
    global _resolver, _owned_client
    async with _lock:
        if _resolver is None:
            active = _settings or default_settings
            store = await CardStore.from_url(active.resolved_database_url(), echo=active.debug)
            client = _client
            if client is None:
                _owned_client = ScryfallClient.from_settings(active)
                client = _owned_client
            _resolver = CardResolver(store, client)
            logger.debug("Created default resolver on %s", active.resolved_database_url())
        return _resolver


async def reset_default_resolver() -> None:
    """Close the default resolver and forget the configuration."""
    global _settings, _client
    async with _lock:
        await _close()
        _settings = None
        _client = None


async def _close() -> None:
    global _resolver, _owned_client
    if _resolver is not None:
        await _resolver.store.aclose()
        _resolver = None
    if _owned_client is not None:
        await _owned_client.aclose()
        _owned_client = None


# --- Convenience coroutines ---


async def query(text: str, *, timeout: float | None = None) -> list[Card]:
    """Resolve a search query with the default resolver."""
    resolver = await get_default_resolver()
    return await resolver.resolve_query(text, timeout=timeout)


async def query_card(name: str, *, timeout: float | None = None) -> Card:
    """Resolve a card name with the default resolver."""
    resolver = await get_default_resolver()
    return await resolver.resolve_name(name, timeout=timeout)


async def query_card_by_oracle_id(oracle_id: str, *, timeout: float | None = None) -> Card:
    """Resolve an oracle id with the default resolver."""
    resolver = await get_default_resolver()
    return await resolver.resolve_identity(oracle_id, timeout=timeout)


async def parse_decklist(text: str, *, timeout: float | None = None) -> Decklist:
    """Parse decklist text with the default resolver."""
    resolver = await get_default_resolver()
    return await DecklistParser(resolver).parse(text, timeout=timeout)
