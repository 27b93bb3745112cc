"""
Warm the card cache.

Run this job to resolve search queries into a persistent card database
ahead of time, so later lookups are answered without remote calls.

    python -m scrycache.jobs.warm_cache --db-path cards.db "t:goblin" "set:dom"
"""

import argparse
import asyncio
import logging
from collections.abc import Sequence

from scrycache.client.base import RemoteSearchClient
from scrycache.client.scryfall import ScryfallClient
from scrycache.config import Settings
from scrycache.config import settings as default_settings
from scrycache.db.store import CardStore
from scrycache.errors import CardCacheError
from scrycache.logging_config import configure_logging
from scrycache.services.card_resolver import CardResolver

logger = logging.getLogger(__name__)


async def run_warm(
    queries: Sequence[str],
    settings: Settings,
    client: RemoteSearchClient | None = None,
) -> dict[str, int]:
    """
    Resolve each query into the configured database.

    Returns:
        Number of cards each query resolved to
    """
    store = await CardStore.from_url(settings.resolved_database_url(), echo=settings.debug)
    owned: ScryfallClient | None = None
    if client is None:
        owned = ScryfallClient.from_settings(settings)
        client = owned
    resolver = CardResolver(store, client)

    counts: dict[str, int] = {}
    try:
        for text in queries:
            logger.info("Warming query %r...", text)
            cards = await resolver.resolve_query(text)
            counts[text] = len(cards)
            logger.info("Query %r resolved to %d cards", text, len(cards))

        stats = await resolver.query_cache_stats()
        logger.info(
            "Cache holds %d queries (%d hits total)", stats.total_queries, stats.total_hits
        )
    except CardCacheError as e:
        logger.error("Failed to warm cache: %s", e)
        raise
    finally:
        if owned is not None:
            await owned.aclose()
        await store.aclose()

    return counts


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Resolve Scryfall queries into the card cache.")
    parser.add_argument("queries", nargs="+", help="Scryfall search queries")
    parser.add_argument("--db-path", help="SQLite database file (default: from settings)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    settings = default_settings
    if args.db_path:
        settings = settings.model_copy(update={"db_path": args.db_path})

    try:
        asyncio.run(run_warm(args.queries, settings))
    except CardCacheError:
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
